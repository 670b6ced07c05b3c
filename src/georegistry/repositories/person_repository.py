"""
Person repository. Emails are stored lower-cased, so lookups normalize the same way.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from georegistry.models.person import Person
from georegistry.validators.normalizers import normalize_email
from .base_repository import BaseRepository


class PersonRepository(BaseRepository[Person]):

    def __init__(self, db: AsyncSession):
        super().__init__(Person, db)

    async def find_by_email(self, email: str) -> Person | None:
        return await self.find_first_by(email=normalize_email(email))

    async def email_exists(self, email: str) -> bool:
        return await self.find_by_email(email) is not None
