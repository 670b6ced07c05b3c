"""
Country repository. Name and code lookups go through `find_first_by`, driven by the
uniqueness keys the resolver and guard are given.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from georegistry.models.country import Country
from .base_repository import BaseRepository


class CountryRepository(BaseRepository[Country]):

    def __init__(self, db: AsyncSession):
        super().__init__(Country, db)
