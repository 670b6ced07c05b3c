"""
Person management for ADMIN/MODERATOR endpoints.

Unlike the geographic levels a person is not resolved idempotently: a second create with
the same email is a duplicate. Passwords arrive in clear text and leave this service
only as a bcrypt hash.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from georegistry.config import Settings
from georegistry.core.security import hash_password_async
from georegistry.models import Person, PersonRole
from georegistry.repositories import PersonRepository
from georegistry.validators.normalizers import normalize_email
from .base_service import HierarchyService
from .hierarchy_guard import PERSON

logger = logging.getLogger(__name__)


class PersonService(HierarchyService[Person]):
    level = PERSON
    sortable = {
        "id": "id",
        "firstName": "first_name",
        "lastName": "last_name",
        "email": "email",
        "role": "role",
        "birthDate": "birth_date",
        "cityId": "city_id",
    }
    search_fields = ("first_name", "last_name")

    repository: PersonRepository

    def __init__(self, db: AsyncSession, settings: Settings | None = None):
        super().__init__(db, PersonRepository(db), settings)

    async def _prepare(self, data: dict[str, Any]) -> dict[str, Any]:
        values = dict(data)
        if values.get("email") is not None:
            values["email"] = normalize_email(values["email"])
        if "role" in values and values["role"] is None:
            values.pop("role")
        if "password" in values:
            password = values.pop("password")
            if password is not None:
                values["password_hash"] = await hash_password_async(password, self.settings.BCRYPT_ROUNDS)
        return values

    async def create(self, data: dict[str, Any]) -> Person:
        """
        Raises:
            NotFoundError: `city_id` given but no such city.
            DuplicateError: the email is already registered (payload carries `existingId`).
        """
        await self.guard.assert_parent_exists(self.level, data.get("city_id"))

        values = await self._prepare(data)
        values.setdefault("role", PersonRole.USER)

        person = await self.repository.create(**values)
        await self.db.commit()

        logger.info("service.person.created", extra={"id": person.id, "role": person.role.value})
        return person

    async def update(self, entity_id: int, changes: dict[str, Any]) -> Person:
        return await super().update(entity_id, await self._prepare(changes))

    async def find_by_email(self, email: str) -> Person | None:
        return await self.repository.find_by_email(email)
