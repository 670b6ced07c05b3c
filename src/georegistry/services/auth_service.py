"""
Registration, login and credential checks.

Login failures are indistinguishable: an unknown email and a wrong password
produce the same UnauthorizedError message.
"""

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from georegistry.config import Settings, get_settings
from georegistry.core.security import (
    create_access_token,
    hash_password_async,
    parse_expires_in,
    verify_password_async,
)
from georegistry.exceptions.base import (
    AppError,
    BadRequestError,
    DuplicateError,
    InternalError,
    UnauthorizedError,
)
from georegistry.models import Person, PersonRole
from georegistry.repositories import CityRepository, PersonRepository
from georegistry.validators.normalizers import normalize_email

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


@dataclass(frozen=True)
class PublicProfile:
    """A person without password material."""
    id: int
    first_name: str
    last_name: str
    email: str
    role: PersonRole
    city_id: int | None = None
    birth_date: date | None = None

    @classmethod
    def from_person(cls, person: Person) -> "PublicProfile":
        return cls(
            id=person.id,
            first_name=person.first_name,
            last_name=person.last_name,
            email=person.email,
            role=person.role,
            city_id=person.city_id,
            birth_date=person.birth_date,
        )


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    expires_in: int          # seconds
    person: Person


class AuthService:

    def __init__(self, db: AsyncSession, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()
        self.persons = PersonRepository(db)
        self.cities = CityRepository(db)

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        city_name: str,
        province_name: str | None = None,
        birth_date: date | None = None,
    ) -> Person:
        """
        Create a USER account.

        Raises:
            DuplicateError: email already registered.
            BadRequestError: no city matches (city_name, province_name), or the password is too long.
            InternalError: any unexpected persistence failure.
        """
        email = normalize_email(email)

        if await self.persons.email_exists(email):
            logger.info("auth.register.duplicate_email")
            raise DuplicateError("Email already registered", fields=["email"])

        city = await self.cities.find_by_name_and_province_name(city_name, province_name)
        if city is None:
            logger.info("auth.register.city_not_found", extra={"city": city_name, "province": province_name})
            if province_name and province_name.strip():
                raise BadRequestError(f"City '{city_name}' not found in province '{province_name}'", fields=["cityName"])
            raise BadRequestError(f"City '{city_name}' not found", fields=["cityName"])

        password_hash = await hash_password_async(password, self.settings.BCRYPT_ROUNDS)

        try:
            person = await self.persons.create(
                email=email,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                birth_date=birth_date,
                city_id=city.id,
                role=PersonRole.USER,
            )
            await self.db.commit()
        except DuplicateError:
            # lost a race with a concurrent registration of the same email
            raise
        except AppError as exc:
            logger.error("auth.register.failed", extra={"code": exc.error_code})
            raise InternalError("Registration failed") from exc

        logger.info("auth.register.success", extra={"person_id": person.id})
        return person

    async def _check_password(self, email: str, password: str) -> Person | None:
        person = await self.persons.find_by_email(email)
        if person is None:
            return None

        if not await verify_password_async(password, person.password_hash):
            return None
        return person

    async def validate_credentials(self, email: str, password: str) -> PublicProfile | None:
        """The public profile when the password matches, otherwise None."""
        person = await self._check_password(email, password)
        return PublicProfile.from_person(person) if person is not None else None

    async def login(self, email: str, password: str) -> LoginResult:
        person = await self._check_password(email, password)
        if person is None:
            logger.info("auth.login.failed")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        token = create_access_token(person.id, person.email, person.role, self.settings)
        logger.info("auth.login.success", extra={"person_id": person.id, "role": person.role.value})
        return LoginResult(
            access_token=token,
            expires_in=parse_expires_in(self.settings.JWT_EXPIRES_IN),
            person=person,
        )

    async def profile(self, person_id: int) -> Person:
        """Current person from the database; a token whose person was deleted is no longer valid."""
        person = await self.persons.get_by_id(person_id)
        if person is None:
            raise UnauthorizedError("Account no longer exists")
        return person
