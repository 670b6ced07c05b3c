"""Fixtures for repository, service and API tests."""

import uuid
from itertools import count

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from georegistry.core.security import hash_password
from georegistry.models import City, Country, Person, PersonRole, Province
from georegistry.repositories import (
    CityRepository,
    CountryRepository,
    PersonRepository,
    ProvinceRepository,
)

# NOTE: All fixtures in this file depend on the `db_session` fixture defined in conftest.py
# The `db_session` provides a transactional, rollback-capable database session for tests.

PASSWORD = "s3cret-pass"

# bcrypt at 4 rounds; computed once, every fixture person shares it
PASSWORD_HASH = hash_password(PASSWORD, rounds=4)

# distinct coordinates for factory-made provinces and cities
_coordinates = count(1)


def _next_coordinates() -> tuple[float, float]:
    n = next(_coordinates)
    return round(-80 + (n % 16000) * 0.01, 2), round(-170 + (n // 16000) * 0.01, 2)


@pytest.fixture
async def country_repo(db_session: AsyncSession) -> CountryRepository:
    return CountryRepository(db_session)


@pytest.fixture
async def province_repo(db_session: AsyncSession) -> ProvinceRepository:
    return ProvinceRepository(db_session)


@pytest.fixture
async def city_repo(db_session: AsyncSession) -> CityRepository:
    return CityRepository(db_session)


@pytest.fixture
async def person_repo(db_session: AsyncSession) -> PersonRepository:
    return PersonRepository(db_session)


@pytest.fixture
async def create_country(country_repo: CountryRepository):
    """
    Factory for countries with optional overrides.

    Usage:
        country = await create_country(name="Chile", code="CL")
    """
    async def _create(**overrides) -> Country:
        data = {"name": f"Country {uuid.uuid4().hex[:8]}", "code": None}
        data.update(overrides)
        return await country_repo.create(**data)

    return _create


@pytest.fixture
async def create_province(province_repo: ProvinceRepository, create_country):
    """
    Factory for provinces. Without `country_id` a fresh country is created as the parent.
    """
    async def _create(**overrides) -> Province:
        latitude, longitude = _next_coordinates()
        data = {"name": f"Province {uuid.uuid4().hex[:8]}", "latitude": latitude, "longitude": longitude}
        data.update(overrides)
        if "country_id" not in data:
            data["country_id"] = (await create_country()).id
        return await province_repo.create(**data)

    return _create


@pytest.fixture
async def create_city(city_repo: CityRepository, create_province):
    async def _create(**overrides) -> City:
        latitude, longitude = _next_coordinates()
        data = {"name": f"City {uuid.uuid4().hex[:8]}", "latitude": latitude, "longitude": longitude}
        data.update(overrides)
        if "province_id" not in data:
            data["province_id"] = (await create_province()).id
        return await city_repo.create(**data)

    return _create


@pytest.fixture
async def create_person(person_repo: PersonRepository):
    """
    Factory for persons. Every person gets PASSWORD as their password.

    Usage:
        admin = await create_person(role=PersonRole.ADMIN)
    """
    async def _create(**overrides) -> Person:
        data = {
            "first_name": "Test",
            "last_name": "Person",
            "email": f"person_{uuid.uuid4().hex[:8]}@example.com",
            "password_hash": PASSWORD_HASH,
            "role": PersonRole.USER,
        }
        data.update(overrides)
        return await person_repo.create(**data)

    return _create


@pytest.fixture
async def chile(create_country) -> Country:
    return await create_country(name="Chile", code="CL")


@pytest.fixture
async def santa_fe(create_province, chile: Country) -> Province:
    return await create_province(name="Santa Fe", latitude=-31.63, longitude=-60.70, country_id=chile.id)


@pytest.fixture
async def rosario(create_city, santa_fe: Province) -> City:
    return await create_city(name="Rosario", latitude=-32.94, longitude=-60.64, province_id=santa_fe.id)


@pytest.fixture
async def admin_person(create_person) -> Person:
    return await create_person(first_name="Ada", last_name="Admin", email="admin@example.com",
                               role=PersonRole.ADMIN)


@pytest.fixture
async def moderator_person(create_person) -> Person:
    return await create_person(first_name="Mo", last_name="Derator", email="moderator@example.com",
                               role=PersonRole.MODERATOR)


@pytest.fixture
async def user_person(create_person, rosario: City) -> Person:
    return await create_person(first_name="Uma", last_name="User", email="user@example.com",
                               role=PersonRole.USER, city_id=rosario.id)
