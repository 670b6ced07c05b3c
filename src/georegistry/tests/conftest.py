"""
Core pytest configuration for the entire test suite.

This module provides only the essential database setup and core utilities
that are needed across ALL types of tests (repositories, services, APIs, auth, logging).

Domain-specific fixtures are located in:
- tests/test_fixtures/repository_fixtures.py   (countries, provinces, cities, persons)
- tests/test_fixtures/api_fixtures.py          (HTTP client, role headers)
- tests/test_fixtures/database.py              (test database URL, markers)

They are imported at the bottom of this file so every test module can use them.
"""

from __future__ import annotations

import os

# bcrypt at its minimum work factor keeps the suite fast; must be set before Settings is cached
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret-key")

import logging
from typing import AsyncGenerator

NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "asyncio",
    "httpx",
    "aiosqlite",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)


import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from georegistry.config import get_settings
from georegistry.core.logging.builder import setup_logging
from georegistry.database.base import Base
import georegistry.models  # noqa: F401 – registers every table on Base.metadata

from .test_fixtures.database import IS_SQLITE, TEST_DATABASE_URL, safe_log_db_url

settings = get_settings()
logger = logging.getLogger(__name__)
logger.info(f"Using test DB: {safe_log_db_url(TEST_DATABASE_URL)}")


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """
    Install application logging for the entire test session, so tests run under the same
    formatters, filters and handlers as the app. pytest re-attaches its own capture handler
    around every test, so `caplog` keeps working.
    """
    setup_logging(settings)
    yield


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """
    pysqlite's own transaction handling breaks SAVEPOINT; take it over, and switch on
    foreign keys, which SQLite leaves off by default.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="session")
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, pool_pre_ping=True)
    if IS_SQLITE:
        _enable_sqlite_savepoints(engine)

    async with engine.begin() as conn:
        # a crashed earlier run may have left tables behind
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture()
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """
    Create a transaction-per-test. This gives full test isolation even if code calls `commit()`.

    Pattern:
      - acquire a connection and begin an outer transaction on it
      - bind an AsyncSession to the connection with join_transaction_mode="create_savepoint":
        the session's own transactions become SAVEPOINTs, so `commit()` releases a savepoint
        and `rollback()` returns to it, while the outer transaction stays open
      - yield session to test
      - cleanup: close session and roll back the outer transaction
    """
    async with async_engine.connect() as connection:
        await connection.begin()

        maker = async_sessionmaker(
            bind=connection,
            class_=AsyncSession,
            expire_on_commit=False,
            join_transaction_mode="create_savepoint",
        )
        session: AsyncSession = maker()

        try:
            yield session
        finally:
            await session.close()
            await connection.rollback()


from .test_fixtures.repository_fixtures import (  # noqa: E402,F401
    country_repo,
    province_repo,
    city_repo,
    person_repo,
    create_country,
    create_province,
    create_city,
    create_person,
    chile,
    santa_fe,
    rosario,
    admin_person,
    moderator_person,
    user_person,
)
from .test_fixtures.api_fixtures import (  # noqa: E402,F401
    client,
    admin_headers,
    moderator_headers,
    user_headers,
)
