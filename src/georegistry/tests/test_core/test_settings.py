import pytest
from pydantic import ValidationError

from georegistry.config import Settings


def test_database_url_from_parts():
    settings = Settings(
        POSTGRES_USERNAME="geo",
        POSTGRES_PASSWORD="pw",
        POSTGRES_HOST="db",
        POSTGRES_PORT=6543,
        POSTGRES_DB="registry",
    )
    assert settings.DATABASE_URL == "postgresql+psycopg://geo:pw@db:6543/registry"


def test_testing_switches_to_test_database():
    settings = Settings(POSTGRES_DB="registry", TESTING=True, TEST_POSTGRES_DB="registry_test")
    assert settings.DATABASE_URL.endswith("/registry_test")


def test_dsn_wins():
    settings = Settings(DATABASE_DSN="sqlite+aiosqlite:///./geo.db", POSTGRES_DB="ignored")
    assert settings.DATABASE_URL == "sqlite+aiosqlite:///./geo.db"


def test_choices_are_normalized():
    settings = Settings(LOG_LEVEL=" debug ", LOG_FORMAT="TEXT", JWT_ALGORITHM="hs256", AUTH_COOKIE_SAMESITE="Strict")

    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.LOG_FORMAT == "text"
    assert settings.JWT_ALGORITHM == "HS256"
    assert settings.AUTH_COOKIE_SAMESITE == "strict"


@pytest.mark.parametrize("rounds", [3, 32])
def test_bcrypt_rounds_bounds(rounds):
    with pytest.raises(ValidationError):
        Settings(BCRYPT_ROUNDS=rounds)


def test_cookie_is_secure_only_in_production():
    assert Settings(ENV="production").AUTH_COOKIE_SECURE is True
    assert Settings(ENV="development").AUTH_COOKIE_SECURE is False


def test_environment_variables_are_read(monkeypatch):
    monkeypatch.setenv("PAGINATION_MAX_LIMIT", "50")
    monkeypatch.setenv("JWT_EXPIRES_IN", "15m")

    settings = Settings()

    assert settings.PAGINATION_MAX_LIMIT == 50
    assert settings.JWT_EXPIRES_IN == "15m"
