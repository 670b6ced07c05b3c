from pydantic_settings import BaseSettings
from pydantic import ConfigDict, field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache
from ..validators.normalizers import to_uppercase, to_lowercase

class Settings(BaseSettings):
    """
    Application settings loaded from environment.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Database configuration
    POSTGRES_DRIVER: str = "psycopg"
    POSTGRES_USERNAME: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "georegistry"

    # Full SQLAlchemy URL; wins over the POSTGRES_* parts when set
    DATABASE_DSN: str | None = None

    # Test database configuration
    TEST_POSTGRES_DB: str | None = None
    TESTING: bool = False

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False
    DB_CREATE_ALL: bool = False

    # Auth
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_IN: str = "1h"
    BCRYPT_ROUNDS: int = 12
    AUTH_COOKIE_NAME: str = "jwt"
    AUTH_COOKIE_SAMESITE: Literal["lax", "strict", "none"] = "lax"

    # Pagination
    PAGINATION_DEFAULT_LIMIT: int = 10
    PAGINATION_MAX_LIMIT: int = 100

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/georegistry")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False
    LOG_USE_QUEUE: bool = False
    LOG_QUEUE_MAX_SIZE: int = 0
    LOG_QUEUE_BLOCKING: bool = False
    LOG_QUEUE_DROP_WARNING_THRESHOLD: int = 100

    # --- Derived settings ---
    @property
    def DATABASE_URL(self) -> str:
        """
        Return the database URL for the current environment.

        - `DATABASE_DSN`, when set, is returned untouched.
        - With `TESTING=True` and `TEST_POSTGRES_DB` set, the URL points at the test database
          so a test run never writes to the regular one.
        - Otherwise the URL is built from the POSTGRES_* parts.
        """
        if self.DATABASE_DSN:
            return self.DATABASE_DSN

        database = self.POSTGRES_DB
        if self.TESTING and self.TEST_POSTGRES_DB:
            database = self.TEST_POSTGRES_DB

        return (
            f"postgresql+{self.POSTGRES_DRIVER}://"
            f"{self.POSTGRES_USERNAME}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
            f"{database}"
        )

    @property
    def AUTH_COOKIE_SECURE(self) -> bool:
        return self.ENV == "production"

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize LOG_LEVEL to uppercase before Literal validation runs, since the logging
        module expects level names such as "DEBUG" or "INFO".
        """
        return to_uppercase(v)

    @field_validator("LOG_FORMAT", "AUTH_COOKIE_SAMESITE", mode="before")
    def normalize_lowercase_choices(cls, v: str | None) -> str | None:
        return to_lowercase(v)

    @field_validator("JWT_ALGORITHM", mode="before")
    def normalize_jwt_algorithm(cls, v: str | None) -> str | None:
        return to_uppercase(v)

    @field_validator("BCRYPT_ROUNDS")
    def check_bcrypt_rounds(cls, v: int) -> int:
        # bcrypt accepts work factors 4..31
        if not 4 <= v <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    # --- ConfigDict settings ---
    model_config = ConfigDict(
        # .env lives next to the package root (src/georegistry/.env)
        env_file=str(Path(__file__).parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

# Settings are read from the environment once per process.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
