"""
Seed a privileged account. Self-registration always creates USER accounts, so the first
ADMIN (and any MODERATOR) is created here.

    georegistry-create-admin --email admin@example.com --password 'S3cret!' \
        --first-name Ada --last-name Admin [--role MODERATOR] [--create-tables]

An existing account with that email is promoted to the requested role instead.
"""

import argparse
import asyncio
import logging
import sys

from sqlalchemy.ext.asyncio import AsyncSession

from georegistry.config import Settings, get_settings
from georegistry.core.logging import setup_logging
from georegistry.core.security import hash_password_async
from georegistry.database.base import Base
from georegistry.database.session import dispose_engine, get_engine, get_sessionmaker
from georegistry.exceptions.base import AppError
from georegistry.models import Person, PersonRole
from georegistry.repositories import PersonRepository
from georegistry.validators.normalizers import normalize_email

logger = logging.getLogger(__name__)

PRIVILEGED_ROLES = (PersonRole.ADMIN, PersonRole.MODERATOR)


async def create_admin(
    session: AsyncSession,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    role: PersonRole = PersonRole.ADMIN,
    settings: Settings | None = None,
) -> tuple[Person, bool]:
    """
    Create (or promote) a privileged person. Returns (person, created).
    """
    settings = settings or get_settings()
    role = PersonRole(role)
    if role not in PRIVILEGED_ROLES:
        raise ValueError(f"role must be one of {', '.join(r.value for r in PRIVILEGED_ROLES)}")

    persons = PersonRepository(session)
    existing = await persons.find_by_email(email)
    if existing is not None:
        if existing.role != role:
            await persons.update(existing, role=role)
            await session.commit()
            logger.info("script.create_admin.promoted", extra={"person_id": existing.id, "role": role.value})
        return existing, False

    person = await persons.create(
        email=normalize_email(email),
        password_hash=await hash_password_async(password, settings.BCRYPT_ROUNDS),
        first_name=first_name,
        last_name=last_name,
        role=role,
    )
    await session.commit()
    logger.info("script.create_admin.created", extra={"person_id": person.id, "role": role.value})
    return person, True


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or promote an ADMIN/MODERATOR account.")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--first-name", default="Admin")
    parser.add_argument("--last-name", default="User")
    parser.add_argument("--role", choices=[r.value for r in PRIVILEGED_ROLES], default=PersonRole.ADMIN.value)
    parser.add_argument("--create-tables", action="store_true", help="create missing tables first")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace, settings: Settings) -> tuple[Person, bool]:
    try:
        if args.create_tables:
            async with get_engine().begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        async with get_sessionmaker()() as session:
            return await create_admin(
                session,
                email=args.email,
                password=args.password,
                first_name=args.first_name,
                last_name=args.last_name,
                role=PersonRole(args.role),
                settings=settings,
            )
    finally:
        await dispose_engine()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings)

    try:
        person, created = asyncio.run(_run(args, settings))
    except AppError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1

    print(f"{'Created' if created else 'Updated'} {person.role.value} {person.email} (id={person.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
