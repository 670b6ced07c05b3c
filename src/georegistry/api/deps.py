"""
FastAPI dependencies: database session, services, and the authenticate/authorize gates.

    @router.delete("/{country_id}", dependencies=[Depends(require_roles(PersonRole.ADMIN))])

The token is taken from `Authorization: Bearer <jwt>` first, then from the session cookie.
"""

from typing import AsyncGenerator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from georegistry.config import Settings, get_settings
from georegistry.core.permissions import authenticate, authorize
from georegistry.core.security import TokenClaims
from georegistry.exceptions.base import DuplicateError
from georegistry.database.session import get_async_session
from georegistry.models import Person, PersonRole
from georegistry.services.auth_service import AuthService
from georegistry.services.entity_resolver import Resolution

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db(session: AsyncSession = Depends(get_async_session)) -> AsyncGenerator[AsyncSession, None]:
    yield session


def get_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> str | None:
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.AUTH_COOKIE_NAME)


def get_current_claims(
    token: str | None = Depends(get_token),
    settings: Settings = Depends(get_settings),
) -> TokenClaims:
    return authenticate(token, settings)


def require_roles(*roles: PersonRole):
    """Dependency factory: authenticated AND role in `roles`."""
    def role_checker(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
        return authorize(claims, roles)

    return role_checker


async def get_current_person(
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Person:
    return await AuthService(db, settings).profile(claims.sub)


require_admin = require_roles(PersonRole.ADMIN)
require_staff = require_roles(PersonRole.ADMIN, PersonRole.MODERATOR)


def created_or_raise(resolution: Resolution, label: str):
    """
    The row a POST just inserted, or a 409 pointing at the row that already held the key.
    """
    if resolution.created:
        return resolution.entity
    fields = list(resolution.matched_on) if resolution.matched_on else None
    raise DuplicateError(
        f"{label} already exists",
        fields=fields,
        existing_id=resolution.entity.id,
    )
