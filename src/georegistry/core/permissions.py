"""
The two gates every protected endpoint passes: authenticate, then authorize.

Plain functions, so they are testable without FastAPI; `georegistry.api.deps` wires
them into dependencies.
"""

import logging
from typing import Iterable

from georegistry.config import Settings
from georegistry.exceptions.base import ForbiddenError, UnauthorizedError
from georegistry.models.person import PersonRole
from .security import TokenClaims, decode_access_token

logger = logging.getLogger(__name__)


def authenticate(token: str | None, settings: Settings) -> TokenClaims:
    """Absent, malformed, badly signed or expired token -> UnauthorizedError."""
    if not token or not token.strip():
        raise UnauthorizedError("Authentication required")
    return decode_access_token(token.strip(), settings)


def authorize(claims: TokenClaims, allowed_roles: Iterable[PersonRole]) -> TokenClaims:
    """
    Role must be one of `allowed_roles`. There is no hierarchy: ADMIN is not implicitly
    a MODERATOR, every accepted role is listed by the endpoint.
    """
    allowed = tuple(allowed_roles)
    if claims.role not in allowed:
        logger.info(
            "auth.authorize.denied",
            extra={"person_id": claims.sub, "role": claims.role.value, "required": [r.value for r in allowed]},
        )
        raise ForbiddenError(f"Access denied. Required roles: {', '.join(r.value for r in allowed)}")
    return claims
