"""
Password hashing (bcrypt) and access-token handling (JWT).

Everything here is synchronous and pure. The `*_async` helpers push bcrypt's
slow work onto Starlette's threadpool so request handlers never block the event loop.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from starlette.concurrency import run_in_threadpool

from georegistry.config import Settings
from georegistry.exceptions.base import BadRequestError, UnauthorizedError
from georegistry.models.person import PersonRole

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a secret
BCRYPT_MAX_BYTES = 72

DEFAULT_EXPIRES_IN_SECONDS = 3600

_EXPIRES_IN_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


# =====================================================================================================================
# Passwords
# =====================================================================================================================

def hash_password(password: str, rounds: int = 12) -> str:
    raw = password.encode("utf-8")
    if len(raw) > BCRYPT_MAX_BYTES:
        raise BadRequestError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes", fields=["password"])
    return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """False on mismatch, and also on input bcrypt refuses (oversized secret, malformed hash)."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.debug("security.verify.rejected_input")
        return False


async def hash_password_async(password: str, rounds: int = 12) -> str:
    return await run_in_threadpool(hash_password, password, rounds)


async def verify_password_async(password: str, password_hash: str) -> bool:
    return await run_in_threadpool(verify_password, password, password_hash)


# =====================================================================================================================
# Tokens
# =====================================================================================================================

def parse_expires_in(expr: str | int | None) -> int:
    """
    Turn "3600", "30s", "15m", "1h" or "7d" into seconds.

    Anything unparseable (or non-positive) falls back to one hour with a warning; token
    issuance never fails because of this setting.
    """
    if isinstance(expr, int) and not isinstance(expr, bool):
        if expr > 0:
            return expr
    elif isinstance(expr, str):
        match = _EXPIRES_IN_PATTERN.match(expr)
        if match:
            seconds = int(match.group(1)) * _UNIT_SECONDS[match.group(2).lower()]
            if seconds > 0:
                return seconds

    logger.warning("security.expires_in.invalid", extra={"value": repr(expr), "fallback_seconds": DEFAULT_EXPIRES_IN_SECONDS})
    return DEFAULT_EXPIRES_IN_SECONDS


@dataclass(frozen=True)
class TokenClaims:
    """Decoded access token. `sub` is the person id."""
    sub: int
    email: str
    role: PersonRole
    iat: int
    exp: int


def create_access_token(person_id: int, email: str, role: PersonRole | str, settings: Settings,
                        now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    expires_at = now + timedelta(seconds=parse_expires_in(settings.JWT_EXPIRES_IN))
    payload = {
        # registered claims must be strings for PyJWT's validation
        "sub": str(person_id),
        "email": email,
        "role": PersonRole(role).value,
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> TokenClaims:
    """
    Verify signature and expiry and return the claims.

    Raises:
        UnauthorizedError: expired, badly signed, malformed, or missing required claims.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["sub", "exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise UnauthorizedError("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        logger.info("security.token.invalid", extra={"reason": type(exc).__name__})
        raise UnauthorizedError("Invalid token") from exc

    try:
        return TokenClaims(
            sub=int(payload["sub"]),
            email=str(payload.get("email", "")),
            role=PersonRole(payload.get("role")),
            iat=int(payload["iat"]),
            exp=int(payload["exp"]),
        )
    except (TypeError, ValueError) as exc:
        logger.info("security.token.bad_claims")
        raise UnauthorizedError("Invalid token") from exc
