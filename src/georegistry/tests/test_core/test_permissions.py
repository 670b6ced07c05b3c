import pytest

from georegistry.config import Settings
from georegistry.core.permissions import authenticate, authorize
from georegistry.core.security import TokenClaims, create_access_token
from georegistry.exceptions.base import ForbiddenError, UnauthorizedError
from georegistry.models import PersonRole


@pytest.fixture
def settings() -> Settings:
    return Settings(JWT_SECRET="unit-test-secret")


def claims_for(role: PersonRole) -> TokenClaims:
    return TokenClaims(sub=7, email="p@example.com", role=role, iat=0, exp=1)


@pytest.mark.parametrize("token", [None, "", "   "])
def test_authenticate_without_token(token, settings):
    with pytest.raises(UnauthorizedError, match="Authentication required"):
        authenticate(token, settings)


def test_authenticate_valid_token(settings):
    token = create_access_token(7, "p@example.com", PersonRole.USER, settings)
    claims = authenticate(f"  {token} ", settings)
    assert claims.sub == 7


def test_authenticate_invalid_token(settings):
    with pytest.raises(UnauthorizedError):
        authenticate("abc.def.ghi", settings)


def test_authorize_allows_listed_role():
    claims = claims_for(PersonRole.MODERATOR)
    assert authorize(claims, [PersonRole.ADMIN, PersonRole.MODERATOR]) is claims


def test_authorize_denies_unlisted_role():
    with pytest.raises(ForbiddenError) as exc_info:
        authorize(claims_for(PersonRole.USER), [PersonRole.ADMIN, PersonRole.MODERATOR])

    assert exc_info.value.message == "Access denied. Required roles: ADMIN, MODERATOR"
    assert exc_info.value.http_status() == 403


def test_admin_is_not_implicitly_every_role():
    """Roles are flat: an endpoint that lists only MODERATOR refuses an ADMIN."""
    with pytest.raises(ForbiddenError):
        authorize(claims_for(PersonRole.ADMIN), [PersonRole.MODERATOR])
