from .common import CamelModel, MessageResponse, PageMetaResponse, PageResponse
from .country import CountryCreate, CountryReplace, CountryPatch, CountryResponse
from .province import ProvinceCreate, ProvinceReplace, ProvincePatch, ProvinceResponse
from .city import CityCreate, CityReplace, CityPatch, CityResponse
from .person import PersonCreate, PersonReplace, PersonPatch, PersonResponse
from .auth import (
    RegisterRequest,
    RegisterResponse,
    LoginRequest,
    LoginResponse,
    AuthStatusResponse,
)

__all__ = [
    "CamelModel",
    "MessageResponse",
    "PageMetaResponse",
    "PageResponse",
    "CountryCreate",
    "CountryReplace",
    "CountryPatch",
    "CountryResponse",
    "ProvinceCreate",
    "ProvinceReplace",
    "ProvincePatch",
    "ProvinceResponse",
    "CityCreate",
    "CityReplace",
    "CityPatch",
    "CityResponse",
    "PersonCreate",
    "PersonReplace",
    "PersonPatch",
    "PersonResponse",
    "RegisterRequest",
    "RegisterResponse",
    "LoginRequest",
    "LoginResponse",
    "AuthStatusResponse",
]
