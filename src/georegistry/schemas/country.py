from pydantic import Field

from .common import CamelModel


class CountryCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    code: str | None = Field(default=None, min_length=1, max_length=10)


class CountryReplace(CountryCreate):
    """PUT body: every field is replaced, an omitted code clears it."""


class CountryPatch(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    code: str | None = Field(default=None, min_length=1, max_length=10)


class CountryResponse(CamelModel):
    id: int
    name: str
    code: str | None = None
