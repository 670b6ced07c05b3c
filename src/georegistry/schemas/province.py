from pydantic import Field

from .common import CamelModel


class ProvinceCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    country_id: int = Field(gt=0)


class ProvinceReplace(ProvinceCreate):
    pass


class ProvincePatch(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    country_id: int | None = Field(default=None, gt=0)


class ProvinceResponse(CamelModel):
    id: int
    name: str
    latitude: float
    longitude: float
    country_id: int
