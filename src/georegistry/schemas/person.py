from datetime import date

from pydantic import EmailStr, Field

from georegistry.models.person import PersonRole
from .common import CamelModel


class PersonCreate(CamelModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    role: PersonRole = PersonRole.USER
    city_id: int | None = Field(default=None, gt=0)
    birth_date: date | None = None


class PersonReplace(PersonCreate):
    pass


class PersonPatch(CamelModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=6, max_length=72)
    role: PersonRole | None = None
    city_id: int | None = Field(default=None, gt=0)
    birth_date: date | None = None


class PersonResponse(CamelModel):
    """Public profile. The password hash has no field here, so it can never be serialized."""
    id: int
    first_name: str
    last_name: str
    email: str
    role: PersonRole
    city_id: int | None = None
    birth_date: date | None = None
