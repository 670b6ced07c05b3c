from datetime import date

from pydantic import EmailStr, Field

from .common import CamelModel
from .person import PersonResponse


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    city_name: str = Field(min_length=1, max_length=100)
    province_name: str | None = Field(default=None, max_length=100)
    birth_date: date | None = None


class RegisterResponse(CamelModel):
    message: str
    user_id: int


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class LoginResponse(CamelModel):
    message: str
    access_token: str


class AuthStatusResponse(CamelModel):
    is_authenticated: bool
    user: PersonResponse
