"""
Authentication endpoints
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from georegistry.api.deps import get_current_claims, get_current_person, get_db
from georegistry.config import Settings, get_settings
from georegistry.models import Person
from georegistry.schemas import (
    AuthStatusResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PersonResponse,
    RegisterRequest,
    RegisterResponse,
)
from georegistry.services.auth_service import AuthService

router = APIRouter()


def get_service(db: AsyncSession = Depends(get_db), settings: Settings = Depends(get_settings)) -> AuthService:
    return AuthService(db, settings)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, service: AuthService = Depends(get_service)):
    """Self-registration always yields a USER account."""
    person = await service.register(
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        city_name=payload.city_name,
        province_name=payload.province_name,
        birth_date=payload.birth_date,
    )
    return RegisterResponse(message="User registered successfully", user_id=person.id)


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    service: AuthService = Depends(get_service),
    settings: Settings = Depends(get_settings),
):
    """Returns the token in the body and also sets it as an HTTP-only cookie."""
    result = await service.login(payload.email, payload.password)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=result.access_token,
        max_age=result.expires_in,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite=settings.AUTH_COOKIE_SAMESITE,
        path="/",
    )
    return LoginResponse(message="Login successful", access_token=result.access_token)


@router.post("/logout", response_model=MessageResponse, dependencies=[Depends(get_current_claims)])
async def logout(response: Response, settings: Settings = Depends(get_settings)):
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite=settings.AUTH_COOKIE_SAMESITE,
    )
    return MessageResponse(message="Logged out successfully")


@router.get("/profile", response_model=PersonResponse)
async def profile(person: Person = Depends(get_current_person)):
    return person


@router.get("/status", response_model=AuthStatusResponse)
async def auth_status(person: Person = Depends(get_current_person)):
    return AuthStatusResponse(is_authenticated=True, user=PersonResponse.model_validate(person))
