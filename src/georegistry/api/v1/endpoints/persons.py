"""
Person endpoints. Reads need ADMIN or MODERATOR, writes need ADMIN.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from georegistry.api.deps import get_db, require_admin, require_staff
from georegistry.config import Settings, get_settings
from georegistry.schemas import (
    MessageResponse,
    PageResponse,
    PersonCreate,
    PersonPatch,
    PersonReplace,
    PersonResponse,
)
from georegistry.services.person_service import PersonService

router = APIRouter()


def get_service(db: AsyncSession = Depends(get_db), settings: Settings = Depends(get_settings)) -> PersonService:
    return PersonService(db, settings)


@router.post("", response_model=PersonResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_admin)])
async def create_person(payload: PersonCreate, service: PersonService = Depends(get_service)):
    """409 with `existingId` when the email is already registered."""
    return await service.create(payload.model_dump())


@router.get("", response_model=PageResponse[PersonResponse], dependencies=[Depends(require_staff)])
async def list_persons(
    page: int | None = Query(None),
    limit: int | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    service: PersonService = Depends(get_service),
):
    request = service.page_request(page, limit, sort_by, sort_order)
    return PageResponse[PersonResponse].from_page(await service.list_all(request))


@router.get("/search", response_model=PageResponse[PersonResponse], dependencies=[Depends(require_staff)])
async def search_persons(
    name: str | None = Query(None),
    page: int | None = Query(None),
    limit: int | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    service: PersonService = Depends(get_service),
):
    """Matches first or last name."""
    request = service.page_request(page, limit, sort_by, sort_order)
    return PageResponse[PersonResponse].from_page(await service.search(name, request))


@router.get("/{person_id}", response_model=PersonResponse, dependencies=[Depends(require_staff)])
async def get_person(person_id: int, service: PersonService = Depends(get_service)):
    return await service.get(person_id)


@router.put("/{person_id}", response_model=PersonResponse, dependencies=[Depends(require_admin)])
async def replace_person(person_id: int, payload: PersonReplace, service: PersonService = Depends(get_service)):
    return await service.update(person_id, payload.model_dump())


@router.patch("/{person_id}", response_model=PersonResponse, dependencies=[Depends(require_admin)])
async def update_person(person_id: int, payload: PersonPatch, service: PersonService = Depends(get_service)):
    return await service.update(person_id, payload.model_dump(exclude_unset=True))


@router.delete("/{person_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_person(person_id: int, service: PersonService = Depends(get_service)):
    return MessageResponse(message=await service.delete(person_id))
