"""
City endpoints. Reads are public, writes need ADMIN. Cities are also listed per province.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from georegistry.api.deps import created_or_raise, get_db, require_admin
from georegistry.config import Settings, get_settings
from georegistry.schemas import (
    CityCreate,
    CityPatch,
    CityReplace,
    CityResponse,
    MessageResponse,
    PageResponse,
)
from georegistry.services.city_service import CityService

router = APIRouter()


def get_service(db: AsyncSession = Depends(get_db), settings: Settings = Depends(get_settings)) -> CityService:
    return CityService(db, settings)


@router.post("", response_model=CityResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_admin)])
async def create_city(payload: CityCreate, service: CityService = Depends(get_service)):
    """Create a city, or 409 with `existingId` when the coordinates are taken."""
    resolution = await service.create(payload.model_dump())
    return created_or_raise(resolution, "City")


@router.get("", response_model=PageResponse[CityResponse])
async def list_cities(
    page: int | None = Query(None),
    limit: int | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    service: CityService = Depends(get_service),
):
    request = service.page_request(page, limit, sort_by, sort_order)
    return PageResponse[CityResponse].from_page(await service.list_all(request))


@router.get("/search", response_model=PageResponse[CityResponse])
async def search_cities(
    name: str | None = Query(None),
    page: int | None = Query(None),
    limit: int | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    service: CityService = Depends(get_service),
):
    request = service.page_request(page, limit, sort_by, sort_order)
    return PageResponse[CityResponse].from_page(await service.search(name, request))


@router.get("/by-province/{province_id}", response_model=PageResponse[CityResponse])
async def list_cities_by_province(
    province_id: int,
    page: int | None = Query(None),
    limit: int | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    service: CityService = Depends(get_service),
):
    request = service.page_request(page, limit, sort_by, sort_order)
    return PageResponse[CityResponse].from_page(await service.list_by_province(province_id, request))


@router.get("/{city_id}", response_model=CityResponse)
async def get_city(city_id: int, service: CityService = Depends(get_service)):
    return await service.get(city_id)


@router.put("/{city_id}", response_model=CityResponse, dependencies=[Depends(require_admin)])
async def replace_city(city_id: int, payload: CityReplace, service: CityService = Depends(get_service)):
    return await service.update(city_id, payload.model_dump())


@router.patch("/{city_id}", response_model=CityResponse, dependencies=[Depends(require_admin)])
async def update_city(city_id: int, payload: CityPatch, service: CityService = Depends(get_service)):
    return await service.update(city_id, payload.model_dump(exclude_unset=True))


@router.delete("/{city_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_city(city_id: int, service: CityService = Depends(get_service)):
    """409 while persons still live in the city."""
    return MessageResponse(message=await service.delete(city_id))
