"""
Country endpoints. Reads are public, writes need ADMIN.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from georegistry.api.deps import created_or_raise, get_db, require_admin
from georegistry.config import Settings, get_settings
from georegistry.schemas import (
    CountryCreate,
    CountryPatch,
    CountryReplace,
    CountryResponse,
    MessageResponse,
    PageResponse,
)
from georegistry.services.country_service import CountryService

router = APIRouter()


def get_service(db: AsyncSession = Depends(get_db), settings: Settings = Depends(get_settings)) -> CountryService:
    return CountryService(db, settings)


@router.post("", response_model=CountryResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_admin)])
async def create_country(payload: CountryCreate, service: CountryService = Depends(get_service)):
    """Create a country, or 409 with `existingId` when the name or code is taken."""
    resolution = await service.create(payload.model_dump())
    return created_or_raise(resolution, "Country")


@router.get("", response_model=PageResponse[CountryResponse])
async def list_countries(
    page: int | None = Query(None),
    limit: int | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    service: CountryService = Depends(get_service),
):
    request = service.page_request(page, limit, sort_by, sort_order)
    return PageResponse[CountryResponse].from_page(await service.list_all(request))


@router.get("/search", response_model=PageResponse[CountryResponse])
async def search_countries(
    name: str | None = Query(None),
    page: int | None = Query(None),
    limit: int | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    service: CountryService = Depends(get_service),
):
    request = service.page_request(page, limit, sort_by, sort_order)
    return PageResponse[CountryResponse].from_page(await service.search(name, request))


@router.get("/{country_id}", response_model=CountryResponse)
async def get_country(country_id: int, service: CountryService = Depends(get_service)):
    return await service.get(country_id)


@router.put("/{country_id}", response_model=CountryResponse, dependencies=[Depends(require_admin)])
async def replace_country(country_id: int, payload: CountryReplace, service: CountryService = Depends(get_service)):
    return await service.update(country_id, payload.model_dump())


@router.patch("/{country_id}", response_model=CountryResponse, dependencies=[Depends(require_admin)])
async def update_country(country_id: int, payload: CountryPatch, service: CountryService = Depends(get_service)):
    return await service.update(country_id, payload.model_dump(exclude_unset=True))


@router.delete("/{country_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_country(country_id: int, service: CountryService = Depends(get_service)):
    """409 while the country still has provinces."""
    return MessageResponse(message=await service.delete(country_id))
