"""
Province endpoints. Reads are public, writes need ADMIN. Provinces are also listed per country.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from georegistry.api.deps import created_or_raise, get_db, require_admin
from georegistry.config import Settings, get_settings
from georegistry.schemas import (
    ProvinceCreate,
    ProvincePatch,
    ProvinceReplace,
    ProvinceResponse,
    MessageResponse,
    PageResponse,
)
from georegistry.services.province_service import ProvinceService

router = APIRouter()


def get_service(db: AsyncSession = Depends(get_db), settings: Settings = Depends(get_settings)) -> ProvinceService:
    return ProvinceService(db, settings)


@router.post("", response_model=ProvinceResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_admin)])
async def create_province(payload: ProvinceCreate, service: ProvinceService = Depends(get_service)):
    """Create a province, or 409 with `existingId` when the coordinates are taken."""
    resolution = await service.create(payload.model_dump())
    return created_or_raise(resolution, "Province")


@router.get("", response_model=PageResponse[ProvinceResponse])
async def list_provinces(
    page: int | None = Query(None),
    limit: int | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    service: ProvinceService = Depends(get_service),
):
    request = service.page_request(page, limit, sort_by, sort_order)
    return PageResponse[ProvinceResponse].from_page(await service.list_all(request))


@router.get("/search", response_model=PageResponse[ProvinceResponse])
async def search_provinces(
    name: str | None = Query(None),
    page: int | None = Query(None),
    limit: int | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    service: ProvinceService = Depends(get_service),
):
    request = service.page_request(page, limit, sort_by, sort_order)
    return PageResponse[ProvinceResponse].from_page(await service.search(name, request))


@router.get("/by-country/{country_id}", response_model=PageResponse[ProvinceResponse])
async def list_provinces_by_country(
    country_id: int,
    page: int | None = Query(None),
    limit: int | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    service: ProvinceService = Depends(get_service),
):
    request = service.page_request(page, limit, sort_by, sort_order)
    return PageResponse[ProvinceResponse].from_page(await service.list_by_country(country_id, request))


@router.get("/{province_id}", response_model=ProvinceResponse)
async def get_province(province_id: int, service: ProvinceService = Depends(get_service)):
    return await service.get(province_id)


@router.put("/{province_id}", response_model=ProvinceResponse, dependencies=[Depends(require_admin)])
async def replace_province(province_id: int, payload: ProvinceReplace, service: ProvinceService = Depends(get_service)):
    return await service.update(province_id, payload.model_dump())


@router.patch("/{province_id}", response_model=ProvinceResponse, dependencies=[Depends(require_admin)])
async def update_province(province_id: int, payload: ProvincePatch, service: ProvinceService = Depends(get_service)):
    return await service.update(province_id, payload.model_dump(exclude_unset=True))


@router.delete("/{province_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_province(province_id: int, service: ProvinceService = Depends(get_service)):
    """409 while the province still has cities."""
    return MessageResponse(message=await service.delete(province_id))
