from sqlalchemy.ext.asyncio import AsyncSession

from georegistry.config import Settings
from georegistry.models import City
from georegistry.repositories import CityRepository
from .base_service import HierarchyService
from .hierarchy_guard import CITY
from .pagination import Page, PageRequest


class CityService(HierarchyService[City]):
    level = CITY
    sortable = {
        "id": "id",
        "name": "name",
        "latitude": "latitude",
        "longitude": "longitude",
        "provinceId": "province_id",
    }

    def __init__(self, db: AsyncSession, settings: Settings | None = None):
        super().__init__(db, CityRepository(db), settings)

    async def list_by_province(self, province_id: int, request: PageRequest) -> Page[City]:
        return await self._page(request, where=[City.province_id == province_id])
