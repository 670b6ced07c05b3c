from sqlalchemy.ext.asyncio import AsyncSession

from georegistry.config import Settings
from georegistry.models import Province
from georegistry.repositories import ProvinceRepository
from .base_service import HierarchyService
from .hierarchy_guard import PROVINCE
from .pagination import Page, PageRequest


class ProvinceService(HierarchyService[Province]):
    level = PROVINCE
    sortable = {
        "id": "id",
        "name": "name",
        "latitude": "latitude",
        "longitude": "longitude",
        "countryId": "country_id",
    }

    def __init__(self, db: AsyncSession, settings: Settings | None = None):
        super().__init__(db, ProvinceRepository(db), settings)

    async def list_by_country(self, country_id: int, request: PageRequest) -> Page[Province]:
        """Provinces of one country. An unknown country simply yields an empty page."""
        return await self._page(request, where=[Province.country_id == country_id])
