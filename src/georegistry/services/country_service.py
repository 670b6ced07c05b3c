from sqlalchemy.ext.asyncio import AsyncSession

from georegistry.config import Settings
from georegistry.models import Country
from georegistry.repositories import CountryRepository
from .base_service import HierarchyService
from .hierarchy_guard import COUNTRY


class CountryService(HierarchyService[Country]):
    level = COUNTRY
    sortable = {"id": "id", "name": "name", "code": "code"}

    def __init__(self, db: AsyncSession, settings: Settings | None = None):
        super().__init__(db, CountryRepository(db), settings)
