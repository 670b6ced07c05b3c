"""
Province repository. Provinces are identified globally by their coordinates.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from georegistry.models.province import Province
from .base_repository import BaseRepository


class ProvinceRepository(BaseRepository[Province]):

    def __init__(self, db: AsyncSession):
        super().__init__(Province, db)
