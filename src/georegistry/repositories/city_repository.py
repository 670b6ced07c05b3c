"""
City repository.

Registration resolves a person's city by name, optionally narrowed by the province name.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from georegistry.models.city import City
from georegistry.models.province import Province
from georegistry.exceptions.base import RepositoryError
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CityRepository(BaseRepository[City]):

    def __init__(self, db: AsyncSession):
        super().__init__(City, db)

    async def find_by_name_and_province_name(self, city_name: str, province_name: str | None = None) -> City | None:
        """
        First city (by id) whose name matches `city_name`, case-insensitively.

        When `province_name` is given, only cities of a province with that name qualify.
        A blank province name is treated as absent.
        """
        query = select(City).where(func.lower(City.name) == city_name.strip().lower())

        if province_name and province_name.strip():
            query = query.join(Province, City.province_id == Province.id).where(
                func.lower(Province.name) == province_name.strip().lower()
            )

        try:
            result = await self.db.execute(query.order_by(City.id).limit(1))
            city = result.scalars().first()
            logger.debug(
                "repo.city.lookup_by_name",
                extra={"city": city_name, "province": province_name, "found": city is not None},
            )
            return city

        except Exception as e:
            logger.error(f"Error finding City {city_name!r} / {province_name!r}: {e}")
            raise RepositoryError("Failed to find City") from e
