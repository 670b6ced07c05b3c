from .base_repository import BaseRepository
from .country_repository import CountryRepository
from .province_repository import ProvinceRepository
from .city_repository import CityRepository
from .person_repository import PersonRepository

__all__ = [
    "BaseRepository",
    "CountryRepository",
    "ProvinceRepository",
    "CityRepository",
    "PersonRepository",
]
