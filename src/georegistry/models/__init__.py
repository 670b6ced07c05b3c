r"""
Single import point for the registry's ORM models.

    from georegistry.models import Country, Province, City, Person, PersonRole

Importing this package also registers every table on `Base.metadata`, which is what
`create_all()` (startup with DB_CREATE_ALL, and the test fixtures) relies on.
"""

from .country import Country
from .province import Province
from .city import City
from .person import Person, PersonRole

__all__ = [
    "Country",
    "Province",
    "City",
    "Person",
    "PersonRole",
]
