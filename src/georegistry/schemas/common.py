"""
Shared schema plumbing: camelCase on the wire, snake_case in Python.
"""

from dataclasses import asdict
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from georegistry.services.pagination import Page

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


class MessageResponse(CamelModel):
    message: str


class PageMetaResponse(CamelModel):
    total_items: int
    item_count: int
    items_per_page: int
    total_pages: int
    current_page: int


class PageResponse(CamelModel, Generic[T]):
    data: list[T]
    meta: PageMetaResponse

    @classmethod
    def from_page(cls, page: Page) -> "PageResponse[T]":
        """Build from a service Page; call on the parametrized class, e.g. PageResponse[CityResponse]."""
        return cls.model_validate({"data": page.items, "meta": asdict(page.meta)}, from_attributes=True)
