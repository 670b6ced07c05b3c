"""
Page/limit/sort validation and page metadata shared by every listing.

Collections declare which API sort names they accept (`sortable`), mapped to the model
attribute that is actually ordered on. Anything outside that map is a client error.
"""

from dataclasses import dataclass
from math import ceil
from typing import Any, Generic, Mapping, TypeVar

from georegistry.config import Settings, get_settings
from georegistry.exceptions.base import BadRequestError
from georegistry.validators.normalizers import to_uppercase

T = TypeVar("T")

SORT_ORDERS = ("ASC", "DESC")


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = 10
    sort_by: str = "id"         # model attribute, already validated
    descending: bool = False

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class PageMeta:
    total_items: int
    item_count: int
    items_per_page: int
    total_pages: int
    current_page: int


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    meta: PageMeta


def build_page_request(
    page: int | None,
    limit: int | None,
    sort_by: str | None,
    sort_order: str | None,
    sortable: Mapping[str, str],
    settings: Settings | None = None,
) -> PageRequest:
    """
    Validate raw query values into a PageRequest.

    Raises:
        BadRequestError: page < 1, limit outside 1..PAGINATION_MAX_LIMIT, unknown sortBy,
            or a sortOrder other than ASC/DESC (any case).
    """
    settings = settings or get_settings()

    page = 1 if page is None else page
    limit = settings.PAGINATION_DEFAULT_LIMIT if limit is None else limit

    if page < 1:
        raise BadRequestError("page must be greater than or equal to 1", fields=["page"])
    if not 1 <= limit <= settings.PAGINATION_MAX_LIMIT:
        raise BadRequestError(
            f"limit must be between 1 and {settings.PAGINATION_MAX_LIMIT}", fields=["limit"]
        )

    column = "id"
    if sort_by is not None and sort_by.strip():
        column = sortable.get(sort_by.strip())
        if column is None:
            raise BadRequestError(
                f"Invalid sortBy '{sort_by}'. Allowed: {', '.join(sorted(sortable))}", fields=["sortBy"]
            )

    order = to_uppercase(sort_order) or "ASC"
    if order not in SORT_ORDERS:
        raise BadRequestError("sortOrder must be ASC or DESC", fields=["sortOrder"])

    return PageRequest(page=page, limit=limit, sort_by=column, descending=order == "DESC")


def build_page(items: list[Any], total: int, request: PageRequest) -> Page:
    meta = PageMeta(
        total_items=total,
        item_count=len(items),
        items_per_page=request.limit,
        total_pages=ceil(total / request.limit) if total else 0,
        current_page=request.page,
    )
    return Page(items=items, meta=meta)


def require_search_term(term: str | None) -> str:
    """Strip the term; empty or whitespace-only terms are rejected."""
    if term is None or not term.strip():
        raise BadRequestError("Search term must not be empty", fields=["name"])
    return term.strip()
