"""
Shared service behaviour for the geographic levels (Country, Province, City).

Services own the unit of work: they validate through the guard, write through the
repository, then `commit()`. Any error raised before the commit leaves the session to be
rolled back when the request ends.
"""

import logging
from typing import Any, ClassVar, Generic, Mapping, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from georegistry.config import Settings, get_settings
from georegistry.exceptions.base import BadRequestError
from georegistry.repositories.base_repository import BaseRepository, ModelType
from georegistry.validators.exception_validators import get_required_columns
from .entity_resolver import EntityResolver, Resolution
from .hierarchy_guard import HierarchyGuard, HierarchyLevel
from .pagination import Page, PageRequest, build_page, build_page_request, require_search_term

logger = logging.getLogger(__name__)


class HierarchyService(Generic[ModelType]):
    level: ClassVar[HierarchyLevel]
    # API sort name -> model attribute
    sortable: ClassVar[Mapping[str, str]] = {"id": "id", "name": "name"}
    search_fields: ClassVar[tuple[str, ...]] = ("name",)

    def __init__(self, db: AsyncSession, repository: BaseRepository[ModelType], settings: Settings | None = None):
        self.db = db
        self.repository = repository
        self.settings = settings or get_settings()
        self.guard = HierarchyGuard(db)
        self.resolver = EntityResolver(repository)

    # ------------------------------------------------------------------ pagination

    def page_request(
        self,
        page: int | None = None,
        limit: int | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> PageRequest:
        return build_page_request(page, limit, sort_by, sort_order, self.sortable, self.settings)

    async def _page(self, request: PageRequest, where: Sequence[ColumnElement[bool]] = ()) -> Page[ModelType]:
        items, total = await self.repository.get_page(
            offset=request.offset,
            limit=request.limit,
            order_by=request.sort_by,
            descending=request.descending,
            where=where,
        )
        return build_page(items, total, request)

    # ------------------------------------------------------------------ reads

    async def list_all(self, request: PageRequest) -> Page[ModelType]:
        return await self._page(request)

    async def search(self, term: str | None, request: PageRequest) -> Page[ModelType]:
        term = require_search_term(term)
        return await self._page(request, where=[self.repository.contains_filter(self.search_fields, term)])

    async def get(self, entity_id: int) -> ModelType:
        return await self.repository.get_by_id_or_raise(entity_id)

    # ------------------------------------------------------------------ writes

    async def create(self, data: dict[str, Any]) -> Resolution[ModelType]:
        """
        Resolve-or-create. The parent (if the level has one) is checked first, so a missing
        parent fails with NotFoundError before anything is written.
        """
        if self.level.parent_field:
            await self.guard.assert_parent_exists(self.level, data.get(self.level.parent_field))

        resolution = await self.resolver.resolve(data, self.level.unique_keys, self.level.soft_keys)
        await self.db.commit()
        return resolution

    async def update(self, entity_id: int, changes: dict[str, Any]) -> ModelType:
        """
        Apply `changes` (a full replacement or a partial merge, the caller decides which fields
        are present). Conflicting keys are rejected and the row is left untouched.
        """
        entity = await self.repository.get_by_id_or_raise(entity_id)
        if not changes:
            return entity

        required = get_required_columns(self.repository.model)
        nulled = [field for field in required if field in changes and changes[field] is None]
        if nulled:
            raise BadRequestError(f"Field(s) cannot be null: {', '.join(nulled)}", fields=nulled)

        await self.guard.assert_reparentable(self.level, entity, changes)
        entity = await self.repository.update(entity, **changes)
        await self.db.commit()

        logger.info(
            "service.update.success",
            extra={"model": self.level.label, "id": entity_id, "fields": sorted(changes)},
        )
        return entity

    async def delete(self, entity_id: int) -> str:
        await self.guard.assert_deletable(self.level, entity_id)
        await self.repository.delete(entity_id)
        await self.db.commit()

        logger.info("service.delete.success", extra={"model": self.level.label, "id": entity_id})
        return f"{self.level.label} with ID {entity_id} deleted successfully"
