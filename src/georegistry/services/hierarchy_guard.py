"""
Referential-integrity checks for the Country -> Province -> City -> Person chain.

Each level of the chain is described once by a `HierarchyLevel`; the guard reads that
description to decide whether a delete, an update or a move to another parent is allowed.
Nothing here ever cascades: a parent with children cannot be deleted.
"""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from georegistry.database.base import Base
from georegistry.exceptions.base import DependentRecordsError, DuplicateError, NotFoundError
from georegistry.models import City, Country, Person, Province
from georegistry.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HierarchyLevel:
    model: type[Base]
    label: str
    children: str | None = None            # relationship holding the direct children
    children_label: str | None = None
    parent_field: str | None = None
    parent_model: type[Base] | None = None
    parent_label: str | None = None
    parent_required: bool = True
    unique_keys: tuple[tuple[str, ...], ...] = ()
    soft_keys: tuple[tuple[str, ...], ...] = ()   # logged on create, rejected on update


COUNTRY = HierarchyLevel(
    model=Country,
    label="Country",
    children="provinces",
    children_label="provinces",
    unique_keys=(("name",), ("code",)),
)

PROVINCE = HierarchyLevel(
    model=Province,
    label="Province",
    children="cities",
    children_label="cities",
    parent_field="country_id",
    parent_model=Country,
    parent_label="Country",
    unique_keys=(("latitude", "longitude"),),
)

CITY = HierarchyLevel(
    model=City,
    label="City",
    children="persons",
    children_label="persons",
    parent_field="province_id",
    parent_model=Province,
    parent_label="Province",
    unique_keys=(("latitude", "longitude"),),
    soft_keys=(("name", "province_id"),),
)

PERSON = HierarchyLevel(
    model=Person,
    label="Person",
    parent_field="city_id",
    parent_model=City,
    parent_label="City",
    parent_required=False,
    unique_keys=(("email",),),
)


def _describe(values: dict[str, Any]) -> str:
    return ", ".join(f"{field}={value!r}" for field, value in values.items())


class HierarchyGuard:

    def __init__(self, db: AsyncSession):
        self.db = db

    def _repository(self, model: type[Base]) -> BaseRepository:
        return BaseRepository(model, self.db)

    async def assert_deletable(self, level: HierarchyLevel, entity_id: int):
        """
        Load the entity with its direct children and refuse deletion while any exist.

        Raises:
            NotFoundError: no such entity.
            DependentRecordsError: "<Entity> with ID <id> has associated <children>".
        """
        repository = self._repository(level.model)
        if level.children:
            entity = await repository.get_with_children(entity_id, level.children)
        else:
            entity = await repository.get_by_id(entity_id)

        if entity is None:
            raise NotFoundError(f"{level.label} with ID {entity_id} not found")

        if level.children:
            children = getattr(entity, level.children)
            if children:
                logger.info(
                    "guard.delete.blocked",
                    extra={"model": level.label, "id": entity_id,
                           "children": level.children_label, "count": len(children)},
                )
                raise DependentRecordsError(
                    f"{level.label} with ID {entity_id} has associated {level.children_label}",
                    children=level.children_label,
                    count=len(children),
                )
        return entity

    async def assert_parent_exists(self, level: HierarchyLevel, parent_id: int | None):
        """Return the parent row; a missing parent raises NotFoundError before anything is written."""
        if level.parent_model is None:
            return None
        if parent_id is None:
            if level.parent_required:
                raise NotFoundError(f"{level.parent_label} is required for {level.label}",
                                    fields=[level.parent_field])
            return None

        parent = await self._repository(level.parent_model).get_by_id(parent_id)
        if parent is None:
            raise NotFoundError(f"{level.parent_label} with ID {parent_id} not found", fields=[level.parent_field])
        return parent

    async def assert_reparentable(self, level: HierarchyLevel, entity, changes: dict[str, Any]) -> None:
        """
        When `changes` moves the entity under another parent, that parent must exist.
        Uniqueness is then re-checked against the merged values.
        """
        if level.parent_field and level.parent_field in changes:
            new_parent_id = changes[level.parent_field]
            if new_parent_id != getattr(entity, level.parent_field):
                await self.assert_parent_exists(level, new_parent_id)
                logger.debug(
                    "guard.reparent",
                    extra={"model": level.label, "id": entity.id,
                           "from": getattr(entity, level.parent_field), "to": new_parent_id},
                )

        await self.assert_unique_for_update(level, entity, changes)

    async def assert_unique_for_update(self, level: HierarchyLevel, entity, changes: dict[str, Any]) -> None:
        """
        For every uniqueness key touched by `changes`, no other row may hold the merged value.
        The entity itself is never modified here.

        Raises:
            DuplicateError: with the id of the row already holding the value.
        """
        repository = self._repository(level.model)

        for key in level.unique_keys + level.soft_keys:
            if not any(field in changes for field in key):
                continue

            merged = {field: changes[field] if field in changes else getattr(entity, field) for field in key}
            if any(value is None for value in merged.values()):
                continue

            other = await repository.find_first_by(exclude_id=entity.id, **merged)
            if other is not None:
                logger.info(
                    "guard.update.conflict",
                    extra={"model": level.label, "id": entity.id, "existing_id": other.id, "key": list(key)},
                )
                raise DuplicateError(
                    f"{level.label} with {_describe(merged)} already exists",
                    fields=list(key),
                    existing_id=other.id,
                )
