"""
Base repository class providing common database operations.

Every entity repository inherits from `BaseRepository`, which wraps an `AsyncSession` and
implements the record-store operations shared by the hierarchy: point lookup by id, lookup
by a unique-key predicate, paginated scans with sorting and filtering, insert, update
and delete.

Repositories only `flush()`. The service layer owns the transaction and decides when to
`commit()`. Storage-level unique constraints stay the last line of defense against races,
which is why `insert()` writes inside a SAVEPOINT and lets `IntegrityError` through.
"""
from georegistry.exceptions.base import (
    RepositoryError,
    DuplicateError,
    NotFoundError,
    InvalidFieldError
)

from georegistry.exceptions.mapper import db_error_handler
from georegistry.validators.exception_validators import (
    find_unknown_model_kwargs,
    get_required_columns,
    find_unique_conflicts,
)

import time
from typing import TypeVar, Generic, Type, Any, Iterable, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func, and_, or_
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import ColumnElement
import logging

from georegistry.database.base import Base

# Type variable for the model class
ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)

# escape character for LIKE patterns built from user input
LIKE_ESCAPE = "\\"


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository providing common CRUD operations.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Args:
            model: The SQLAlchemy model class (e.g. `Country`, not `Country()`)
            db: The async database session
        """
        self.model = model
        self.db = db

    @property
    def model_name(self) -> str:
        return self.model.__name__

    # =================================================================================================================
    # Create Operations
    # =================================================================================================================

    def _check_fields(self, kwargs: dict[str, Any], operation: str) -> None:
        unknown = find_unknown_model_kwargs(self.model, kwargs)
        if unknown:
            logger.info(
                f"repo.{operation}.invalid_fields",
                extra={"model": self.model_name, "operation": operation, "invalid_fields": sorted(unknown)},
            )
            raise InvalidFieldError(f"Unknown field(s) for {self.model_name}: {', '.join(unknown)}", fields=unknown)

    async def create(self, **kwargs) -> ModelType:
        """
        Create an entity with validation + DB write. Logging:
        - DEBUG: start event with model name and provided keys (not values).
        - INFO: expected domain errors (invalid fields, missing required, duplicate).
        - INFO: success event with created id and duration_ms.
        - EXCEPTION: unexpected errors with stack trace.

        A pre-existing row on any unique column set raises DuplicateError carrying its id.
        """
        logger.debug(
            "repo.create.start",
            extra={
                "model": self.model_name,
                "operation": "create",
                # keys only, values may hold secrets
                "provided_keys": sorted(kwargs.keys()),
            },
        )

        # 1) unknown fields
        self._check_fields(kwargs, "create")

        # 2) required fields (missing or explicitly None)
        required_cols = get_required_columns(self.model)
        missing = [c for c in required_cols if kwargs.get(c) is None]
        if missing:
            logger.info(
                "repo.create.missing_required",
                extra={"model": self.model_name, "operation": "create", "missing_fields": sorted(missing)},
            )
            raise InvalidFieldError(
                f"Missing required field(s): {', '.join(missing)} for {self.model_name}", fields=missing
            )

        # 3) unique pre-check (best-effort; the constraint still decides under concurrency)
        conflicts = await find_unique_conflicts(self.db, self.model, kwargs)
        if conflicts:
            logger.info(
                "repo.create.duplicate_precheck",
                extra={"model": self.model_name, "operation": "create", "conflict_fields": sorted(conflicts)},
            )
            existing = await self.find_first_by(**{c: kwargs[c] for c in conflicts})
            raise DuplicateError(
                f"{self.model_name} already exists for field(s): {', '.join(sorted(conflicts))}",
                fields=sorted(conflicts),
                existing_id=getattr(existing, "id", None),
            )

        # 4) DB write with fallback mapping on integrity errors
        start = time.perf_counter()

        async with db_error_handler(self.db, self.model_name):
            entity = self.model(**kwargs)
            self.db.add(entity)
            await self.db.flush()
            await self.db.refresh(entity)

            logger.info(
                "repo.create.success",
                extra={
                    "model": self.model_name,
                    "operation": "create",
                    "id": entity.id,
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                },
            )
            return entity

    async def insert(self, **kwargs) -> ModelType:
        """
        Insert a row inside a SAVEPOINT and return it refreshed.

        Unlike `create()` there is no pre-check and no error mapping: a storage-level
        `IntegrityError` propagates untouched after the savepoint is rolled back, leaving
        the surrounding transaction usable. The entity resolver relies on this to detect
        that a concurrent writer claimed the same key.
        """
        self._check_fields(kwargs, "insert")

        entity = self.model(**kwargs)
        async with self.db.begin_nested():
            self.db.add(entity)
            await self.db.flush()
        await self.db.refresh(entity)

        logger.debug("repo.insert.success", extra={"model": self.model_name, "id": entity.id})
        return entity

    # =================================================================================================================
    # Read Operations (Single Entity)
    # =================================================================================================================

    async def get_by_id(self, entity_id: int) -> ModelType | None:
        """
        Get an entity by its ID, or None.

        Raises:
            RepositoryError: If an error occurs during retrieval.
        """
        try:
            result = await self.db.execute(select(self.model).where(self.model.id == entity_id))
            entity = result.scalar_one_or_none()
            logger.debug(f"Retrieved {self.model_name} by ID: {entity_id}")
            return entity

        except Exception as e:
            logger.error(f"Error retrieving {self.model_name} by ID {entity_id}: {e}")
            raise RepositoryError(f"Failed to retrieve {self.model_name}") from e

    async def get_by_id_or_raise(self, entity_id: int) -> ModelType:
        """
        Get an entity by its ID or raise NotFoundError.
        """
        entity = await self.get_by_id(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.model_name} with ID {entity_id} not found")
        return entity

    async def get_with_children(self, entity_id: int, relationship: str) -> ModelType | None:
        """
        Load an entity together with one child collection (eager, one level deep).

        Relationships are declared `lazy="raise"`; this is the only sanctioned way to read them.
        """
        attr = getattr(self.model, relationship, None)
        if attr is None:
            raise RepositoryError(f"{self.model_name} has no relationship '{relationship}'")

        try:
            result = await self.db.execute(
                select(self.model)
                .where(self.model.id == entity_id)
                .options(selectinload(attr))
                # an instance already in the identity map would otherwise keep its unloaded collection
                .execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()

        except Exception as e:
            logger.error(f"Error loading {self.model_name} {entity_id} with {relationship}: {e}")
            raise RepositoryError(f"Failed to retrieve {self.model_name}") from e

    async def find_first_by(self, *, exclude_id: int | None = None, **criteria: Any) -> ModelType | None:
        """
        Return the first row (lowest id) matching every `field == value` pair, or None.

        Used for unique-key lookups, e.g. `find_first_by(latitude=-32.94, longitude=-60.64)`.
        `exclude_id` skips one row, typically the entity being updated.
        """
        self._check_fields(criteria, "find")

        try:
            conditions = [getattr(self.model, field) == value for field, value in criteria.items()]
            if exclude_id is not None:
                conditions.append(self.model.id != exclude_id)
            query = select(self.model).where(and_(*conditions)).order_by(self.model.id).limit(1)
            result = await self.db.execute(query)
            return result.scalars().first()

        except Exception as e:
            logger.error(f"Error finding {self.model_name} by {sorted(criteria)}: {e}")
            raise RepositoryError(f"Failed to find {self.model_name}") from e

    # =================================================================================================================
    # Read Operations (Multiple Entities)
    # =================================================================================================================

    async def get_page(
        self,
        offset: int = 0,                                    # records to skip
        limit: int = 10,                                    # page size
        order_by: str = "id",                               # mapped attribute name
        descending: bool = False,
        where: Sequence[ColumnElement[bool]] = (),
    ) -> tuple[list[ModelType], int]:
        """
        Return one page of entities and the total number of rows matching `where`.

        Ties on the sort column are broken by id so that pages never overlap.
        """
        if not hasattr(self.model, order_by):
            raise RepositoryError(f"{self.model_name} has no field '{order_by}'")

        try:
            count_query = select(func.count(self.model.id))
            query = select(self.model)
            if where:
                count_query = count_query.where(*where)
                query = query.where(*where)

            column = getattr(self.model, order_by)
            query = query.order_by(column.desc() if descending else column.asc())
            if order_by != "id":
                query = query.order_by(self.model.id.asc())

            total = (await self.db.execute(count_query)).scalar() or 0
            result = await self.db.execute(query.offset(offset).limit(limit))
            entities = list(result.scalars().all())

            logger.debug(
                "repo.page",
                extra={"model": self.model_name, "offset": offset, "limit": limit,
                       "order_by": order_by, "returned": len(entities), "total": total},
            )
            return entities, total

        except Exception as e:
            logger.error(f"Error retrieving {self.model_name} page: {e}")
            raise RepositoryError(f"Failed to retrieve {self.model_name} entities") from e

    def contains_filter(self, fields: Iterable[str], term: str) -> ColumnElement[bool]:
        """
        Case-insensitive substring match of `term` on any of `fields` (`ILIKE %term%`).

        `%`, `_` and the escape character itself are matched literally.
        """
        escaped = (
            term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
            .replace("%", LIKE_ESCAPE + "%")
            .replace("_", LIKE_ESCAPE + "_")
        )
        pattern = f"%{escaped}%"
        return or_(*(getattr(self.model, field).ilike(pattern, escape=LIKE_ESCAPE) for field in fields))

    # =================================================================================================================
    # Update / Delete Operations
    # =================================================================================================================

    async def update(self, entity: ModelType, **values) -> ModelType:
        """
        Apply `values` to a loaded entity and flush.

        Unknown fields raise InvalidFieldError; integrity failures are mapped by
        `db_error_handler` (DuplicateError / ConflictError).
        """
        self._check_fields(values, "update")

        async with db_error_handler(self.db, self.model_name):
            for field, value in values.items():
                setattr(entity, field, value)
            await self.db.flush()
            # updated_at is server-side; reload so callers never trigger lazy IO
            await self.db.refresh(entity)

        logger.info(
            "repo.update.success",
            extra={"model": self.model_name, "id": entity.id, "updated_fields": sorted(values)},
        )
        return entity

    async def delete(self, entity_id: int) -> bool:
        """
        Delete an entity by its ID.

        Returns:
            True if entity was deleted, False if not found
        """
        async with db_error_handler(self.db, self.model_name):
            result = await self.db.execute(delete(self.model).where(self.model.id == entity_id))

        if result.rowcount > 0:
            logger.info("repo.delete.success", extra={"model": self.model_name, "id": entity_id})
            return True

        logger.warning(f"{self.model_name} with ID {entity_id} not found for deletion")
        return False
