"""
Idempotent, race-tolerant resolve-or-create.

    resolver = EntityResolver(ProvinceRepository(db))
    resolution = await resolver.resolve(
        {"name": "Santa Fe", "latitude": -32.94, "longitude": -60.64, "country_id": 1},
        uniqueness_keys=[("latitude", "longitude")],
    )

No lock is taken. Two callers creating the same entity both probe, both miss, both insert;
the unique constraint lets exactly one insert through. The loser's insert fails inside its
own SAVEPOINT, it re-reads once by the same keys and returns the winner's row.
"""

import logging
from dataclasses import dataclass
from typing import Any, Generic, Iterable, Sequence

from sqlalchemy.exc import IntegrityError

from georegistry.exceptions.base import DuplicateError
from georegistry.exceptions.integrity_classifier import is_unique_violation
from georegistry.exceptions.mapper import raise_mapped_integrity_error
from georegistry.repositories.base_repository import BaseRepository, ModelType

logger = logging.getLogger(__name__)

Key = tuple[str, ...]


@dataclass(frozen=True)
class Resolution(Generic[ModelType]):
    """Outcome of `resolve()`: the stored row and whether this call inserted it."""
    entity: ModelType
    created: bool
    matched_on: Key | None = None


class EntityResolver(Generic[ModelType]):

    def __init__(self, repository: BaseRepository[ModelType]):
        self.repository = repository

    @property
    def model_name(self) -> str:
        return self.repository.model_name

    async def _probe(self, candidate: dict[str, Any], keys: Iterable[Key]) -> tuple[ModelType | None, Key | None]:
        for key in keys:
            values = {field: candidate.get(field) for field in key}
            # a key with a NULL part identifies nothing
            if any(value is None for value in values.values()):
                continue
            entity = await self.repository.find_first_by(**values)
            if entity is not None:
                return entity, key
        return None, None

    async def resolve(
        self,
        candidate: dict[str, Any],
        uniqueness_keys: Sequence[Key],
        soft_keys: Sequence[Key] = (),
    ) -> Resolution[ModelType]:
        """
        Return the row identified by any of `uniqueness_keys`, inserting `candidate` if none exists.

        Keys are probed in order, so the first key that matches is reported in `matched_on`.
        A match on a soft key is logged and does not stop the insert.

        Raises:
            DuplicateError: the insert lost a uniqueness race but the re-read found nothing
                (the winning row disappeared in between).
            ConflictError: any other integrity failure (e.g. a foreign key).
        """
        existing, key = await self._probe(candidate, uniqueness_keys)
        if existing is not None:
            logger.info(
                "resolver.create.existing",
                extra={"model": self.model_name, "id": existing.id, "matched_on": list(key)},
            )
            return Resolution(entity=existing, created=False, matched_on=key)

        for soft_key in soft_keys:
            clash, _ = await self._probe(candidate, [soft_key])
            if clash is not None:
                logger.warning(
                    "resolver.create.soft_key_clash",
                    extra={"model": self.model_name, "existing_id": clash.id, "key": list(soft_key)},
                )

        try:
            entity = await self.repository.insert(**candidate)

        except IntegrityError as exc:
            if not is_unique_violation(exc):
                raise_mapped_integrity_error(exc, self.model_name)

            # a concurrent creator won; one re-read, no loop
            existing, key = await self._probe(candidate, uniqueness_keys)
            if existing is None:
                logger.warning("resolver.create.race_unresolved", extra={"model": self.model_name})
                raise DuplicateError(f"{self.model_name} conflicts with an existing record") from exc

            logger.info(
                "resolver.create.recovered_race",
                extra={"model": self.model_name, "id": existing.id, "matched_on": list(key)},
            )
            return Resolution(entity=existing, created=False, matched_on=key)

        logger.info("resolver.create.inserted", extra={"model": self.model_name, "id": entity.id})
        return Resolution(entity=entity, created=True)
