from typing import Any, Iterable

from sqlalchemy import UniqueConstraint, and_, inspect as sa_inspect, select


def find_unknown_model_kwargs(model, kwargs: dict) -> list[str]:
    """
    Return list of unknown kwarg keys that are not part of the model's mapped attributes.
    - model: the SQLAlchemy model class (not instance)
    - kwargs: dict of incoming kwargs to validate
    """
    mapper = sa_inspect(model)
    # mapper.attrs includes columns and relationships; attr.key is the name callers use
    allowed = {attr.key for attr in mapper.attrs}
    return [k for k in kwargs.keys() if k not in allowed]


def get_required_columns(model) -> list[str]:
    """
    Columns that are NOT NULL and have no server/default and are not simple auto PKs.
    """
    cols = []
    for col in model.__table__.columns:
        has_default = col.default is not None or col.server_default is not None
        is_auto_pk = col.primary_key and col.autoincrement in (True, "auto")
        if not col.nullable and not has_default and not is_auto_pk:
            cols.append(col.name)
    return cols


def get_unique_column_sets(model) -> list[tuple[str, ...]]:
    """
    Return the unique column sets declared on the model's table, without duplicates.
    Covers:
      - Column(unique=True)
      - UniqueConstraint in the table
      - Index(..., unique=True)
    """
    unique_sets: list[tuple[str, ...]] = []

    def _add(cols: Iterable[str]) -> None:
        key = tuple(cols)
        if key and key not in unique_sets:
            unique_sets.append(key)

    for col in model.__table__.columns:
        if col.unique:
            _add([col.name])

    for constraint in model.__table__.constraints:
        if isinstance(constraint, UniqueConstraint):
            _add(c.name for c in constraint.columns)

    for idx in model.__table__.indexes:
        if idx.unique:
            _add(c.name for c in idx.columns)

    return unique_sets


async def find_unique_conflicts(db, model, kwargs: dict, exclude_id: Any = None) -> set[str]:
    """
    Run pre-write queries to detect existing rows that would violate unique constraints.
    Returns a set of column names that conflict (best-effort).

    - Only unique sets whose columns are all present in kwargs are checked.
    - Sets with a None value are skipped; NULLs never collide in a unique index.
    - `exclude_id` leaves the row being updated out of the check.
    """
    conflicts: set[str] = set()

    for cols in get_unique_column_sets(model):
        if not all(c in kwargs for c in cols):
            continue
        if any(kwargs[c] is None for c in cols):
            continue

        conditions = [getattr(model, c) == kwargs[c] for c in cols]
        if exclude_id is not None:
            conditions.append(model.id != exclude_id)
        q = select(model.id).where(and_(*conditions)).limit(1)

        res = await db.execute(q)
        if res.scalar_one_or_none() is not None:
            conflicts.update(cols)

    return conflicts
