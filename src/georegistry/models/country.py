from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from georegistry.database.base import Base, TimestampMixin
from typing import TYPE_CHECKING

# Avoid circular import issues when using type hints for related models
if TYPE_CHECKING:
    from .province import Province


class Country(TimestampMixin, Base):
    """
    Root of the hierarchy.

    `name` is globally unique; `code` (ISO-like, e.g. "CL") is unique when present.
    A country owns its provinces only by reference: it cannot be deleted while any exist.
    """
    __tablename__ = "countries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        index=True,
        nullable=False
    )

    # Optional short code; NULLs never collide in the unique index
    code: Mapped[str | None] = mapped_column(
        String(10),
        unique=True,
        nullable=True
    )

    # --- Relationships ---

    # One-to-Many, never cascaded; loaded explicitly (selectinload) when needed
    provinces: Mapped[list["Province"]] = relationship(
        "Province",
        back_populates="country",
        lazy="raise",
        passive_deletes="all"
    )

    def __repr__(self) -> str:
        return f"<Country(id={self.id!r}, name={self.name!r}, code={self.code!r})>"
