from datetime import date
from enum import Enum as PyEnum
from sqlalchemy import Date, ForeignKey, Integer, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from georegistry.database.base import Base, TimestampMixin
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .city import City


# ------------------------------
# Enum to define person roles
# ------------------------------
class PersonRole(str, PyEnum):
    """Fixed set of roles. There is no hierarchy between them; endpoints list what they accept."""
    USER = "USER"
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"


class Person(TimestampMixin, Base):
    """
    Leaf of the hierarchy and the authenticated principal of the API.
    """
    __tablename__ = "persons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    first_name: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), index=True, nullable=False)

    # Stored lower-cased by the services
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False
    )

    # bcrypt hash; never serialized
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[PersonRole] = mapped_column(
        SQLEnum(PersonRole, name="person_role"),
        nullable=False,
        default=PersonRole.USER,
        index=True
    )

    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    city_id: Mapped[int | None] = mapped_column(
        ForeignKey("cities.id", ondelete="RESTRICT"),
        nullable=True,
        index=True
    )

    # --- Relationships ---

    city: Mapped["City | None"] = relationship(
        "City",
        back_populates="persons",
        lazy="raise"
    )

    def __repr__(self) -> str:
        # never include password_hash
        return f"<Person(id={self.id!r}, email={self.email!r}, role={self.role!r})>"
