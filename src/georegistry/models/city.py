from sqlalchemy import Float, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from georegistry.database.base import Base, TimestampMixin
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .province import Province
    from .person import Person


class City(TimestampMixin, Base):
    """
    Third level of the hierarchy.

    (latitude, longitude) is enforced unique by the database. (name, province_id) is only
    logically unique, so it is a plain index and the services decide what a clash means.
    """
    __tablename__ = "cities"
    __table_args__ = (
        UniqueConstraint("latitude", "longitude"),
        Index("ix_cities_name_province_id", "name", "province_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    province_id: Mapped[int] = mapped_column(
        ForeignKey("provinces.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    # --- Relationships ---

    province: Mapped["Province"] = relationship(
        "Province",
        back_populates="cities",
        lazy="raise"
    )

    persons: Mapped[list["Person"]] = relationship(
        "Person",
        back_populates="city",
        lazy="raise",
        passive_deletes="all"
    )

    def __repr__(self) -> str:
        return (
            f"<City(id={self.id!r}, name={self.name!r}, "
            f"lat={self.latitude!r}, lon={self.longitude!r}, province_id={self.province_id!r})>"
        )
