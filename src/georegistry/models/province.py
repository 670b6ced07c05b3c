from sqlalchemy import Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from georegistry.database.base import Base, TimestampMixin
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .country import Country
    from .city import City


class Province(TimestampMixin, Base):
    """
    Second level of the hierarchy.

    Coordinates identify a province globally; the name is only meaningful within its country.
    """
    __tablename__ = "provinces"
    __table_args__ = (
        UniqueConstraint("latitude", "longitude"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), index=True, nullable=False)

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    country_id: Mapped[int] = mapped_column(
        ForeignKey("countries.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    # --- Relationships ---

    country: Mapped["Country"] = relationship(
        "Country",
        back_populates="provinces",
        lazy="raise"
    )

    cities: Mapped[list["City"]] = relationship(
        "City",
        back_populates="province",
        lazy="raise",
        passive_deletes="all"
    )

    def __repr__(self) -> str:
        return (
            f"<Province(id={self.id!r}, name={self.name!r}, "
            f"lat={self.latitude!r}, lon={self.longitude!r}, country_id={self.country_id!r})>"
        )
