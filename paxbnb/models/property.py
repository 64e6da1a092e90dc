"""Property model: rental listings owned by hosts."""

import uuid
from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paxbnb.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

LOCATION_TYPES = ("beach", "countryside", "city", "mountain", "lakeside", "desert")


class Property(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A rental listing. Read-only from the booking core's point of view."""

    __tablename__ = "properties"

    host_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    price_per_night: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    max_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    bedrooms: Mapped[int] = mapped_column(Integer, default=1)
    beds: Mapped[int] = mapped_column(Integer, default=1)
    bathrooms: Mapped[int] = mapped_column(Integer, default=1)
    address: Mapped[str] = mapped_column(String(255), default="")
    city: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    country: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    location_type: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)

    # Relationships
    host: Mapped["Profile"] = relationship(back_populates="properties", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    bookings: Mapped[list["Booking"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="property", lazy="raise"
    )

    __table_args__ = (
        CheckConstraint("price_per_night > 0", name="ck_properties_price_positive"),
        CheckConstraint("max_guests > 0", name="ck_properties_max_guests_positive"),
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title!r}, city={self.city!r})>"
