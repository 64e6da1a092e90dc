"""Booking model: tracks property reservations.

The no-double-booking rule is guarded by the database itself, not only by
the application pre-check. Both guards below are named
``bookings_no_overlap`` so that the service layer can recognise the
violation in the resulting ``IntegrityError``:

* PostgreSQL: a GiST exclusion constraint over ``(property_id,
  daterange(check_in, check_out, '[)'))`` restricted to confirmed rows.
* SQLite (tests, local development): ``BEFORE INSERT``/``BEFORE UPDATE``
  triggers raising ``ABORT``.
"""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import DDL, CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, String, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paxbnb.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

BOOKING_STATUSES = ("confirmed", "cancelled", "completed")
OVERLAP_GUARD_NAME = "bookings_no_overlap"


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation linking a guest to a property for a half-open date range."""

    __tablename__ = "bookings"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    guest_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    guest_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default="confirmed",
        nullable=False,
        index=True,
    )  # confirmed, cancelled, completed

    # Relationships
    property: Mapped["Property"] = relationship(back_populates="bookings", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    guest: Mapped["Profile"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        CheckConstraint("check_in < check_out", name="ck_bookings_date_order"),
        CheckConstraint("guest_count >= 1", name="ck_bookings_guest_count"),
        CheckConstraint(
            "status IN ('confirmed', 'cancelled', 'completed')",
            name="ck_bookings_status",
        ),
        Index("ix_bookings_property_dates", "property_id", "check_in", "check_out"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, property_id={self.property_id}, guest_id={self.guest_id}, "
            f"{self.check_in}..{self.check_out}, status={self.status})>"
        )


# ---------------------------------------------------------------------------
# Storage-level overlap guard
# ---------------------------------------------------------------------------

PG_BTREE_GIST = DDL("CREATE EXTENSION IF NOT EXISTS btree_gist")

PG_EXCLUSION_CONSTRAINT = DDL(
    f"ALTER TABLE bookings ADD CONSTRAINT {OVERLAP_GUARD_NAME} "
    "EXCLUDE USING gist (property_id WITH =, daterange(check_in, check_out, '[)') WITH &&) "
    "WHERE (status = 'confirmed')"
)

_SQLITE_OVERLAP_CONDITION = (
    "SELECT RAISE(ABORT, '{name}') WHERE EXISTS ("
    "SELECT 1 FROM bookings AS b "
    "WHERE b.property_id = NEW.property_id "
    "AND b.status = 'confirmed' "
    "AND b.id != NEW.id "
    "AND b.check_in < NEW.check_out "
    "AND NEW.check_in < b.check_out)"
).format(name=OVERLAP_GUARD_NAME)

SQLITE_INSERT_TRIGGER = DDL(
    f"CREATE TRIGGER {OVERLAP_GUARD_NAME}_insert BEFORE INSERT ON bookings "
    "FOR EACH ROW WHEN NEW.status = 'confirmed' "
    f"BEGIN {_SQLITE_OVERLAP_CONDITION}; END"
)

SQLITE_UPDATE_TRIGGER = DDL(
    f"CREATE TRIGGER {OVERLAP_GUARD_NAME}_update BEFORE UPDATE ON bookings "
    "FOR EACH ROW WHEN NEW.status = 'confirmed' "
    f"BEGIN {_SQLITE_OVERLAP_CONDITION}; END"
)

event.listen(Base.metadata, "before_create", PG_BTREE_GIST.execute_if(dialect="postgresql"))
event.listen(Booking.__table__, "after_create", PG_EXCLUSION_CONSTRAINT.execute_if(dialect="postgresql"))
event.listen(Booking.__table__, "after_create", SQLITE_INSERT_TRIGGER.execute_if(dialect="sqlite"))
event.listen(Booking.__table__, "after_create", SQLITE_UPDATE_TRIGGER.execute_if(dialect="sqlite"))


def is_overlap_violation(exc: Exception) -> bool:
    """Return True if a database error was raised by the overlap guard."""
    return OVERLAP_GUARD_NAME in str(getattr(exc, "orig", exc))
