"""Availability checks against confirmed bookings."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from paxbnb.models.booking import Booking
from paxbnb.models.property import Property
from paxbnb.services.dates import DateRange
from paxbnb.services.exceptions import NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class AvailabilityResult:
    """Outcome of an availability check, with every blocking booking."""

    property: Property
    date_range: DateRange
    conflicts: list[Booking] = field(default_factory=list)

    @property
    def available(self) -> bool:
        return not self.conflicts


async def get_property(session: AsyncSession, property_id: uuid.UUID) -> Property:
    """Fetch a property or raise ``NotFoundError``."""
    prop = await session.get(Property, property_id)
    if prop is None:
        raise NotFoundError("Property not found.", property_id=str(property_id))
    return prop


async def find_conflicts(
    session: AsyncSession,
    property_id: uuid.UUID,
    date_range: DateRange,
    exclude_booking_id: uuid.UUID | None = None,
) -> list[Booking]:
    """Return confirmed bookings of a property overlapping ``date_range``.

    Cancelled and completed bookings never block a stay.
    """
    query = select(Booking).where(
        Booking.property_id == property_id,
        Booking.status == "confirmed",
        Booking.check_in < date_range.check_out,
        Booking.check_out > date_range.check_in,
    )
    if exclude_booking_id is not None:
        query = query.where(Booking.id != exclude_booking_id)
    result = await session.execute(query.order_by(Booking.check_in))
    return list(result.scalars().all())


async def check_availability(
    session: AsyncSession,
    property_id: uuid.UUID,
    check_in: str | date,
    check_out: str | date,
    today: date | None = None,
) -> AvailabilityResult:
    """Decide whether a property is free for a stay.

    Raises:
        InvalidDateError / InvalidRangeError: If the dates are unusable.
        NotFoundError: If the property does not exist.
    """
    date_range = DateRange.parse(check_in, check_out, today=today)
    prop = await get_property(session, property_id)
    conflicts = await find_conflicts(session, property_id, date_range)
    logger.info(
        "Availability for property %s %s..%s: %d conflict(s)",
        property_id,
        date_range.check_in,
        date_range.check_out,
        len(conflicts),
    )
    return AvailabilityResult(property=prop, date_range=date_range, conflicts=conflicts)
