"""Read-only property search used by the assistant and the search page."""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import exists, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from paxbnb.models.booking import Booking
from paxbnb.models.property import Property
from paxbnb.services.dates import DateRange, parse_date

logger = logging.getLogger(__name__)


@dataclass
class PropertyFilters:
    """Optional search criteria; unset fields do not filter."""

    location: str | None = None
    check_in: str | None = None
    check_out: str | None = None
    guests: int | None = None
    min_price: Decimal | float | None = None
    max_price: Decimal | float | None = None
    bedrooms: int | None = None
    location_type: str | None = None


@dataclass
class SearchOutcome:
    properties: list[Property]
    check_in: date | None
    check_out: date | None


async def search_properties(
    session: AsyncSession,
    filters: PropertyFilters,
    today: date | None = None,
    limit: int = 6,
) -> SearchOutcome:
    """Find properties matching ``filters``, newest first.

    When both dates are given the stay is normalized and properties with an
    overlapping confirmed booking are left out.
    """
    check_in = parse_date(filters.check_in, today=today) if filters.check_in else None
    check_out = parse_date(filters.check_out, today=today) if filters.check_out else None

    query = select(Property)

    if filters.location:
        query = query.where(
            or_(
                Property.city.icontains(filters.location, autoescape=True),
                Property.country.icontains(filters.location, autoescape=True),
                Property.title.icontains(filters.location, autoescape=True),
            )
        )
    if filters.location_type:
        query = query.where(Property.location_type == filters.location_type)
    if filters.guests:
        query = query.where(Property.max_guests >= filters.guests)
    if filters.bedrooms:
        query = query.where(Property.bedrooms >= filters.bedrooms)
    if filters.min_price is not None:
        query = query.where(Property.price_per_night >= filters.min_price)
    if filters.max_price is not None:
        query = query.where(Property.price_per_night <= filters.max_price)

    if check_in and check_out:
        date_range = DateRange(check_in, check_out)
        booked = exists().where(
            Booking.property_id == Property.id,
            Booking.status == "confirmed",
            Booking.check_in < date_range.check_out,
            Booking.check_out > date_range.check_in,
        )
        query = query.where(~booked)

    query = query.order_by(Property.created_at.desc()).limit(limit)
    result = await session.execute(query)
    properties = list(result.scalars().all())

    logger.info("Property search returned %d result(s)", len(properties))
    return SearchOutcome(properties=properties, check_in=check_in, check_out=check_out)
