"""Booking mutations: create, cancel, and guest-scoped reads.

Creation uses two layers against double-booking: an application pre-check
that gives the caller a precise list of conflicting stays, and the
``bookings_no_overlap`` storage guard that rejects whichever of two racing
inserts lands second. The guard's ``IntegrityError`` is reported as the same
``ConflictError`` as the pre-check.

Functions flush but do not commit; the caller owns the transaction.
"""

import enum
import logging
import uuid
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from paxbnb.models.booking import Booking, is_overlap_violation
from paxbnb.models.property import Property
from paxbnb.services.availability import find_conflicts, get_property
from paxbnb.services.dates import DateRange, utc_today
from paxbnb.services.exceptions import (
    AlreadyCancelledError,
    AlreadyCompletedError,
    CapacityExceededError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PastDateError,
    TooLateError,
)

logger = logging.getLogger(__name__)

BOOKING_FILTERS = ("all", "upcoming", "past", "cancelled")
DETAIL_CANCELLATION_NOTICE = timedelta(hours=24)


class CancellationPolicy(str, enum.Enum):
    """Cut-off rule applied when a guest cancels.

    ASSISTANT: the conversational path; check-in must be after today.
    BOOKING_DETAIL: the booking-detail page; check-in must be at least
    24 hours away.
    """

    ASSISTANT = "assistant"
    BOOKING_DETAIL = "booking_detail"


def calculate_total_price(prop: Property, date_range: DateRange) -> Decimal:
    """Total price of a stay, computed server-side only."""
    return (Decimal(date_range.nights) * Decimal(prop.price_per_night)).quantize(Decimal("0.01"))


def conflict_error(conflicts: list[Booking]) -> ConflictError:
    return ConflictError(
        "Property is not available for these dates.",
        conflicts=[
            {
                "booking_id": str(c.id),
                "check_in": c.check_in.isoformat(),
                "check_out": c.check_out.isoformat(),
            }
            for c in conflicts
        ],
    )


async def create_booking(
    session: AsyncSession,
    property_id: uuid.UUID,
    guest_id: uuid.UUID,
    check_in: str | date,
    check_out: str | date,
    guest_count: int,
    today: date | None = None,
) -> Booking:
    """Create a confirmed booking after validating every rule.

    Raises:
        InvalidDateError / InvalidRangeError: Bad or inverted dates.
        NotFoundError: Unknown property.
        CapacityExceededError: Too many guests for the property.
        PastDateError: Check-in before today.
        ConflictError: Overlap found by the pre-check or the storage guard.
    """
    today = today or utc_today()
    date_range = DateRange.parse(check_in, check_out, today=today)

    prop = await get_property(session, property_id)

    if guest_count > prop.max_guests:
        raise CapacityExceededError(
            f"This property can only accommodate {prop.max_guests} guests.",
            max_guests=prop.max_guests,
            guest_count=guest_count,
        )

    if date_range.check_in < today:
        raise PastDateError(
            f"Check-in date ({date_range.check_in.isoformat()}) is in the past. "
            f"Please choose dates from {today.isoformat()} onwards.",
            check_in=date_range.check_in.isoformat(),
            today=today.isoformat(),
        )

    conflicts = await find_conflicts(session, property_id, date_range)
    if conflicts:
        raise conflict_error(conflicts)

    booking = Booking(
        property_id=prop.id,
        guest_id=guest_id,
        check_in=date_range.check_in,
        check_out=date_range.check_out,
        guest_count=guest_count,
        total_price=calculate_total_price(prop, date_range),
        status="confirmed",
    )
    session.add(booking)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        if is_overlap_violation(exc):
            logger.info(
                "Storage guard rejected overlapping booking for property %s %s..%s",
                property_id,
                date_range.check_in,
                date_range.check_out,
            )
            raise ConflictError(
                "Property was just booked for these dates by someone else.",
                conflicts=[],
            ) from exc
        raise

    await session.refresh(booking)
    logger.info(
        "Booking %s created for property %s by guest %s (%s..%s, %d nights)",
        booking.id,
        property_id,
        guest_id,
        date_range.check_in,
        date_range.check_out,
        date_range.nights,
    )
    return booking


async def get_booking(session: AsyncSession, booking_id: uuid.UUID) -> Booking:
    booking = await session.get(Booking, booking_id)
    if booking is None:
        raise NotFoundError("Booking not found.", booking_id=str(booking_id))
    return booking


def _ensure_cancellable(booking: Booking, now: datetime, policy: CancellationPolicy) -> None:
    if booking.status == "cancelled":
        raise AlreadyCancelledError("This booking is already cancelled.", booking_id=str(booking.id))
    if booking.status == "completed":
        raise AlreadyCompletedError("Cannot cancel a completed booking.", booking_id=str(booking.id))

    if policy is CancellationPolicy.ASSISTANT:
        if booking.check_in <= now.date():
            raise TooLateError(
                "Cannot cancel bookings that have already started or passed.",
                check_in=booking.check_in.isoformat(),
            )
    else:
        check_in_at = datetime.combine(booking.check_in, time.min, tzinfo=timezone.utc)
        if check_in_at - now < DETAIL_CANCELLATION_NOTICE:
            raise TooLateError(
                "Booking cannot be cancelled less than 24 hours before check-in.",
                check_in=booking.check_in.isoformat(),
            )


async def cancel_booking(
    session: AsyncSession,
    booking_id: uuid.UUID,
    requester_id: uuid.UUID,
    now: datetime | None = None,
    policy: CancellationPolicy = CancellationPolicy.ASSISTANT,
) -> Booking:
    """Cancel a guest's confirmed booking.

    The row is kept; only its status changes.

    Raises:
        NotFoundError, ForbiddenError, AlreadyCancelledError,
        AlreadyCompletedError, TooLateError
    """
    now = now or datetime.now(timezone.utc)
    booking = await get_booking(session, booking_id)

    if booking.guest_id != requester_id:
        raise ForbiddenError("You can only cancel your own bookings.", booking_id=str(booking_id))

    _ensure_cancellable(booking, now, policy)

    booking.status = "cancelled"
    await session.flush()
    await session.refresh(booking)
    logger.info("Booking %s cancelled by guest %s (policy=%s)", booking_id, requester_id, policy.value)
    return booking


async def list_user_bookings(
    session: AsyncSession,
    guest_id: uuid.UUID,
    booking_filter: str = "all",
    limit: int = 10,
    today: date | None = None,
) -> list[Booking]:
    """List a guest's bookings, newest check-in first.

    ``upcoming``: confirmed stays starting today or later.
    ``past``: stays that ended before today and were not cancelled.
    ``cancelled``: cancelled stays. ``all``: everything.
    """
    if booking_filter not in BOOKING_FILTERS:
        raise ValueError(f"Unknown booking filter '{booking_filter}'")
    today = today or utc_today()

    query = select(Booking).where(Booking.guest_id == guest_id)
    if booking_filter == "upcoming":
        query = query.where(Booking.check_in >= today, Booking.status == "confirmed")
    elif booking_filter == "past":
        query = query.where(Booking.check_out < today, Booking.status.in_(("confirmed", "completed")))
    elif booking_filter == "cancelled":
        query = query.where(Booking.status == "cancelled")

    query = query.order_by(Booking.check_in.desc()).limit(limit)
    result = await session.execute(query)
    return list(result.scalars().all())


async def get_booking_for_viewer(
    session: AsyncSession,
    booking_id: uuid.UUID,
    viewer_id: uuid.UUID,
) -> Booking:
    """Return a booking visible to its guest or to the host of its property."""
    booking = await get_booking(session, booking_id)
    if booking.guest_id != viewer_id and booking.property.host_id != viewer_id:
        raise ForbiddenError("Access denied.", booking_id=str(booking_id))
    return booking


async def count_user_bookings(session: AsyncSession, guest_id: uuid.UUID) -> int:
    result = await session.execute(select(func.count()).select_from(Booking).where(Booking.guest_id == guest_id))
    return result.scalar_one()
