"""Bookings API router.

Access rule: a guest sees and cancels their own bookings; the host of the
booked property may also view a booking. All rule checks live in
``paxbnb.services.booking_service`` and reach the client as HTTP errors.
"""

from __future__ import annotations

import uuid
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from paxbnb.api.deps import get_current_user, get_db, http_error
from paxbnb.models.booking import Booking
from paxbnb.models.profile import Profile
from paxbnb.schemas.booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
)
from paxbnb.services import booking_service
from paxbnb.services.booking_service import CancellationPolicy
from paxbnb.services.exceptions import BookingError

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new booking",
)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
) -> Booking:
    """Book a property for the signed-in guest.

    The total price is computed from the property's nightly rate; hosts
    cannot book.
    """
    if current_user.user_type != "guest":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only guests can make bookings",
        )
    try:
        return await booking_service.create_booking(
            db,
            property_id=body.property_id,
            guest_id=current_user.id,
            check_in=body.check_in,
            check_out=body.check_out,
            guest_count=body.guest_count,
        )
    except BookingError as exc:
        raise http_error(exc) from exc


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List the current user's bookings",
)
async def list_bookings(
    booking_filter: Literal["all", "upcoming", "past", "cancelled"] = Query(
        "all", alias="filter", description="Which bookings to list"
    ),
    limit: int = Query(10, ge=1, le=50, description="Maximum number of bookings"),
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
) -> dict:
    """Return the caller's bookings, newest check-in first."""
    items = await booking_service.list_user_bookings(db, current_user.id, booking_filter=booking_filter, limit=limit)
    return {"items": items, "total": len(items)}


@router.get(
    "/{booking_id}",
    response_model=BookingDetailResponse,
    summary="Get booking detail with nested property",
)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
) -> Booking:
    """Retrieve a booking for its guest or the host of its property."""
    try:
        return await booking_service.get_booking_for_viewer(db, booking_id, current_user.id)
    except BookingError as exc:
        raise http_error(exc) from exc


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel a booking",
)
async def cancel_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
) -> Booking:
    """Cancel one of the caller's bookings at least 24 hours before check-in."""
    try:
        return await booking_service.cancel_booking(
            db,
            booking_id,
            requester_id=current_user.id,
            policy=CancellationPolicy.BOOKING_DETAIL,
        )
    except BookingError as exc:
        raise http_error(exc) from exc
