"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """Schema for creating a booking. The total price is always computed server-side."""

    property_id: uuid.UUID
    check_in: date
    check_out: date
    guest_count: int = Field(1, ge=1)

    @model_validator(mode="after")
    def check_dates(self) -> "BookingCreate":
        """Validate that check_out is strictly after check_in."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingPropertySummary(BaseModel):
    id: uuid.UUID
    title: str
    city: str
    country: str
    host_id: uuid.UUID

    model_config = ConfigDict(from_attributes=True)


class BookingResponse(BaseModel):
    """Standard booking response."""

    id: uuid.UUID
    property_id: uuid.UUID
    guest_id: uuid.UUID
    check_in: date
    check_out: date
    guest_count: int
    status: str
    total_price: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingDetailResponse(BookingResponse):
    """Booking with its property, used by the booking-detail page."""

    property: BookingPropertySummary | None = None


class BookingListResponse(BaseModel):
    """List of the caller's bookings."""

    items: list[BookingDetailResponse]
    total: int
