"""Pydantic v2 response schemas for property endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PropertyResponse(BaseModel):
    """Public property information returned from the API."""

    id: uuid.UUID
    host_id: uuid.UUID
    title: str
    description: str
    price_per_night: Decimal
    max_guests: int
    bedrooms: int
    beds: int
    bathrooms: int
    address: str
    city: str
    country: str
    location_type: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropertyListResponse(BaseModel):
    """Search results."""

    items: list[PropertyResponse]
    total: int


class BookedRangeResponse(BaseModel):
    """A confirmed stay blocking the requested dates."""

    id: uuid.UUID
    check_in: date
    check_out: date

    model_config = ConfigDict(from_attributes=True)


class AvailabilityResponse(BaseModel):
    """Availability of one property for a requested stay."""

    property_id: uuid.UUID
    check_in: date
    check_out: date
    nights: int
    available: bool
    conflicts: list[BookedRangeResponse]
