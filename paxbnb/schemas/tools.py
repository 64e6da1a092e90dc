"""Input and output schemas of the assistant's tools.

Inputs are what the language model fills in; their JSON Schema is what the
model sees. Outputs are plain structured values, independent of the ORM, so
the chat stream and any client-side rendering share a stable contract.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from paxbnb.models.booking import Booking
from paxbnb.models.property import Property

LocationType = Literal["beach", "countryside", "city", "mountain", "lakeside", "desert"]
BookingFilter = Literal["all", "upcoming", "past", "cancelled"]

# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


class GetCurrentDateInput(BaseModel):
    """No arguments."""


class SearchPropertiesInput(BaseModel):
    location: str | None = Field(None, description="City or country to search in")
    check_in: str | None = Field(None, description="Check-in date in YYYY-MM-DD format")
    check_out: str | None = Field(None, description="Check-out date in YYYY-MM-DD format")
    guests: int | None = Field(None, ge=1, description="Number of guests")
    min_price: float | None = Field(None, ge=0, description="Minimum price per night")
    max_price: float | None = Field(None, ge=0, description="Maximum price per night")
    location_type: LocationType | None = Field(
        None,
        description="Type of location (beach, countryside, city, mountain, lakeside, desert)",
    )


class CheckAvailabilityInput(BaseModel):
    property_id: uuid.UUID = Field(..., description="Property ID to check availability for")
    check_in: str = Field(..., description="Check-in date in YYYY-MM-DD format")
    check_out: str = Field(..., description="Check-out date in YYYY-MM-DD format")


class CreateBookingInput(BaseModel):
    property_id: uuid.UUID = Field(..., description="Property ID to book")
    check_in: str = Field(..., description="Check-in date in YYYY-MM-DD format")
    check_out: str = Field(..., description="Check-out date in YYYY-MM-DD format")
    guest_count: int = Field(..., ge=1, description="Number of guests")


class CancelBookingInput(BaseModel):
    booking_id: uuid.UUID = Field(..., description="The ID of the booking to cancel")


class GetUserBookingsInput(BaseModel):
    filter: BookingFilter = Field("all", description="Filter bookings by status")
    limit: int = Field(10, ge=1, le=50, description="Maximum number of bookings to return")


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


class CurrentDateOutput(BaseModel):
    current_date: date
    current_year: int
    current_month: int
    current_day: int
    timestamp: datetime


class PropertyBrief(BaseModel):
    id: uuid.UUID
    title: str
    city: str
    country: str

    @classmethod
    def from_property(cls, prop: Property) -> "PropertyBrief":
        return cls(id=prop.id, title=prop.title, city=prop.city, country=prop.country)


class PropertySummary(PropertyBrief):
    description: str
    price_per_night: Decimal
    max_guests: int
    bedrooms: int
    beds: int
    bathrooms: int
    address: str
    location_type: str | None = None
    host_name: str | None = None

    @classmethod
    def from_property(cls, prop: Property) -> "PropertySummary":
        return cls(
            id=prop.id,
            title=prop.title,
            city=prop.city,
            country=prop.country,
            description=prop.description,
            price_per_night=prop.price_per_night,
            max_guests=prop.max_guests,
            bedrooms=prop.bedrooms,
            beds=prop.beds,
            bathrooms=prop.bathrooms,
            address=prop.address,
            location_type=prop.location_type,
            host_name=prop.host.full_name if prop.host else None,
        )


class SearchPropertiesOutput(BaseModel):
    results: list[PropertySummary]
    total: int
    search_criteria: dict


class BookedRange(BaseModel):
    booking_id: uuid.UUID
    check_in: date
    check_out: date
    status: str


class AvailabilityOutput(BaseModel):
    available: bool
    property_id: uuid.UUID
    check_in: date
    check_out: date
    nights: int
    property: PropertyBrief
    conflicting_bookings: list[BookedRange]


class BookingDetails(BaseModel):
    id: uuid.UUID
    property: PropertyBrief | None
    check_in: date
    check_out: date
    guest_count: int
    nights: int
    price_per_night: Decimal | None
    total_price: Decimal
    status: str
    created_at: datetime

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingDetails":
        prop = booking.property
        return cls(
            id=booking.id,
            property=PropertyBrief.from_property(prop) if prop else None,
            check_in=booking.check_in,
            check_out=booking.check_out,
            guest_count=booking.guest_count,
            nights=(booking.check_out - booking.check_in).days,
            price_per_night=prop.price_per_night if prop else None,
            total_price=booking.total_price,
            status=booking.status,
            created_at=booking.created_at,
        )


class CreateBookingOutput(BaseModel):
    success: bool = True
    booking: BookingDetails


class CancelBookingOutput(BaseModel):
    success: bool = True
    cancelled_booking: BookingDetails


class UserBookingsOutput(BaseModel):
    bookings: list[BookingDetails]
    total: int
    filter: BookingFilter
