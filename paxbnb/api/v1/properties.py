"""Property search, detail and availability routes. Public, no sign-in needed."""

import uuid
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from paxbnb.api.deps import get_db, http_error
from paxbnb.config import settings
from paxbnb.models.property import LOCATION_TYPES
from paxbnb.schemas.property import (
    AvailabilityResponse,
    BookedRangeResponse,
    PropertyListResponse,
    PropertyResponse,
)
from paxbnb.services.availability import check_availability, get_property
from paxbnb.services.exceptions import BookingError
from paxbnb.services.property_search import PropertyFilters, search_properties

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


@router.get(
    "/search",
    response_model=PropertyListResponse,
    summary="Search properties",
)
async def search(
    location: str | None = Query(None, description="City, country or title fragment"),
    checkin: str | None = Query(None, description="Check-in date"),
    checkout: str | None = Query(None, description="Check-out date"),
    guests: int | None = Query(None, ge=1),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    bedrooms: int | None = Query(None, ge=0),
    location_type: str | None = Query(None, description=f"One of: {', '.join(LOCATION_TYPES)}"),
    limit: int = Query(settings.search_result_limit, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
) -> PropertyListResponse:
    """Return properties matching the criteria; with both dates, only free ones."""
    filters = PropertyFilters(
        location=location,
        check_in=checkin,
        check_out=checkout,
        guests=guests,
        min_price=min_price,
        max_price=max_price,
        bedrooms=bedrooms,
        location_type=location_type,
    )
    try:
        outcome = await search_properties(db, filters, limit=limit)
    except BookingError as exc:
        raise http_error(exc) from exc

    return PropertyListResponse(
        items=[PropertyResponse.model_validate(p) for p in outcome.properties],
        total=len(outcome.properties),
    )


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get a property by ID",
)
async def get_property_detail(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> PropertyResponse:
    """Retrieve a single property. Returns 404 if not found."""
    try:
        prop = await get_property(db, property_id)
    except BookingError as exc:
        raise http_error(exc) from exc
    return PropertyResponse.model_validate(prop)


@router.get(
    "/{property_id}/availability",
    response_model=AvailabilityResponse,
    summary="Check a property's availability",
)
async def get_availability(
    property_id: uuid.UUID,
    check_in: str = Query(..., description="Check-in date"),
    check_out: str = Query(..., description="Check-out date"),
    db: AsyncSession = Depends(get_db),
) -> AvailabilityResponse:
    """Report whether the property is free for the stay and what blocks it."""
    try:
        result = await check_availability(db, property_id, check_in, check_out)
    except BookingError as exc:
        raise http_error(exc) from exc

    return AvailabilityResponse(
        property_id=result.property.id,
        check_in=result.date_range.check_in,
        check_out=result.date_range.check_out,
        nights=result.date_range.nights,
        available=result.available,
        conflicts=[BookedRangeResponse.model_validate(b) for b in result.conflicts],
    )
