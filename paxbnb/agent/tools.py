"""Tool registry for the PaxBnb assistant.

The catalog is closed: ``ToolName`` enumerates the six tools and each maps
to a ``ToolSpec`` with its own input model and handler. The model's tool
calls are matched against this enum; nothing is resolved by reflection.

Handlers receive the validated input and an explicit ``ToolContext`` (caller
identity, clock, session factory). Rule violations raised by the services
are recovered here and returned as structured results so the model can
explain them; they never escape ``execute_tool``.
"""

import enum
import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from pydantic import BaseModel, ValidationError

from paxbnb.models.profile import Profile
from paxbnb.schemas.tools import (
    AvailabilityOutput,
    BookedRange,
    BookingDetails,
    CancelBookingInput,
    CancelBookingOutput,
    CheckAvailabilityInput,
    CreateBookingInput,
    CreateBookingOutput,
    CurrentDateOutput,
    GetCurrentDateInput,
    GetUserBookingsInput,
    PropertyBrief,
    PropertySummary,
    SearchPropertiesInput,
    SearchPropertiesOutput,
    UserBookingsOutput,
)
from paxbnb.services.availability import check_availability
from paxbnb.services.booking_service import (
    CancellationPolicy,
    cancel_booking,
    create_booking,
    list_user_bookings,
)
from paxbnb.services.exceptions import AuthRequiredError, BookingError
from paxbnb.services.property_search import PropertyFilters, search_properties

logger = logging.getLogger(__name__)


class ToolName(str, enum.Enum):
    GET_CURRENT_DATE = "get_current_date"
    SEARCH_PROPERTIES = "search_properties"
    CHECK_AVAILABILITY = "check_availability"
    CREATE_BOOKING = "create_booking"
    CANCEL_BOOKING = "cancel_booking"
    GET_USER_BOOKINGS = "get_user_bookings"


@dataclass(frozen=True)
class CallerIdentity:
    """The signed-in user, as resolved once per request."""

    user_id: uuid.UUID
    full_name: str | None = None
    email: str | None = None
    user_type: str = "guest"

    @classmethod
    def from_profile(cls, profile: Profile) -> "CallerIdentity":
        return cls(
            user_id=profile.id,
            full_name=profile.full_name,
            email=profile.email,
            user_type=profile.user_type,
        )


@dataclass(frozen=True)
class ToolContext:
    """Everything a tool may depend on besides its arguments."""

    session_factory: Callable[[], Any]
    caller: CallerIdentity | None = None
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    search_limit: int = 6

    @property
    def today(self) -> date:
        return self.now.date()


Handler = Callable[[Any, ToolContext], Awaitable[BaseModel]]


@dataclass(frozen=True)
class ToolSpec:
    name: ToolName
    description: str
    input_model: type[BaseModel]
    handler: Handler
    requires_auth: bool = False
    auth_message: str = "Please sign in to continue."

    def as_openai_tool(self) -> dict:
        """Tool definition in the function-calling format accepted by ``bind_tools``."""
        return {
            "type": "function",
            "function": {
                "name": self.name.value,
                "description": self.description,
                "parameters": self.input_model.model_json_schema(),
            },
        }


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _get_current_date(_args: GetCurrentDateInput, ctx: ToolContext) -> CurrentDateOutput:
    today = ctx.today
    return CurrentDateOutput(
        current_date=today,
        current_year=today.year,
        current_month=today.month,
        current_day=today.day,
        timestamp=ctx.now,
    )


async def _search_properties(args: SearchPropertiesInput, ctx: ToolContext) -> SearchPropertiesOutput:
    filters = PropertyFilters(
        location=args.location,
        check_in=args.check_in,
        check_out=args.check_out,
        guests=args.guests,
        min_price=args.min_price,
        max_price=args.max_price,
        location_type=args.location_type,
    )
    async with ctx.session_factory() as session:
        outcome = await search_properties(session, filters, today=ctx.today, limit=ctx.search_limit)
        results = [PropertySummary.from_property(p) for p in outcome.properties]

    criteria = {
        "location": args.location,
        "check_in": outcome.check_in.isoformat() if outcome.check_in else None,
        "check_out": outcome.check_out.isoformat() if outcome.check_out else None,
        "guests": args.guests,
        "min_price": args.min_price,
        "max_price": args.max_price,
        "location_type": args.location_type,
    }
    return SearchPropertiesOutput(
        results=results,
        total=len(results),
        search_criteria={k: v for k, v in criteria.items() if v is not None},
    )


async def _check_availability(args: CheckAvailabilityInput, ctx: ToolContext) -> AvailabilityOutput:
    async with ctx.session_factory() as session:
        result = await check_availability(
            session, args.property_id, args.check_in, args.check_out, today=ctx.today
        )
        return AvailabilityOutput(
            available=result.available,
            property_id=result.property.id,
            check_in=result.date_range.check_in,
            check_out=result.date_range.check_out,
            nights=result.date_range.nights,
            property=PropertyBrief.from_property(result.property),
            conflicting_bookings=[
                BookedRange(booking_id=b.id, check_in=b.check_in, check_out=b.check_out, status=b.status)
                for b in result.conflicts
            ],
        )


async def _create_booking(args: CreateBookingInput, ctx: ToolContext) -> CreateBookingOutput:
    async with ctx.session_factory() as session:
        booking = await create_booking(
            session,
            property_id=args.property_id,
            guest_id=ctx.caller.user_id,
            check_in=args.check_in,
            check_out=args.check_out,
            guest_count=args.guest_count,
            today=ctx.today,
        )
        await session.commit()
        return CreateBookingOutput(booking=BookingDetails.from_booking(booking))


async def _cancel_booking(args: CancelBookingInput, ctx: ToolContext) -> CancelBookingOutput:
    async with ctx.session_factory() as session:
        booking = await cancel_booking(
            session,
            args.booking_id,
            requester_id=ctx.caller.user_id,
            now=ctx.now,
            policy=CancellationPolicy.ASSISTANT,
        )
        await session.commit()
        return CancelBookingOutput(cancelled_booking=BookingDetails.from_booking(booking))


async def _get_user_bookings(args: GetUserBookingsInput, ctx: ToolContext) -> UserBookingsOutput:
    async with ctx.session_factory() as session:
        bookings = await list_user_bookings(
            session,
            ctx.caller.user_id,
            booking_filter=args.filter,
            limit=args.limit,
            today=ctx.today,
        )
        details = [BookingDetails.from_booking(b) for b in bookings]
    return UserBookingsOutput(bookings=details, total=len(details), filter=args.filter)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

TOOLS: dict[ToolName, ToolSpec] = {
    spec.name: spec
    for spec in (
        ToolSpec(
            name=ToolName.GET_CURRENT_DATE,
            description="Get the current date and year to make sure booking dates are in the future",
            input_model=GetCurrentDateInput,
            handler=_get_current_date,
        ),
        ToolSpec(
            name=ToolName.SEARCH_PROPERTIES,
            description=(
                "Search for rental properties by location, dates, guests, price range and "
                "location type"
            ),
            input_model=SearchPropertiesInput,
            handler=_search_properties,
        ),
        ToolSpec(
            name=ToolName.CHECK_AVAILABILITY,
            description="Check if a property is available for specific dates by looking at existing bookings",
            input_model=CheckAvailabilityInput,
            handler=_check_availability,
        ),
        ToolSpec(
            name=ToolName.CREATE_BOOKING,
            description="Create a new booking for a property on behalf of the signed-in user",
            input_model=CreateBookingInput,
            handler=_create_booking,
            requires_auth=True,
            auth_message="User must be signed in to make a booking.",
        ),
        ToolSpec(
            name=ToolName.CANCEL_BOOKING,
            description=(
                "Cancel an existing booking of the signed-in user. Only upcoming bookings can be "
                "cancelled."
            ),
            input_model=CancelBookingInput,
            handler=_cancel_booking,
            requires_auth=True,
            auth_message="User must be signed in to cancel bookings.",
        ),
        ToolSpec(
            name=ToolName.GET_USER_BOOKINGS,
            description="Get the signed-in user's bookings with optional filtering",
            input_model=GetUserBookingsInput,
            handler=_get_user_bookings,
            requires_auth=True,
            auth_message="Please sign in to view your bookings.",
        ),
    )
}


def tool_definitions() -> list[dict]:
    """All tool definitions, in catalog order, for binding to a chat model."""
    return [spec.as_openai_tool() for spec in TOOLS.values()]


async def execute_tool(name: str, arguments: dict | None, context: ToolContext) -> dict:
    """Run one tool call and return its JSON-ready result.

    Unknown tools, invalid arguments, missing authentication and booking rule
    violations all come back as ``{"success": False, "code": ..., "error": ...}``.
    Anything else raised by a handler propagates to the caller.
    """
    try:
        tool_name = ToolName(name)
    except ValueError:
        logger.warning("Model requested unknown tool %r", name)
        return {"success": False, "code": "unknown_tool", "error": f"Unknown tool '{name}'."}

    spec = TOOLS[tool_name]

    if spec.requires_auth and context.caller is None:
        logger.info("Tool %s needs a signed-in user", tool_name.value)
        return AuthRequiredError(spec.auth_message).to_dict()

    try:
        args = spec.input_model.model_validate(arguments or {})
    except ValidationError as exc:
        problems = [f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}" for err in exc.errors()]
        logger.info("Tool %s called with invalid arguments: %s", tool_name.value, problems)
        return {
            "success": False,
            "code": "invalid_arguments",
            "error": "The tool was called with invalid arguments.",
            "problems": problems,
        }

    try:
        output = await spec.handler(args, context)
    except BookingError as exc:
        logger.info("Tool %s rejected: %s (%s)", tool_name.value, exc.code, exc.message)
        return exc.to_dict()

    logger.info("Tool %s executed", tool_name.value)
    return output.model_dump(mode="json")
