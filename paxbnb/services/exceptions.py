"""Booking domain errors.

Every rule violation raised by the services is a ``BookingError`` carrying a
stable ``code`` and a human-readable ``message``. The assistant's tool
registry turns them into structured tool results; the REST routers map them
to HTTP status codes. ``UpstreamError`` is not part of that family:
it means the store or the model could not be reached and the whole request
fails.
"""

from typing import Any


class BookingError(Exception):
    """Base class for recoverable booking rule violations."""

    code = "booking_error"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "code": self.code, "error": self.message, **self.details}


class NotFoundError(BookingError):
    code = "not_found"


class InvalidRangeError(BookingError):
    """Check-out is not strictly after check-in."""

    code = "invalid_range"


class InvalidDateError(InvalidRangeError):
    """A date string could not be understood."""

    code = "invalid_date"


class PastDateError(BookingError):
    code = "past_date"


class CapacityExceededError(BookingError):
    code = "capacity_exceeded"


class ConflictError(BookingError):
    """Overlapping confirmed booking, from the pre-check or the storage guard."""

    code = "conflict"


class ForbiddenError(BookingError):
    code = "forbidden"


class AlreadyCancelledError(BookingError):
    code = "already_cancelled"


class AlreadyCompletedError(BookingError):
    code = "already_completed"


class TooLateError(BookingError):
    code = "too_late"


class AuthRequiredError(BookingError):
    code = "auth_required"

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "requires_auth": True}


class UpstreamError(Exception):
    """The relational store or the language model service failed."""
