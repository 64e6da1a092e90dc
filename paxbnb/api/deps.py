"""Shared API dependencies, the single import point for all routers.

Re-exports database session and authentication dependencies so that router
modules can import everything they need from one place::

    from paxbnb.api.deps import get_db, get_current_user
"""

from fastapi import HTTPException, status

from paxbnb.auth.dependencies import get_current_user, get_optional_user
from paxbnb.database import get_db
from paxbnb.services.exceptions import BookingError

_STATUS_BY_CODE = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "invalid_range": status.HTTP_400_BAD_REQUEST,
    "invalid_date": status.HTTP_400_BAD_REQUEST,
    "past_date": status.HTTP_400_BAD_REQUEST,
    "capacity_exceeded": status.HTTP_400_BAD_REQUEST,
    "too_late": status.HTTP_400_BAD_REQUEST,
    "already_cancelled": status.HTTP_400_BAD_REQUEST,
    "already_completed": status.HTTP_400_BAD_REQUEST,
    "conflict": status.HTTP_409_CONFLICT,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "auth_required": status.HTTP_401_UNAUTHORIZED,
}


def http_error(exc: BookingError) -> HTTPException:
    """Translate a booking rule violation into an HTTP error."""
    return HTTPException(
        status_code=_STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST),
        detail={"code": exc.code, "message": exc.message, **exc.details},
    )


__all__ = [
    "get_db",
    "get_current_user",
    "get_optional_user",
    "http_error",
]
