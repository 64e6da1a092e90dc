"""FastAPI authentication dependencies.

Identity is resolved once per request from the bearer token and handed on
explicitly; nothing below the routers looks up "the current user" itself.
"""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from paxbnb.auth.jwt import decode_token
from paxbnb.database import get_db
from paxbnb.models.profile import Profile

# Strict bearer: raises 403 automatically if no token provided
_bearer_scheme = HTTPBearer()

# Optional bearer: returns None if no token provided
_bearer_scheme_optional = HTTPBearer(auto_error=False)


async def _profile_from_token(token: str, db: AsyncSession) -> Profile | None:
    """Return the profile named by a valid token's ``sub`` claim, or None."""
    try:
        payload = decode_token(token)
    except JWTError:
        return None

    sub: str | None = payload.get("sub")
    if sub is None:
        return None

    try:
        profile_id = uuid.UUID(sub)
    except ValueError:
        return None

    return await db.get(Profile, profile_id)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Profile:
    """Extract and validate the Bearer token, then return the caller's profile.

    Raises:
        HTTPException 401: If the token is invalid, expired, or has no profile.
    """
    profile = await _profile_from_token(credentials.credentials, db)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return profile


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme_optional),
    db: AsyncSession = Depends(get_db),
) -> Profile | None:
    """Optionally authenticate a user from a Bearer token.

    Returns ``None`` instead of raising when no token is provided or it does
    not verify. The chat endpoint uses this: anonymous visitors may search,
    and the booking tools answer them with an "authentication required"
    result.
    """
    if credentials is None:
        return None
    return await _profile_from_token(credentials.credentials, db)
