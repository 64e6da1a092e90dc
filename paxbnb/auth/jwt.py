"""Verification of access tokens issued by the external auth provider.

The provider (Supabase-style) signs HS256 tokens with a shared secret; the
``sub`` claim is the user's profile id and ``aud`` is ``authenticated``.
``create_access_token`` mints compatible tokens for local development and
tests.
"""

from datetime import datetime, timedelta, timezone

from jose import jwt

from paxbnb.config import settings


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create an access token in the provider's format.

    Args:
        data: Payload data. Must include ``sub`` (profile UUID as string).
        expires_delta: Custom expiration duration. Defaults to
            ``settings.jwt_access_token_expire_minutes`` minutes.

    Returns:
        Encoded JWT string.
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes))
    to_encode.update({"exp": expire, "iat": now, "aud": settings.jwt_audience, "role": "authenticated"})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Args:
        token: Encoded JWT string.

    Returns:
        Decoded payload dictionary.

    Raises:
        jose.JWTError: If the token is invalid, expired, malformed, or issued
            for another audience.
    """
    return jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
    )
