"""Unit tests for access token creation and verification."""

from datetime import timedelta

import pytest
from jose import JWTError, jwt

from paxbnb.auth.jwt import create_access_token, decode_token
from paxbnb.config import settings


class TestCreateAccessToken:
    """Test access token creation."""

    def test_contains_sub_claim(self):
        token = create_access_token({"sub": "user-abc"})
        payload = decode_token(token)
        assert payload["sub"] == "user-abc"

    def test_matches_provider_format(self):
        payload = decode_token(create_access_token({"sub": "user-123"}))
        assert payload["aud"] == "authenticated"
        assert payload["role"] == "authenticated"
        assert "iat" in payload
        assert "exp" in payload

    def test_custom_expiry_delta(self):
        token = create_access_token({"sub": "user-123"}, expires_delta=timedelta(hours=1))
        payload = decode_token(token)
        assert payload["sub"] == "user-123"


class TestDecodeToken:
    """Test token decoding and validation."""

    def test_decode_expired_token_raises(self):
        token = create_access_token({"sub": "user-123"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(JWTError):
            decode_token(token)

    def test_decode_invalid_token_raises(self):
        with pytest.raises(JWTError):
            decode_token("not.a.valid.token")

    def test_decode_empty_string_raises(self):
        with pytest.raises(JWTError):
            decode_token("")

    def test_other_audience_rejected(self):
        token = jwt.encode(
            {"sub": "user-123", "aud": "someone-else"},
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(JWTError):
            decode_token(token)

    def test_wrong_secret_rejected(self):
        token = jwt.encode(
            {"sub": "user-123", "aud": settings.jwt_audience},
            "not-the-shared-secret",
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(JWTError):
            decode_token(token)
