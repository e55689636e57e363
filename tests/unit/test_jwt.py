# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for JWT token utilities.

Tests the JWTManager class and token operations.
"""

import time
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from jose import jwt
from pydantic import SecretStr

from src.domains.auth.caller import Caller, CallerRole
from src.domains.auth.jwt import (
    InvalidTokenError,
    JWTManager,
    TokenExpiredError,
    TokenPayload,
)

SECRET = "test-secret-key-for-jwt-testing"


@pytest.fixture
def jwt_settings() -> MagicMock:
    """Create mock JWT settings."""
    settings = MagicMock()
    settings.secret_key = SecretStr(SECRET)
    settings.algorithm = "HS256"
    settings.access_token_expire_minutes = 30
    return settings


@pytest.fixture
def jwt_manager(jwt_settings: MagicMock) -> JWTManager:
    """Create JWT manager with test settings."""
    return JWTManager(jwt_settings)


class TestJWTManager:
    """Tests for JWTManager class."""

    def test_create_and_decode_access_token(self, jwt_manager: JWTManager) -> None:
        """Test that a created token decodes to the same caller."""
        token = jwt_manager.create_access_token(user_id="admin-1", role="admin")

        payload = jwt_manager.decode_token(token)

        assert isinstance(payload, TokenPayload)
        assert payload.sub == "admin-1"
        assert payload.role == CallerRole.ADMIN
        assert payload.jti is not None
        assert payload.to_caller() == Caller(id="admin-1", role=CallerRole.ADMIN)

    def test_default_expiry_uses_settings(self, jwt_manager: JWTManager) -> None:
        token = jwt_manager.create_access_token(user_id="t-1", role=CallerRole.TEACHER)

        payload = jwt_manager.decode_token(token)

        assert payload.exp - payload.iat == 30 * 60

    def test_each_token_has_unique_jti(self, jwt_manager: JWTManager) -> None:
        first = jwt_manager.decode_token(jwt_manager.create_access_token("u", "admin"))
        second = jwt_manager.decode_token(jwt_manager.create_access_token("u", "admin"))

        assert first.jti != second.jti

    def test_expired_token_raises(self, jwt_manager: JWTManager) -> None:
        token = jwt_manager.create_access_token(
            user_id="admin-1",
            role="admin",
            expires_in=timedelta(seconds=-10),
        )

        with pytest.raises(TokenExpiredError):
            jwt_manager.decode_token(token)

    def test_wrong_secret_is_invalid(self, jwt_manager: JWTManager) -> None:
        token = jwt.encode(
            {"sub": "admin-1", "role": "admin", "exp": int(time.time()) + 60},
            "another-secret",
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token(token)

    def test_garbage_is_invalid(self, jwt_manager: JWTManager) -> None:
        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token("not-a-token")

    def test_unknown_role_is_invalid(self, jwt_manager: JWTManager) -> None:
        token = jwt.encode(
            {"sub": "x", "role": "janitor", "exp": int(time.time()) + 60},
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError, match="claims"):
            jwt_manager.decode_token(token)

    def test_missing_subject_is_invalid(self, jwt_manager: JWTManager) -> None:
        token = jwt.encode(
            {"role": "admin", "exp": int(time.time()) + 60},
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token(token)

    def test_user_type_claim_is_accepted(self, jwt_manager: JWTManager) -> None:
        """Test tokens carrying user_type instead of role."""
        now = int(time.time())
        token = jwt.encode(
            {"sub": "t-9", "user_type": "teacher", "exp": now + 60, "iat": now},
            SECRET,
            algorithm="HS256",
        )

        payload = jwt_manager.decode_token(token)

        assert payload.role == CallerRole.TEACHER
        assert payload.to_caller().is_admin is False
