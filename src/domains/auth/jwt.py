# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JWT token validation utilities.

Access tokens are issued by the school application's sign-in service and
validated here using python-jose. Token creation is kept for tooling and
tests.

Example:
    >>> from src.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> token = jwt_manager.create_access_token(user_id="admin-1", role="admin")
    >>> caller = jwt_manager.decode_token(token).to_caller()
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError as JoseJWTError, jwt
from pydantic import BaseModel, ValidationError as PydanticValidationError

from src.core.config.settings import JWTSettings
from src.domains.auth.caller import Caller, CallerRole

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """JWT token payload structure.

    Attributes:
        sub: Subject (user ID).
        role: Caller role.
        exp: Expiration timestamp.
        iat: Issued at timestamp.
        jti: JWT ID for token tracking.
    """

    sub: str
    role: CallerRole
    exp: int
    iat: int
    jti: str | None = None

    def to_caller(self) -> Caller:
        return Caller(id=self.sub, role=self.role)


class JWTError(Exception):
    """Base exception for JWT operations."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid."""

    pass


class JWTManager:
    """JWT token creation and validation manager.

    Attributes:
        _settings: JWT configuration settings.
    """

    def __init__(self, settings: JWTSettings) -> None:
        """Initialize the JWT manager.

        Args:
            settings: JWT configuration settings.
        """
        self._settings = settings

    def create_access_token(
        self,
        user_id: str,
        role: CallerRole | str,
        expires_in: timedelta | None = None,
    ) -> str:
        """Create an access token.

        Args:
            user_id: User identifier.
            role: Caller role.
            expires_in: Lifetime override; defaults to the configured expiry.

        Returns:
            JWT access token string.
        """
        now = datetime.now(timezone.utc)
        exp = now + (expires_in or timedelta(minutes=self._settings.access_token_expire_minutes))

        payload = {
            "sub": str(user_id),
            "role": CallerRole(role).value,
            "exp": int(exp.timestamp()),
            "iat": int(now.timestamp()),
            "jti": secrets.token_urlsafe(16),
        }

        return jwt.encode(
            payload,
            self._settings.secret_key.get_secret_value(),
            algorithm=self._settings.algorithm,
        )

    def decode_token(self, token: str) -> TokenPayload:
        """Decode and validate a JWT token.

        The role is read from the ``role`` claim, falling back to
        ``user_type`` for tokens issued by older sign-in services.

        Args:
            token: JWT token string.

        Returns:
            TokenPayload with decoded claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid or carries an unknown role.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
            )
        except ExpiredSignatureError:
            raise TokenExpiredError("Token has expired") from None
        except JoseJWTError as e:
            logger.warning("Token decode failed: %s", str(e))
            raise InvalidTokenError(f"Invalid token: {str(e)}") from None

        try:
            return TokenPayload(
                sub=payload["sub"],
                role=payload.get("role") or payload.get("user_type"),
                exp=payload["exp"],
                iat=payload.get("iat", 0),
                jti=payload.get("jti"),
            )
        except (KeyError, PydanticValidationError) as e:
            logger.warning("Token claims rejected: %s", str(e))
            raise InvalidTokenError("Invalid token claims") from None
