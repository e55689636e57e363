# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain.

Tokens are issued elsewhere; this package validates them and exposes the
resulting caller identity.

Exports:
    Caller: Authenticated user identity.
    CallerRole: Closed set of roles.
    JWTManager: JWT token creation and validation.
"""

from src.domains.auth.caller import Caller, CallerRole
from src.domains.auth.jwt import (
    InvalidTokenError,
    JWTError,
    JWTManager,
    TokenExpiredError,
    TokenPayload,
)

__all__ = [
    "Caller",
    "CallerRole",
    "JWTManager",
    "JWTError",
    "TokenExpiredError",
    "InvalidTokenError",
    "TokenPayload",
]
