# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

This package provides middleware for request processing:
- AuthMiddleware: JWT authentication.
- RequestContextMiddleware: Request id and logging context.
- Rate limiting helpers built on slowapi.
"""

from src.api.middleware.auth import AuthMiddleware, get_current_caller
from src.api.middleware.context import RequestContextMiddleware
from src.api.middleware.rate_limit import build_limiter, rate_limit_exceeded_handler

__all__ = [
    "AuthMiddleware",
    "RequestContextMiddleware",
    "build_limiter",
    "get_current_caller",
    "rate_limit_exceeded_handler",
]
