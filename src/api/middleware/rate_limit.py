# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Rate limiting using slowapi.

Limits are applied per client: the authenticated caller when there is one,
otherwise the remote address. The default limit covers every route through
SlowAPIMiddleware.

Example:
    app.state.limiter = build_limiter(settings.rate_limit)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from src.core.config import RateLimitSettings

logger = logging.getLogger(__name__)


def get_client_identifier(request: Request) -> str:
    """Get a unique identifier for the client.

    Uses the caller ID if authenticated, otherwise the IP address.

    Args:
        request: HTTP request.

    Returns:
        Client identifier string.
    """
    caller = getattr(request.state, "caller", None)
    if caller is not None:
        return f"user:{caller.id}"
    return f"ip:{get_remote_address(request)}"


def build_limiter(settings: RateLimitSettings) -> Limiter:
    """Create the application limiter.

    Counters are kept in process memory.

    Args:
        settings: Rate limit settings.

    Returns:
        Configured Limiter.
    """
    return Limiter(
        key_func=get_client_identifier,
        default_limits=[f"{settings.requests_per_minute}/minute"],
        enabled=settings.enabled,
        storage_uri="memory://",
    )


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded errors.

    Returns a 429 Too Many Requests response in the standard envelope.

    Args:
        request: HTTP request.
        exc: Rate limit exceeded exception.

    Returns:
        JSON response with error details.
    """
    logger.warning(
        "Rate limit exceeded: %s for %s",
        exc.detail,
        get_client_identifier(request),
    )
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": "Too many requests. Please try again later.",
            "kind": "rate_limited",
        },
        headers={"Retry-After": "60"},
    )
