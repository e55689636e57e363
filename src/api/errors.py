# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exception handlers translating errors into the response envelope.

Every error response has the shape
``{"success": false, "message": ..., "kind": ...}``.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.middleware.rate_limit import rate_limit_exceeded_handler
from src.domains.scheduling.exceptions import (
    ConflictError,
    InternalError,
    NotFoundError,
    SchedulerError,
    StoreTimeoutError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[SchedulerError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    StoreTimeoutError: status.HTTP_503_SERVICE_UNAVAILABLE,
    InternalError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_HTTP_KINDS = {
    status.HTTP_400_BAD_REQUEST: "validation_error",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


def status_for(error: SchedulerError) -> int:
    """HTTP status for a scheduler error, walking up its class hierarchy."""
    for cls in type(error).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _envelope(message: str, kind: str, details: dict | None = None) -> dict:
    body: dict = {"success": False, "message": message, "kind": kind}
    if details:
        body["details"] = details
    return body


async def scheduler_error_handler(request: Request, exc: SchedulerError) -> JSONResponse:
    """Handle scheduler domain errors."""
    status_code = status_for(exc)
    headers = {"Retry-After": "1"} if exc.retryable else None
    if status_code >= 500:
        logger.error("Request failed: kind=%s, message=%s", exc.kind, exc.message)
        details = None
    else:
        logger.info("Request rejected: kind=%s, message=%s", exc.kind, exc.message)
        details = exc.details or None
    return JSONResponse(
        status_code=status_code,
        content=_envelope(exc.message, exc.kind, details),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions raised by routes, dependencies and routing."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(str(exc.detail), _HTTP_KINDS.get(exc.status_code, "http_error")),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle malformed request bodies, paths and query strings as 400."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(message, "validation_error"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log and return an opaque 500."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope("Internal server error", InternalError.kind),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install every handler on the application."""
    app.add_exception_handler(SchedulerError, scheduler_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
