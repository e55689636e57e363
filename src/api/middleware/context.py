# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Request logging context middleware.

Binds a request id (taken from X-Request-ID or generated) and the request
line to the structlog context for the duration of the request, and logs
one line per completed request.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.utils.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach request-scoped logging context and echo the request id."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        clear_context()
        bind_context(request_id=request_id, method=request.method, path=request.url.path)
        start = time.perf_counter()
        try:
            response = await call_next(request)
            caller = getattr(request.state, "caller", None)
            logger.info(
                "Request completed",
                status=response.status_code,
                caller=caller.id if caller else None,
                duration_ms=round((time.perf_counter() - start) * 1000, 1),
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_context()
