# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoints.

This module provides liveness and readiness endpoints for the API.
"""

import logging
import time
from datetime import datetime

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src import __version__
from src.infrastructure.database.connection import Database
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

# Track server start time for uptime calculation
_server_start_time = time.time()


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(description="Overall health status")
    timestamp: datetime = Field(description="Current server timestamp")
    version: str = Field(description="API version")
    environment: str = Field(description="Deployment environment")
    uptime_seconds: int = Field(description="Server uptime in seconds")


class ReadinessResponse(BaseModel):
    """Readiness check response model."""
    ready: bool = Field(description="Whether the service is ready")
    checks: dict[str, str] = Field(description="Individual check results")


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Report that the process is alive."""
    settings = request.app.state.settings
    return HealthResponse(
        status="healthy",
        timestamp=utc_now(),
        version=__version__,
        environment=settings.environment,
        uptime_seconds=int(time.time() - _server_start_time),
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request) -> JSONResponse:
    """Report whether the school database is reachable.

    Returns 503 when it is not, so orchestrators stop routing traffic.
    """
    database: Database | None = getattr(request.app.state, "database", None)
    reachable = database is not None and await database.check_connection()
    if not reachable:
        logger.warning("Readiness check failed: database unreachable")

    body = ReadinessResponse(
        ready=reachable,
        checks={"database": "healthy" if reachable else "unhealthy"},
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK if reachable else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(),
    )
