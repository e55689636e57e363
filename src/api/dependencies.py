# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

The database, lock registry and settings live on ``app.state``; they are
created by the application lifespan. Services are built per request from
them.

Example:
    @router.get("")
    async def list_assignments(
        service: AssignmentServiceDep,
        caller: AdminCaller,
    ):
        ...
"""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.api.middleware.auth import get_current_caller
from src.core.config import Settings
from src.domains.auth.caller import Caller
from src.domains.directory import SqlClassDirectory, SqlTeacherDirectory
from src.domains.scheduling.locks import TeacherLockRegistry
from src.domains.scheduling.service import AssignmentService
from src.domains.scheduling.statistics import StatisticsAggregator
from src.infrastructure.database.connection import Database

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_database(request: Request) -> Database:
    """Get the school database opened by the lifespan.

    Raises:
        HTTPException: 503 if the database is not connected.
    """
    database: Database | None = getattr(request.app.state, "database", None)
    if database is None or not database.is_connected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not available",
        )
    return database


def get_lock_registry(request: Request) -> TeacherLockRegistry:
    return request.app.state.locks


def get_assignment_service(
    database: Annotated[Database, Depends(get_database)],
    locks: Annotated[TeacherLockRegistry, Depends(get_lock_registry)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AssignmentService:
    """Build the assignment service for a request."""
    return AssignmentService(
        database=database,
        teachers=SqlTeacherDirectory(),
        classes=SqlClassDirectory(),
        locks=locks,
        settings=settings.scheduler,
    )


def get_statistics_aggregator(
    database: Annotated[Database, Depends(get_database)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> StatisticsAggregator:
    return StatisticsAggregator(
        database=database,
        teachers=SqlTeacherDirectory(),
        settings=settings.scheduler,
    )


def require_auth(request: Request) -> Caller:
    """Require an authenticated caller.

    Raises:
        HTTPException: 401 if not authenticated.
    """
    caller = get_current_caller(request)
    if caller is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return caller


def require_admin(caller: Annotated[Caller, Depends(require_auth)]) -> Caller:
    """Require an administrator.

    Raises:
        HTTPException: 403 if the caller is not an admin.
    """
    if not caller.is_admin:
        logger.info("Admin access denied: caller=%s, role=%s", caller.id, caller.role.value)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return caller


# Type aliases for cleaner endpoint signatures
AdminCaller = Annotated[Caller, Depends(require_admin)]
AssignmentServiceDep = Annotated[AssignmentService, Depends(get_assignment_service)]
StatisticsDep = Annotated[StatisticsAggregator, Depends(get_statistics_aggregator)]
