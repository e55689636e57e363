# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment management API endpoints.

This module provides endpoints for teacher assignments:
- POST / - Create an assignment
- GET / - List assignments with filtering and pagination
- GET /statistics/overview - Aggregate counts
- GET /teacher/{teacher_id} - All assignments of a teacher
- GET /teacher/{teacher_id}/schedule/{day} - A teacher's day schedule
- GET /class/{class_id} - All assignments of a class
- GET /{assignment_id} - Get assignment details
- PUT /{assignment_id} - Update assignment
- DELETE /{assignment_id} - Soft-delete assignment

All endpoints require an administrator. Domain errors are translated into
the response envelope by the handlers in src.api.errors.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Path, Query, status

from src.api.dependencies import AdminCaller, AssignmentServiceDep, StatisticsDep
from src.domains.scheduling.schemas import (
    ApiResponse,
    AssignmentCreateRequest,
    AssignmentResponse,
    AssignmentUpdateRequest,
    ClassAssignments,
    DaySchedule,
    StatisticsOverview,
    TeacherAssignments,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[AssignmentResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create assignment",
    description="Assign a teacher to a class, section and subject on a weekday slot.",
)
async def create_assignment(
    data: AssignmentCreateRequest,
    caller: AdminCaller,
    service: AssignmentServiceDep,
) -> ApiResponse[AssignmentResponse]:
    """Create a new assignment.

    Args:
        data: Assignment creation request.
        caller: Authenticated administrator.
        service: Assignment service.

    Returns:
        The created assignment.
    """
    assignment = await service.create_assignment(
        caller,
        teacher_id=data.teacher_id,
        class_id=data.class_id,
        section=data.section,
        subject=data.subject,
        grade=data.grade,
        day=data.day,
        time=data.time,
        notes=data.notes,
    )
    return ApiResponse(success=True, data=assignment, message="Assignment created successfully")


@router.get(
    "",
    response_model=ApiResponse[list[AssignmentResponse]],
    response_model_exclude_none=True,
    summary="List assignments",
    description="List assignments filtered by teacher, class, day, subject or free-text search.",
)
async def list_assignments(
    caller: AdminCaller,
    service: AssignmentServiceDep,
    teacher_id: Annotated[str | None, Query(alias="teacherId", description="Filter by teacher")] = None,
    class_id: Annotated[str | None, Query(alias="classId", description="Filter by class")] = None,
    day: Annotated[str | None, Query(description="Filter by weekday")] = None,
    subject: Annotated[str | None, Query(description="Subject contains (case-insensitive)")] = None,
    search: Annotated[str | None, Query(description="Subject or notes contain (case-insensitive)")] = None,
    include_inactive: Annotated[bool, Query(alias="includeInactive", description="Include deleted")] = False,
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    page_size: Annotated[int | None, Query(alias="pageSize", ge=1, description="Items per page")] = None,
) -> ApiResponse[list[AssignmentResponse]]:
    """List assignments with filtering and pagination."""
    result = await service.list_assignments(
        teacher_id=teacher_id,
        class_id=class_id,
        day=day,
        subject=subject,
        search=search,
        include_inactive=include_inactive,
        page=page,
        page_size=page_size,
    )
    return ApiResponse(
        success=True,
        data=result.items,
        count=len(result.items),
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.get(
    "/statistics/overview",
    response_model=ApiResponse[StatisticsOverview],
    response_model_exclude_none=True,
    summary="Assignment statistics",
    description="Totals and histograms over active assignments.",
)
async def statistics_overview(
    caller: AdminCaller,
    statistics: StatisticsDep,
) -> ApiResponse[StatisticsOverview]:
    """Compute the statistics overview."""
    return ApiResponse(success=True, data=await statistics.overview())


@router.get(
    "/teacher/{teacher_id}",
    response_model=ApiResponse[TeacherAssignments],
    response_model_exclude_none=True,
    summary="Teacher assignments",
    description="All active assignments of a teacher, grouped by day.",
)
async def list_teacher_assignments(
    teacher_id: Annotated[str, Path(description="Teacher identifier")],
    caller: AdminCaller,
    service: AssignmentServiceDep,
    day: Annotated[str | None, Query(description="Only this weekday")] = None,
) -> ApiResponse[TeacherAssignments]:
    """List a teacher's assignments."""
    result = await service.list_teacher_assignments(teacher_id, day=day)
    return ApiResponse(success=True, data=result, count=len(result.assignments))


@router.get(
    "/teacher/{teacher_id}/schedule/{day}",
    response_model=ApiResponse[DaySchedule],
    response_model_exclude_none=True,
    summary="Teacher day schedule",
    description="A teacher's active assignments on one weekday, ordered by time.",
)
async def get_teacher_schedule(
    teacher_id: Annotated[str, Path(description="Teacher identifier")],
    day: Annotated[str, Path(description="Weekday name")],
    caller: AdminCaller,
    service: AssignmentServiceDep,
) -> ApiResponse[DaySchedule]:
    """Get a teacher's schedule for one day."""
    result = await service.get_teacher_schedule(teacher_id, day)
    return ApiResponse(success=True, data=result, count=len(result.assignments))


@router.get(
    "/class/{class_id}",
    response_model=ApiResponse[ClassAssignments],
    response_model_exclude_none=True,
    summary="Class assignments",
    description="All active assignments of a class, grouped by day.",
)
async def list_class_assignments(
    class_id: Annotated[str, Path(description="Class identifier")],
    caller: AdminCaller,
    service: AssignmentServiceDep,
    day: Annotated[str | None, Query(description="Only this weekday")] = None,
) -> ApiResponse[ClassAssignments]:
    """List a class's assignments."""
    result = await service.list_class_assignments(class_id, day=day)
    return ApiResponse(success=True, data=result, count=len(result.assignments))


@router.get(
    "/{assignment_id}",
    response_model=ApiResponse[AssignmentResponse],
    response_model_exclude_none=True,
    summary="Get assignment",
    description="Get an assignment by ID, including deleted ones.",
)
async def get_assignment(
    assignment_id: Annotated[str, Path(description="Assignment identifier")],
    caller: AdminCaller,
    service: AssignmentServiceDep,
) -> ApiResponse[AssignmentResponse]:
    """Get assignment details."""
    return ApiResponse(success=True, data=await service.get_assignment(assignment_id))


@router.put(
    "/{assignment_id}",
    response_model=ApiResponse[AssignmentResponse],
    response_model_exclude_none=True,
    summary="Update assignment",
    description="Change fields of an active assignment. The new slot is re-checked for conflicts.",
)
async def update_assignment(
    assignment_id: Annotated[str, Path(description="Assignment identifier")],
    data: AssignmentUpdateRequest,
    caller: AdminCaller,
    service: AssignmentServiceDep,
) -> ApiResponse[AssignmentResponse]:
    """Update an assignment.

    Only fields present in the request body are changed.
    """
    assignment = await service.update_assignment(
        caller,
        assignment_id,
        data.model_dump(exclude_unset=True),
    )
    return ApiResponse(success=True, data=assignment, message="Assignment updated successfully")


@router.delete(
    "/{assignment_id}",
    response_model=ApiResponse[AssignmentResponse],
    response_model_exclude_none=True,
    summary="Delete assignment",
    description="Soft-delete an assignment. It stays fetchable by ID.",
)
async def delete_assignment(
    assignment_id: Annotated[str, Path(description="Assignment identifier")],
    caller: AdminCaller,
    service: AssignmentServiceDep,
) -> ApiResponse[AssignmentResponse]:
    """Soft-delete an assignment."""
    assignment = await service.delete_assignment(caller, assignment_id)
    return ApiResponse(success=True, data=assignment, message="Assignment deleted successfully")
