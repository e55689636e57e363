# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Legacy teacher-centric assignment endpoints.

Older admin screens send a teacher's whole class list at once and remove
assignments by (class, section, subject) rather than by ID:
- POST /{teacher_id}/assign-classes - Batch assign classes
- DELETE /{teacher_id}/subject-assignment - Composite-key delete

Both fan out into AssignmentService operations.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Path

from src.api.dependencies import AdminCaller, AssignmentServiceDep
from src.domains.scheduling.schemas import (
    ApiResponse,
    AssignClassesRequest,
    AssignClassesResult,
    AssignmentResponse,
    SubjectAssignmentDeleteRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/{teacher_id}/assign-classes",
    response_model=ApiResponse[AssignClassesResult],
    response_model_exclude_none=True,
    summary="Assign classes to teacher",
    description=(
        "Assign several classes at once. Elements matching an existing assignment are "
        "left in place; any time conflict rejects the whole request."
    ),
)
async def assign_classes(
    teacher_id: Annotated[str, Path(description="Teacher identifier")],
    data: AssignClassesRequest,
    caller: AdminCaller,
    service: AssignmentServiceDep,
) -> ApiResponse[AssignClassesResult]:
    """Assign a batch of classes to a teacher."""
    logger.info(
        "Assigning classes: teacher=%s, items=%s, by=%s",
        teacher_id,
        len(data.assigned_classes),
        caller.id,
    )
    result = await service.assign_classes(caller, teacher_id, data.assigned_classes)
    return ApiResponse(
        success=True,
        data=result,
        count=len(result.created) + len(result.unchanged),
        message="Classes assigned successfully",
    )


@router.delete(
    "/{teacher_id}/subject-assignment",
    response_model=ApiResponse[list[AssignmentResponse]],
    response_model_exclude_none=True,
    summary="Remove subject assignment",
    description="Soft-delete every active assignment of the teacher for a class, section and subject.",
)
async def delete_subject_assignment(
    teacher_id: Annotated[str, Path(description="Teacher identifier")],
    data: SubjectAssignmentDeleteRequest,
    caller: AdminCaller,
    service: AssignmentServiceDep,
) -> ApiResponse[list[AssignmentResponse]]:
    """Remove a teacher's assignment by composite key."""
    deleted = await service.delete_by_key(
        caller,
        teacher_id=teacher_id,
        class_id=data.class_id,
        section=data.section,
        subject=data.subject,
    )
    return ApiResponse(
        success=True,
        data=deleted,
        count=len(deleted),
        message="Subject assignment removed successfully",
    )
