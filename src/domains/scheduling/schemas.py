# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Request and response models for the assignment scheduler.

All models serialize with camelCase keys and accept either camelCase or
snake_case on input.
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.domains.scheduling.slots import Weekday, format_time
from src.infrastructure.database.models import Assignment

T = TypeVar("T")


class SchedulerModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ============================================================================
# Requests
# ============================================================================


class AssignmentCreateRequest(SchedulerModel):
    """Request model for creating an assignment."""

    teacher_id: str = Field(..., max_length=64, description="Teacher identifier")
    class_id: str = Field(..., max_length=64, description="Class identifier")
    section: str = Field(..., max_length=20, description="Section label, e.g. A")
    grade: str = Field(..., max_length=20, description="Grade label, e.g. 10")
    subject: str = Field(..., max_length=100, description="Subject name")
    day: str = Field(..., description="Weekday name, case-insensitive")
    time: str = Field(..., description="Start time, e.g. 9:00 AM or 09:00")
    notes: str | None = Field(None, max_length=500, description="Optional notes")


class AssignmentUpdateRequest(SchedulerModel):
    """Request model for updating an assignment.

    Only the fields present in the body are changed.
    """

    teacher_id: str | None = Field(None, max_length=64)
    class_id: str | None = Field(None, max_length=64)
    section: str | None = Field(None, max_length=20)
    grade: str | None = Field(None, max_length=20)
    subject: str | None = Field(None, max_length=100)
    day: str | None = None
    time: str | None = None
    notes: str | None = Field(None, max_length=500)


class LegacyClassItem(SchedulerModel):
    """One element of the legacy ``assignedClasses`` list."""

    class_id: str = Field(..., alias="class", description="Class identifier")
    section: str
    subject: str
    grade: str
    time: str
    day: str


class AssignClassesRequest(SchedulerModel):
    """Legacy batch request: ``{"assignedClasses": [...]}``."""

    assigned_classes: list[LegacyClassItem] = Field(..., description="Classes to assign")


class SubjectAssignmentDeleteRequest(SchedulerModel):
    """Legacy composite-key delete request."""

    class_id: str
    section: str
    subject: str


# ============================================================================
# Responses
# ============================================================================


class AssignmentResponse(SchedulerModel):
    """An assignment as returned to clients."""

    id: str
    teacher_id: str
    class_id: str
    section: str
    grade: str
    subject: str
    day: str
    time: str
    time_minutes: int
    notes: str | None = None
    is_active: bool
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, assignment: Assignment) -> "AssignmentResponse":
        return cls(
            id=assignment.id,
            teacher_id=assignment.teacher_id,
            class_id=assignment.class_id,
            section=assignment.section,
            grade=assignment.grade,
            subject=assignment.subject,
            day=Weekday(assignment.day_of_week).label,
            time=format_time(assignment.time_minutes),
            time_minutes=assignment.time_minutes,
            notes=assignment.notes,
            is_active=assignment.is_active,
            created_by=assignment.created_by,
            updated_by=assignment.updated_by,
            created_at=assignment.created_at,
            updated_at=assignment.updated_at,
        )


def group_by_day(assignments: list[AssignmentResponse]) -> dict[str, list[AssignmentResponse]]:
    """Group assignments by day name, Monday first, keeping their order.

    Days without assignments are left out.
    """
    grouped: dict[str, list[AssignmentResponse]] = {}
    for day in Weekday:
        items = [a for a in assignments if a.day == day.label]
        if items:
            grouped[day.label] = items
    return grouped


class AssignmentPage(SchedulerModel):
    """One page of a filtered assignment listing."""

    items: list[AssignmentResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class TeacherAssignments(SchedulerModel):
    """All active assignments of one teacher."""

    teacher_id: str
    teacher_name: str
    assignments: list[AssignmentResponse]
    grouped_by_day: dict[str, list[AssignmentResponse]]


class ClassAssignments(SchedulerModel):
    """All active assignments of one class."""

    class_id: str
    class_name: str
    grade: str
    section: str
    assignments: list[AssignmentResponse]
    grouped_by_day: dict[str, list[AssignmentResponse]]


class DaySchedule(SchedulerModel):
    """A teacher's assignments on one weekday, ordered by time."""

    teacher_id: str
    teacher_name: str
    day: str
    assignments: list[AssignmentResponse]


class AssignClassesResult(SchedulerModel):
    """Outcome of a legacy batch assignment."""

    teacher_id: str
    created: list[AssignmentResponse]
    unchanged: list[AssignmentResponse]


class SubjectCount(SchedulerModel):
    subject: str
    count: int


class DayCount(SchedulerModel):
    day: str
    count: int


class TeacherCount(SchedulerModel):
    teacher_id: str
    teacher_name: str | None = None
    count: int


class StatisticsOverview(SchedulerModel):
    """Aggregate counts over active assignments."""

    total_assignments: int
    total_teachers: int
    total_classes: int
    by_subject: list[SubjectCount]
    by_day: list[DayCount]
    top_teachers: list[TeacherCount]


class ApiResponse(SchedulerModel, Generic[T]):
    """Response envelope shared by every scheduler route.

    Attributes:
        success: Whether the request succeeded.
        data: Payload on success.
        message: Human-readable message.
        kind: Stable error kind on failure.
        count: Number of items in ``data`` for list payloads.
        total: Total matching items for paged payloads.
        page: Current page for paged payloads.
        total_pages: Page count for paged payloads.
        details: Extra error context.
    """

    success: bool
    data: T | None = None
    message: str | None = None
    kind: str | None = None
    count: int | None = None
    total: int | None = None
    page: int | None = None
    total_pages: int | None = None
    details: dict[str, Any] | None = None
