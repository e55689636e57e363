# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment service for managing teacher schedules.

This module provides the AssignmentService class for:
- Creating, updating and soft-deleting assignments
- Listing assignments by filter, teacher, class and day
- The legacy batch assign-classes and composite-key delete operations

Every write for a teacher runs under that teacher's lock, and the conflict
check, the insert or update, and the commit all happen while the lock is
held. Reads never take the lock.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import SchedulerSettings
from src.domains.auth.caller import Caller
from src.domains.directory import ClassDirectory, ClassRecord, TeacherDirectory, TeacherRecord
from src.domains.scheduling.conflicts import find_conflict
from src.domains.scheduling.exceptions import (
    ConflictError,
    NotFoundError,
    StoreTimeoutError,
    ValidationError,
)
from src.domains.scheduling.locks import TeacherLockRegistry
from src.domains.scheduling.schemas import (
    AssignClassesResult,
    AssignmentPage,
    AssignmentResponse,
    ClassAssignments,
    DaySchedule,
    LegacyClassItem,
    TeacherAssignments,
    group_by_day,
)
from src.domains.scheduling.slots import Slot, Weekday, normalize_day, normalize_time
from src.domains.scheduling.store import (
    AssignmentDraft,
    AssignmentFilter,
    store_transaction,
    validate_fields,
)
from src.infrastructure.database.connection import Database
from src.infrastructure.database.models import Assignment

logger = logging.getLogger(__name__)

# Request field name -> assignments column
_TEXT_FIELDS = {
    "teacher_id": "teacher_id",
    "class_id": "class_id",
    "section": "section",
    "grade": "grade",
    "subject": "subject",
}
_PATCH_FIELDS = frozenset({*_TEXT_FIELDS, "day", "time", "notes"})

# Attempts to lock the right teacher when an update races a teacher change
_UPDATE_LOCK_ATTEMPTS = 3


@dataclass(frozen=True)
class _BatchItem:
    class_id: str
    section: str
    grade: str
    subject: str
    slot: Slot

    def matches(self, assignment: Assignment) -> bool:
        return (
            assignment.is_active
            and assignment.class_id == self.class_id
            and assignment.section == self.section
            and assignment.subject == self.subject
            and assignment.day_of_week == int(self.slot.day)
            and assignment.time_minutes == self.slot.minutes
        )


def _clean_text(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} is required", field=name)
    return value.strip()


def _clean_notes(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("notes must be text", field="notes")
    return value.strip() or None


def _slot_conflict(slot: Slot, existing: Assignment) -> ConflictError:
    return ConflictError(
        f"Time is already assigned to this teacher: {slot}",
        day=slot.day.label,
        time=slot.time_label,
        existing_id=existing.id,
    )


def _to_responses(assignments: Iterable[Assignment]) -> list[AssignmentResponse]:
    return [AssignmentResponse.from_model(a) for a in assignments]


class AssignmentService:
    """Service for managing teacher assignments.

    Attributes:
        database: School database.
        teachers: Teacher directory adapter.
        classes: Class directory adapter.
        locks: Per-teacher write lock registry.
        settings: Scheduler timeouts and paging limits.
    """

    def __init__(
        self,
        database: Database,
        teachers: TeacherDirectory,
        classes: ClassDirectory,
        locks: TeacherLockRegistry,
        settings: SchedulerSettings,
    ) -> None:
        """Initialize assignment service.

        Args:
            database: Connected school database.
            teachers: Teacher directory adapter.
            classes: Class directory adapter.
            locks: Lock registry shared by every service instance of the process.
            settings: Scheduler settings.
        """
        self.database = database
        self.teachers = teachers
        self.classes = classes
        self.locks = locks
        self.settings = settings

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_assignment(
        self,
        caller: Caller,
        teacher_id: str,
        class_id: str,
        section: str,
        subject: str,
        grade: str,
        day: str,
        time: str,
        notes: str | None = None,
    ) -> AssignmentResponse:
        """Assign a teacher to a class slot.

        Args:
            caller: Authenticated administrator.
            teacher_id: Teacher identifier.
            class_id: Class identifier.
            section: Section label.
            subject: Subject name.
            grade: Grade label.
            day: Weekday name.
            time: Start time in 12-hour or 24-hour form.
            notes: Optional notes.

        Returns:
            The created assignment.

        Raises:
            ValidationError: If a field is missing or malformed.
            NotFoundError: If the teacher or class is unknown.
            ConflictError: If the teacher already holds the slot.
            StoreTimeoutError: If the lock or store is too slow.
        """
        slot = Slot.parse(day, time)
        draft = AssignmentDraft(
            teacher_id=_clean_text("teacher_id", teacher_id),
            class_id=_clean_text("class_id", class_id),
            section=_clean_text("section", section),
            grade=_clean_text("grade", grade),
            subject=_clean_text("subject", subject),
            day_of_week=int(slot.day),
            time_minutes=slot.minutes,
            notes=_clean_notes(notes),
            created_by=caller.id,
        )
        validate_fields(vars(draft))

        async with store_transaction(self.database, self._timeout, "create_assignment") as store:
            await self._require_teacher(store.session, draft.teacher_id)
            await self._require_class(store.session, draft.class_id)

        async with self.locks.hold(draft.teacher_id):
            async with store_transaction(self.database, self._timeout, "create_assignment") as store:
                existing = await store.list_by_teacher(draft.teacher_id)
                clash = find_conflict(slot, existing)
                if clash is not None:
                    raise _slot_conflict(slot, clash)
                assignment = await store.insert(draft)

        logger.info(
            "Created assignment: id=%s, teacher=%s, class=%s-%s, subject=%s, slot=%s, by=%s",
            assignment.id,
            assignment.teacher_id,
            assignment.class_id,
            assignment.section,
            assignment.subject,
            slot,
            caller.id,
        )
        return AssignmentResponse.from_model(assignment)

    async def update_assignment(
        self,
        caller: Caller,
        assignment_id: str,
        patch: dict[str, Any],
    ) -> AssignmentResponse:
        """Change fields of an active assignment.

        The new slot is checked against the target teacher's other active
        assignments. Moving an assignment to another teacher holds both
        teachers' locks.

        Args:
            caller: Authenticated administrator.
            assignment_id: Assignment to change.
            patch: Request fields to change (``teacher_id``, ``class_id``,
                ``section``, ``grade``, ``subject``, ``day``, ``time``,
                ``notes``).

        Returns:
            The updated assignment.

        Raises:
            ValidationError: If the patch is malformed.
            NotFoundError: If the assignment, teacher or class is unknown.
            ConflictError: If the target teacher already holds the new slot.
        """
        columns = self._patch_columns(patch)

        async with store_transaction(self.database, self._timeout, "update_assignment") as store:
            current = await store.get(assignment_id)
            if current is None or not current.is_active:
                raise NotFoundError(f"Assignment {assignment_id} not found")
            if "teacher_id" in columns:
                await self._require_teacher(store.session, columns["teacher_id"])
            if "class_id" in columns:
                await self._require_class(store.session, columns["class_id"])
            locked_teacher = current.teacher_id

        for _ in range(_UPDATE_LOCK_ATTEMPTS):
            target_teacher = columns.get("teacher_id", locked_teacher)
            async with self.locks.hold(locked_teacher, target_teacher):
                async with store_transaction(self.database, self._timeout, "update_assignment") as store:
                    current = await store.get(assignment_id)
                    if current is None or not current.is_active:
                        raise NotFoundError(f"Assignment {assignment_id} not found")
                    if current.teacher_id != locked_teacher:
                        # Moved to another teacher since it was read; relock
                        locked_teacher = current.teacher_id
                        continue

                    slot = Slot(
                        Weekday(columns.get("day_of_week", current.day_of_week)),
                        columns.get("time_minutes", current.time_minutes),
                    )
                    existing = await store.list_by_teacher(target_teacher)
                    clash = find_conflict(slot, existing, exclude_id=assignment_id)
                    if clash is not None:
                        raise _slot_conflict(slot, clash)
                    assignment = await store.update(assignment_id, columns, updated_by=caller.id)

            logger.info(
                "Updated assignment: id=%s, fields=%s, by=%s",
                assignment_id,
                sorted(columns),
                caller.id,
            )
            return AssignmentResponse.from_model(assignment)

        raise StoreTimeoutError(
            "Assignment kept changing while being updated",
            details={"assignment_id": assignment_id},
        )

    async def delete_assignment(self, caller: Caller, assignment_id: str) -> AssignmentResponse:
        """Soft-delete an assignment.

        Raises:
            NotFoundError: If the assignment does not exist or is already deleted.
        """
        current = await self._get_active(assignment_id)

        async with self.locks.hold(current.teacher_id):
            async with store_transaction(self.database, self._timeout, "delete_assignment") as store:
                assignment = await store.get(assignment_id)
                if assignment is None or not assignment.is_active:
                    raise NotFoundError(f"Assignment {assignment_id} not found")
                await store.soft_delete(assignment_id, deleted_by=caller.id)

        logger.info(
            "Deleted assignment: id=%s, teacher=%s, by=%s",
            assignment_id,
            assignment.teacher_id,
            caller.id,
        )
        return AssignmentResponse.from_model(assignment)

    async def delete_by_key(
        self,
        caller: Caller,
        teacher_id: str,
        class_id: str,
        section: str,
        subject: str,
    ) -> list[AssignmentResponse]:
        """Soft-delete every active assignment matching a composite key.

        Args:
            caller: Authenticated administrator.
            teacher_id: Teacher identifier.
            class_id: Class identifier.
            section: Section label.
            subject: Subject name.

        Returns:
            The deleted assignments.

        Raises:
            NotFoundError: If no active assignment matches.
        """
        teacher_id = _clean_text("teacher_id", teacher_id)
        class_id = _clean_text("class_id", class_id)
        section = _clean_text("section", section)
        subject = _clean_text("subject", subject)

        async with self.locks.hold(teacher_id):
            async with store_transaction(self.database, self._timeout, "delete_by_key") as store:
                matches = await store.find_by_key(teacher_id, class_id, section, subject)
                if not matches:
                    raise NotFoundError(
                        f"No assignment of {subject} for class {class_id}-{section} "
                        f"found for teacher {teacher_id}"
                    )
                for assignment in matches:
                    await store.soft_delete(assignment.id, deleted_by=caller.id)

        logger.info(
            "Deleted subject assignment: teacher=%s, class=%s-%s, subject=%s, count=%s, by=%s",
            teacher_id,
            class_id,
            section,
            subject,
            len(matches),
            caller.id,
        )
        return _to_responses(matches)

    async def assign_classes(
        self,
        caller: Caller,
        teacher_id: str,
        items: Sequence[LegacyClassItem | dict[str, Any]],
    ) -> AssignClassesResult:
        """Assign a teacher to several class slots at once.

        Every element is validated and resolved before anything is written.
        The elements are then applied in one transaction under the
        teacher's lock. An element identical to an active assignment of the
        teacher is left in place; any other collision aborts the batch.

        Args:
            caller: Authenticated administrator.
            teacher_id: Teacher identifier.
            items: Elements with ``class``, ``section``, ``subject``,
                ``grade``, ``time`` and ``day``.

        Returns:
            Created and unchanged assignments.

        Raises:
            ValidationError: If the list is empty or an element is malformed.
            NotFoundError: If the teacher or a class is unknown.
            ConflictError: If an element collides; nothing is written.
        """
        teacher_id = _clean_text("teacher_id", teacher_id)
        if not items:
            raise ValidationError("assignedClasses must contain at least one class", field="assignedClasses")

        batch = [self._batch_item(index, item) for index, item in enumerate(items)]

        async with store_transaction(self.database, self._timeout, "assign_classes") as store:
            await self._require_teacher(store.session, teacher_id)
            for class_id in dict.fromkeys(item.class_id for item in batch):
                await self._require_class(store.session, class_id)

        created: list[Assignment] = []
        unchanged: list[Assignment] = []
        async with self.locks.hold(teacher_id):
            async with store_transaction(self.database, self._timeout, "assign_classes") as store:
                existing = list(await store.list_by_teacher(teacher_id))
                for item in batch:
                    current = existing + created
                    same = next((a for a in current if item.matches(a)), None)
                    if same is not None:
                        if same not in unchanged and same not in created:
                            unchanged.append(same)
                        continue
                    clash = find_conflict(item.slot, current)
                    if clash is not None:
                        raise ConflictError(
                            f"Time is already assigned: {item.slot} "
                            f"({item.subject}, class {item.class_id}-{item.section})",
                            day=item.slot.day.label,
                            time=item.slot.time_label,
                            existing_id=clash.id,
                        )
                    created.append(
                        await store.insert(
                            AssignmentDraft(
                                teacher_id=teacher_id,
                                class_id=item.class_id,
                                section=item.section,
                                grade=item.grade,
                                subject=item.subject,
                                day_of_week=int(item.slot.day),
                                time_minutes=item.slot.minutes,
                                created_by=caller.id,
                            )
                        )
                    )

        logger.info(
            "Assigned classes: teacher=%s, created=%s, unchanged=%s, by=%s",
            teacher_id,
            len(created),
            len(unchanged),
            caller.id,
        )
        return AssignClassesResult(
            teacher_id=teacher_id,
            created=_to_responses(created),
            unchanged=_to_responses(unchanged),
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_assignment(self, assignment_id: str) -> AssignmentResponse:
        """Get an assignment by id, including deleted ones.

        Raises:
            NotFoundError: If the assignment does not exist.
        """
        async with store_transaction(self.database, self._timeout, "get_assignment") as store:
            assignment = await store.get(assignment_id)
        if assignment is None:
            raise NotFoundError(f"Assignment {assignment_id} not found")
        return AssignmentResponse.from_model(assignment)

    async def list_assignments(
        self,
        teacher_id: str | None = None,
        class_id: str | None = None,
        day: str | None = None,
        subject: str | None = None,
        search: str | None = None,
        include_inactive: bool = False,
        page: int = 1,
        page_size: int | None = None,
    ) -> AssignmentPage:
        """List assignments matching a filter, one page at a time.

        Args:
            teacher_id: Only this teacher's assignments.
            class_id: Only this class's assignments.
            day: Only this weekday.
            subject: Case-insensitive subject substring.
            search: Case-insensitive substring of the subject or the notes.
            include_inactive: Also include deleted assignments.
            page: 1-based page number.
            page_size: Items per page; defaults to the configured size.

        Returns:
            The requested page with totals.

        Raises:
            ValidationError: If the day or paging values are invalid.
        """
        if page_size is None:
            page_size = self.settings.default_page_size
        if page < 1:
            raise ValidationError("page must be at least 1", field="page")
        if not 1 <= page_size <= self.settings.max_page_size:
            raise ValidationError(
                f"pageSize must be between 1 and {self.settings.max_page_size}",
                field="pageSize",
            )

        criteria = AssignmentFilter(
            teacher_id=teacher_id or None,
            class_id=class_id or None,
            day=normalize_day(day) if day else None,
            subject=subject.strip() if subject and subject.strip() else None,
            search=search.strip() if search and search.strip() else None,
            include_inactive=include_inactive,
        )
        async with store_transaction(self.database, self._timeout, "list_assignments") as store:
            rows, total = await store.query(criteria, offset=(page - 1) * page_size, limit=page_size)

        return AssignmentPage(
            items=_to_responses(rows),
            total=total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total / page_size) if total else 0,
        )

    async def list_teacher_assignments(
        self,
        teacher_id: str,
        day: str | None = None,
    ) -> TeacherAssignments:
        """All active assignments of a teacher, grouped by day.

        Raises:
            NotFoundError: If the teacher is unknown.
            ValidationError: If the day is invalid.
        """
        weekday = normalize_day(day) if day else None
        async with store_transaction(self.database, self._timeout, "list_teacher_assignments") as store:
            teacher = await self._require_teacher(store.session, teacher_id)
            if weekday is None:
                rows = await store.list_by_teacher(teacher_id)
            else:
                rows = await store.list_by_day(teacher_id, weekday)

        assignments = _to_responses(rows)
        return TeacherAssignments(
            teacher_id=teacher.id,
            teacher_name=teacher.name,
            assignments=assignments,
            grouped_by_day=group_by_day(assignments),
        )

    async def list_class_assignments(
        self,
        class_id: str,
        day: str | None = None,
    ) -> ClassAssignments:
        """All active assignments of a class, grouped by day.

        Raises:
            NotFoundError: If the class is unknown.
            ValidationError: If the day is invalid.
        """
        weekday = normalize_day(day) if day else None
        async with store_transaction(self.database, self._timeout, "list_class_assignments") as store:
            class_ = await self._require_class(store.session, class_id)
            rows = await store.list_by_class(class_id)

        if weekday is not None:
            rows = [row for row in rows if row.day_of_week == int(weekday)]
        assignments = _to_responses(rows)
        return ClassAssignments(
            class_id=class_.id,
            class_name=class_.name,
            grade=class_.grade,
            section=class_.section,
            assignments=assignments,
            grouped_by_day=group_by_day(assignments),
        )

    async def get_teacher_schedule(self, teacher_id: str, day: str) -> DaySchedule:
        """A teacher's active assignments on one weekday, ordered by time.

        Raises:
            NotFoundError: If the teacher is unknown.
            ValidationError: If the day is invalid.
        """
        weekday = normalize_day(day)
        async with store_transaction(self.database, self._timeout, "get_teacher_schedule") as store:
            teacher = await self._require_teacher(store.session, teacher_id)
            rows = await store.list_by_day(teacher_id, weekday)

        return DaySchedule(
            teacher_id=teacher.id,
            teacher_name=teacher.name,
            day=weekday.label,
            assignments=_to_responses(rows),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def _timeout(self) -> float:
        return self.settings.store_timeout

    async def _get_active(self, assignment_id: str) -> Assignment:
        async with store_transaction(self.database, self._timeout, "get_assignment") as store:
            assignment = await store.get(assignment_id)
        if assignment is None or not assignment.is_active:
            raise NotFoundError(f"Assignment {assignment_id} not found")
        return assignment

    async def _require_teacher(self, session: AsyncSession, teacher_id: str) -> TeacherRecord:
        """Get teacher from the directory.

        Raises:
            NotFoundError: If not found.
        """
        teacher = await self.teachers.get_teacher(session, teacher_id)
        if teacher is None:
            raise NotFoundError(f"Teacher {teacher_id} not found")
        return teacher

    async def _require_class(self, session: AsyncSession, class_id: str) -> ClassRecord:
        """Get class from the directory.

        Raises:
            NotFoundError: If not found.
        """
        class_ = await self.classes.get_class(session, class_id)
        if class_ is None:
            raise NotFoundError(f"Class {class_id} not found")
        return class_

    def _patch_columns(self, patch: dict[str, Any]) -> dict[str, Any]:
        """Translate request fields into validated column values."""
        unknown = set(patch) - _PATCH_FIELDS
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        columns: dict[str, Any] = {}
        for name, column in _TEXT_FIELDS.items():
            if name in patch:
                columns[column] = _clean_text(name, patch[name])
        if "day" in patch:
            columns["day_of_week"] = int(normalize_day(patch["day"]))
        if "time" in patch:
            columns["time_minutes"] = normalize_time(patch["time"])
        if "notes" in patch:
            columns["notes"] = _clean_notes(patch["notes"])

        if not columns:
            raise ValidationError("No fields to update")
        validate_fields(columns)
        return columns

    @staticmethod
    def _batch_item(index: int, item: LegacyClassItem | dict[str, Any]) -> _BatchItem:
        if isinstance(item, dict):
            try:
                item = LegacyClassItem.model_validate(item)
            except ValueError as e:
                raise ValidationError(f"assignedClasses[{index}] is malformed: {e}") from None
        try:
            parsed = _BatchItem(
                class_id=_clean_text("class", item.class_id),
                section=_clean_text("section", item.section),
                grade=_clean_text("grade", item.grade),
                subject=_clean_text("subject", item.subject),
                slot=Slot.parse(item.day, item.time),
            )
            validate_fields(
                {
                    "class_id": parsed.class_id,
                    "section": parsed.section,
                    "grade": parsed.grade,
                    "subject": parsed.subject,
                }
            )
        except ValidationError as e:
            raise ValidationError(
                f"assignedClasses[{index}]: {e.message}",
                field=e.field,
                details={"index": index},
            ) from None
        return parsed
