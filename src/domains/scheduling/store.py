# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment store backed by the school database.

The store works inside a session opened by the caller, so several store
calls can share one transaction. Rows are never physically deleted.

Database failures never leave this module as SQLAlchemy exceptions:
violations of the active slot index become ConflictError and everything
else becomes InternalError with a generic message.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Iterator, Sequence

from sqlalchemy import Select, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.scheduling.exceptions import (
    ConflictError,
    InternalError,
    NotFoundError,
    SchedulerError,
    StoreTimeoutError,
    ValidationError,
)
from src.domains.scheduling.slots import MINUTES_PER_DAY, Weekday, format_time
from src.infrastructure.database.connection import Database, DatabaseError
from src.infrastructure.database.models import ACTIVE_SLOT_INDEX, Assignment
from src.utils.datetime import utc_now, utc_now_after

logger = logging.getLogger(__name__)

# Column length limits, mirrored from the assignments table
FIELD_LIMITS = {
    "teacher_id": 64,
    "class_id": 64,
    "section": 20,
    "grade": 20,
    "subject": 100,
}
NOTES_LIMIT = 500

UPDATABLE_FIELDS = frozenset(
    {
        "teacher_id",
        "class_id",
        "section",
        "grade",
        "subject",
        "day_of_week",
        "time_minutes",
        "notes",
    }
)

# SQLite names the columns instead of the index in its error text
_SQLITE_SLOT_COLUMNS = "assignments.teacher_id, assignments.day_of_week, assignments.time_minutes"


@dataclass
class AssignmentDraft:
    """Field values for a new assignment row."""

    teacher_id: str
    class_id: str
    section: str
    grade: str
    subject: str
    day_of_week: int
    time_minutes: int
    notes: str | None = None
    created_by: str | None = None


@dataclass
class AssignmentFilter:
    """Criteria for AssignmentStore.query().

    Attributes:
        teacher_id: Exact teacher match.
        class_id: Exact class match.
        day: Exact weekday match.
        subject: Case-insensitive substring of the subject.
        search: Case-insensitive substring of either the subject or the notes.
        include_inactive: Also return soft-deleted rows.
    """

    teacher_id: str | None = None
    class_id: str | None = None
    day: Weekday | None = None
    subject: str | None = None
    search: str | None = None
    include_inactive: bool = False


def validate_fields(values: dict[str, Any]) -> None:
    """Check required assignment fields before they reach the database.

    Args:
        values: Column values keyed by column name. Only the keys present
            are checked, so patches can be validated too.

    Raises:
        ValidationError: If a field is missing, blank or out of range.
    """
    for name, limit in FIELD_LIMITS.items():
        if name not in values:
            continue
        value = values[name]
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{name} is required", field=name)
        if len(value) > limit:
            raise ValidationError(f"{name} must be at most {limit} characters", field=name)

    if "day_of_week" in values:
        day = values["day_of_week"]
        if not isinstance(day, int) or not 0 <= day <= 6:
            raise ValidationError("day_of_week must be between 0 and 6", field="day")

    if "time_minutes" in values:
        minutes = values["time_minutes"]
        if not isinstance(minutes, int) or not 0 <= minutes < MINUTES_PER_DAY:
            raise ValidationError("time_minutes must be between 0 and 1439", field="time")

    notes = values.get("notes")
    if notes is not None and len(notes) > NOTES_LIMIT:
        raise ValidationError(f"notes must be at most {NOTES_LIMIT} characters", field="notes")


def is_slot_violation(error: IntegrityError) -> bool:
    """Whether an IntegrityError comes from the active slot index."""
    message = str(error.orig) if error.orig is not None else str(error)
    return ACTIVE_SLOT_INDEX in message or _SQLITE_SLOT_COLUMNS in message


def _slot_conflict(day_of_week: int, time_minutes: int) -> ConflictError:
    day = Weekday(day_of_week).label
    time = format_time(time_minutes)
    return ConflictError(
        f"Time is already assigned to this teacher: {day} {time}",
        day=day,
        time=time,
    )


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SchedulerError:
        raise
    except SQLAlchemyError as e:
        logger.error("Assignment store failure during %s: %s", action, e, exc_info=True)
        raise InternalError("Assignment storage is unavailable") from e


class AssignmentStore:
    """Keyed collection of assignment rows.

    Attributes:
        session: Session whose transaction the store writes into.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the store.

        Args:
            session: Open async session; the caller commits.
        """
        self.session = session

    async def insert(self, draft: AssignmentDraft) -> Assignment:
        """Insert a new active assignment.

        Args:
            draft: Field values of the new row.

        Returns:
            The created assignment with its generated id.

        Raises:
            ValidationError: If required fields are missing or malformed.
            ConflictError: If the slot index rejects the row.
            InternalError: On any other storage failure.
        """
        validate_fields(vars(draft))
        now = utc_now()
        assignment = Assignment(
            teacher_id=draft.teacher_id,
            class_id=draft.class_id,
            section=draft.section,
            grade=draft.grade,
            subject=draft.subject,
            day_of_week=draft.day_of_week,
            time_minutes=draft.time_minutes,
            notes=draft.notes,
            is_active=True,
            created_by=draft.created_by,
            updated_by=draft.created_by,
            created_at=now,
            updated_at=now,
        )
        with _storage_errors("insert"):
            self.session.add(assignment)
            await self._flush(assignment.day_of_week, assignment.time_minutes)
        return assignment

    async def get(self, assignment_id: str) -> Assignment | None:
        """Get an assignment by id, active or not."""
        with _storage_errors("get"):
            return await self.session.get(Assignment, assignment_id)

    async def update(
        self,
        assignment_id: str,
        patch: dict[str, Any],
        updated_by: str | None = None,
    ) -> Assignment:
        """Apply a patch to an active assignment.

        Args:
            assignment_id: Assignment to change.
            patch: Column values to set; keys outside the updatable set
                are rejected.
            updated_by: Identity of the caller.

        Returns:
            The updated assignment.

        Raises:
            NotFoundError: If the assignment does not exist or is deleted.
            ValidationError: If the patch is malformed.
            ConflictError: If the slot index rejects the new slot.
        """
        unknown = set(patch) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        validate_fields(patch)

        assignment = await self.get(assignment_id)
        if assignment is None or not assignment.is_active:
            raise NotFoundError(f"Assignment {assignment_id} not found")

        for name, value in patch.items():
            setattr(assignment, name, value)
        assignment.updated_by = updated_by
        assignment.updated_at = utc_now_after(assignment.updated_at)

        with _storage_errors("update"):
            await self._flush(assignment.day_of_week, assignment.time_minutes)
        return assignment

    async def soft_delete(self, assignment_id: str, deleted_by: str | None = None) -> bool:
        """Mark an assignment inactive.

        Deleting an already inactive row is a no-op.

        Returns:
            True if the row changed, False if it was already inactive.

        Raises:
            NotFoundError: If the assignment does not exist.
        """
        assignment = await self.get(assignment_id)
        if assignment is None:
            raise NotFoundError(f"Assignment {assignment_id} not found")
        if not assignment.is_active:
            return False

        assignment.is_active = False
        assignment.updated_by = deleted_by
        assignment.updated_at = utc_now_after(assignment.updated_at)
        with _storage_errors("soft_delete"):
            await self.session.flush()
        return True

    async def list_by_teacher(
        self,
        teacher_id: str,
        include_inactive: bool = False,
    ) -> Sequence[Assignment]:
        """All assignments of a teacher ordered by day then time."""
        query = select(Assignment).where(Assignment.teacher_id == teacher_id)
        return await self._fetch(query, include_inactive, "list_by_teacher")

    async def list_by_class(
        self,
        class_id: str,
        include_inactive: bool = False,
    ) -> Sequence[Assignment]:
        """All assignments of a class ordered by day then time."""
        query = select(Assignment).where(Assignment.class_id == class_id)
        return await self._fetch(query, include_inactive, "list_by_class")

    async def list_by_day(self, teacher_id: str, day: Weekday) -> Sequence[Assignment]:
        """Active assignments of a teacher on one weekday ordered by time."""
        query = select(Assignment).where(
            Assignment.teacher_id == teacher_id,
            Assignment.day_of_week == int(day),
        )
        return await self._fetch(query, False, "list_by_day")

    async def find_by_key(
        self,
        teacher_id: str,
        class_id: str,
        section: str,
        subject: str,
    ) -> Sequence[Assignment]:
        """Active assignments matching the legacy composite key."""
        query = select(Assignment).where(
            Assignment.teacher_id == teacher_id,
            Assignment.class_id == class_id,
            Assignment.section == section,
            Assignment.subject == subject,
        )
        return await self._fetch(query, False, "find_by_key")

    async def query(
        self,
        criteria: AssignmentFilter,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[Sequence[Assignment], int]:
        """Page through assignments matching a filter.

        Args:
            criteria: Filter to apply.
            offset: Rows to skip.
            limit: Maximum rows to return.

        Returns:
            Tuple of (rows on this page, total matching rows).
        """
        conditions = []
        if not criteria.include_inactive:
            conditions.append(Assignment.is_active.is_(True))
        if criteria.teacher_id:
            conditions.append(Assignment.teacher_id == criteria.teacher_id)
        if criteria.class_id:
            conditions.append(Assignment.class_id == criteria.class_id)
        if criteria.day is not None:
            conditions.append(Assignment.day_of_week == int(criteria.day))
        if criteria.subject:
            conditions.append(
                func.lower(Assignment.subject).contains(criteria.subject.lower(), autoescape=True)
            )
        if criteria.search:
            needle = criteria.search.lower()
            conditions.append(
                or_(
                    func.lower(Assignment.subject).contains(needle, autoescape=True),
                    func.lower(func.coalesce(Assignment.notes, "")).contains(needle, autoescape=True),
                )
            )

        count_query = select(func.count()).select_from(Assignment).where(*conditions)
        page_query = (
            select(Assignment)
            .where(*conditions)
            .order_by(
                Assignment.day_of_week,
                Assignment.time_minutes,
                Assignment.teacher_id,
                Assignment.created_at,
            )
            .offset(offset)
            .limit(limit)
        )

        with _storage_errors("query"):
            total = (await self.session.execute(count_query)).scalar_one()
            rows = (await self.session.execute(page_query)).scalars().all()
        return rows, total

    # Aggregates over active rows

    async def count_active(self) -> int:
        query = select(func.count()).select_from(Assignment).where(Assignment.is_active.is_(True))
        with _storage_errors("count_active"):
            return (await self.session.execute(query)).scalar_one()

    async def count_distinct_teachers(self) -> int:
        query = select(func.count(func.distinct(Assignment.teacher_id))).where(
            Assignment.is_active.is_(True)
        )
        with _storage_errors("count_distinct_teachers"):
            return (await self.session.execute(query)).scalar_one()

    async def count_distinct_classes(self) -> int:
        query = select(func.count(func.distinct(Assignment.class_id))).where(
            Assignment.is_active.is_(True)
        )
        with _storage_errors("count_distinct_classes"):
            return (await self.session.execute(query)).scalar_one()

    async def subject_histogram(self) -> list[tuple[str, int]]:
        """(subject, count) pairs, busiest subject first."""
        count = func.count().label("count")
        query = (
            select(Assignment.subject, count)
            .where(Assignment.is_active.is_(True))
            .group_by(Assignment.subject)
            .order_by(count.desc(), Assignment.subject)
        )
        with _storage_errors("subject_histogram"):
            result = await self.session.execute(query)
            return [(subject, total) for subject, total in result]

    async def day_histogram(self) -> dict[Weekday, int]:
        """Count per weekday; days without assignments are absent."""
        query = (
            select(Assignment.day_of_week, func.count().label("count"))
            .where(Assignment.is_active.is_(True))
            .group_by(Assignment.day_of_week)
        )
        with _storage_errors("day_histogram"):
            result = await self.session.execute(query)
            return {Weekday(day): total for day, total in result}

    async def teacher_histogram(self, limit: int | None = None) -> list[tuple[str, int]]:
        """(teacher_id, count) pairs, busiest teacher first."""
        count = func.count().label("count")
        query = (
            select(Assignment.teacher_id, count)
            .where(Assignment.is_active.is_(True))
            .group_by(Assignment.teacher_id)
            .order_by(count.desc(), Assignment.teacher_id)
        )
        if limit is not None:
            query = query.limit(limit)
        with _storage_errors("teacher_histogram"):
            result = await self.session.execute(query)
            return [(teacher_id, total) for teacher_id, total in result]

    async def _fetch(
        self,
        query: Select,
        include_inactive: bool,
        action: str,
    ) -> Sequence[Assignment]:
        if not include_inactive:
            query = query.where(Assignment.is_active.is_(True))
        query = query.order_by(Assignment.day_of_week, Assignment.time_minutes, Assignment.created_at)
        with _storage_errors(action):
            result = await self.session.execute(query)
            return result.scalars().all()

    async def _flush(self, day_of_week: int, time_minutes: int) -> None:
        try:
            await self.session.flush()
        except IntegrityError as e:
            if is_slot_violation(e):
                raise _slot_conflict(day_of_week, time_minutes) from e
            raise


@asynccontextmanager
async def store_transaction(
    database: Database,
    timeout: float,
    action: str,
) -> AsyncIterator[AssignmentStore]:
    """Open a store over one database transaction.

    The transaction commits when the block exits normally and rolls back
    on any exception, including cancellation and timeout.

    Args:
        database: Connected school database.
        timeout: Seconds the whole block may take.
        action: Operation name used in logs.

    Yields:
        AssignmentStore bound to the transaction's session.

    Raises:
        StoreTimeoutError: If the block exceeds ``timeout``.
        InternalError: If the database fails outside a store call.
    """
    try:
        async with asyncio.timeout(timeout):
            async with database.session() as session:
                yield AssignmentStore(session)
    except TimeoutError:
        logger.warning("Assignment store timed out: action=%s, timeout=%s", action, timeout)
        raise StoreTimeoutError(
            "The assignment store did not respond in time",
            details={"action": action},
        ) from None
    except DatabaseError as e:
        logger.error("Assignment transaction failed: action=%s, error=%s", action, e, exc_info=True)
        raise InternalError("Assignment storage is unavailable") from e
