# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher and class directory adapters.

The adapters answer one question each: does this identifier exist, and
what does the directory know about it. They never write.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import SchoolClass, Teacher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TeacherRecord:
    """Teacher as seen by the scheduler."""

    id: str
    name: str
    email: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class ClassRecord:
    """Class as seen by the scheduler."""

    id: str
    name: str
    grade: str
    section: str


class TeacherDirectory(Protocol):
    async def get_teacher(self, session: AsyncSession, teacher_id: str) -> TeacherRecord | None:
        ...


class ClassDirectory(Protocol):
    async def get_class(self, session: AsyncSession, class_id: str) -> ClassRecord | None:
        ...


class SqlTeacherDirectory:
    """Teacher lookups against the school ``teachers`` table.

    Inactive teachers are treated as absent.
    """

    async def get_teacher(self, session: AsyncSession, teacher_id: str) -> TeacherRecord | None:
        """Resolve a teacher identifier.

        Args:
            session: Open database session.
            teacher_id: Teacher identifier.

        Returns:
            The teacher record, or None if unknown or inactive.
        """
        result = await session.execute(
            select(Teacher).where(Teacher.id == teacher_id, Teacher.is_active.is_(True))
        )
        teacher = result.scalar_one_or_none()
        if teacher is None:
            logger.debug("Teacher not found in directory: %s", teacher_id)
            return None
        return TeacherRecord(
            id=teacher.id,
            name=teacher.name,
            email=teacher.email,
            is_active=teacher.is_active,
        )


class SqlClassDirectory:
    """Class lookups against the school ``classes`` table."""

    async def get_class(self, session: AsyncSession, class_id: str) -> ClassRecord | None:
        result = await session.execute(select(SchoolClass).where(SchoolClass.id == class_id))
        class_ = result.scalar_one_or_none()
        if class_ is None:
            logger.debug("Class not found in directory: %s", class_id)
            return None
        return ClassRecord(
            id=class_.id,
            name=class_.name,
            grade=class_.grade,
            section=class_.section,
        )
