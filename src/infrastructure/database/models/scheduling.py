# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher assignment model.

One row binds a teacher to a class, section and subject on a weekday slot.
Rows are never physically removed: deletion flips is_active to False.

The partial unique index on (teacher_id, day_of_week, time_minutes) over
active rows backs the per-teacher write lock held by the service, so two
processes cannot both book the same slot.
"""

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, TimestampMixin, new_uuid

ACTIVE_SLOT_INDEX = "uq_assignments_teacher_active_slot"


class Assignment(TimestampMixin, Base):
    """A teacher's recurring weekly teaching slot.

    Attributes:
        id: Opaque identifier.
        teacher_id: Teacher identifier from the teacher directory.
        class_id: Class identifier from the class directory.
        section: Section label (e.g. "A").
        grade: Grade label (e.g. "10").
        subject: Free-text subject label.
        day_of_week: 0 (Monday) .. 6 (Sunday).
        time_minutes: Slot start as minutes since midnight.
        notes: Optional administrative notes.
        is_active: False once soft-deleted.
        created_by: Identity of the caller that created the row.
        updated_by: Identity of the caller that last changed the row.
    """

    __tablename__ = "assignments"

    id: Mapped[str] = mapped_column(sa.String(36), primary_key=True, default=new_uuid)
    teacher_id: Mapped[str] = mapped_column(sa.String(64), nullable=False)
    class_id: Mapped[str] = mapped_column(sa.String(64), nullable=False)
    section: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    grade: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    subject: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    day_of_week: Mapped[int] = mapped_column(sa.SmallInteger, nullable=False)
    time_minutes: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(sa.String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)
    created_by: Mapped[str | None] = mapped_column(sa.String(64), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(sa.String(64), nullable=True)

    __table_args__ = (
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="day_of_week_range"),
        sa.CheckConstraint("time_minutes BETWEEN 0 AND 1439", name="time_minutes_range"),
        sa.Index(
            ACTIVE_SLOT_INDEX,
            "teacher_id",
            "day_of_week",
            "time_minutes",
            unique=True,
            postgresql_where=sa.text("is_active"),
            sqlite_where=sa.text("is_active"),
        ),
        sa.Index("ix_assignments_teacher_id", "teacher_id"),
        sa.Index("ix_assignments_class_day", "class_id", "day_of_week", "time_minutes"),
    )

    def __repr__(self) -> str:
        return (
            f"<Assignment {self.id} teacher={self.teacher_id} "
            f"day={self.day_of_week} minutes={self.time_minutes} active={self.is_active}>"
        )
