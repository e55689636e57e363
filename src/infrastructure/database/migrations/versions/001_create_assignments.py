# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Create assignments table.

Revision ID: 001_assignments
Revises: None
Create Date: 2025-01-06
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_assignments"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the assignments table and its slot indexes."""
    op.create_table(
        "assignments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("teacher_id", sa.String(64), nullable=False),
        sa.Column("class_id", sa.String(64), nullable=False),
        sa.Column("section", sa.String(20), nullable=False),
        sa.Column("grade", sa.String(20), nullable=False),
        sa.Column("subject", sa.String(100), nullable=False),
        sa.Column("day_of_week", sa.SmallInteger, nullable=False),
        sa.Column("time_minutes", sa.Integer, nullable=False),
        sa.Column("notes", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.Column("updated_by", sa.String(64), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "day_of_week BETWEEN 0 AND 6",
            name="ck_assignments_day_of_week_range",
        ),
        sa.CheckConstraint(
            "time_minutes BETWEEN 0 AND 1439",
            name="ck_assignments_time_minutes_range",
        ),
    )

    # One active booking per teacher slot
    op.create_index(
        "uq_assignments_teacher_active_slot",
        "assignments",
        ["teacher_id", "day_of_week", "time_minutes"],
        unique=True,
        postgresql_where=sa.text("is_active"),
        sqlite_where=sa.text("is_active"),
    )
    op.create_index("ix_assignments_teacher_id", "assignments", ["teacher_id"])
    op.create_index(
        "ix_assignments_class_day",
        "assignments",
        ["class_id", "day_of_week", "time_minutes"],
    )


def downgrade() -> None:
    """Drop the assignments table."""
    op.drop_index("ix_assignments_class_day", table_name="assignments")
    op.drop_index("ix_assignments_teacher_id", table_name="assignments")
    op.drop_index("uq_assignments_teacher_active_slot", table_name="assignments")
    op.drop_table("assignments")
