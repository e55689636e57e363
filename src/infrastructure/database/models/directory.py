# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher and class directory tables.

These tables belong to the school administration application; the
scheduler maps them only to read teacher and class metadata.
"""

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, TimestampMixin, new_uuid


class Teacher(TimestampMixin, Base):
    """Teacher record in the school directory."""

    __tablename__ = "teachers"

    id: Mapped[str] = mapped_column(sa.String(64), primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(sa.String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)


class SchoolClass(TimestampMixin, Base):
    """Class (grade + section) record in the school directory."""

    __tablename__ = "classes"

    id: Mapped[str] = mapped_column(sa.String(64), primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    grade: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    section: Mapped[str] = mapped_column(sa.String(20), nullable=False)
