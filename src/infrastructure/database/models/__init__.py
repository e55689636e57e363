# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for the school database."""

from src.infrastructure.database.models.base import Base, TimestampMixin, UTCDateTime
from src.infrastructure.database.models.directory import SchoolClass, Teacher
from src.infrastructure.database.models.scheduling import ACTIVE_SLOT_INDEX, Assignment

__all__ = [
    "Base",
    "TimestampMixin",
    "UTCDateTime",
    "Assignment",
    "ACTIVE_SLOT_INDEX",
    "Teacher",
    "SchoolClass",
]
