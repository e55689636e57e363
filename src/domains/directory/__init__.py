# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Read-only teacher and class directory lookups.

The school application owns the teacher and class records; the scheduler
only resolves identifiers against them.
"""

from src.domains.directory.service import (
    ClassDirectory,
    ClassRecord,
    SqlClassDirectory,
    SqlTeacherDirectory,
    TeacherDirectory,
    TeacherRecord,
)

__all__ = [
    "TeacherRecord",
    "ClassRecord",
    "TeacherDirectory",
    "ClassDirectory",
    "SqlTeacherDirectory",
    "SqlClassDirectory",
]
