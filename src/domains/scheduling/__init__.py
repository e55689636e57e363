# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher assignment scheduling domain.

This package binds teachers to (class, section, subject, weekday, time)
slots and guarantees that no teacher is double-booked:
- slots: Weekday and time normalization
- conflicts: Exact slot collision detection
- locks: Per-teacher write serialization
- store: Assignment persistence
- service: The operations callers use
- statistics: Aggregate counts
"""

from src.domains.scheduling.exceptions import (
    ConflictError,
    InternalError,
    NotFoundError,
    SchedulerError,
    StoreTimeoutError,
    ValidationError,
)
from src.domains.scheduling.locks import TeacherLockRegistry
from src.domains.scheduling.service import AssignmentService
from src.domains.scheduling.slots import Slot, Weekday, format_time, normalize_day, normalize_time
from src.domains.scheduling.statistics import StatisticsAggregator

__all__ = [
    "AssignmentService",
    "StatisticsAggregator",
    "TeacherLockRegistry",
    "Slot",
    "Weekday",
    "normalize_day",
    "normalize_time",
    "format_time",
    "SchedulerError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "InternalError",
    "StoreTimeoutError",
]
