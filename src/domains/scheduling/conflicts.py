# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Slot conflict detection.

A teacher cannot hold two active assignments on the same weekday at the
same start time. Times are compared after normalization, so "9:00 AM" and
"09:00" collide. Only exact slot equality counts as a conflict; overlapping
intervals with different start times are not detected because assignments
carry no duration.
"""

from typing import Iterable, Optional, Protocol, TypeVar

from src.domains.scheduling.slots import Slot


class SlotHolder(Protocol):
    """Anything that occupies a teacher slot (ORM rows, in-flight batch items)."""

    id: str
    day_of_week: int
    time_minutes: int
    is_active: bool


T = TypeVar("T", bound=SlotHolder)


def occupies(record: SlotHolder, slot: Slot) -> bool:
    """Whether an active record sits exactly on ``slot``."""
    return (
        bool(record.is_active)
        and record.day_of_week == int(slot.day)
        and record.time_minutes == slot.minutes
    )


def find_conflict(
    candidate: Slot,
    existing: Iterable[T],
    exclude_id: Optional[str] = None,
) -> Optional[T]:
    """Find the first existing record occupying the candidate slot.

    Args:
        candidate: Normalized slot being booked.
        existing: The teacher's assignments. Inactive records are ignored.
        exclude_id: Record to skip, used when an assignment is re-validated
            against its own new slot during an update.

    Returns:
        The colliding record, or None if the slot is free.
    """
    for record in existing:
        if exclude_id is not None and record.id == exclude_id:
            continue
        if occupies(record, candidate):
            return record
    return None


def has_conflict(
    candidate: Slot,
    existing: Iterable[SlotHolder],
    exclude_id: Optional[str] = None,
) -> bool:
    """Boolean form of find_conflict()."""
    return find_conflict(candidate, existing, exclude_id) is not None
