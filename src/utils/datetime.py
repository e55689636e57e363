# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for the assignment scheduler.

All timestamps are stored in UTC and every Python datetime handled by the
scheduler is timezone-aware. Drivers that hand back naive values (SQLite)
are normalized through ensure_utc().

Usage:
------
    from src.utils.datetime import utc_now

    created_at = mapped_column(UTCDateTime(), default=utc_now)
"""

from datetime import datetime, timedelta, timezone

# Smallest step used to keep updated_at strictly increasing.
_TICK = timedelta(microseconds=1)


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.

    Example:
        >>> now = utc_now()
        >>> now.tzinfo
        datetime.timezone.utc
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        - If dt is None, returns None
        - If dt is naive, assumes UTC and adds tzinfo
        - If dt is aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def utc_now_after(previous: datetime | None) -> datetime:
    """Get the current UTC time, guaranteed later than ``previous``.

    Two writes inside the same clock tick would otherwise receive the same
    timestamp.

    Args:
        previous: Earlier timestamp, or None.

    Returns:
        Timezone-aware UTC datetime strictly after ``previous``.
    """
    now = utc_now()
    previous = ensure_utc(previous)
    if previous is not None and now <= previous:
        return previous + _TICK
    return now
