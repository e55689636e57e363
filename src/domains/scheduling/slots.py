# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Weekday and time-of-day normalization.

Assignments have no end time; a slot is identified by its weekday and its
start time in minutes since midnight. Times arrive in either clock form:

    >>> normalize_time("9:00 AM") == normalize_time("09:00") == normalize_time("9:00")
    True
    >>> normalize_time("12:30 PM")
    750
    >>> format_time(750)
    '12:30 PM'
"""

import re
from dataclasses import dataclass
from enum import IntEnum

from src.domains.scheduling.exceptions import ValidationError

_TIME_12H = re.compile(r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})\s*(?P<meridiem>[ap])\.?\s*m\.?$", re.IGNORECASE)
_TIME_24H = re.compile(r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})$")

MINUTES_PER_DAY = 24 * 60


class Weekday(IntEnum):
    """Days of the week, Monday first."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @property
    def label(self) -> str:
        """Capitalised day name, e.g. ``"Monday"``."""
        return self.name.capitalize()


def normalize_day(value: "str | Weekday") -> Weekday:
    """Parse a weekday name.

    Matching ignores case and surrounding whitespace. Abbreviations and
    other spellings are rejected rather than guessed.

    Args:
        value: Day name such as ``"monday"`` or ``"Monday"``.

    Returns:
        The matching Weekday.

    Raises:
        ValidationError: If the value is not a weekday name.
    """
    if isinstance(value, Weekday):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Day is required", field="day")
    try:
        return Weekday[value.strip().upper()]
    except KeyError:
        raise ValidationError(
            f"Invalid day '{value}'. Must be one of: "
            + ", ".join(day.label for day in Weekday),
            field="day",
        ) from None


def normalize_time(value: str) -> int:
    """Parse a time of day into minutes since midnight.

    Accepts 12-hour forms (``"9:00 AM"``, ``"9:00am"``, ``"12:15 p.m."``)
    and 24-hour forms (``"09:00"``, ``"9:00"``, ``"21:30"``). A time
    without a meridiem is read on the 24-hour clock.

    Args:
        value: Time string.

    Returns:
        Minutes since midnight, 0..1439.

    Raises:
        ValidationError: If the value is not a valid time.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Time is required", field="time")

    text = value.strip()
    match = _TIME_12H.match(text)
    if match:
        hour = int(match["hour"])
        minute = int(match["minute"])
        if not 1 <= hour <= 12 or minute > 59:
            raise ValidationError(f"Invalid time '{value}'", field="time")
        hour %= 12
        if match["meridiem"].lower() == "p":
            hour += 12
        return hour * 60 + minute

    match = _TIME_24H.match(text)
    if match:
        hour = int(match["hour"])
        minute = int(match["minute"])
        if hour > 23 or minute > 59:
            raise ValidationError(f"Invalid time '{value}'", field="time")
        return hour * 60 + minute

    raise ValidationError(
        f"Invalid time '{value}'. Use HH:MM (24-hour) or h:MM AM/PM",
        field="time",
    )


def format_time(minutes: int) -> str:
    """Render minutes since midnight on the 12-hour clock.

    Args:
        minutes: 0..1439.

    Returns:
        Label such as ``"9:05 AM"``.
    """
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"minutes out of range: {minutes}")
    hour, minute = divmod(minutes, 60)
    meridiem = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12}:{minute:02d} {meridiem}"


@dataclass(frozen=True, order=True)
class Slot:
    """A normalized (weekday, start minute) pair."""

    day: Weekday
    minutes: int

    @classmethod
    def parse(cls, day: "str | Weekday", time: str) -> "Slot":
        """Build a slot from raw day and time input."""
        return cls(normalize_day(day), normalize_time(time))

    @property
    def time_label(self) -> str:
        return format_time(self.minutes)

    def __str__(self) -> str:
        return f"{self.day.label} {self.time_label}"
