# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exceptions raised by the assignment scheduler.

This module defines the exception hierarchy for scheduler operations:
- SchedulerError: Base exception carrying a message and a stable kind
- ValidationError: Missing or malformed input, unknown weekday
- NotFoundError: Unknown teacher, class or assignment
- ConflictError: The teacher already holds the requested slot
- InternalError: Storage or infrastructure failure
- StoreTimeoutError: A lock or store transaction took too long; retryable

The ``kind`` attribute is what API clients branch on; messages are meant
for people.
"""


class SchedulerError(Exception):
    """Base exception for all scheduler errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
        kind: Stable machine-readable error kind.
        retryable: Whether repeating the same request may succeed.
    """

    kind: str = "scheduler_error"
    retryable: bool = False

    def __init__(self, message: str, details: dict | None = None):
        """Initialize scheduler error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ValidationError(SchedulerError):
    """Input is missing or malformed.

    Attributes:
        field: Name of the offending field, when known.
    """

    kind = "validation_error"

    def __init__(self, message: str, field: str | None = None, details: dict | None = None):
        self.field = field
        details = dict(details or {})
        if field:
            details.setdefault("field", field)
        super().__init__(message, details)


class NotFoundError(SchedulerError):
    """A teacher, class or assignment does not exist (or is deleted)."""

    kind = "not_found"


class ConflictError(SchedulerError):
    """The teacher is already booked for the requested slot.

    Attributes:
        day: Weekday name of the colliding slot.
        time: Canonical time label of the colliding slot.
        existing_id: Identifier of the assignment holding the slot, if known.
    """

    kind = "conflict"

    def __init__(
        self,
        message: str,
        day: str,
        time: str,
        existing_id: str | None = None,
        details: dict | None = None,
    ):
        self.day = day
        self.time = time
        self.existing_id = existing_id
        details = dict(details or {})
        details.update({"day": day, "time": time})
        if existing_id:
            details["existing_id"] = existing_id
        super().__init__(message, details)


class InternalError(SchedulerError):
    """Storage or infrastructure failure.

    The message is safe to show to clients; the underlying cause is kept on
    ``__cause__`` for logs only.
    """

    kind = "internal_error"


class StoreTimeoutError(InternalError):
    """A teacher lock or store transaction exceeded its time budget."""

    kind = "timeout"
    retryable = True
