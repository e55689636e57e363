# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authenticated caller identity.

The authentication middleware turns a bearer token into a Caller. The API
layer checks the role once; the scheduler core only records the caller's
identifier on the rows it writes.
"""

from dataclasses import dataclass
from enum import Enum


class CallerRole(str, Enum):
    """Roles known to the school application."""

    ADMIN = "admin"
    TEACHER = "teacher"
    PARENT = "parent"
    STUDENT = "student"


@dataclass(frozen=True)
class Caller:
    """Identity of the user performing an operation.

    Attributes:
        id: User identifier from the token subject.
        role: The user's role.
    """

    id: str
    role: CallerRole

    @property
    def is_admin(self) -> bool:
        return self.role is CallerRole.ADMIN
