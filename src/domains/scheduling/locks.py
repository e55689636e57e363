# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Per-teacher write locks.

Writes for one teacher are serialized so that the read-check-write sequence
of conflict detection cannot interleave. Writes for different teachers run
concurrently. Locks are created on first use and dropped once no task holds
or waits for them.

Example:
    locks = TeacherLockRegistry(timeout=5.0)
    async with locks.hold("teacher-1", "teacher-2"):
        ...
"""

import asyncio
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator

from src.domains.scheduling.exceptions import StoreTimeoutError

logger = logging.getLogger(__name__)


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class TeacherLockRegistry:
    """Registry of asyncio locks keyed by teacher identifier.

    Attributes:
        timeout: Seconds to wait for a lock before giving up.
    """

    def __init__(self, timeout: float = 5.0) -> None:
        self.timeout = timeout
        self._entries: dict[str, _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def is_locked(self, teacher_id: str) -> bool:
        entry = self._entries.get(teacher_id)
        return entry is not None and entry.lock.locked()

    @asynccontextmanager
    async def _hold_one(self, teacher_id: str) -> AsyncIterator[None]:
        entry = self._entries.get(teacher_id)
        if entry is None:
            entry = self._entries[teacher_id] = _Entry()
        entry.users += 1
        try:
            try:
                async with asyncio.timeout(self.timeout):
                    await entry.lock.acquire()
            except TimeoutError:
                logger.warning(
                    "Teacher lock wait timed out: teacher=%s, timeout=%s",
                    teacher_id,
                    self.timeout,
                )
                raise StoreTimeoutError(
                    "Timed out waiting for another change to this teacher's schedule",
                    details={"teacher_id": teacher_id},
                ) from None
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            entry.users -= 1
            if entry.users == 0 and self._entries.get(teacher_id) is entry:
                del self._entries[teacher_id]

    @asynccontextmanager
    async def hold(self, *teacher_ids: str) -> AsyncIterator[None]:
        """Hold the locks of one or more teachers.

        Locks are acquired in sorted identifier order, so two tasks that
        both need teachers A and B cannot deadlock.

        Args:
            *teacher_ids: Teachers whose schedules are about to change.

        Raises:
            StoreTimeoutError: If any lock is not acquired within ``timeout``.
        """
        async with AsyncExitStack() as stack:
            for teacher_id in sorted(set(teacher_ids)):
                await stack.enter_async_context(self._hold_one(teacher_id))
            yield
