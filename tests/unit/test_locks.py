# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the per-teacher lock registry."""

import asyncio

import pytest

from src.domains.scheduling.exceptions import StoreTimeoutError
from src.domains.scheduling.locks import TeacherLockRegistry


class TestTeacherLockRegistry:
    """Tests for TeacherLockRegistry."""

    @pytest.mark.asyncio
    async def test_lock_is_held_inside_block_and_reclaimed_after(self) -> None:
        registry = TeacherLockRegistry(timeout=1.0)

        async with registry.hold("T1"):
            assert registry.is_locked("T1")
            assert len(registry) == 1

        assert not registry.is_locked("T1")
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_same_teacher_is_serialized(self) -> None:
        registry = TeacherLockRegistry(timeout=1.0)
        order: list[str] = []

        async def worker(name: str) -> None:
            async with registry.hold("T1"):
                order.append(f"{name}-start")
                await asyncio.sleep(0.01)
                order.append(f"{name}-end")

        await asyncio.gather(worker("a"), worker("b"))

        assert order in (
            ["a-start", "a-end", "b-start", "b-end"],
            ["b-start", "b-end", "a-start", "a-end"],
        )

    @pytest.mark.asyncio
    async def test_different_teachers_do_not_block(self) -> None:
        registry = TeacherLockRegistry(timeout=0.5)

        async with registry.hold("T1"):
            async with registry.hold("T2"):
                assert registry.is_locked("T1")
                assert registry.is_locked("T2")

    @pytest.mark.asyncio
    async def test_timeout_raises_retryable_error(self) -> None:
        registry = TeacherLockRegistry(timeout=0.05)
        held = asyncio.Event()
        release = asyncio.Event()

        async def holder() -> None:
            async with registry.hold("T1"):
                held.set()
                await release.wait()

        task = asyncio.create_task(holder())
        await held.wait()

        with pytest.raises(StoreTimeoutError) as exc_info:
            async with registry.hold("T1"):
                pass

        assert exc_info.value.retryable is True
        assert exc_info.value.kind == "timeout"

        release.set()
        await task
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_hold_many_deduplicates_teachers(self) -> None:
        registry = TeacherLockRegistry(timeout=0.5)

        async with registry.hold("T2", "T1", "T2"):
            assert registry.is_locked("T1")
            assert registry.is_locked("T2")

        assert len(registry) == 0
