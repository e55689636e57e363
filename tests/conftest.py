# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Settings pointing at a temporary SQLite database
- A connected Database seeded with directory records
- A ready-to-use AssignmentService
"""

import asyncio
from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio

from src.core.config import Settings, clear_settings_cache, get_settings
from src.domains.auth.caller import Caller, CallerRole
from src.domains.directory import SqlClassDirectory, SqlTeacherDirectory
from src.domains.scheduling.locks import TeacherLockRegistry
from src.domains.scheduling.service import AssignmentService
from src.infrastructure.database.connection import Database
from src.infrastructure.database.models import SchoolClass, Teacher

TEST_JWT_SECRET = "test-secret-key-for-testing-only"

TEACHERS = [
    {"id": "T1", "name": "Ada Lovelace", "email": "ada@school.test"},
    {"id": "T2", "name": "Alan Turing", "email": "alan@school.test"},
    {"id": "T3", "name": "Grace Hopper", "email": "grace@school.test"},
    {"id": "T-retired", "name": "Emeritus", "email": None, "is_active": False},
]

CLASSES = [
    {"id": "10", "name": "Grade 10 A", "grade": "10", "section": "A"},
    {"id": "11", "name": "Grade 11 A", "grade": "11", "section": "A"},
    {"id": "9", "name": "Grade 9 B", "grade": "9", "section": "B"},
]


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (API over a temporary database)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture
def test_environment(tmp_path) -> dict[str, str]:
    """Provide test environment variables.

    Returns:
        Dictionary of environment variables for testing.
    """
    return {
        "ENVIRONMENT": "test",
        "DEBUG": "false",
        "LOG_LEVEL": "WARNING",
        "DATABASE_URL": f"sqlite+aiosqlite:///{tmp_path / 'scheduler.db'}",
        "DB_CREATE_TABLES": "true",
        "JWT_SECRET_KEY": TEST_JWT_SECRET,
        "JWT_ALGORITHM": "HS256",
        "RATE_LIMIT_ENABLED": "false",
        "SCHEDULER_LOCK_TIMEOUT": "5",
        "SCHEDULER_STORE_TIMEOUT": "10",
    }


@pytest.fixture
def settings(
    test_environment: dict[str, str],
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[Settings, None, None]:
    """Settings loaded from the test environment."""
    for key, value in test_environment.items():
        monkeypatch.setenv(key, value)
    clear_settings_cache()
    yield get_settings()
    clear_settings_cache()


# =============================================================================
# Database Fixtures
# =============================================================================


async def seed_directory(database: Database) -> None:
    """Create the schema and insert the directory records."""
    await database.create_tables()
    async with database.session() as session:
        for record in TEACHERS:
            session.add(Teacher(**record))
        for record in CLASSES:
            session.add(SchoolClass(**record))


def prepare_database(settings: Settings) -> None:
    """Seed the test database from synchronous code (before an app starts)."""

    async def _run() -> None:
        database = Database(settings.database)
        await database.connect()
        try:
            await seed_directory(database)
        finally:
            await database.disconnect()

    asyncio.run(_run())


@pytest.fixture
def seeded_settings(settings: Settings) -> Settings:
    """Settings whose database is already seeded, for apps started by TestClient."""
    prepare_database(settings)
    return settings


@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    """Connected database with the directory seeded."""
    database = Database(settings.database)
    await database.connect()
    await seed_directory(database)
    yield database
    await database.disconnect()


@pytest.fixture
def lock_registry(settings: Settings) -> TeacherLockRegistry:
    return TeacherLockRegistry(timeout=settings.scheduler.lock_timeout)


@pytest.fixture
def service(
    database: Database,
    lock_registry: TeacherLockRegistry,
    settings: Settings,
) -> AssignmentService:
    """Assignment service over the seeded test database."""
    return AssignmentService(
        database=database,
        teachers=SqlTeacherDirectory(),
        classes=SqlClassDirectory(),
        locks=lock_registry,
        settings=settings.scheduler,
    )


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def admin() -> Caller:
    """Provide an administrator caller."""
    return Caller(id="admin-1", role=CallerRole.ADMIN)
