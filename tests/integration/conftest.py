# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for API tests.

The application runs its real lifespan against the temporary SQLite
database, seeded before the app starts.
"""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from src.api.app import create_app
from src.core.config import Settings
from src.domains.auth.jwt import JWTManager


@pytest.fixture
def client(seeded_settings: Settings) -> Generator[TestClient, None, None]:
    """Test client for an app backed by the seeded database."""
    with TestClient(create_app(seeded_settings)) as client:
        yield client


def _bearer(settings: Settings, user_id: str, role: str) -> dict[str, str]:
    token = JWTManager(settings.jwt).create_access_token(user_id=user_id, role=role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(settings: Settings) -> dict[str, str]:
    return _bearer(settings, "admin-1", "admin")


@pytest.fixture
def teacher_headers(settings: Settings) -> dict[str, str]:
    return _bearer(settings, "T1", "teacher")
