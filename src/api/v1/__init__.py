# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    assignments: Assignment CRUD, listings and statistics.
    teachers: Legacy teacher-centric assignment endpoints.
"""

from fastapi import APIRouter

from src.api.v1 import assignments, teachers

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(assignments.router, prefix="/admin/assignments", tags=["Assignments"])
router.include_router(teachers.router, prefix="/admin/teachers", tags=["Teachers (legacy)"])

__all__ = ["router"]
