# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for the school database.

This package provides the SQLAlchemy async Database object and the ORM
models for assignments and the read-only teacher/class directory tables.

Example:
    from src.infrastructure.database import Database

    database = Database(settings.database)
    await database.connect()
    async with database.session() as session:
        result = await session.execute(select(Assignment))
"""

from src.infrastructure.database.connection import Database, DatabaseError

__all__ = [
    "Database",
    "DatabaseError",
]
