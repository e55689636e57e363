# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the Alembic migrations.

The migrations run through env.py against the temporary SQLite database
named by DATABASE_URL, the same way ``alembic upgrade head`` would.
"""

from collections.abc import Generator
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import Engine, create_engine, inspect, text
from sqlalchemy.exc import IntegrityError

from src.core.config import Settings

MIGRATIONS = Path(__file__).resolve().parents[2] / "src" / "infrastructure" / "database" / "migrations"

pytestmark = pytest.mark.integration


@pytest.fixture
def alembic_config(settings: Settings) -> Config:
    # No ini file: keeps alembic from reconfiguring logging for the rest of the run
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS))
    config.set_main_option("version_locations", str(MIGRATIONS / "versions"))
    return config


@pytest.fixture
def engine(settings: Settings) -> Generator[Engine, None, None]:
    engine = create_engine(settings.database.url.replace("+aiosqlite", ""))
    yield engine
    engine.dispose()


def insert_row(engine: Engine, row_id: str, is_active: bool) -> None:
    with engine.begin() as connection:
        connection.execute(
            text(
                "INSERT INTO assignments (id, teacher_id, class_id, section, grade, subject, "
                "day_of_week, time_minutes, is_active) "
                "VALUES (:id, 'T1', '10', 'A', '10', 'Mathematics', 0, 600, :is_active)"
            ),
            {"id": row_id, "is_active": is_active},
        )


class TestCreateAssignmentsRevision:
    """Tests for revision 001_assignments."""

    def test_upgrade_creates_table_and_indexes(self, alembic_config: Config, engine: Engine) -> None:
        command.upgrade(alembic_config, "head")

        inspector = inspect(engine)
        assert "assignments" in inspector.get_table_names()
        columns = {column["name"] for column in inspector.get_columns("assignments")}
        assert {"teacher_id", "day_of_week", "time_minutes", "is_active", "notes"} <= columns

        indexes = {index["name"]: index for index in inspector.get_indexes("assignments")}
        slot = indexes["uq_assignments_teacher_active_slot"]
        assert slot["unique"]
        assert slot["column_names"] == ["teacher_id", "day_of_week", "time_minutes"]
        assert "ix_assignments_class_day" in indexes

        with engine.connect() as connection:
            version = connection.execute(text("SELECT version_num FROM alembic_version")).scalar_one()
        assert version == "001_assignments"

    def test_slot_index_only_covers_active_rows(self, alembic_config: Config, engine: Engine) -> None:
        command.upgrade(alembic_config, "head")

        insert_row(engine, "a-1", is_active=True)
        insert_row(engine, "a-2", is_active=False)
        insert_row(engine, "a-3", is_active=False)

        with pytest.raises(IntegrityError):
            insert_row(engine, "a-4", is_active=True)

        with engine.connect() as connection:
            created_at = connection.execute(
                text("SELECT created_at FROM assignments WHERE id = 'a-1'")
            ).scalar_one()
        assert created_at is not None

    def test_downgrade_drops_table(self, alembic_config: Config, engine: Engine) -> None:
        command.upgrade(alembic_config, "head")

        command.downgrade(alembic_config, "base")

        assert "assignments" not in inspect(engine).get_table_names()
