# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School database connection management using SQLAlchemy async.

The Database object owns the engine and sessionmaker for the school
database. It is created by the application lifespan (opened on startup,
closed on shutdown) and handed to the services that need it; nothing in
the scheduler reaches for a module-level connection.

Uses SQLAlchemy 2.0 async API with the asyncpg driver in production and
aiosqlite in tests.

Example:
    database = Database(settings.database)
    await database.connect()

    async with database.session() as session:
        result = await session.execute(select(Assignment))
        assignments = result.scalars().all()

    await database.disconnect()
"""

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.infrastructure.database.models.base import Base

if TYPE_CHECKING:
    from src.core.config.settings import DatabaseSettings


class DatabaseError(Exception):
    """Base exception for database operations.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying SQLAlchemy or database error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        """Initialize the database error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class Database:
    """Connection pool and session factory for the school database.

    Attributes:
        settings: Database configuration.
    """

    def __init__(self, settings: "DatabaseSettings") -> None:
        """Initialize without connecting.

        Args:
            settings: Database configuration.
        """
        self.settings = settings
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_connected(self) -> bool:
        """Whether connect() has been called and not yet undone."""
        return self._engine is not None

    async def connect(self) -> None:
        """Create the connection pool.

        Raises:
            DatabaseError: If connection pool creation fails.
        """
        if self._engine is not None:
            return

        engine_kwargs: dict = {"echo": self.settings.echo}
        if not self.settings.is_sqlite:
            engine_kwargs.update(
                pool_size=self.settings.pool_size,
                max_overflow=self.settings.max_overflow,
                pool_pre_ping=True,
                pool_recycle=1800,
            )

        try:
            self._engine = create_async_engine(self.settings.url, **engine_kwargs)
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to initialize database connection", e) from e

        self._sessionmaker = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def disconnect(self) -> None:
        """Close the connection pool."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None

    async def create_tables(self) -> None:
        """Create all tables known to the ORM metadata.

        Used for development and tests; production schemas come from the
        Alembic migrations.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @property
    def engine(self) -> AsyncEngine:
        """Get the async engine.

        Raises:
            DatabaseError: If the database has not been connected.
        """
        if self._engine is None:
            raise DatabaseError("Database not initialized. Call connect() first.")
        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Get an async session wrapped in a transaction.

        The session is committed when the block exits normally and rolled
        back on any exception, including task cancellation.

        Yields:
            AsyncSession for database operations.

        Raises:
            DatabaseError: If the database has not been initialized or
                if a database operation fails.
        """
        if self._sessionmaker is None:
            raise DatabaseError("Database not initialized. Call connect() first.")

        async with self._sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise DatabaseError("Database operation failed", e) from e
            except BaseException:
                await session.rollback()
                raise

    async def check_connection(self) -> bool:
        """Check if the database is reachable.

        Returns:
            True if the database is reachable, False otherwise.
        """
        if self._engine is None:
            return False

        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

