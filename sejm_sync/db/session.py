"""
Database session and engine management.

Provides async SQLite connections, transaction management with context
managers, and whole-database export/import as an opaque byte blob.

Responsibility: Manage database connections, sessions and backups
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional
import logging
import os
import tempfile

from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker
)
from sqlalchemy.pool import NullPool, StaticPool

from ..config import DatabaseConfig, settings

logger = logging.getLogger(__name__)

SQLITE_HEADER = b"SQLite format 3\x00"


class Database:
    """
    Database connection manager.

    Handles engine creation and session management for the SQLite store.

    Example:
        # Initialize
        db = Database()
        await db.initialize()
        await db.create_tables()

        # Use session
        async with db.session() as session:
            result = await session.execute(query)

        # Cleanup
        await db.close()
    """

    def __init__(self, config: Optional[DatabaseConfig] = None):
        """Initialize database manager"""
        self.config = config or settings.db
        self.engine: AsyncEngine | None = None
        self.session_factory: async_sessionmaker[AsyncSession] | None = None
        self._initialized = False

    @property
    def in_memory(self) -> bool:
        return self.config.path == ":memory:"

    async def initialize(self) -> None:
        """
        Initialize database engine and session factory.

        File databases use NullPool (one connection per session); an
        in-memory database keeps a single shared connection.
        """
        if self._initialized:
            logger.warning("Database already initialized")
            return

        if self.in_memory:
            pool_kwargs = {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
            logger.info("Initializing in-memory SQLite database")
        else:
            Path(self.config.path).parent.mkdir(parents=True, exist_ok=True)
            pool_kwargs = {"poolclass": NullPool}
            logger.info(f"Initializing SQLite database at {self.config.path}")

        # Create async engine
        self.engine = create_async_engine(
            self.config.connection_string,
            echo=self.config.echo,
            **pool_kwargs
        )

        # Create session factory
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,  # Don't expire objects after commit
            autoflush=False,  # Manual flush control
        )

        self._initialized = True
        logger.info("Database initialized successfully")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Create a new database session with automatic cleanup.

        Commits on success and rolls back on error.

        Yields:
            AsyncSession for database operations
        """
        if not self._initialized or not self.session_factory:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        session = self.session_factory()

        try:
            yield session
            # Auto-commit on success (if not already committed)
            if session.in_transaction():
                await session.commit()
        except Exception as e:
            # Auto-rollback on error
            logger.error(f"Session error, rolling back: {e}")
            await session.rollback()
            raise
        finally:
            # Always close session
            await session.close()

    async def create_tables(self) -> None:
        """
        Create all database tables if they don't exist.
        """
        if not self._initialized or not self.engine:
            raise RuntimeError("Database not initialized")

        from .models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database tables ready")

    async def export_bytes(self) -> bytes:
        """
        Snapshot the whole database as SQLite file bytes.

        Uses ``VACUUM INTO`` so the copy is consistent even for an
        in-memory database.
        """
        if not self._initialized or not self.engine:
            raise RuntimeError("Database not initialized")

        with tempfile.TemporaryDirectory() as tmp:
            target = os.path.join(tmp, "export.db")
            async with self.engine.connect() as conn:
                conn = await conn.execution_options(isolation_level="AUTOCOMMIT")
                await conn.exec_driver_sql("VACUUM INTO ?", (target,))
            data = Path(target).read_bytes()

        logger.info(f"Exported database ({len(data)} bytes)")
        return data

    async def import_bytes(self, data: bytes) -> None:
        """
        Replace the database file with previously exported bytes.

        The engine is disposed, the file overwritten, and the engine
        re-initialized.

        Raises:
            ValueError: If data is not an SQLite database or the store is in-memory
        """
        if not data.startswith(SQLITE_HEADER):
            raise ValueError("Not an SQLite database file")
        if self.in_memory:
            raise ValueError("Cannot import into an in-memory database")

        await self.close()
        path = Path(self.config.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".import")
        tmp_path.write_bytes(data)
        os.replace(tmp_path, path)
        logger.info(f"Imported database ({len(data)} bytes) into {path}")

        await self.initialize()
        await self.create_tables()

    async def close(self) -> None:
        """
        Close database engine and cleanup connections.
        """
        if not self._initialized:
            return

        if self.engine:
            logger.info("Closing database connections...")
            await self.engine.dispose()
            self.engine = None

        self.session_factory = None
        self._initialized = False

        logger.info("Database closed")


# Global database instance
db = Database()
