"""Database abstraction layer using SQLAlchemy 2.0 async.

This module provides the database session management and engine configuration
for SQLAlchemy with async support. It supports both SQLite (aiosqlite) and
PostgreSQL (asyncpg) drivers.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from docgate.core.config import Settings, get_settings
from docgate.core.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class DatabaseManager:
    """Database connection and session manager.

    This class manages the async database engine and session factory.
    It provides context managers for database sessions and handles
    connection pooling.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the database manager.

        Args:
            settings: Optional settings; loaded from the environment if omitted.
        """
        self.settings = settings or get_settings()
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.settings.database_url.startswith("sqlite")

    @property
    def engine(self) -> AsyncEngine:
        """Get or create the database engine."""
        if self._engine is None:
            url = self.settings.database_url
            if self.is_sqlite:
                # In-memory databases live on one connection, shared via StaticPool
                kwargs = {"connect_args": {"check_same_thread": False}}
                if ":memory:" in url:
                    kwargs["poolclass"] = StaticPool
                else:
                    self._ensure_sqlite_directory(url)
            else:
                kwargs = {
                    "pool_size": self.settings.db_pool_size,
                    "max_overflow": self.settings.db_max_overflow,
                }
            self._engine = create_async_engine(url, echo=self.settings.db_echo, **kwargs)
            logger.info(
                "Database engine created",
                database_url=self._engine.url.render_as_string(hide_password=True),
            )
        return self._engine

    @staticmethod
    def _ensure_sqlite_directory(url: str) -> None:
        database = make_url(url).database
        if database:
            Path(database).parent.mkdir(parents=True, exist_ok=True)

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
            logger.debug("Database session factory created")
        return self._session_factory

    async def create_tables(self) -> None:
        """Create all database tables.

        Called on startup; the document table layout is fixed, so no
        migrations are needed.
        """
        # Registers the models with Base.metadata
        from docgate.infrastructure.persistence.models import DocumentModel  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created")

    async def drop_tables(self) -> None:
        """Drop all database tables.

        WARNING: This will delete all data. Only use in testing!
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            logger.warning("Database tables dropped")

    async def disconnect(self) -> None:
        """Close the database engine and all connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a transactional scope for database operations.

        Example:
            async with db.session() as session:
                result = await session.execute(select(DocumentModel))
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def check_connection(self) -> bool:
        """Check if database connection is working."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error("Database connection check failed", error=str(e))
            return False
