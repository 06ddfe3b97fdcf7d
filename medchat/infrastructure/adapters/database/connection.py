"""
Database Connection Manager

"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional
import logging

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ...config.settings import DatabaseSettings
from .base import Base
from . import models  # noqa: F401  registers every table on Base.metadata


logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """
    Database connection manager.

    Handles database engine creation, session management, and connection lifecycle.
    """

    def __init__(self, settings: DatabaseSettings):
        """
        Initialize database manager with settings.

        Args:
            settings: Database configuration settings
        """
        self._settings = settings
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def database_url(self) -> str:
        return self._settings.database_url

    def create_engine(self) -> AsyncEngine:
        """
        Create database engine with connection pooling.

        Returns:
            Configured async SQLAlchemy engine
        """
        if self._engine is None:
            engine_kwargs = {
                "echo": self._settings.echo_sql,
            }

            if self._settings.is_sqlite:
                engine_kwargs["connect_args"] = {"check_same_thread": False}
                if ":memory:" in self._settings.database_url:
                    # Every connection would otherwise get its own empty database
                    engine_kwargs["poolclass"] = StaticPool
            else:
                engine_kwargs.update({
                    "pool_size": self._settings.max_pool_size,
                    "max_overflow": 10,
                    "pool_timeout": self._settings.pool_timeout,
                    "pool_recycle": self._settings.pool_recycle,
                    "pool_pre_ping": True,
                })

            self._engine = create_async_engine(self._settings.database_url, **engine_kwargs)

            if self._settings.is_sqlite:
                event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        return self._engine

    def create_session_factory(self) -> async_sessionmaker[AsyncSession]:
        """
        Create session factory for database operations.

        Returns:
            Configured session factory
        """
        if self._session_factory is None:
            engine = self.create_engine()
            self._session_factory = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=True,
            )

        return self._session_factory

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get database session with automatic cleanup.

        Commits when the block exits normally and rolls back on error.

        Yields:
            Database session
        """
        session_factory = self.create_session_factory()

        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> None:
        """
        Create all database tables.

        Used for initial setup and testing.
        """
        engine = self.create_engine()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def drop_tables(self) -> None:
        """
        Drop all database tables.

        Used for testing cleanup.
        """
        engine = self.create_engine()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def close(self) -> None:
        """
        Close database connections and cleanup resources.
        """
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    async def health_check(self) -> bool:
        """
        Check database connectivity.

        Returns:
            True if database is accessible
        """
        try:
            async with self.get_session() as session:
                await session.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.warning(f"Database health check failed: {e}")
            return False
