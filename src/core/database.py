"""Database configuration and session management."""

import logging
from typing import Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

# SQLAlchemy Base for ORM models
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Turn on foreign key enforcement for SQLite connections."""
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


class DatabaseManager:
    """Database connection and session management."""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.database_url = settings.database_url

        engine_kwargs = {"echo": settings.database_echo}
        if self.is_sqlite:
            engine_kwargs["connect_args"] = {"timeout": 30}
        else:
            engine_kwargs.update(pool_size=20, max_overflow=0, pool_recycle=3600)

        self._async_engine: AsyncEngine = create_async_engine(self.database_url, **engine_kwargs)
        if self.is_sqlite:
            event.listen(self._async_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self._sessionmaker = async_sessionmaker(
            self._async_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def sessionmaker(self) -> async_sessionmaker:
        return self._sessionmaker

    async def connect(self) -> None:
        """Verify the database is reachable."""
        try:
            async with self._async_engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info("Database async connection established")
        except Exception as e:
            logger.error(f"Failed to connect to database: {e}")
            raise

    async def create_all(self) -> None:
        """Create tables for all registered models (development and tests)."""
        # Registers every model on Base.metadata
        import src.models  # noqa: F401

        async with self._async_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    async def disconnect(self) -> None:
        """Close database connections."""
        try:
            await self._async_engine.dispose()
            logger.info("Database connections closed")
        except Exception as e:
            logger.error(f"Error closing database connections: {e}")
