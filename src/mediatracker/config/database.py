"""
Database configuration and connection management.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from mediatracker.config.settings import settings
from mediatracker.db.audit import AuditedSession
from mediatracker.db.models import Base


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build a session factory whose sessions soft-delete and stamp audit columns."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        sync_session_class=AuditedSession,
        expire_on_commit=False,
    )


class DatabaseManager:
    """Manages database connections and sessions."""

    def __init__(self, database_url: str | None = None) -> None:
        self._database_url = database_url
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def database_url(self) -> str:
        return self._database_url or settings.effective_database_url

    def get_engine(self) -> AsyncEngine:
        """Get or create async database engine."""
        if self._engine is None:
            engine_kwargs: dict[str, Any] = {
                "echo": settings.debug or settings.db_log_queries,
                "future": True,
            }
            # SQLite uses a static pool; pool tuning only applies elsewhere
            if not self.database_url.startswith("sqlite"):
                engine_kwargs.update({"pool_pre_ping": True, "pool_recycle": 3600})

            self._engine = create_async_engine(self.database_url, **engine_kwargs)
        return self._engine

    def get_session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create session factory."""
        if self._session_factory is None:
            self._session_factory = create_session_factory(self.get_engine())
        return self._session_factory

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get async database session.

        Everything a request does (entity write plus tag reconciliation)
        commits together here, or rolls back together on any exception.
        """
        session_factory = self.get_session_factory()
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def close(self) -> None:
        """Close database connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
        self._session_factory = None

    async def create_tables(self) -> None:
        """Create database tables."""
        engine = self.get_engine()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        """Drop database tables."""
        engine = self.get_engine()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)


# Global database manager instance
db_manager = DatabaseManager()
