"""
Pytest configuration and fixtures for mediatracker tests.

Database fixtures run against in-memory SQLite through aiosqlite with the
production metadata and the audited session class, so soft-delete and
audit stamping behave exactly as they do against PostgreSQL.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from mediatracker.auth.credentials import CredentialService
from mediatracker.config.database import create_session_factory
from mediatracker.config.settings import Settings
from mediatracker.db.models import Base, User
from tests.factories.user_factory import UserFactory

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def mock_settings() -> Settings:
    """Settings for testing; cheap password hashing, short-lived tokens."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        jwt_secret="test-secret-key-for-mediatracker-tests",
        access_token_ttl_minutes=5,
        password_hash_iterations=1_000,
    )


@pytest.fixture
def credential_service(mock_settings: Settings) -> CredentialService:
    """Credential service bound to the test settings."""
    return CredentialService(config=mock_settings)


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory database with the full schema.

    StaticPool keeps one connection alive so every session sees the
    same in-memory database.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory producing audited sessions."""
    return create_session_factory(db_engine)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session; anything left uncommitted is rolled back."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def user(db_session: AsyncSession) -> User:
    """A persisted account."""
    account = UserFactory.build()
    db_session.add(account)
    await db_session.flush()
    return account


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    """A second persisted account, for tenant isolation checks."""
    account = UserFactory.build()
    db_session.add(account)
    await db_session.flush()
    return account


class FrozenClock:
    """Callable clock the audit hook reads instead of the wall clock."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> FrozenClock:
    """Freeze audit timestamps; tests move time forward explicitly."""
    frozen = FrozenClock(datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc))
    monkeypatch.setattr("mediatracker.db.audit.utc_now", frozen)
    return frozen
