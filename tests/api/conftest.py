"""
Fixtures for API tests.

The real application runs over httpx's ASGITransport with the database
and credential dependencies pointed at the in-memory test database.
Each request gets its own session that commits on success, as in
production.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mediatracker.api.deps import get_credential_service, get_db
from mediatracker.api.main import app
from mediatracker.auth.credentials import CredentialService
from tests.factories.user_factory import CredentialsFactory


@pytest.fixture
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
    credential_service: CredentialService,
) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client for FastAPI testing."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_credential_service] = lambda: credential_service

    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


async def _register(client: AsyncClient) -> dict[str, str]:
    creds = CredentialsFactory.build()
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": creds.email, "password": creds.password},
    )
    assert response.status_code == 201, response.text
    token = response.json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def auth_headers(async_client: AsyncClient) -> dict[str, str]:
    """Bearer header for a freshly registered account."""
    return await _register(async_client)


@pytest.fixture
async def other_auth_headers(async_client: AsyncClient) -> dict[str, str]:
    """Bearer header for a second account."""
    return await _register(async_client)
