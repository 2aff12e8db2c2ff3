"""FastAPI dependencies for API endpoints."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from mediatracker.auth.credentials import CredentialService, credential_service
from mediatracker.config.database import db_manager
from mediatracker.exceptions import AuthenticationError
from mediatracker.services.media_entry_service import MediaEntryService

# auto_error=False so a missing header goes through the 401 problem handler
bearer_scheme = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for database session.

    Yields an async SQLAlchemy session that commits once the endpoint
    returns and rolls back on exception.

    Yields
    ------
    AsyncSession
        An async SQLAlchemy session for database operations.
    """
    async for session in db_manager.get_session():
        yield session


def get_credential_service() -> CredentialService:
    """Dependency for the credential service."""
    return credential_service


def get_entry_service() -> MediaEntryService:
    """Dependency for the media entry service."""
    return MediaEntryService()


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    service: CredentialService = Depends(get_credential_service),
) -> uuid.UUID:
    """
    Dependency resolving the caller's verified user id from a bearer token.

    Raises
    ------
    AuthenticationError
        If the Authorization header is missing or the token is invalid.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")
    return service.verify_token(credentials.credentials)
