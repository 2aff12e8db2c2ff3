"""
User repository implementation.
"""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mediatracker.db.models import User
from mediatracker.exceptions import ConflictError


class UserRepository:
    """Repository for user accounts."""

    async def get_by_id(self, session: AsyncSession, user_id: uuid.UUID) -> Optional[User]:
        """Get a user by id."""
        return await session.get(User, user_id)

    async def get_by_email(self, session: AsyncSession, email: str) -> Optional[User]:
        """Get a user by normalized email."""
        result = await session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def create(self, session: AsyncSession, email: str, password_hash: str) -> User:
        """Create a user; a taken email is a conflict."""
        user = User(email=email, password_hash=password_hash)
        session.add(user)
        try:
            await session.flush()
        except IntegrityError as e:
            raise ConflictError(
                message="Email is already registered",
                details={"field": "email"},
            ) from e
        return user
