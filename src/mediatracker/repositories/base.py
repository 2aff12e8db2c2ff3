"""
Base repository implementation.

Provides the shared, tenant-scoped operations every repository needs.
Repositories never commit: the request-scoped session commits once at
the end, so an entity write and its tag reconciliation land together.
"""

from __future__ import annotations

import uuid
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.orm.exc import StaleDataError

from mediatracker.db.models import SoftDeleteMixin
from mediatracker.exceptions import ConflictError
from mediatracker.repositories.visibility import visible_unless

# Type variable for generic repository
ModelType = TypeVar("ModelType", bound=DeclarativeBase)


class BaseSQLAlchemyRepository(Generic[ModelType]):
    """
    Base SQLAlchemy repository for models owned by a user.

    Subclasses operate on models with ``id`` and ``user_id`` columns;
    soft-deletable models are filtered to live rows unless a caller asks
    for ``include_deleted``.
    """

    def __init__(self, model: type[ModelType]):
        self.model = model

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    def _owned(self, user_id: uuid.UUID, include_deleted: bool = False) -> list[Any]:
        conditions: list[Any] = [self.model.user_id == user_id]  # type: ignore[attr-defined]
        if issubclass(self.model, SoftDeleteMixin):
            conditions.append(visible_unless(self.model, include_deleted))
        return conditions

    async def get(
        self,
        session: AsyncSession,
        id: uuid.UUID,
        user_id: uuid.UUID,
        *,
        include_deleted: bool = False,
    ) -> Optional[ModelType]:
        """Get an entity by id, only if ``user_id`` owns it and it is live."""
        result = await session.execute(
            select(self.model).where(
                self.model.id == id,  # type: ignore[attr-defined]
                *self._owned(user_id, include_deleted),
            )
        )
        return result.scalar_one_or_none()

    async def add(self, session: AsyncSession, db_obj: ModelType) -> ModelType:
        """Stage a new entity and flush it to obtain a stable identity."""
        session.add(db_obj)
        await self.flush(session)
        return db_obj

    async def delete(self, session: AsyncSession, db_obj: ModelType) -> None:
        """Delete an entity; soft-deletable models are only marked deleted."""
        await session.delete(db_obj)
        await self.flush(session)

    async def count(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        *,
        include_deleted: bool = False,
    ) -> int:
        """Count entities owned by ``user_id``."""
        result = await session.execute(
            select(func.count())
            .select_from(self.model)
            .where(*self._owned(user_id, include_deleted))
        )
        return result.scalar() or 0

    async def flush(self, session: AsyncSession) -> None:
        """Flush pending changes, surfacing version mismatches as conflicts."""
        try:
            await session.flush()
        except StaleDataError as e:
            raise ConflictError(
                message=f"{self.entity_name} was modified by another request; reload and retry",
                details={"entity_type": self.entity_name},
            ) from e
