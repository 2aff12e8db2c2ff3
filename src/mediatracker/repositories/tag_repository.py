"""
Tag repository implementation.

Tags are per user and stored lowercase, so case-insensitive lookups are
plain equality on the normalized name.
"""

from __future__ import annotations

import uuid
from typing import Dict, Iterable, List, Tuple

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mediatracker.db.models import EntryTag, MediaEntry, Tag
from mediatracker.exceptions import ConflictError
from mediatracker.repositories.base import BaseSQLAlchemyRepository
from mediatracker.repositories.visibility import live


class TagRepository(BaseSQLAlchemyRepository[Tag]):
    """Repository for per-user tags."""

    def __init__(self) -> None:
        super().__init__(Tag)

    async def get_by_names(
        self, session: AsyncSession, user_id: uuid.UUID, names: Iterable[str]
    ) -> Dict[str, Tag]:
        """Live tags of ``user_id`` keyed by name, for the given lowercase names."""
        wanted = sorted(set(names))
        if not wanted:
            return {}
        result = await session.execute(
            select(Tag).where(Tag.user_id == user_id, Tag.name.in_(wanted), live(Tag))
        )
        return {tag.name: tag for tag in result.scalars().all()}

    async def create_many(
        self, session: AsyncSession, user_id: uuid.UUID, names: Iterable[str]
    ) -> List[Tag]:
        """Create tags for names the user has no live tag for yet.

        A concurrent request creating the same name surfaces as a conflict;
        the partial unique index on live ``(user_id, name)`` guarantees a
        user never ends up with two.
        """
        tags = [Tag(user_id=user_id, name=name) for name in sorted(set(names))]
        if not tags:
            return []
        session.add_all(tags)
        try:
            await self.flush(session)
        except IntegrityError as e:
            raise ConflictError(
                message="A tag with this name was created concurrently; retry the request",
                details={"entity_type": "Tag", "names": [t.name for t in tags]},
            ) from e
        return tags

    async def list_with_counts(
        self, session: AsyncSession, user_id: uuid.UUID
    ) -> List[Tuple[str, int]]:
        """A user's live tags with the number of live entries using each."""
        entry_count = func.count(MediaEntry.id)
        result = await session.execute(
            select(Tag.name, entry_count)
            .select_from(Tag)
            .outerjoin(EntryTag, EntryTag.tag_id == Tag.id)
            .outerjoin(
                MediaEntry,
                and_(MediaEntry.id == EntryTag.media_entry_id, live(MediaEntry)),
            )
            .where(Tag.user_id == user_id, live(Tag))
            .group_by(Tag.id, Tag.name)
            .order_by(Tag.name)
        )
        return [(name, count) for name, count in result.all()]
