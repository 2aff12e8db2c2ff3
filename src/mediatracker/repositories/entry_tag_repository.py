"""
Entry/tag join repository implementation.

Join rows are removed physically: they carry no audit state, and their
visibility already follows the two rows they connect.
"""

from __future__ import annotations

import uuid
from typing import Iterable, List

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from mediatracker.db.models import EntryTag, Tag
from mediatracker.repositories.visibility import select_visible_entry_tags


class EntryTagRepository:
    """Repository for entry/tag associations."""

    async def get_visible_tags(
        self, session: AsyncSession, entry_id: uuid.UUID
    ) -> List[Tag]:
        """Live tags attached to a live entry, alphabetically."""
        result = await session.execute(
            select_visible_entry_tags(Tag)
            .where(EntryTag.media_entry_id == entry_id)
            .order_by(Tag.name)
        )
        return list(result.scalars().all())

    async def attach(
        self, session: AsyncSession, entry_id: uuid.UUID, tag_ids: Iterable[uuid.UUID]
    ) -> int:
        """Create join rows from ``entry_id`` to each tag."""
        links = [EntryTag(media_entry_id=entry_id, tag_id=tag_id) for tag_id in tag_ids]
        session.add_all(links)
        await session.flush()
        return len(links)

    async def detach(
        self, session: AsyncSession, entry_id: uuid.UUID, tag_ids: Iterable[uuid.UUID]
    ) -> int:
        """Remove join rows from ``entry_id`` to each tag."""
        ids = list(tag_ids)
        if not ids:
            return 0
        result = await session.execute(
            delete(EntryTag).where(
                EntryTag.media_entry_id == entry_id, EntryTag.tag_id.in_(ids)
            )
        )
        return result.rowcount or 0
