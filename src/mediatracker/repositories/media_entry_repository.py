"""
Media entry repository implementation.

Provides tenant-scoped lookup and the filtered, paged listing of media
entries, plus batched loading of each entry's visible tag names.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Any, Dict, List, Sequence, Tuple

from sqlalchemy import case, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from mediatracker.db.models import EntryTag, MediaEntry, Tag
from mediatracker.models.enums import EntrySortField, SortOrder
from mediatracker.repositories.base import BaseSQLAlchemyRepository
from mediatracker.repositories.visibility import (
    select_visible_entry_tags,
    visible_unless,
)
from mediatracker.services.entry_query import EntryFilter

SORT_COLUMNS: Dict[EntrySortField, Any] = {
    EntrySortField.TITLE: func.lower(MediaEntry.title),
    EntrySortField.CREATED: MediaEntry.created_at,
    EntrySortField.UPDATED: MediaEntry.updated_at,
    EntrySortField.RATING: MediaEntry.rating,
}


class MediaEntryRepository(BaseSQLAlchemyRepository[MediaEntry]):
    """Repository for media entry operations."""

    def __init__(self) -> None:
        super().__init__(MediaEntry)

    def _conditions(self, user_id: uuid.UUID, entry_filter: EntryFilter) -> List[Any]:
        conditions = self._owned(user_id, entry_filter.include_deleted)

        if entry_filter.q:
            conditions.append(
                or_(
                    MediaEntry.title.icontains(entry_filter.q, autoescape=True),
                    MediaEntry.notes.icontains(entry_filter.q, autoescape=True),
                )
            )
        if entry_filter.type is not None:
            conditions.append(MediaEntry.type == entry_filter.type)
        if entry_filter.sub_type is not None:
            conditions.append(MediaEntry.sub_type == entry_filter.sub_type)
        if entry_filter.status is not None:
            conditions.append(MediaEntry.status == entry_filter.status)
        if entry_filter.tag:
            conditions.append(
                exists(
                    select(EntryTag.media_entry_id)
                    .join(Tag, Tag.id == EntryTag.tag_id)
                    .where(
                        EntryTag.media_entry_id == MediaEntry.id,
                        Tag.user_id == user_id,
                        Tag.name == entry_filter.tag,
                        visible_unless(Tag, entry_filter.include_deleted),
                    )
                )
            )
        return conditions

    @staticmethod
    def _ordering(entry_filter: EntryFilter) -> List[Any]:
        ascending = entry_filter.order == SortOrder.ASC

        def directed(column: Any) -> Any:
            return column.asc() if ascending else column.desc()

        ordering: List[Any] = []
        if entry_filter.sort == EntrySortField.RATING:
            # Unrated entries go last in both directions
            ordering.append(case((MediaEntry.rating.is_(None), 1), else_=0).asc())
        ordering.append(directed(SORT_COLUMNS[entry_filter.sort]))
        # Tie-breakers keep pages stable
        ordering.extend([directed(MediaEntry.created_at), directed(MediaEntry.id)])
        return ordering

    async def search(
        self, session: AsyncSession, user_id: uuid.UUID, entry_filter: EntryFilter
    ) -> Tuple[List[MediaEntry], int]:
        """
        List a user's entries matching ``entry_filter``.

        Parameters
        ----------
        session : AsyncSession
            Database session.
        user_id : uuid.UUID
            Owner; no other user's rows are ever considered.
        entry_filter : EntryFilter
            Normalized filter, sort and paging parameters.

        Returns
        -------
        Tuple[List[MediaEntry], int]
            The requested page and the total number of matches before paging.
        """
        conditions = self._conditions(user_id, entry_filter)

        total_result = await session.execute(
            select(func.count()).select_from(MediaEntry).where(*conditions)
        )
        total = total_result.scalar() or 0
        # Pages past the end are empty; their offset may not fit in a BIGINT
        if entry_filter.offset >= total:
            return [], total

        result = await session.execute(
            select(MediaEntry)
            .where(*conditions)
            .order_by(*self._ordering(entry_filter))
            .offset(entry_filter.offset)
            .limit(entry_filter.page_size)
        )
        return list(result.scalars().all()), total

    async def get_tag_names(
        self,
        session: AsyncSession,
        entry_ids: Sequence[uuid.UUID],
        *,
        include_deleted: bool = False,
    ) -> Dict[uuid.UUID, List[str]]:
        """Visible tag names per entry, alphabetically."""
        if not entry_ids:
            return {}

        result = await session.execute(
            select_visible_entry_tags(
                EntryTag.media_entry_id, Tag.name, include_deleted=include_deleted
            )
            .where(EntryTag.media_entry_id.in_(entry_ids))
            .order_by(EntryTag.media_entry_id, Tag.name)
        )
        names: Dict[uuid.UUID, List[str]] = defaultdict(list)
        for entry_id, name in result.all():
            names[entry_id].append(name)
        return dict(names)

