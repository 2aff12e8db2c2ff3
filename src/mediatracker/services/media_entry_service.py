"""
Media entry service.

The core operation surface: list, get, create, update and soft-delete a
user's media entries. Every operation takes the verified ``user_id``
explicitly and scopes all reads and writes to it. Create and update flush
the entry first (stable id, version check) and then reconcile tags in the
same transaction; the session commits both together.
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from mediatracker.db.models import MediaEntry
from mediatracker.exceptions import BadRequestError, ConflictError, NotFoundError
from mediatracker.models.media_entry import (
    EntryListQuery,
    MediaEntryDraft,
    MediaEntryPatch,
    MediaEntryRead,
)
from mediatracker.models.tag import TagSummary
from mediatracker.repositories.media_entry_repository import MediaEntryRepository
from mediatracker.repositories.tag_repository import TagRepository
from mediatracker.services.entry_mapping import (
    apply_patch,
    build_entry,
    collect_patch_changes,
    to_read,
)
from mediatracker.services.entry_query import build_entry_filter
from mediatracker.services.tag_sync import TagSyncService

logger = logging.getLogger(__name__)


class MediaEntryService:
    """Tenant-scoped CRUD over media entries and their tags."""

    def __init__(
        self,
        entry_repository: Optional[MediaEntryRepository] = None,
        tag_repository: Optional[TagRepository] = None,
        tag_sync: Optional[TagSyncService] = None,
    ) -> None:
        self.entry_repository = entry_repository or MediaEntryRepository()
        self.tag_repository = tag_repository or TagRepository()
        self.tag_sync = tag_sync or TagSyncService(tag_repository=self.tag_repository)

    async def _load(
        self, session: AsyncSession, user_id: uuid.UUID, entry_id: uuid.UUID
    ) -> MediaEntry:
        entry = await self.entry_repository.get(session, entry_id, user_id)
        if entry is None:
            raise NotFoundError(resource_type="MediaEntry", identifier=str(entry_id))
        return entry

    async def _project(self, session: AsyncSession, entry: MediaEntry) -> MediaEntryRead:
        names = await self.entry_repository.get_tag_names(session, [entry.id])
        return to_read(entry, names.get(entry.id, []))

    async def list_entries(
        self, session: AsyncSession, user_id: uuid.UUID, query: EntryListQuery
    ) -> Tuple[List[MediaEntryRead], int]:
        """
        List a user's entries.

        Parameters
        ----------
        session : AsyncSession
            Database session.
        user_id : uuid.UUID
            Verified caller id.
        query : EntryListQuery
            Raw filter, sort and paging parameters.

        Returns
        -------
        Tuple[List[MediaEntryRead], int]
            The page of entries, each with its tag names, and the total
            number of matching entries.

        Raises
        ------
        ValidationError
            If an enum filter token is not recognized.
        """
        entry_filter = build_entry_filter(query)
        entries, total = await self.entry_repository.search(session, user_id, entry_filter)
        names = await self.entry_repository.get_tag_names(
            session,
            [entry.id for entry in entries],
            include_deleted=entry_filter.include_deleted,
        )
        return [to_read(entry, names.get(entry.id, [])) for entry in entries], total

    async def get_entry(
        self, session: AsyncSession, user_id: uuid.UUID, entry_id: uuid.UUID
    ) -> MediaEntryRead:
        """Get one live entry owned by ``user_id``, or raise NotFoundError."""
        entry = await self._load(session, user_id, entry_id)
        return await self._project(session, entry)

    async def create_entry(
        self, session: AsyncSession, user_id: uuid.UUID, draft: MediaEntryDraft
    ) -> MediaEntryRead:
        """Validate and store a new entry, then attach its tags."""
        entry = build_entry(draft, user_id)
        await self.entry_repository.add(session, entry)
        await self.tag_sync.sync(session, entry, draft.tags, user_id)

        logger.info("Created media entry %s for user %s", entry.id, user_id)
        return await self._project(session, entry)

    async def update_entry(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        entry_id: uuid.UUID,
        patch: MediaEntryPatch,
    ) -> MediaEntryRead:
        """
        Apply a partial update.

        The whole patch is validated before the entry is loaded or touched.
        ``patch.tags`` replaces the tag set when it is a list; absent or
        null leaves tags as they are.

        Raises
        ------
        ValidationError
            If any field in the patch is invalid.
        BadRequestError
            If ``patch.id`` is given and differs from ``entry_id``.
        NotFoundError
            If the entry is absent, deleted, or owned by someone else.
        ConflictError
            If ``patch.version`` is stale, or a concurrent write won.
        """
        if patch.id is not None and patch.id != entry_id:
            raise BadRequestError(
                message="Body id does not match route id",
                details={"route_id": str(entry_id), "body_id": str(patch.id)},
            )
        collect_patch_changes(patch)

        entry = await self._load(session, user_id, entry_id)
        if patch.version is not None and patch.version != entry.version:
            raise ConflictError(
                message="MediaEntry was modified by another request; reload and retry",
                details={
                    "entity_type": "MediaEntry",
                    "expected_version": patch.version,
                    "current_version": entry.version,
                },
            )

        changed = apply_patch(entry, patch)
        if changed:
            await self.entry_repository.flush(session)
        if patch.tags is not None:
            await self.tag_sync.sync(session, entry, patch.tags, user_id)

        logger.info(
            "Updated media entry %s (%s)", entry.id, ", ".join(changed) or "no field changes"
        )
        return await self._project(session, entry)

    async def delete_entry(
        self, session: AsyncSession, user_id: uuid.UUID, entry_id: uuid.UUID
    ) -> None:
        """Soft-delete an entry. Its tag links stay stored but become invisible."""
        entry = await self._load(session, user_id, entry_id)
        await self.entry_repository.delete(session, entry)
        logger.info("Deleted media entry %s for user %s", entry.id, user_id)

    async def list_tags(self, session: AsyncSession, user_id: uuid.UUID) -> List[TagSummary]:
        """A user's live tags with live-entry counts."""
        rows = await self.tag_repository.list_with_counts(session, user_id)
        return [TagSummary(name=name, entry_count=count) for name, count in rows]
