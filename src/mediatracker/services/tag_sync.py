"""
Tag reconciliation for media entries.

Brings an entry's attached tags in line with a desired list of names
using the smallest add/remove delta. Names are compared and stored in
lowercase, so "Action", "action" and "ACTION" are one tag.
"""

from __future__ import annotations

import logging
import uuid
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from mediatracker.db.models import TAG_NAME_MAX_LENGTH, MediaEntry
from mediatracker.exceptions import ValidationError
from mediatracker.models.tag import TagDelta
from mediatracker.repositories.entry_tag_repository import EntryTagRepository
from mediatracker.repositories.tag_repository import TagRepository

logger = logging.getLogger(__name__)


def normalize_tag_names(names: Optional[Iterable[Optional[str]]]) -> List[str]:
    """
    Trim, drop blanks, lowercase and deduplicate tag names.

    Order of first appearance is kept. The length limit applies to the
    stored lowercase form, which can be longer than the input (U+0130
    lowercases to two code points).

    Examples
    --------
    >>> normalize_tag_names(["Action", " action ", "", "ACTION", "Drama"])
    ['action', 'drama']
    """
    normalized: List[str] = []
    seen: set[str] = set()
    for raw in names or ():
        if raw is None:
            continue
        name = raw.strip().lower()
        if not name or name in seen:
            continue
        if len(name) > TAG_NAME_MAX_LENGTH:
            raise ValidationError(
                message=(
                    f"Tag names must be at most {TAG_NAME_MAX_LENGTH} characters "
                    "once lowercased."
                ),
                field_name="tags",
                invalid_value=raw,
                rule="length",
            )
        seen.add(name)
        normalized.append(name)
    return normalized


class TagSyncService:
    """Reconciles an entry's tag set against a desired list of names."""

    def __init__(
        self,
        tag_repository: Optional[TagRepository] = None,
        entry_tag_repository: Optional[EntryTagRepository] = None,
    ) -> None:
        self.tag_repository = tag_repository or TagRepository()
        self.entry_tag_repository = entry_tag_repository or EntryTagRepository()

    async def sync(
        self,
        session: AsyncSession,
        entry: MediaEntry,
        desired_names: Optional[Iterable[Optional[str]]],
        user_id: uuid.UUID,
    ) -> TagDelta:
        """
        Make ``entry``'s visible tags exactly ``desired_names``.

        The entry must already be flushed. Nothing is committed here; the
        caller's transaction commits the tag changes together with the
        entry write.

        Parameters
        ----------
        session : AsyncSession
            Database session.
        entry : MediaEntry
            A live entry owned by ``user_id``.
        desired_names : Iterable[str] | None
            Target names in any casing; ``None`` or empty removes every tag.
        user_id : uuid.UUID
            Owner of the entry and of any tags created.

        Returns
        -------
        TagDelta
            Names attached, detached, and newly created.
        """
        desired = normalize_tag_names(desired_names)
        current = {
            tag.name.lower(): tag
            for tag in await self.entry_tag_repository.get_visible_tags(session, entry.id)
        }

        desired_set = set(desired)
        to_add = [name for name in desired if name not in current]
        to_remove = sorted(set(current) - desired_set)

        if to_remove:
            await self.entry_tag_repository.detach(
                session, entry.id, [current[name].id for name in to_remove]
            )

        created: List[str] = []
        if to_add:
            existing = await self.tag_repository.get_by_names(session, user_id, to_add)
            missing = [name for name in to_add if name not in existing]
            for tag in await self.tag_repository.create_many(session, user_id, missing):
                existing[tag.name] = tag
                created.append(tag.name)
            await self.entry_tag_repository.attach(
                session, entry.id, [existing[name].id for name in to_add]
            )

        delta = TagDelta(
            added=frozenset(to_add),
            removed=frozenset(to_remove),
            created=frozenset(created),
        )
        if not delta.is_noop:
            logger.debug(
                "Synced tags for entry %s: +%s -%s (new: %s)",
                entry.id,
                sorted(delta.added),
                sorted(delta.removed),
                sorted(delta.created),
            )
        return delta
