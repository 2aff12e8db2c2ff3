"""
Standing visibility predicates.

Soft-deleted rows stay in the tables, so every read path composes these
predicates explicitly. An entry/tag join row has no state of its own: it
is visible only while both of its ends are live.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import ColumnElement, Select, and_, select, true

from mediatracker.db.models import EntryTag, MediaEntry, SoftDeleteMixin, Tag


def live(model: type[SoftDeleteMixin]) -> ColumnElement[bool]:
    """Predicate matching rows of ``model`` that are not soft-deleted."""
    return model.is_deleted.is_(False)


def visible_unless(model: type[SoftDeleteMixin], include_deleted: bool) -> ColumnElement[bool]:
    """``live(model)``, or no restriction for administrative reads."""
    return true() if include_deleted else live(model)


def entry_tag_visible() -> ColumnElement[bool]:
    """Predicate for join rows whose entry and tag are both live.

    Only meaningful on a statement joined to both ``MediaEntry`` and
    ``Tag`` (see :func:`select_visible_entry_tags`).
    """
    return and_(live(MediaEntry), live(Tag))


def select_visible_entry_tags(*columns: Any, include_deleted: bool = False) -> Select[Any]:
    """SELECT over join rows, joined to both ends, with the standing filter."""
    stmt = (
        select(*columns)
        .select_from(EntryTag)
        .join(MediaEntry, MediaEntry.id == EntryTag.media_entry_id)
        .join(Tag, Tag.id == EntryTag.tag_id)
    )
    if not include_deleted:
        stmt = stmt.where(entry_tag_visible())
    return stmt
