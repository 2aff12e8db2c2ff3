"""
Pydantic models for mediatracker.

Wire-facing request, query and read models shared by the services, the
API and the CLI.
"""

from __future__ import annotations

from .decoding import DecodeFailure, Decoded, decode_enum
from .enums import EntrySortField, EntryStatus, MediaSubType, MediaType, SortOrder
from .media_entry import (
    ClearableField,
    EntryListQuery,
    MediaEntryDraft,
    MediaEntryPatch,
    MediaEntryRead,
)
from .tag import TagDelta, TagSummary

__all__ = [
    "ClearableField",
    "DecodeFailure",
    "Decoded",
    "EntryListQuery",
    "EntrySortField",
    "EntryStatus",
    "MediaEntryDraft",
    "MediaEntryPatch",
    "MediaEntryRead",
    "MediaSubType",
    "MediaType",
    "SortOrder",
    "TagDelta",
    "TagSummary",
    "decode_enum",
]
