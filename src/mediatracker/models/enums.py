"""
Enums for mediatracker models.

Defines the closed vocabularies used by media entries. Member values are
the canonical wire and storage tokens.
"""

from __future__ import annotations

from enum import Enum


class MediaType(str, Enum):
    """Top-level kind of a tracked title."""

    MOVIE = "Movie"
    SERIES = "Series"


class MediaSubType(str, Enum):
    """Optional refinement of the media type."""

    LIVE_ACTION = "LiveAction"
    ANIME = "Anime"
    MANGA = "Manga"
    ANIMATED = "Animated"
    DOCUMENTARY = "Documentary"
    OTHER = "Other"


class EntryStatus(str, Enum):
    """Where the user is with a title."""

    PLANNING = "Planning"
    WATCHING = "Watching"
    COMPLETED = "Completed"
    ON_HOLD = "OnHold"
    DROPPED = "Dropped"


class EntrySortField(str, Enum):
    """Sortable columns for entry listings."""

    TITLE = "title"
    CREATED = "created"
    UPDATED = "updated"
    RATING = "rating"


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"
