"""
Repository layer for data access patterns.

Every read composes the standing soft-delete filter from
``repositories.visibility``; every query is scoped to one user.
"""

from .base import BaseSQLAlchemyRepository
from .entry_tag_repository import EntryTagRepository
from .media_entry_repository import MediaEntryRepository
from .tag_repository import TagRepository
from .user_repository import UserRepository

__all__ = [
    "BaseSQLAlchemyRepository",
    "EntryTagRepository",
    "MediaEntryRepository",
    "TagRepository",
    "UserRepository",
]
