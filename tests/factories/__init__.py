"""
Test data factories using factory_boy.
"""

from .media_entry_factory import (
    EntryListQueryFactory,
    MediaEntryDraftFactory,
    MediaEntryPatchFactory,
)
from .user_factory import CredentialsFactory, UserFactory

__all__ = [
    "CredentialsFactory",
    "EntryListQueryFactory",
    "MediaEntryDraftFactory",
    "MediaEntryPatchFactory",
    "UserFactory",
]
