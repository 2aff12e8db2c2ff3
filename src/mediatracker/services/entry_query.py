"""
List-request normalization.

Turns raw list parameters into an ``EntryFilter``: enum tokens decoded
(bad ones rejected with the allowed values), paging clamped to sane
defaults, and sort/direction tokens resolved with fallbacks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Type, TypeVar

from mediatracker.config.settings import settings
from mediatracker.exceptions import ValidationError
from mediatracker.models.decoding import DecodeFailure, decode_enum
from mediatracker.models.enums import (
    EntrySortField,
    EntryStatus,
    MediaSubType,
    MediaType,
    SortOrder,
)
from mediatracker.models.media_entry import EntryListQuery

logger = logging.getLogger(__name__)

E = TypeVar("E", MediaType, MediaSubType, EntryStatus)


@dataclass(frozen=True)
class EntryFilter:
    """Normalized, validated list parameters."""

    q: Optional[str] = None
    type: Optional[MediaType] = None
    sub_type: Optional[MediaSubType] = None
    status: Optional[EntryStatus] = None
    tag: Optional[str] = None
    sort: EntrySortField = EntrySortField.UPDATED
    order: SortOrder = SortOrder.DESC
    page: int = 1
    page_size: int = 20
    include_deleted: bool = False

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


def _decode_filter(enum_cls: Type[E], field_name: str, token: Optional[str]) -> Optional[E]:
    token = _blank_to_none(token)
    if token is None:
        return None
    result = decode_enum(enum_cls, token)
    if isinstance(result, DecodeFailure):
        raise ValidationError(
            message=(
                f"Invalid '{field_name}' value '{result.token}'. "
                f"Allowed: {', '.join(result.allowed)}"
            ),
            field_name=field_name,
            invalid_value=result.token,
            rule="enum",
            allowed_values=result.allowed,
        )
    return result.value


def normalize_page(page: int) -> int:
    """Non-positive page numbers fall back to the first page."""
    return page if page > 0 else 1


def normalize_page_size(page_size: int) -> int:
    """Page sizes outside 1..max fall back to the default size."""
    if page_size < 1 or page_size > settings.max_page_size:
        return settings.default_page_size
    return page_size


def resolve_sort(token: Optional[str]) -> EntrySortField:
    """Sort field by name, falling back to ``updated`` for unknown tokens."""
    token = _blank_to_none(token)
    if token is not None:
        for field in EntrySortField:
            if field.value == token.lower():
                return field
        logger.debug("Unknown sort '%s'; using default", token)
    return EntrySortField.UPDATED


def resolve_order(token: Optional[str]) -> SortOrder:
    """Ascending only when asked for explicitly; anything else is descending."""
    token = _blank_to_none(token)
    if token is not None and token.lower() == SortOrder.ASC.value:
        return SortOrder.ASC
    return SortOrder.DESC


def build_entry_filter(query: EntryListQuery) -> EntryFilter:
    """
    Validate and normalize raw list parameters.

    Parameters
    ----------
    query : EntryListQuery
        Parameters as received from the caller.

    Returns
    -------
    EntryFilter
        Filter ready for the repository.

    Raises
    ------
    ValidationError
        If ``type``, ``sub_type`` or ``status`` is not a recognized token.
    """
    tag = _blank_to_none(query.tag)
    return EntryFilter(
        q=_blank_to_none(query.q),
        type=_decode_filter(MediaType, "type", query.type),
        sub_type=_decode_filter(MediaSubType, "sub_type", query.sub_type),
        status=_decode_filter(EntryStatus, "status", query.status),
        tag=tag.lower() if tag else None,
        sort=resolve_sort(query.sort),
        order=resolve_order(query.dir),
        page=normalize_page(query.page),
        page_size=normalize_page_size(query.page_size),
        include_deleted=query.include_deleted,
    )
