"""
Mapping and validation between wire models and media entry rows.

Everything a write request carries is checked here before any column is
touched: titles, enum tokens, the rating rule and notes normalization.
Tags are only validated; attaching them is the tag reconciliation step
the caller runs after the entry is flushed.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from mediatracker.db.models import NOTES_MAX_LENGTH, TITLE_MAX_LENGTH, MediaEntry
from mediatracker.exceptions import ValidationError
from mediatracker.models.decoding import DecodeFailure, decode_enum
from mediatracker.models.enums import EntryStatus, MediaSubType, MediaType
from mediatracker.models.media_entry import (
    MediaEntryDraft,
    MediaEntryPatch,
    MediaEntryRead,
)
from mediatracker.services.tag_sync import normalize_tag_names

E = TypeVar("E", MediaType, MediaSubType, EntryStatus)

RATING_MIN = Decimal("0")
RATING_MAX = Decimal("10")
RATING_STEP = Decimal("0.5")

RATING_RANGE_MESSAGE = "Rating must be between 0 and 10 (inclusive)."
RATING_PRECISION_MESSAGE = "Rating must use at most one decimal place (e.g., 7, 7.5, 8.0)."
RATING_STEP_MESSAGE = "Rating must be in increments of 0.5."


def validate_rating(rating: Optional[Decimal]) -> Optional[Decimal]:
    """
    Check a rating against the rating rule.

    Rules are checked in order: range (0 to 10 inclusive), precision (at
    most one fractional digit), step (a multiple of 0.5). ``None`` is
    always valid.

    Parameters
    ----------
    rating : Decimal | None
        Candidate rating.

    Returns
    -------
    Decimal | None
        The rating, unchanged.

    Raises
    ------
    ValidationError
        With ``rule`` set to ``"range"``, ``"precision"`` or ``"step"``.
    """
    if rating is None:
        return None

    if not rating.is_finite() or rating < RATING_MIN or rating > RATING_MAX:
        rule, message = "range", RATING_RANGE_MESSAGE
    elif (rating * 10) % 1 != 0:
        rule, message = "precision", RATING_PRECISION_MESSAGE
    elif rating % RATING_STEP != 0:
        rule, message = "step", RATING_STEP_MESSAGE
    else:
        return rating

    raise ValidationError(
        message=message, field_name="rating", invalid_value=rating, rule=rule
    )


def _validate_title(title: Optional[str]) -> str:
    trimmed = (title or "").strip()
    if not trimmed:
        raise ValidationError(
            message="Title is required.",
            field_name="title",
            invalid_value=title,
            rule="required",
        )
    if len(trimmed) > TITLE_MAX_LENGTH:
        raise ValidationError(
            message=f"Title must be at most {TITLE_MAX_LENGTH} characters.",
            field_name="title",
            invalid_value=title,
            rule="length",
        )
    return trimmed


def _normalize_notes(notes: Optional[str]) -> Optional[str]:
    if notes is None or not notes.strip():
        return None
    if len(notes) > NOTES_MAX_LENGTH:
        raise ValidationError(
            message=f"Notes must be at most {NOTES_MAX_LENGTH} characters.",
            field_name="notes",
            invalid_value=notes[:40] + "...",
            rule="length",
        )
    return notes


def _decode_field(enum_cls: Type[E], field_name: str, token: str) -> E:
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


def validate_tags(tags: Optional[Iterable[Optional[str]]]) -> Optional[List[str]]:
    """Normalized tag names, or ``None`` when the request carried no list."""
    if tags is None:
        return None
    return normalize_tag_names(tags)


def build_entry(draft: MediaEntryDraft, user_id: uuid.UUID) -> MediaEntry:
    """
    Validate a create draft and build an unsaved entry owned by ``user_id``.

    Audit columns are left to the session; tags are not attached here.
    """
    title = _validate_title(draft.title)

    if draft.type is None or not draft.type.strip():
        raise ValidationError(
            message="Type is required.", field_name="type", rule="required"
        )
    media_type = _decode_field(MediaType, "type", draft.type)

    sub_type = None
    if draft.sub_type is not None and draft.sub_type.strip():
        sub_type = _decode_field(MediaSubType, "sub_type", draft.sub_type)

    status = EntryStatus.PLANNING
    if draft.status is not None and draft.status.strip():
        status = _decode_field(EntryStatus, "status", draft.status)

    rating = validate_rating(draft.rating)
    notes = _normalize_notes(draft.notes)
    validate_tags(draft.tags)

    return MediaEntry(
        user_id=user_id,
        title=title,
        type=media_type,
        sub_type=sub_type,
        status=status,
        rating=rating,
        notes=notes,
    )


def collect_patch_changes(patch: MediaEntryPatch) -> Dict[str, Any]:
    """
    Validate a patch and return the column values it would assign.

    Only fields present with a non-null value, plus fields named in
    ``clear``, appear in the result. Raises before returning if any
    field is invalid, so a patch is applied entirely or not at all.
    """
    changes: Dict[str, Any] = {}

    for field in patch.clear:
        if patch.provided(field.value):
            raise ValidationError(
                message=f"'{field.value}' cannot be both set and cleared.",
                field_name=field.value,
                rule="conflict",
            )
        changes[field.value] = None

    if patch.provided("title"):
        changes["title"] = _validate_title(patch.title)
    if patch.provided("type"):
        changes["type"] = _decode_field(MediaType, "type", patch.type or "")
    if patch.provided("sub_type"):
        changes["sub_type"] = _decode_field(MediaSubType, "sub_type", patch.sub_type or "")
    if patch.provided("status"):
        changes["status"] = _decode_field(EntryStatus, "status", patch.status or "")
    if patch.provided("rating"):
        changes["rating"] = validate_rating(patch.rating)
    if patch.provided("notes"):
        # Blank notes mean "no notes"
        changes["notes"] = _normalize_notes(patch.notes)

    validate_tags(patch.tags)
    return changes


def apply_patch(entry: MediaEntry, patch: MediaEntryPatch) -> List[str]:
    """Validate ``patch`` in full, then assign it to ``entry``.

    Returns the names of the columns whose value actually changed.
    """
    changes = collect_patch_changes(patch)
    changed: List[str] = []
    for field, value in changes.items():
        if getattr(entry, field) != value:
            setattr(entry, field, value)
            changed.append(field)
    return changed


def to_read(entry: MediaEntry, tag_names: Iterable[str]) -> MediaEntryRead:
    """Project an entry and its tag names into the read model."""
    return MediaEntryRead(
        id=entry.id,
        title=entry.title,
        type=entry.type,
        sub_type=entry.sub_type,
        status=entry.status,
        rating=entry.rating,
        notes=entry.notes,
        tags=list(tag_names),
        created_at=entry.created_at,
        updated_at=entry.updated_at,
        version=entry.version,
    )
