"""
Media entry models.

Defines the Pydantic models that cross the service boundary: the create
draft, the presence-tracking patch, the list query and the read
projection. Enum fields on the write and query models are kept as raw
tokens; the mapping layer decodes them so a bad token is reported with
the allowed values.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Optional, Set
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator

from .enums import EntryStatus, MediaSubType, MediaType

# Ratings leave the API as JSON numbers, not strings
RatingValue = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]


def _coerce_rating(v: object) -> object:
    if isinstance(v, bool):
        raise ValueError("Rating must be a number")
    if isinstance(v, float):
        # str() keeps the literal the client sent (7.3, not 7.2999...)
        return Decimal(str(v))
    return v


class ClearableField(str, Enum):
    """Optional fields a patch can explicitly reset to empty."""

    SUB_TYPE = "sub_type"
    RATING = "rating"
    NOTES = "notes"


class MediaEntryDraft(BaseModel):
    """Model for creating a media entry.

    ``title`` and ``type`` are optional here so that a missing value is
    reported by the mapping layer with the same shape as every other
    rule failure.
    """

    title: Optional[str] = Field(default=None, description="Display title")
    type: Optional[str] = Field(default=None, description="Movie or Series")
    sub_type: Optional[str] = Field(default=None, description="Optional subtype")
    status: Optional[str] = Field(default=None, description="Defaults to Planning")
    rating: Optional[Decimal] = Field(default=None, description="0-10 in 0.5 steps")
    notes: Optional[str] = Field(default=None, description="Free-form notes")
    tags: Optional[List[str]] = Field(
        default=None, description="Tag names; case-insensitive"
    )

    @field_validator("rating", mode="before")
    @classmethod
    def coerce_rating(cls, v: object) -> object:
        """Read float ratings through their decimal literal."""
        return _coerce_rating(v)


class MediaEntryPatch(BaseModel):
    """Model for partially updating a media entry.

    Only fields present in the payload with a non-null value are applied.
    ``clear`` names optional fields to reset explicitly, since a null
    value means "leave unchanged". ``tags`` set to a list (even an empty
    one) replaces the entry's tags; absent or null leaves them alone.
    """

    id: Optional[UUID] = Field(
        default=None, description="Must match the route id when given"
    )
    version: Optional[int] = Field(
        default=None, ge=1, description="Expected current version"
    )
    title: Optional[str] = None
    type: Optional[str] = None
    sub_type: Optional[str] = None
    status: Optional[str] = None
    rating: Optional[Decimal] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
    clear: Set[ClearableField] = Field(default_factory=set)

    @field_validator("rating", mode="before")
    @classmethod
    def coerce_rating(cls, v: object) -> object:
        """Read float ratings through their decimal literal."""
        return _coerce_rating(v)

    def provided(self, field_name: str) -> bool:
        """Whether ``field_name`` was sent with a non-null value."""
        return (
            field_name in self.model_fields_set
            and getattr(self, field_name) is not None
        )


class MediaEntryRead(BaseModel):
    """Read projection of a media entry with its tag names."""

    id: UUID
    title: str
    type: MediaType
    sub_type: Optional[MediaSubType] = None
    status: EntryStatus
    rating: Optional[RatingValue] = None
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    version: int

    model_config = ConfigDict(from_attributes=True)


class EntryListQuery(BaseModel):
    """Raw list parameters, before normalization.

    Out-of-range paging and unknown sort tokens are normalized rather
    than rejected; unknown enum filter tokens are rejected.
    """

    q: Optional[str] = Field(default=None, description="Title or notes substring")
    type: Optional[str] = None
    sub_type: Optional[str] = None
    status: Optional[str] = None
    tag: Optional[str] = Field(default=None, description="Exact tag name")
    sort: Optional[str] = Field(default=None, description="title|created|updated|rating")
    dir: Optional[str] = Field(default=None, description="asc|desc")
    page: int = 1
    page_size: int = 20
    include_deleted: bool = Field(
        default=False, description="Administrative access to soft-deleted rows"
    )
