"""
Database models for mediatracker.

This module contains the SQLAlchemy models for users, media entries,
per-user tags and the entry/tag join table. Entries and tags are never
physically removed; see ``mediatracker.db.audit`` for the session that
turns deletes into soft deletes and stamps the audit columns.
"""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    TypeDecorator,
    Uuid,
    text,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func

from mediatracker.models.enums import EntryStatus, MediaSubType, MediaType

TITLE_MAX_LENGTH = 200
NOTES_MAX_LENGTH = 2000
TAG_NAME_MAX_LENGTH = 64


def utc_now() -> datetime.datetime:
    """Get current UTC time."""
    return datetime.datetime.now(datetime.timezone.utc)


class UTCDateTime(TypeDecorator[datetime.datetime]):
    """Timezone-aware datetime that always loads as UTC.

    SQLite drops the offset on storage, so naive values coming back are
    treated as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(
        self, value: Optional[datetime.datetime], dialect: Any
    ) -> Optional[datetime.datetime]:
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(datetime.timezone.utc)
        return value

    def process_result_value(
        self, value: Optional[datetime.datetime], dialect: Any
    ) -> Optional[datetime.datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=datetime.timezone.utc)
        return value


def _enum_column(enum_cls: type, length: int = 20) -> SAEnum:
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=length,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class AuditMixin:
    """Creation/update timestamps, stamped by the session on flush."""

    created_at: Mapped[datetime.datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now, server_default=func.now()
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now, server_default=func.now()
    )


class SoftDeleteMixin(AuditMixin):
    """Soft-delete columns.

    ``is_deleted`` and ``deleted_at`` move together: a live row has
    ``deleted_at`` unset, a deleted row always has it stamped.
    """

    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    deleted_at: Mapped[Optional[datetime.datetime]] = mapped_column(UTCDateTime)


class User(AuditMixin, Base):
    """Account that owns media entries and tags."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)


class MediaEntry(SoftDeleteMixin, Base):
    """A movie or series on a user's list."""

    __tablename__ = "media_entries"

    # Primary key
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Ownership
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )

    # Entry content
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    type: Mapped[MediaType] = mapped_column(_enum_column(MediaType), nullable=False)
    sub_type: Mapped[Optional[MediaSubType]] = mapped_column(_enum_column(MediaSubType))
    status: Mapped[EntryStatus] = mapped_column(
        _enum_column(EntryStatus), nullable=False, default=EntryStatus.PLANNING
    )
    rating: Mapped[Optional[Decimal]] = mapped_column(Numeric(3, 1, asdecimal=True))
    notes: Mapped[Optional[str]] = mapped_column(String(NOTES_MAX_LENGTH))

    # Optimistic concurrency
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_media_entries_user_type", "user_id", "type"),
        Index("ix_media_entries_user_status", "user_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<MediaEntry(id={self.id}, title={self.title!r}, type={self.type})>"


class Tag(SoftDeleteMixin, Base):
    """Per-user label; names are stored lowercase."""

    __tablename__ = "tags"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(TAG_NAME_MAX_LENGTH), nullable=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        # Unique among live rows only, so a deleted tag never blocks a new one
        Index(
            "uq_tags_user_name_live",
            "user_id",
            "name",
            unique=True,
            postgresql_where=text("NOT is_deleted"),
            sqlite_where=text("is_deleted = 0"),
        ),
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name={self.name!r})>"


class EntryTag(Base):
    """Join row between an entry and a tag.

    Has no soft-delete state of its own: it is visible only while both
    the entry and the tag are live.
    """

    __tablename__ = "entry_tags"

    media_entry_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("media_entries.id"), primary_key=True
    )
    tag_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tags.id"), primary_key=True, index=True
    )

    created_at: Mapped[datetime.datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now, server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<EntryTag(entry={self.media_entry_id}, tag={self.tag_id})>"
