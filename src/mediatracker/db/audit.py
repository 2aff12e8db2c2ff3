"""
Audit and soft-delete enforcement at the session boundary.

``AuditedSession`` is the sync session class behind every ``AsyncSession``
the application opens. Deleting a soft-deletable row through it marks the
row deleted instead of removing it, and a ``before_flush`` hook stamps the
audit columns for every pending insert and update in one place, so
callers never set timestamps themselves.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from mediatracker.db.models import AuditMixin, SoftDeleteMixin, utc_now
from mediatracker.exceptions import RepositoryError

logger = logging.getLogger(__name__)


class AuditedSession(Session):
    """Session that never physically deletes soft-deletable rows."""

    def delete(self, instance: object) -> None:
        if isinstance(instance, SoftDeleteMixin):
            # Rewritten to an UPDATE; the flush hook stamps deleted_at
            instance.is_deleted = True
            return
        super().delete(instance)


def _is_resurrection(instance: SoftDeleteMixin) -> bool:
    history = inspect(instance).attrs.is_deleted.history
    return True in history.deleted and not instance.is_deleted


@event.listens_for(AuditedSession, "before_flush")
def stamp_audit_columns(session: Session, flush_context: Any, instances: Any) -> None:
    """Stamp created/updated/deleted timestamps on pending rows."""
    now = utc_now()

    for instance in session.new:
        if isinstance(instance, AuditMixin):
            instance.created_at = now
            instance.updated_at = now
        if isinstance(instance, SoftDeleteMixin):
            instance.is_deleted = False
            instance.deleted_at = None

    for instance in session.dirty:
        if not isinstance(instance, AuditMixin):
            continue
        if not session.is_modified(instance, include_collections=False):
            continue

        if isinstance(instance, SoftDeleteMixin):
            if _is_resurrection(instance):
                raise RepositoryError(
                    message="Soft-deleted rows cannot be restored",
                    operation="update",
                    entity_type=type(instance).__name__,
                )
            if instance.is_deleted and instance.deleted_at is None:
                instance.deleted_at = now
                logger.debug("Soft-deleting %r", instance)
            elif not instance.is_deleted:
                instance.deleted_at = None

        instance.updated_at = now

    for instance in session.deleted:
        if isinstance(instance, SoftDeleteMixin):
            raise RepositoryError(
                message="Soft-deletable rows cannot be physically removed",
                operation="delete",
                entity_type=type(instance).__name__,
            )
