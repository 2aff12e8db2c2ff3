"""
Service layer for mediatracker.

Business logic over the repositories: entry CRUD, tag reconciliation,
mapping/validation of write requests and list-query normalization.
"""

from __future__ import annotations

__all__: list[str] = []
