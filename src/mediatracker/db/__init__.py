"""
Database module for mediatracker.

Contains the SQLAlchemy models and the soft-delete aware session used by
every repository.
"""

from __future__ import annotations

__all__: list[str] = []
