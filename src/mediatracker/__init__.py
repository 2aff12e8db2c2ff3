"""
mediatracker - Personal media tracking API.

A small, multi-user service for keeping a private list of movies and
series, with per-user tags, ratings and notes, backed by an async
SQLAlchemy store with soft-delete auditing.
"""

from __future__ import annotations

__version__ = "0.3.0"
__author__ = "mediatracker"
__email__ = "noreply@mediatracker.dev"
__license__ = "AGPL-3.0-or-later"

__all__ = ["__version__", "__author__", "__email__", "__license__"]
