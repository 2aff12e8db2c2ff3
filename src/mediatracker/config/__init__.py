"""
Configuration management module for mediatracker.

Handles application settings, environment variables and database
connection management.
"""

from __future__ import annotations

__all__: list[str] = []
