"""
Command-line interface for mediatracker.

Runs the API server, manages the schema, and offers administrative reads
that the HTTP API does not expose.
"""

from __future__ import annotations

__all__: list[str] = []
