"""
Tests for the mediatracker CLI.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from mediatracker import __version__
from mediatracker.cli.main import app
from mediatracker.config.database import db_manager
from mediatracker.exceptions import ValidationError
from mediatracker.models.enums import EntryStatus, MediaSubType, MediaType
from mediatracker.models.media_entry import EntryListQuery, MediaEntryRead

runner = CliRunner()


def _read(title: str, **overrides: object) -> MediaEntryRead:
    fields: dict[str, object] = {
        "id": uuid.uuid4(),
        "title": title,
        "type": MediaType.SERIES,
        "sub_type": MediaSubType.ANIME,
        "status": EntryStatus.WATCHING,
        "rating": Decimal("9.5"),
        "tags": ["classic", "scifi"],
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 2, tzinfo=timezone.utc),
        "version": 1,
    }
    fields.update(overrides)
    return MediaEntryRead(**fields)


class TestMainApp:
    """Tests for the top-level app."""

    def test_version_command(self) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"mediatracker v{__version__}" in result.stdout

    def test_help_lists_command_groups(self) -> None:
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for group in ("api", "db", "entries"):
            assert group in result.stdout


class TestEntriesList:
    """Tests for `mediatracker entries list`."""

    def test_invalid_user_id_exits_2(self) -> None:
        result = runner.invoke(app, ["entries", "list", "--user", "not-a-uuid"])

        assert result.exit_code == 2
        assert "Not a valid user id" in result.stdout

    def test_lists_entries_with_deleted(self) -> None:
        user_id = uuid.uuid4()
        fetch = AsyncMock(return_value=([_read("Cowboy Bebop")], 1))

        with patch("mediatracker.cli.commands.entries.fetch_entries", fetch):
            result = runner.invoke(
                app,
                [
                    "entries",
                    "list",
                    "--user",
                    str(user_id),
                    "--include-deleted",
                    "--tag",
                    "scifi",
                ],
            )

        assert result.exit_code == 0, result.stdout
        assert "Cowboy" in result.stdout
        called_user, query = fetch.call_args.args
        assert called_user == user_id
        assert isinstance(query, EntryListQuery)
        assert query.include_deleted is True
        assert query.tag == "scifi"

    def test_empty_result(self) -> None:
        fetch = AsyncMock(return_value=([], 0))

        with patch("mediatracker.cli.commands.entries.fetch_entries", fetch):
            result = runner.invoke(app, ["entries", "list", "--user", str(uuid.uuid4())])

        assert result.exit_code == 0
        assert "No entries found" in result.stdout

    def test_domain_error_exits_1(self) -> None:
        fetch = AsyncMock(side_effect=ValidationError("Invalid 'type' value"))

        with patch("mediatracker.cli.commands.entries.fetch_entries", fetch):
            result = runner.invoke(app, ["entries", "list", "--user", str(uuid.uuid4())])

        assert result.exit_code == 1
        assert "Invalid 'type' value" in result.stdout


class TestDbCommands:
    """Tests for `mediatracker db`."""

    def test_init_creates_tables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        create = AsyncMock()
        close = AsyncMock()
        monkeypatch.setattr(db_manager, "create_tables", create)
        monkeypatch.setattr(db_manager, "close", close)

        result = runner.invoke(app, ["db", "init"])

        assert result.exit_code == 0
        create.assert_awaited_once()
        close.assert_awaited_once()

    def test_drop_requires_confirmation(self, monkeypatch: pytest.MonkeyPatch) -> None:
        drop = AsyncMock()
        monkeypatch.setattr(db_manager, "drop_tables", drop)
        monkeypatch.setattr(db_manager, "close", AsyncMock())

        result = runner.invoke(app, ["db", "drop"], input="n\n")

        assert result.exit_code != 0
        drop.assert_not_awaited()

    def test_drop_with_yes(self, monkeypatch: pytest.MonkeyPatch) -> None:
        drop = AsyncMock()
        monkeypatch.setattr(db_manager, "drop_tables", drop)
        monkeypatch.setattr(db_manager, "close", AsyncMock())

        result = runner.invoke(app, ["db", "drop", "--yes"])

        assert result.exit_code == 0
        drop.assert_awaited_once()
