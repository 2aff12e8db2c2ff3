"""
Administrative entry commands.

Reads a user's entries straight from the database. Unlike the API, these
commands can include soft-deleted entries.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mediatracker.config.database import db_manager
from mediatracker.exceptions import (
    EXIT_CODE_GENERAL_ERROR,
    EXIT_CODE_INVALID_ARGS,
    MediaTrackerError,
)
from mediatracker.models.media_entry import EntryListQuery, MediaEntryRead
from mediatracker.services.media_entry_service import MediaEntryService

logger = logging.getLogger(__name__)

console = Console()

entries_app = typer.Typer(
    name="entries",
    help="Inspect media entries (administrative)",
    no_args_is_help=True,
)


async def fetch_entries(
    user_id: uuid.UUID, query: EntryListQuery
) -> Tuple[List[MediaEntryRead], int]:
    """Run one list query in its own session."""
    service = MediaEntryService()
    try:
        async with db_manager.get_session_factory()() as session:
            return await service.list_entries(session, user_id, query)
    finally:
        await db_manager.close()


def build_entries_table(items: List[MediaEntryRead], total: int) -> Table:
    """Render entries as a rich table."""
    table = Table(
        title=f"Entries (showing {len(items)} of {total})",
        show_header=True,
        header_style="bold blue",
    )
    table.add_column("ID", style="dim", width=36)
    table.add_column("Title", style="cyan")
    table.add_column("Type")
    table.add_column("Status")
    table.add_column("Rating", justify="right")
    table.add_column("Tags", style="green")

    for item in items:
        table.add_row(
            str(item.id),
            item.title,
            item.type.value + (f" / {item.sub_type.value}" if item.sub_type else ""),
            item.status.value,
            "" if item.rating is None else str(item.rating),
            ", ".join(item.tags),
        )
    return table


@entries_app.command("list")
def list_entries(
    user: str = typer.Option(..., "--user", "-u", help="Owner user id (UUID)"),
    include_deleted: bool = typer.Option(
        False, "--include-deleted", help="Also show soft-deleted entries"
    ),
    q: Optional[str] = typer.Option(None, "--search", "-q", help="Title/notes substring"),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Exact tag name"),
    sort: str = typer.Option("updated", "--sort", help="title|created|updated|rating"),
    page: int = typer.Option(1, "--page", help="Page number"),
    page_size: int = typer.Option(20, "--page-size", help="Entries per page (max 100)"),
) -> None:
    """List a user's entries, optionally including deleted ones."""
    try:
        user_id = uuid.UUID(user)
    except ValueError:
        console.print(f"[red]Not a valid user id: {user}[/red]")
        raise typer.Exit(code=EXIT_CODE_INVALID_ARGS)

    query = EntryListQuery(
        q=q,
        tag=tag,
        sort=sort,
        page=page,
        page_size=page_size,
        include_deleted=include_deleted,
    )
    try:
        items, total = asyncio.run(fetch_entries(user_id, query))
    except MediaTrackerError as e:
        console.print(Panel(f"[red]{e.message}[/red]", title="Error", border_style="red"))
        raise typer.Exit(code=EXIT_CODE_GENERAL_ERROR)

    if not items:
        console.print(
            Panel("[yellow]No entries found[/yellow]", title="Entries", border_style="yellow")
        )
        return

    console.print(build_entries_table(items, total))
