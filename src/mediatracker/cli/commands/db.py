"""CLI commands for schema management."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.panel import Panel

from mediatracker.config.database import db_manager

console = Console()

db_app = typer.Typer(
    name="db",
    help="Database schema commands",
    no_args_is_help=True,
)


@db_app.command("init")
def init_db() -> None:
    """Create all tables (existing tables are left alone)."""

    async def run_init() -> None:
        try:
            await db_manager.create_tables()
        finally:
            await db_manager.close()

    asyncio.run(run_init())
    console.print(
        Panel("[green]✓[/green] Tables created", title="Database", border_style="green")
    )


@db_app.command("drop")
def drop_db(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Drop all tables. Soft-deleted history is lost too."""
    if not yes:
        typer.confirm("Drop every mediatracker table?", abort=True)

    async def run_drop() -> None:
        try:
            await db_manager.drop_tables()
        finally:
            await db_manager.close()

    asyncio.run(run_drop())
    console.print(
        Panel("[yellow]Tables dropped[/yellow]", title="Database", border_style="yellow")
    )
