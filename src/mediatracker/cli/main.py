"""
Main CLI entry point for mediatracker.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel

from mediatracker import __version__
from mediatracker.cli.commands.api import api_app
from mediatracker.cli.commands.db import db_app
from mediatracker.cli.commands.entries import entries_app
from mediatracker.exceptions import EXIT_CODE_GENERAL_ERROR, EXIT_CODE_SUCCESS

console = Console()

app = typer.Typer(
    name="mediatracker",
    help="Personal media tracking API",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(api_app, name="api", help="API server management commands")
app.add_typer(db_app, name="db", help="Database schema commands")
app.add_typer(entries_app, name="entries", help="Inspect media entries (administrative)")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(
        Panel(
            f"[bold blue]mediatracker[/bold blue] v{__version__}",
            title="Version",
            border_style="blue",
        )
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit"
    ),
) -> None:
    """
    mediatracker - Personal media tracking API.

    Keep a private list of movies and series with tags, ratings and notes.
    """
    if version:
        console.print(f"mediatracker v{__version__}")
        raise typer.Exit(code=EXIT_CODE_SUCCESS)

    if ctx.invoked_subcommand is None:
        console.print("[yellow]Use 'mediatracker --help' for available commands[/yellow]")
        raise typer.Exit(code=EXIT_CODE_GENERAL_ERROR)


if __name__ == "__main__":
    app()
