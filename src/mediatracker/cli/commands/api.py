"""CLI commands for API server management."""

from __future__ import annotations

import typer

from mediatracker.config.log_setup import configure_logging
from mediatracker.config.settings import settings

api_app = typer.Typer(
    name="api",
    help="API server management commands",
    no_args_is_help=True,
)


@api_app.command()
def start(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run the server on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    production: bool = typer.Option(
        False, "--production", help="Run in production mode"
    ),
) -> None:
    """
    Start the mediatracker API server.

    Development mode (default): auto-reload, info logging.
    Production mode: two workers, warning-level logging.

    Examples:
        mediatracker api start
        mediatracker api start --port 3000 --production
    """
    import uvicorn

    configure_logging("WARNING" if production else settings.log_level)

    if production:
        uvicorn.run(
            "mediatracker.api.main:app",
            host=host,
            port=port,
            workers=2,
            log_level="warning",
        )
    else:
        uvicorn.run(
            "mediatracker.api.main:app",
            host=host,
            port=port,
            reload=True,
            log_level="info",
        )
