from __future__ import annotations

from typing import Optional

import typer
import uvicorn

from shared.logging import setup_logging

from .app import create_app
from .config import get_settings
from .db import ensure_schema, get_connection

cli = typer.Typer(help="Identity Reconciliation Service entrypoint")


@cli.command()
def serve(host: str = "0.0.0.0", port: Optional[int] = None) -> None:
    """Start the service using uvicorn."""

    settings = get_settings()
    app = create_app(settings)
    uvicorn.run(app, host=host, port=port or settings.port, log_level=settings.log_level.lower(), lifespan="on")


@cli.command("init-db")
def init_db() -> None:
    """Create the contacts table and indexes in the configured database."""

    settings = get_settings()
    setup_logging(settings.log_level)
    with get_connection(settings.database_url) as conn:
        ensure_schema(conn)
    typer.echo("contacts schema ready")


if __name__ == "__main__":
    cli()
