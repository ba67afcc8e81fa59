"""
Main CLI application using Typer with router-based command dispatch.

All command groups are registered through the CliRouter; ``serve`` starts
the HTTP API.
"""

from __future__ import annotations

import typer

from ..infra.logging import configure_logging
from .commands import db, events, resource, timeline
from .router import get_router

app = typer.Typer(help="OBS planner operator CLI")

router = get_router(app)

router.register("events", events.app, help_text="OBS feed ingest and inspection")
router.register("resource", resource.app, help_text="Resource registry operations")
router.register("timeline", timeline.app, help_text="Timeline layout inspection")
router.register("db", db.app, help_text="Database operations")


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (defaults to HTTP_HOST)"),
    port: int | None = typer.Option(None, "--port", help="Bind port (defaults to HTTP_PORT)"),
):
    """Run the HTTP API."""
    from ..web.server import run_server

    run_server(host=host, port=port)


@app.callback()
def main(
    log_level: str | None = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    """OBS planner - broadcast operations timeline."""
    configure_logging(log_level)


def cli():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
