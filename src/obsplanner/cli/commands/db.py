from __future__ import annotations

import typer

from ...infra import db as _db
from ._output import echo_json

app = typer.Typer(name="db", help="Database operations")


@app.command("init")
def init(json_output: bool = typer.Option(False, "--json", help="Output in JSON format")):
    """Create every table that does not exist yet."""
    _db.init_db()
    tables = sorted(_db.Base.metadata.tables)
    if json_output:
        echo_json({"status": "ok", "tables": tables})
    else:
        typer.echo(f"Database ready ({len(tables)} tables)")
