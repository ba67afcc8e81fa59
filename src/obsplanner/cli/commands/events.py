from __future__ import annotations

import typer

from ...infra.exceptions import PlannerError
from ...usecases.events import EventStore, ingest_file
from ._output import echo_json, fail

app = typer.Typer(name="events", help="OBS feed ingest and inspection")


@app.command("ingest")
def ingest(
    path: str = typer.Argument(..., help="Path to an OBS schedule CSV export"),
    events_path: str | None = typer.Option(None, "--events-path", help="Event store file (defaults to EVENTS_PATH)"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Replace the stored events with the rows of a feed export.

    Examples:
        obsplanner events ingest ./data/schedule.csv
        obsplanner events ingest ./data/schedule.csv --json
    """
    store = EventStore(events_path)
    try:
        result = ingest_file(store, path)
    except PlannerError as e:
        fail(e, json_output)
        return

    if json_output:
        echo_json({"status": "ok", "count": len(result.events), **result.stats})
    else:
        typer.echo(f"Ingested {len(result.events)} events from {path}")
        typer.echo(f"  Rows: {result.total_rows}")
        typer.echo(f"  Valid: {result.valid_count}")
        typer.echo(f"  Invalid: {result.invalid_count}")


@app.command("dates")
def dates(
    events_path: str | None = typer.Option(None, "--events-path", help="Event store file (defaults to EVENTS_PATH)"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """List the UTC dates that have events."""
    available = EventStore(events_path).available_dates()
    if json_output:
        echo_json({"status": "ok", "dates": available})
        return
    if not available:
        typer.echo("No events stored")
        return
    for day in available:
        typer.echo(day)
