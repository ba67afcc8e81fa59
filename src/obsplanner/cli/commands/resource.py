from __future__ import annotations

import typer

from ...infra.exceptions import PlannerError
from ...infra.uow import session
from ...usecases import resources as _uc_resources
from ._output import echo_json, fail

app = typer.Typer(name="resource", help="Resource registry operations")


@app.command("list")
def list_resources(
    resource_type: str = typer.Argument(..., help="commentators, producers, encoders, booths, suites or networks"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """List every resource of one type, by name."""
    try:
        with session() as db:
            rows = _uc_resources.list_resources(db, resource_type)
    except PlannerError as e:
        fail(e, json_output)
        return

    if json_output:
        echo_json({"status": "ok", "total": len(rows), resource_type: rows})
        return
    if not rows:
        typer.echo(f"No {resource_type} found")
        return
    for row in rows:
        typer.echo(f"{row['name']}  ({row['id']})")


@app.command("add")
def add_resource(
    resource_type: str = typer.Argument(..., help="Resource type"),
    name: str = typer.Argument(..., help="Resource name"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Add one resource.

    Examples:
        obsplanner resource add encoders "TX 28"
        obsplanner resource add commentators "Jane Doe"
    """
    try:
        with session() as db:
            result = _uc_resources.add_resource(db, resource_type, name=name)
    except PlannerError as e:
        fail(e, json_output)
        return

    if json_output:
        echo_json({"status": "ok", "resource": result})
    else:
        typer.echo(f"Added {resource_type[:-1]}: {result['name']} ({result['id']})")


@app.command("seed")
def seed(json_output: bool = typer.Option(False, "--json", help="Output in JSON format")):
    """Insert the standard encoders (TX 01-27) and booths (VT 51-62)."""
    with session() as db:
        created = _uc_resources.seed_default_resources(db)
    if json_output:
        echo_json({"status": "ok", "created": created})
    else:
        typer.echo(f"Seeded {created['encoders']} encoders and {created['booths']} booths")
