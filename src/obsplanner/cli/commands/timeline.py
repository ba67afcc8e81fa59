from __future__ import annotations

import typer

from ...infra.exceptions import PlannerError, ValidationError
from ...infra.uow import session
from ...runtime.clock import SystemClock
from ...usecases import timeline_view
from ...usecases.events import EventStore
from ._output import echo_json, fail

app = typer.Typer(name="timeline", help="Timeline layout inspection")

TIMELINE_KINDS = ("obs", "planning")


@app.command("show")
def show(
    kind: str = typer.Argument(..., help="obs or planning"),
    date: str = typer.Option(..., "--date", help="Anchor date (YYYY-MM-DD)"),
    zoom: int = typer.Option(24, "--zoom", help="Window length in hours: 24, 36 or 48"),
    events_path: str | None = typer.Option(None, "--events-path", help="Event store file (obs only)"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Print the lanes and placed intervals of one timeline window.

    Examples:
        obsplanner timeline show obs --date 2026-02-06
        obsplanner timeline show planning --date 2026-02-06 --zoom 48 --json
    """
    now = SystemClock().now_utc()
    try:
        if kind not in TIMELINE_KINDS:
            raise ValidationError(f"Unknown timeline: {kind}. Expected obs or planning")
        if kind == "obs":
            layout = timeline_view.build_obs_timeline(EventStore(events_path), date, zoom, now=now)
        else:
            with session() as db:
                layout = timeline_view.build_planning_timeline(db, date, zoom, now=now)
    except PlannerError as e:
        fail(e, json_output)
        return

    if json_output:
        echo_json({"status": "ok", "timeline": layout})
        return

    window = layout["window"]
    typer.echo(f"Window: {window['start']} -> {window['end']} ({window['zoom']}h)")
    if layout["daySplitPercent"] is not None:
        typer.echo(f"Day split at {layout['daySplitPercent']:.2f}%")
    for lane in layout["lanes"]:
        typer.echo(f"[{lane['key']}]")
        for interval in lane["intervals"]:
            if interval["isPlaceholder"]:
                typer.echo("  (empty)")
                continue
            typer.echo(
                f"  {interval['startPercent']:6.2f}% +{interval['widthPercent']:6.2f}%  "
                f"{interval['startTime']} - {interval['endTime']}  {interval['title']}"
            )
