"""Shared output helpers for CLI commands."""

from __future__ import annotations

import json
from typing import Any

import typer

from ...infra.exceptions import ConstraintError, IngestError, NotFoundError, PlannerError, ValidationError

_ERROR_CODES: tuple[tuple[type[PlannerError], str], ...] = (
    (ValidationError, "VALIDATION_ERROR"),
    (NotFoundError, "NOT_FOUND"),
    (ConstraintError, "DUPLICATE"),
    (IngestError, "INGEST_ERROR"),
)


def error_code(exc: PlannerError) -> str:
    for error_type, code in _ERROR_CODES:
        if isinstance(exc, error_type):
            return code
    return "ERROR"


def echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


def fail(exc: PlannerError, json_output: bool) -> None:
    """Report `exc` and exit 1."""
    if json_output:
        echo_json({"status": "error", "code": error_code(exc), "error": str(exc)})
    else:
        typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(1)
