"""
OBS feed endpoints: upload, static load, event listing and available dates.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field

from ...infra.exceptions import ValidationError
from ...usecases.events import EventStore, load_static
from ..deps import get_event_store

router = APIRouter(prefix="/api", tags=["events"])


class LoadStaticRequest(BaseModel):
    """Request model for loading a CSV from the data directory."""
    filename: str | None = Field(None, description="CSV file name; the first one found when omitted")


@router.get("/events")
def list_events(
    date: str | None = Query(None, description="UTC day (YYYY-MM-DD) the events must overlap"),
    store: EventStore = Depends(get_event_store),
) -> list[dict[str, Any]]:
    return store.list_events(date)


@router.get("/events/dates")
def list_event_dates(store: EventStore = Depends(get_event_store)) -> list[str]:
    return store.available_dates()


@router.post("/upload")
async def upload_csv(request: Request, store: EventStore = Depends(get_event_store)) -> dict[str, Any]:
    """Ingest a feed export sent as the raw request body."""
    body = await request.body()
    if not body:
        raise ValidationError("No file uploaded")
    result = store.ingest_csv(body)
    return {
        "message": "File uploaded and processed successfully",
        "count": len(result.events),
        **result.stats,
    }


@router.post("/load-static")
def load_static_csv(
    payload: LoadStaticRequest | None = None,
    store: EventStore = Depends(get_event_store),
) -> dict[str, Any]:
    result = load_static(store, filename=payload.filename if payload else None)
    return {"message": "Static file loaded and processed successfully", **result}
