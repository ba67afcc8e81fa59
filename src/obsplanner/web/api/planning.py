"""
Planning lane, live booths and timeline endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ...infra.exceptions import ValidationError
from ...runtime.clock import Clock
from ...runtime.subscriptions import SubscriptionRegistry
from ...timeline.gestures import FinalizedRange, GestureKind
from ...timeline.records import parse_instant
from ...usecases import blocks, planning, timeline_view
from ...usecases.events import EventStore
from ...usecases.gesture_commit import apply_finalized_range
from ..deps import get_clock, get_db, get_event_store, get_registry

router = APIRouter(prefix="/api", tags=["planning"])


class PlanningPayload(BaseModel):
    onAirBlockIds: list[str] = Field(default_factory=list, description="Block ids on the On Air lane, in order")
    overrides: dict[str, dict[str, Any]] = Field(default_factory=dict, description="Per-block producer overrides")


class CommitPayload(BaseModel):
    """A finalized gesture range sent back by the timeline surface."""
    kind: GestureKind
    lane_key: str
    start_time: str
    end_time: str
    interval_id: str | None = None
    name: str | None = Field(None, description="Name for a created block")


@router.get("/planning")
def get_planning(db: Session = Depends(get_db)) -> dict[str, Any]:
    return planning.get_planning(db)


@router.put("/planning")
def put_planning(
    payload: PlanningPayload,
    db: Session = Depends(get_db),
    registry: SubscriptionRegistry = Depends(get_registry),
) -> dict[str, Any]:
    return planning.put_planning(
        db, on_air_block_ids=payload.onAirBlockIds, overrides=payload.overrides, registry=registry
    )


@router.get("/live-booths")
def live_booths(
    at: str | None = Query(None, description="Instant to evaluate (ISO-8601); now when omitted"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> list[dict[str, Any]]:
    return blocks.live_blocks(db, _instant(at) if at else clock.now_utc())


@router.get("/timeline/obs")
def obs_timeline(
    date: str = Query(..., description="Anchor date (YYYY-MM-DD)"),
    zoom: int | None = Query(None, description="Window length in hours: 24, 36 or 48"),
    store: EventStore = Depends(get_event_store),
    clock: Clock = Depends(get_clock),
) -> dict[str, Any]:
    return timeline_view.build_obs_timeline(store, date, zoom, now=clock.now_utc())


@router.get("/timeline/planning")
def planning_timeline(
    date: str = Query(..., description="Anchor date (YYYY-MM-DD)"),
    zoom: int | None = Query(None, description="Window length in hours: 24, 36 or 48"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> dict[str, Any]:
    return timeline_view.build_planning_timeline(db, date, zoom, now=clock.now_utc())


@router.post("/timeline/commit")
def commit_gesture(
    payload: CommitPayload,
    db: Session = Depends(get_db),
    registry: SubscriptionRegistry = Depends(get_registry),
) -> dict[str, Any]:
    finalized = FinalizedRange(
        kind=payload.kind,
        lane_key=payload.lane_key,
        start_utc=_instant(payload.start_time),
        end_utc=_instant(payload.end_time),
        interval_id=payload.interval_id,
    )
    return apply_finalized_range(db, finalized, name=payload.name, registry=registry)


def _instant(value: str) -> datetime:
    moment = parse_instant(value)
    if moment is None:
        raise ValidationError(f"Invalid instant: {value}")
    return moment
