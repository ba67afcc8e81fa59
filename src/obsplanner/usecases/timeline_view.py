"""
Timeline assembly for the two surfaces.

- OBS timeline: feed events, one lane per channel.
- Planning timeline: the pinned "On Air" lane from planning, then one lane per
  encoder (every encoder shows, even when idle).

Both return the TimelineLayout rendered as JSON-ready dicts, each interval
carrying its legend ``display_type`` and ``color``.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..domain.block_types import block_type_color, darken_color, infer_block_type, infer_obs_event_display_type
from ..domain.entities import Encoder
from ..infra.exceptions import ValidationError
from ..infra.settings import settings
from ..timeline.lanes import LaneOrdering
from ..timeline.pipeline import TimelineLayout, build_layout, layout_to_dict
from ..timeline.records import PlacedInterval
from ..timeline.sources import records_for_pinned_lane, records_from_blocks, records_from_events
from ..timeline.window import SUPPORTED_DURATIONS, TimeWindow
from .blocks import list_blocks
from .events import EventStore, parse_day
from .planning import get_planning


def make_window(day: str | date, zoom: int | None = None) -> TimeWindow:
    zoom = zoom or settings.timeline_default_zoom
    if zoom not in SUPPORTED_DURATIONS:
        raise ValidationError(f"Invalid zoom: {zoom}. Expected one of {', '.join(map(str, SUPPORTED_DURATIONS))}")
    return TimeWindow.for_date(
        parse_day(day),
        zoom,
        start_hour_offset=settings.timeline_start_hour,
        zone=settings.primary_timezone,
    )


def _decorate_event(interval: PlacedInterval) -> dict[str, Any]:
    display_type = infer_obs_event_display_type(interval.record.title)
    color = block_type_color(display_type)
    return {"display_type": display_type.value, "color": color, "borderColor": darken_color(color)}


def _decorate_block(interval: PlacedInterval) -> dict[str, Any]:
    block_type = interval.record.data.get("type") or infer_block_type(interval.record.title).value
    color = block_type_color(block_type)
    return {
        "display_type": block_type,
        "color": color,
        "borderColor": darken_color(color),
        "blockId": interval.record.data.get("id"),
    }


def obs_layout(store: EventStore, day: str | date, zoom: int | None = None, *, now: datetime | None = None) -> TimelineLayout:
    window = make_window(day, zoom)
    records = records_from_events(store.all())
    return build_layout(
        records,
        window,
        ordering=LaneOrdering(pinned=()),
        now=now,
        secondary_zone=settings.secondary_timezone,
    )


def planning_layout(db: Session, day: str | date, zoom: int | None = None, *, now: datetime | None = None) -> TimelineLayout:
    window = make_window(day, zoom)
    blocks = list_blocks(db)
    planning = get_planning(db)

    records = records_for_pinned_lane(
        blocks, planning["onAirBlockIds"], planning["overrides"], lane_key=settings.pinned_lane
    )
    records += records_from_blocks(blocks, unassigned_lane=settings.unassigned_lane)

    encoder_names = db.execute(select(Encoder.name)).scalars().all()
    return build_layout(
        records,
        window,
        known_lane_keys=[settings.pinned_lane, *encoder_names],
        ordering=LaneOrdering(pinned=(settings.pinned_lane,)),
        now=now,
        secondary_zone=settings.secondary_timezone,
    )


def build_obs_timeline(
    store: EventStore, day: str | date, zoom: int | None = None, *, now: datetime | None = None
) -> dict[str, Any]:
    return layout_to_dict(obs_layout(store, day, zoom, now=now), _decorate_event)


def build_planning_timeline(
    db: Session, day: str | date, zoom: int | None = None, *, now: datetime | None = None
) -> dict[str, Any]:
    return layout_to_dict(planning_layout(db, day, zoom, now=now), _decorate_block)
