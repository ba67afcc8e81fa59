"""
Placement -> lanes pipeline.

One call takes the caller's full record list and a window and returns
everything a timeline surface draws. Nothing here is cached or recomputed
behind the caller's back: call ``build_layout`` again whenever an input
changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Any, Callable, Iterable

from .lanes import DEFAULT_ORDERING, Lane, LaneOrdering, assign_lanes
from .live import now_marker_percent
from .placement import place
from .records import PlacedInterval, TimedRecord, format_instant
from .window import HourTick, TimeWindow, day_split_percent, hour_ticks, visible_dates, window_range


@dataclass(frozen=True)
class TimelineLayout:
    window: TimeWindow
    lanes: tuple[Lane, ...]
    day_split_percent: float | None
    now_percent: float | None
    hour_ticks: tuple[HourTick, ...]

    @property
    def intervals(self) -> list[PlacedInterval]:
        return [i for lane in self.lanes for i in lane.intervals if not i.is_placeholder]

    def lane(self, key: str) -> Lane | None:
        for lane in self.lanes:
            if lane.key == key:
                return lane
        return None


def build_layout(
    records: Iterable[TimedRecord],
    tw: TimeWindow,
    *,
    known_lane_keys: Iterable[str] = (),
    ordering: LaneOrdering = DEFAULT_ORDERING,
    selected_local_date: date | None = None,
    now: datetime | None = None,
    secondary_zone: str | tzinfo | None = None,
) -> TimelineLayout:
    """Place `records` in `tw` and group them into ordered lanes."""
    if tw is None:
        raise TypeError("build_layout() requires a TimeWindow")
    placed = place(records, tw, selected_local_date)
    lanes = assign_lanes(placed, known_lane_keys, ordering=ordering, window=tw)
    return TimelineLayout(
        window=tw,
        lanes=tuple(lanes),
        day_split_percent=day_split_percent(tw),
        now_percent=now_marker_percent(tw, now) if now is not None else None,
        hour_ticks=tuple(hour_ticks(tw, secondary_zone)),
    )


def interval_to_dict(interval: PlacedInterval, extra: dict[str, Any] | None = None) -> dict[str, Any]:
    record = interval.record
    payload = {
        "id": interval.id,
        "title": record.title,
        "laneKey": interval.lane_key,
        "kind": record.kind.value,
        "startPercent": round(interval.start_percent, 4),
        "widthPercent": round(interval.width_percent, 4),
        "startTime": format_instant(interval.display_start_utc),
        "endTime": format_instant(interval.display_end_utc),
        "isPlaceholder": interval.is_placeholder,
        "isBeautyCamera": interval.is_beauty_camera,
        "resizable": interval.is_resizable,
    }
    if extra:
        payload.update(extra)
    return payload


def layout_to_dict(
    layout: TimelineLayout,
    decorate: Callable[[PlacedInterval], dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """JSON-ready rendering; `decorate` adds per-interval fields (type, colour)."""
    tw = layout.window
    start, end = window_range(tw)
    return {
        "window": {
            "date": tw.anchor_date.isoformat(),
            "zoom": tw.duration_hours,
            "start": format_instant(start),
            "end": format_instant(end),
            "dates": [d.isoformat() for d in visible_dates(tw)],
        },
        "daySplitPercent": layout.day_split_percent,
        "nowPercent": layout.now_percent,
        "hourTicks": [
            {
                "time": format_instant(tick.instant),
                "percent": round(tick.percent, 4),
                "primary": tick.primary_label,
                "secondary": tick.secondary_label,
            }
            for tick in layout.hour_ticks
        ],
        "lanes": [
            {
                "key": lane.key,
                "order": lane.order,
                "intervals": [
                    interval_to_dict(i, decorate(i) if decorate and not i.is_placeholder else None)
                    for i in lane.intervals
                ],
            }
            for lane in layout.lanes
        ],
    }
