"""
Lane assignment.

Groups placed intervals into horizontal lanes and orders the lanes with a
total order:

1. pinned lanes (e.g. the planning "On Air" row), in configured order;
2. group A lanes (``DX01``, ``DX2``...) ascending by number;
3. group B lanes (``TX 1``, ``TX 02``...) ascending by number;
4. everything else, alphabetically.

Ties always fall back to the key string. Every known lane key shows up even
with no intervals, carrying a single placeholder.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from .records import MIN_WIDTH_PERCENT, PlacedInterval, RecordKind, TimedRecord
from .window import TimeWindow, window_range

# Placeholder instant when no window is supplied
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class LaneOrdering:
    """Configuration for the lane sort."""

    pinned: tuple[str, ...] = ("On Air",)
    group_a_pattern: str = r"^DX\s*(\d+)$"
    group_b_pattern: str = r"^TX\s*(\d+)$"

    def sort_key(self, key: str) -> tuple:
        if key in self.pinned:
            return (0, self.pinned.index(key), "", key)
        for rank, pattern in ((1, self.group_a_pattern), (2, self.group_b_pattern)):
            match = re.match(pattern, key.strip(), re.IGNORECASE)
            if match:
                return (rank, int(match.group(1)), "", key)
        return (3, 0, key.casefold(), key)

    def sort(self, keys: Iterable[str]) -> list[str]:
        return sorted(set(keys), key=self.sort_key)


DEFAULT_ORDERING = LaneOrdering()


@dataclass(frozen=True)
class Lane:
    key: str
    order: int
    intervals: tuple[PlacedInterval, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return all(interval.is_placeholder for interval in self.intervals)


def placeholder_interval(lane_key: str, tw: TimeWindow | None = None) -> PlacedInterval:
    """Synthetic zero-duration row filler for a lane with no intervals."""
    anchor = window_range(tw)[0] if tw is not None else _EPOCH
    record = TimedRecord(
        id=f"empty-{lane_key}",
        start_utc=anchor,
        end_utc=anchor,
        title="",
        lane_key=lane_key,
        kind=RecordKind.BLOCK,
        is_placeholder=True,
    )
    return PlacedInterval(
        record=record,
        start_percent=0.0,
        width_percent=MIN_WIDTH_PERCENT,
        display_start_utc=anchor,
        display_end_utc=anchor,
    )


def assign_lanes(
    placed: Iterable[PlacedInterval],
    known_lane_keys: Iterable[str] = (),
    *,
    ordering: LaneOrdering = DEFAULT_ORDERING,
    window: TimeWindow | None = None,
) -> list[Lane]:
    """Partition `placed` into ordered lanes, adding an empty row per known key."""
    by_lane: dict[str, list[PlacedInterval]] = {}
    for interval in placed:
        by_lane.setdefault(interval.lane_key, []).append(interval)
    for key in known_lane_keys:
        by_lane.setdefault(key, [])

    lanes = []
    for order, key in enumerate(ordering.sort(by_lane)):
        intervals = sorted(by_lane[key], key=lambda i: (i.start_percent, i.id))
        if not intervals:
            intervals = [placeholder_interval(key, window)]
        lanes.append(Lane(key=key, order=order, intervals=tuple(intervals)))
    return lanes
