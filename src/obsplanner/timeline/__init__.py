"""
Timeline core: windows, placement, lanes, gestures and the live "now" line.

Pure and synchronous except for ``live``, whose repeating tasks are owned by
the caller.
"""

from .gestures import Edge, FinalizedRange, GestureController, GestureKind, GesturePhase, LaneRect, PointerEvent
from .lanes import DEFAULT_ORDERING, Lane, LaneOrdering, assign_lanes
from .live import LivePositionIndicator, RepeatingTask, now_marker_percent
from .pipeline import TimelineLayout, build_layout
from .placement import place
from .records import MIN_WIDTH_PERCENT, PlacedInterval, RecordKind, TimedRecord
from .window import TimeWindow, instant_to_window_percent, window_percent_to_instant, window_range

__all__ = [
    "DEFAULT_ORDERING",
    "Edge",
    "FinalizedRange",
    "GestureController",
    "GestureKind",
    "GesturePhase",
    "Lane",
    "LaneOrdering",
    "LaneRect",
    "LivePositionIndicator",
    "MIN_WIDTH_PERCENT",
    "PlacedInterval",
    "PointerEvent",
    "RecordKind",
    "RepeatingTask",
    "TimeWindow",
    "TimedRecord",
    "TimelineLayout",
    "assign_lanes",
    "build_layout",
    "instant_to_window_percent",
    "now_marker_percent",
    "place",
    "window_percent_to_instant",
    "window_range",
]
