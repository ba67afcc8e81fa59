"""
Gesture controller: pointer drags over a lane -> validated time ranges.

Three gestures, one at a time:

- create: drag across a lane's empty space;
- resize: drag the start or end handle of an existing interval;
- move:   drag the body of an existing interval.

Each gesture freezes the lane's bounding rectangle (and the TimeWindow) when
the pointer goes down; every later percent is computed against that frame,
so page scrolls, relayouts or data refreshes mid-drag cannot skew it.

Percents drive the preview and the on-screen clamp only. Resize and move
finalize against the record's own instants, so a block clamped at a window
edge or widened for visibility keeps its real start, end and duration.

On pointer-up the gesture yields a FinalizedRange whose dragged edges are
snapped to 5-minute boundaries, or nothing at all. Invalid results, releases off-target and
gestures whose interval vanished are dropped silently; nothing here raises
for user input.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, ClassVar, Iterable, Union

from .records import MIN_WIDTH_PERCENT, PlacedInterval
from .window import TimeWindow, clamp_percent, ensure_utc, window_percent_to_instant

logger = logging.getLogger(__name__)

PRIMARY_BUTTON = 0
SNAP_MINUTES = 5

# A create drag draws the event span; the broadcast window is one hour
# narrower on each side.
CREATE_BROADCAST_INSET = timedelta(hours=1)


class GesturePhase(str, Enum):
    IDLE = "idle"
    CREATING = "creating"
    RESIZING = "resizing"
    MOVING = "moving"


class GestureKind(str, Enum):
    CREATE = "create"
    RESIZE = "resize"
    MOVE = "move"


class Edge(str, Enum):
    START = "start"
    END = "end"


@dataclass(frozen=True)
class LaneRect:
    """Bounding rectangle of a lane's drawable area, in pointer coordinates."""

    left: float
    width: float
    top: float = 0.0
    height: float = 0.0

    def percent_at(self, x: float) -> float:
        return clamp_percent((x - self.left) / self.width * 100.0)


@dataclass(frozen=True)
class PointerEvent:
    x: float
    y: float = 0.0
    button: int = PRIMARY_BUTTON


@dataclass(frozen=True)
class Idle:
    phase: ClassVar[GesturePhase] = GesturePhase.IDLE


@dataclass(frozen=True)
class CreateDrag:
    lane_key: str
    frame: LaneRect
    start_percent: float
    current_percent: float

    phase: ClassVar[GesturePhase] = GesturePhase.CREATING


@dataclass(frozen=True)
class ResizeDrag:
    interval_id: str
    lane_key: str
    frame: LaneRect
    edge: Edge
    start_percent: float
    end_percent: float
    record_start_utc: datetime
    record_end_utc: datetime

    phase: ClassVar[GesturePhase] = GesturePhase.RESIZING


@dataclass(frozen=True)
class MoveDrag:
    interval_id: str
    lane_key: str
    frame: LaneRect
    initial_pointer_percent: float
    initial_start_percent: float
    initial_end_percent: float
    current_start_percent: float
    current_end_percent: float
    record_start_utc: datetime
    record_end_utc: datetime

    phase: ClassVar[GesturePhase] = GesturePhase.MOVING


GestureState = Union[Idle, CreateDrag, ResizeDrag, MoveDrag]

IDLE = Idle()


@dataclass(frozen=True)
class FinalizedRange:
    """What a completed gesture hands to the persistence callback."""

    kind: GestureKind
    lane_key: str
    start_utc: datetime
    end_utc: datetime
    interval_id: str | None = None


def round_to_five_minutes(moment: datetime) -> datetime:
    """Snap to the nearest 5-minute boundary; :58 carries into the next hour."""
    utc = ensure_utc(moment)
    hour = utc.replace(minute=0, second=0, microsecond=0)
    minutes = (utc - hour).total_seconds() / 60.0
    snapped = math.floor(minutes / SNAP_MINUTES + 0.5) * SNAP_MINUTES
    return hour + timedelta(minutes=snapped)


def record_span(interval: PlacedInterval) -> tuple[datetime, datetime]:
    """The record's own start and end, not the clamped or widened span on screen."""
    start = ensure_utc(interval.record.start_utc)
    end = interval.record.end_utc
    return start, ensure_utc(end) if end is not None else start


def resize_percents(edge: Edge, pointer_percent: float, start_percent: float, end_percent: float) -> tuple[float, float]:
    """Move one edge to the pointer without inverting or collapsing the span."""
    if edge is Edge.START:
        return min(pointer_percent, end_percent - MIN_WIDTH_PERCENT), end_percent
    return start_percent, max(pointer_percent, start_percent + MIN_WIDTH_PERCENT)


def move_percents(delta: float, start_percent: float, end_percent: float) -> tuple[float, float]:
    """Shift a span by `delta`, sliding it back inside ``[0, 100]`` at full width."""
    width = end_percent - start_percent
    start = max(0.0, min(start_percent + delta, 100.0 - width))
    return start, start + width


class GestureController:
    """Single-gesture state machine for one timeline surface.

    ``on_commit`` receives every FinalizedRange; ``pointer_up`` also returns
    it. Call ``sync_intervals`` on every data refresh so a gesture on a
    record that disappeared is abandoned, and ``cancel`` on teardown.
    """

    def __init__(
        self,
        window: TimeWindow,
        on_commit: Callable[[FinalizedRange], None] | None = None,
    ) -> None:
        self._window = window
        self._on_commit = on_commit
        self._state: GestureState = IDLE
        self._gesture_window: TimeWindow | None = None
        self._live_ids: frozenset[str] | None = None

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def phase(self) -> GesturePhase:
        return self._state.phase

    @property
    def is_active(self) -> bool:
        return not isinstance(self._state, Idle)

    @property
    def window(self) -> TimeWindow:
        return self._window

    def preview(self) -> tuple[float, float] | None:
        """``(start_percent, width_percent)`` of the span being dragged."""
        state = self._state
        if isinstance(state, CreateDrag):
            lo, hi = sorted((state.start_percent, state.current_percent))
            return lo, max(MIN_WIDTH_PERCENT, hi - lo)
        if isinstance(state, ResizeDrag):
            return state.start_percent, state.end_percent - state.start_percent
        if isinstance(state, MoveDrag):
            return state.current_start_percent, state.current_end_percent - state.current_start_percent
        return None

    # ------------------------------------------------------------------
    # Inputs from the surrounding application
    # ------------------------------------------------------------------

    def set_window(self, window: TimeWindow) -> None:
        """Replace the window; a gesture already in flight keeps its own."""
        self._window = window

    def sync_intervals(self, intervals: Iterable[PlacedInterval | str]) -> None:
        """Record the ids present after a data refresh."""
        self._live_ids = frozenset(i if isinstance(i, str) else i.id for i in intervals)

    def cancel(self) -> None:
        """Drop any gesture without emitting a range."""
        self._reset()

    # ------------------------------------------------------------------
    # Pointer-down
    # ------------------------------------------------------------------

    def begin_create(self, lane_key: str, frame: LaneRect, event: PointerEvent, *, enabled: bool = True) -> bool:
        if not enabled or not self._can_begin(frame, event):
            return False
        percent = frame.percent_at(event.x)
        self._start(CreateDrag(lane_key=lane_key, frame=frame, start_percent=percent, current_percent=percent))
        return True

    def begin_resize(self, interval: PlacedInterval, edge: Edge | str, frame: LaneRect, event: PointerEvent) -> bool:
        if not interval.is_resizable or not self._can_begin(frame, event):
            return False
        record_start, record_end = record_span(interval)
        self._start(
            ResizeDrag(
                interval_id=interval.id,
                lane_key=interval.lane_key,
                frame=frame,
                edge=Edge(edge),
                start_percent=interval.start_percent,
                end_percent=interval.end_percent,
                record_start_utc=record_start,
                record_end_utc=record_end,
            )
        )
        return True

    def begin_move(self, interval: PlacedInterval, frame: LaneRect, event: PointerEvent) -> bool:
        if not interval.is_movable or not self._can_begin(frame, event):
            return False
        record_start, record_end = record_span(interval)
        self._start(
            MoveDrag(
                interval_id=interval.id,
                lane_key=interval.lane_key,
                frame=frame,
                initial_pointer_percent=frame.percent_at(event.x),
                initial_start_percent=interval.start_percent,
                initial_end_percent=interval.end_percent,
                current_start_percent=interval.start_percent,
                current_end_percent=interval.end_percent,
                record_start_utc=record_start,
                record_end_utc=record_end,
            )
        )
        return True

    # ------------------------------------------------------------------
    # Pointer-move / pointer-up
    # ------------------------------------------------------------------

    def pointer_move(self, event: PointerEvent) -> GestureState:
        if self._abandon_if_orphaned():
            return self._state
        self._state = self._advance(self._state, event)
        return self._state

    def pointer_up(self, event: PointerEvent, *, on_target: bool = True) -> FinalizedRange | None:
        """Finish the gesture; None when it resolves to nothing."""
        if not self.is_active or self._abandon_if_orphaned():
            return None
        if not on_target:
            logger.debug("gesture released off target; abandoned")
            self._reset()
            return None

        state = self._advance(self._state, event)
        result = self._finalize(state, self._gesture_window or self._window)
        self._reset()
        if result is not None and self._on_commit is not None:
            self._on_commit(result)
        return result

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _can_begin(self, frame: LaneRect, event: PointerEvent) -> bool:
        if self.is_active:
            logger.debug("pointer-down ignored: %s gesture already active", self.phase.value)
            return False
        return event.button == PRIMARY_BUTTON and frame.width > 0

    def _start(self, state: GestureState) -> None:
        self._state = state
        self._gesture_window = self._window

    def _reset(self) -> None:
        self._state = IDLE
        self._gesture_window = None

    def _abandon_if_orphaned(self) -> bool:
        interval_id = getattr(self._state, "interval_id", None)
        if interval_id is None or self._live_ids is None or interval_id in self._live_ids:
            return False
        logger.debug("interval %s vanished mid-gesture; abandoned", interval_id)
        self._reset()
        return True

    @staticmethod
    def _advance(state: GestureState, event: PointerEvent) -> GestureState:
        if isinstance(state, CreateDrag):
            return replace(state, current_percent=state.frame.percent_at(event.x))
        if isinstance(state, ResizeDrag):
            start, end = resize_percents(state.edge, state.frame.percent_at(event.x), state.start_percent, state.end_percent)
            return replace(state, start_percent=start, end_percent=end)
        if isinstance(state, MoveDrag):
            delta = state.frame.percent_at(event.x) - state.initial_pointer_percent
            start, end = move_percents(delta, state.initial_start_percent, state.initial_end_percent)
            return replace(state, current_start_percent=start, current_end_percent=end)
        return state

    @staticmethod
    def _finalize(state: GestureState, window: TimeWindow) -> FinalizedRange | None:
        if isinstance(state, CreateDrag):
            lo, hi = sorted((state.start_percent, state.current_percent))
            if hi - lo < MIN_WIDTH_PERCENT:
                hi = lo + MIN_WIDTH_PERCENT
            start = window_percent_to_instant(window, lo) + CREATE_BROADCAST_INSET
            end = window_percent_to_instant(window, hi) - CREATE_BROADCAST_INSET
            start, end = round_to_five_minutes(start), round_to_five_minutes(end)
            kind, interval_id = GestureKind.CREATE, None
        elif isinstance(state, ResizeDrag):
            # Only the dragged edge comes from the screen; the other keeps the record's instant.
            if state.edge is Edge.START:
                start = round_to_five_minutes(window_percent_to_instant(window, state.start_percent))
                end = state.record_end_utc
            else:
                start = state.record_start_utc
                end = round_to_five_minutes(window_percent_to_instant(window, state.end_percent))
            kind, interval_id = GestureKind.RESIZE, state.interval_id
        elif isinstance(state, MoveDrag):
            shift = window.duration * ((state.current_start_percent - state.initial_start_percent) / 100.0)
            # zero-duration records move as a single snap step
            duration = max(state.record_end_utc - state.record_start_utc, timedelta(minutes=SNAP_MINUTES))
            start = round_to_five_minutes(state.record_start_utc + shift)
            end = start + duration
            kind, interval_id = GestureKind.MOVE, state.interval_id
        else:
            return None

        if not start < end:
            return None
        return FinalizedRange(kind=kind, lane_key=state.lane_key, start_utc=start, end_utc=end, interval_id=interval_id)
