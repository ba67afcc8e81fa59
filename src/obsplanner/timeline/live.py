"""
Live-position indicator.

Places the "now" line in the same percent space as the intervals and keeps a
separately refreshed digital clock. The two run on independent, cancellable
repeating tasks (60s and 1s by default) owned by the caller; after ``stop()``
neither callback fires again.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Callable

from obsplanner.runtime.clock import Clock, SystemClock

from .window import SECONDARY_ZONE, TimeWindow, instant_to_window_percent, resolve_zone

logger = logging.getLogger(__name__)

POSITION_REFRESH_SECONDS = 60.0
CLOCK_REFRESH_SECONDS = 1.0


def now_marker_percent(tw: TimeWindow, now: datetime) -> float | None:
    """Percent of the "now" line, or None when it must be hidden.

    Never clamped: a line pinned to an edge would claim "now" is a boundary.
    """
    percent = instant_to_window_percent(tw, now)
    if percent < 0.0 or percent > 100.0:
        return None
    return percent


@dataclass(frozen=True)
class ClockReading:
    instant: datetime
    primary: datetime
    secondary: datetime

    def labels(self, fmt: str = "%H:%M:%S") -> tuple[str, str]:
        return self.primary.strftime(fmt), self.secondary.strftime(fmt)


class RepeatingTask:
    """A cancellable fixed-interval callback on a daemon thread.

    ``fn`` runs once immediately on ``start()`` and then every ``interval``
    seconds until ``cancel()``. Exceptions from ``fn`` are logged and the
    schedule continues.
    """

    def __init__(self, interval: float, fn: Callable[[], None], *, name: str = "RepeatingTask") -> None:
        if interval <= 0:
            raise ValueError("interval must be greater than zero")
        self.interval = interval
        self._fn = fn
        self._name = name
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stop_event.is_set()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name=self._name, daemon=True)
        self._thread.start()

    def cancel(self, timeout: float | None = None) -> None:
        """Stop the task; once this returns the callback never runs again."""
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval + 1.0 if timeout is None else timeout)

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self._fn()
            except Exception:
                logger.exception("%s: callback failed", self._name)
            self._stop_event.wait(timeout=self.interval)


class LivePositionIndicator:
    """Recomputes the "now" line and the digital clock for one window.

    ``on_position`` gets the percent (or None when hidden); ``on_clock`` gets
    a ClockReading in the window's zone and the secondary zone. The window may
    be swapped at any time with ``set_window``.
    """

    def __init__(
        self,
        window: TimeWindow,
        *,
        clock: Clock | None = None,
        on_position: Callable[[float | None], None] | None = None,
        on_clock: Callable[[ClockReading], None] | None = None,
        secondary_zone: str | tzinfo | None = None,
        position_interval: float = POSITION_REFRESH_SECONDS,
        clock_interval: float = CLOCK_REFRESH_SECONDS,
    ) -> None:
        self._window = window
        self._clock = clock or SystemClock()
        self._on_position = on_position
        self._on_clock = on_clock
        self._secondary = resolve_zone(secondary_zone, SECONDARY_ZONE)
        self._lock = threading.Lock()
        self._stopped = False
        self.position: float | None = None
        self.reading: ClockReading | None = None
        self._position_task = RepeatingTask(position_interval, self.refresh_position, name="NowLine")
        self._clock_task = RepeatingTask(clock_interval, self.tick_clock, name="DigitalClock")

    def set_window(self, window: TimeWindow) -> None:
        with self._lock:
            self._window = window
        self.refresh_position()

    def refresh_position(self) -> float | None:
        with self._lock:
            if self._stopped:
                return self.position
            self.position = now_marker_percent(self._window, self._clock.now_utc())
            position = self.position
        if self._on_position is not None:
            self._on_position(position)
        return position

    def tick_clock(self) -> ClockReading | None:
        with self._lock:
            if self._stopped:
                return self.reading
            now = self._clock.now_utc()
            self.reading = ClockReading(
                instant=now,
                primary=now.astimezone(self._window.zone),
                secondary=now.astimezone(self._secondary),
            )
            reading = self.reading
        if self._on_clock is not None:
            self._on_clock(reading)
        return reading

    def start(self) -> None:
        with self._lock:
            self._stopped = False
        self._position_task.start()
        self._clock_task.start()

    def stop(self) -> None:
        """Teardown: cancel both tasks; no callback fires afterwards."""
        with self._lock:
            self._stopped = True
        self._position_task.cancel()
        self._clock_task.cancel()
