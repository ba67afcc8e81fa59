"""Clock abstractions used by the live timeline components.

The timeline never calls ``datetime.now`` directly; it asks a Clock. The
system clock backs production, the stepped clock backs tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from threading import Lock
from typing import Protocol, runtime_checkable
from zoneinfo import ZoneInfo


@runtime_checkable
class Clock(Protocol):
    """Protocol implemented by clock providers."""

    def now_utc(self) -> datetime:
        """Return the current instant as an aware UTC datetime."""


class SystemClock:
    """Wall clock, timezone-aware."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)

    def now_local(self, tz: str | tzinfo) -> datetime:
        """Return current time in the requested zone (never the host zone)."""
        return self.now_utc().astimezone(_resolve_timezone(tz))


class SteppedClock:
    """Deterministic clock used for tests.

    Time advances only when :meth:`advance` or :meth:`set` is called.
    """

    def __init__(self, start: datetime) -> None:
        if start.tzinfo is None or start.tzinfo.utcoffset(start) is None:
            raise ValueError("Datetime must be timezone-aware")
        self._current = start.astimezone(timezone.utc)
        self._lock = Lock()

    def now_utc(self) -> datetime:
        with self._lock:
            return self._current

    def now_local(self, tz: str | tzinfo) -> datetime:
        return self.now_utc().astimezone(_resolve_timezone(tz))

    def advance(self, seconds: float) -> datetime:
        """Advance the clock by ``seconds`` (must be non-negative)."""
        if seconds < 0.0:
            raise ValueError("seconds must be non-negative")
        with self._lock:
            self._current += timedelta(seconds=seconds)
            return self._current

    def set(self, moment: datetime) -> None:
        with self._lock:
            self._current = moment.astimezone(timezone.utc)


def _resolve_timezone(tz: str | tzinfo) -> tzinfo:
    if isinstance(tz, tzinfo):
        return tz
    return ZoneInfo(tz)
