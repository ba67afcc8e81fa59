"""
Time-window math: the visible range of the timeline, defined once, centrally.

Pure functions over an immutable TimeWindow. A window is anchored at a local
date in the primary production zone, opens at a fixed start hour (02:00 by
default) and spans 24, 36 or 48 hours. Everything the placement engine and the
gesture controller compute is a percentage of this range.

All instants handed in must be timezone-aware; naive datetimes are read as UTC.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

PRIMARY_ZONE = ZoneInfo("Europe/Rome")
SECONDARY_ZONE = ZoneInfo("America/New_York")

DEFAULT_START_HOUR = 2
SUPPORTED_DURATIONS = (24, 36, 48)
HOURS_PER_DAY = 24


def ensure_utc(instant: datetime) -> datetime:
    """Return `instant` as an aware UTC datetime (naive is read as UTC)."""
    if instant.tzinfo is None or instant.tzinfo.utcoffset(instant) is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def resolve_zone(zone: str | tzinfo | None, default: tzinfo = PRIMARY_ZONE) -> tzinfo:
    """Accept an IANA name or a tzinfo; never falls back to the host zone."""
    if zone is None:
        return default
    if isinstance(zone, tzinfo):
        return zone
    return ZoneInfo(zone)


def local_midnight(day: date, zone: tzinfo = PRIMARY_ZONE) -> datetime:
    """Midnight of `day` in `zone`, as an aware UTC datetime."""
    return datetime.combine(day, time(0, 0), tzinfo=zone).astimezone(timezone.utc)


@dataclass(frozen=True)
class TimeWindow:
    """
    The visible timeline range.

    The window is ``[midnight(anchor_date) + start_hour_offset h,
    midnight(anchor_date) + (start_hour_offset + duration_hours) h)``, with
    hours added as elapsed time so DST transition days stay exact.
    """

    anchor_date: date
    duration_hours: int = 24
    start_hour_offset: int = DEFAULT_START_HOUR
    zone: tzinfo = PRIMARY_ZONE

    def __post_init__(self) -> None:
        if isinstance(self.anchor_date, datetime):
            raise TypeError("anchor_date must be a date, not a datetime")
        if not isinstance(self.duration_hours, int) or self.duration_hours < HOURS_PER_DAY:
            raise ValueError("duration_hours must be an integer >= 24")
        if not 0 <= self.start_hour_offset <= 23:
            raise ValueError("start_hour_offset must be within 0..23")

    @classmethod
    def for_date(
        cls,
        anchor: date | str,
        duration_hours: int = 24,
        *,
        start_hour_offset: int = DEFAULT_START_HOUR,
        zone: str | tzinfo | None = None,
    ) -> "TimeWindow":
        """Build a window from a selected date (``YYYY-MM-DD`` strings accepted)."""
        if isinstance(anchor, str):
            anchor = date.fromisoformat(anchor)
        return cls(
            anchor_date=anchor,
            duration_hours=duration_hours,
            start_hour_offset=start_hour_offset,
            zone=resolve_zone(zone),
        )

    @property
    def start(self) -> datetime:
        return window_range(self)[0]

    @property
    def end(self) -> datetime:
        return window_range(self)[1]

    @property
    def duration(self) -> timedelta:
        return timedelta(hours=self.duration_hours)

    @property
    def duration_minutes(self) -> int:
        return self.duration_hours * 60

    @property
    def is_multi_day(self) -> bool:
        return self.duration_hours > HOURS_PER_DAY


def window_range(tw: TimeWindow) -> tuple[datetime, datetime]:
    """Return the window as ``[start, end)`` in UTC."""
    start = local_midnight(tw.anchor_date, tw.zone) + timedelta(hours=tw.start_hour_offset)
    return start, start + timedelta(hours=tw.duration_hours)


def instant_to_window_percent(tw: TimeWindow, instant: datetime) -> float:
    """Position of `instant` as a percentage of the window. Not clamped."""
    start, end = window_range(tw)
    return (ensure_utc(instant) - start) / (end - start) * 100.0


def window_percent_to_instant(tw: TimeWindow, percent: float) -> datetime:
    """Exact inverse of :func:`instant_to_window_percent`."""
    start, end = window_range(tw)
    return start + (end - start) * (percent / 100.0)


def clamp_percent(percent: float) -> float:
    return max(0.0, min(100.0, percent))


def day_split_percent(tw: TimeWindow) -> float | None:
    """Where day 1 ends and day 2 begins in a multi-day window.

    50.0 for 48h, 66.67 for 36h; None for a single-day window.
    """
    if not tw.is_multi_day:
        return None
    return HOURS_PER_DAY / tw.duration_hours * 100.0


def visible_dates(tw: TimeWindow) -> tuple[date, ...]:
    """Local dates the window shows a day segment for (one, or two when multi-day)."""
    if tw.is_multi_day:
        return (tw.anchor_date, tw.anchor_date + timedelta(days=1))
    return (tw.anchor_date,)


@dataclass(frozen=True)
class HourTick:
    """A whole-hour gridline of the header row."""

    instant: datetime
    percent: float
    primary_label: str
    secondary_label: str


def hour_ticks(tw: TimeWindow, secondary_zone: str | tzinfo | None = None) -> list[HourTick]:
    """One tick per elapsed hour of the window, labelled in both zones."""
    secondary = resolve_zone(secondary_zone, SECONDARY_ZONE)
    start, _ = window_range(tw)
    ticks = []
    for hour in range(tw.duration_hours):
        instant = start + timedelta(hours=hour)
        ticks.append(
            HourTick(
                instant=instant,
                percent=hour / tw.duration_hours * 100.0,
                primary_label=instant.astimezone(tw.zone).strftime("%H:%M"),
                secondary_label=instant.astimezone(secondary).strftime("%H:%M"),
            )
        )
    return ticks

