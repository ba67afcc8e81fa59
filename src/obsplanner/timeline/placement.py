"""
Interval placement engine.

Projects TimedRecords into a TimeWindow as ``{start_percent, width_percent}``
spans. Pure and synchronous: the same inputs always give the same output.

Rules, in order:

- A beauty camera (raw feed event, zero duration, title starting with ``BC``)
  is an all-day placeholder. It is drawn over ``[02:00 D, 02:00 D+1)`` local,
  where D is its own date (or the day after its start when it carries none),
  and fills the whole window (24h) or the whole day segment it falls on
  (36h/48h).
- Every other zero-duration record is given an effective duration of
  1/20 of the window so it stays visible and clickable.
- Spans are clamped to ``[0, 100]`` and floored at MIN_WIDTH_PERCENT.
- Records that do not overlap the window are dropped, as are records with
  malformed or inverted times.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable

from .records import MIN_WIDTH_PERCENT, PlacedInterval, RecordKind, TimedRecord
from .window import (
    TimeWindow,
    clamp_percent,
    day_split_percent,
    ensure_utc,
    instant_to_window_percent,
    local_midnight,
    visible_dates,
    window_range,
)

BEAUTY_CAMERA_PREFIX = "bc"

# Zero-duration records are drawn this fraction of the window wide
ZERO_DURATION_FRACTION = 20


def is_beauty_camera(record: TimedRecord) -> bool:
    """True for all-day placeholder events from the raw feed."""
    return (
        record.kind is RecordKind.EVENT
        and record.is_zero_duration
        and record.title.strip().casefold().startswith(BEAUTY_CAMERA_PREFIX)
    )


def parse_date_label(label: str | None) -> date | None:
    """Parse ``DD/MM/YYYY`` or ``YYYY-MM-DD``; None when absent or invalid."""
    if not label:
        return None
    text = label.strip()
    try:
        if "/" in text:
            day, month, year = (int(part) for part in text.split("/"))
            return date(year, month, day)
        return date.fromisoformat(text)
    except ValueError:
        return None


def beauty_camera_date(record: TimedRecord, tw: TimeWindow) -> date:
    """Canonical display date of a beauty camera."""
    explicit = parse_date_label(record.date_label)
    if explicit is not None:
        return explicit
    return ensure_utc(record.start_utc).astimezone(tw.zone).date() + timedelta(days=1)


def _anchor_instant(day: date, tw: TimeWindow) -> datetime:
    return local_midnight(day, tw.zone) + timedelta(hours=tw.start_hour_offset)


def _place_beauty_camera(record: TimedRecord, tw: TimeWindow, selected: date) -> PlacedInterval | None:
    canonical = beauty_camera_date(record, tw)
    display_start = _anchor_instant(canonical, tw)
    display_end = _anchor_instant(canonical + timedelta(days=1), tw)

    split = day_split_percent(tw)
    if split is None:
        if canonical != selected:
            return None
        start_percent, end_percent = 0.0, 100.0
    else:
        first, second = visible_dates(tw)
        if canonical == first:
            start_percent, end_percent = 0.0, split
        elif canonical == second:
            start_percent, end_percent = split, 100.0
        else:
            return None

    return PlacedInterval(
        record=record,
        start_percent=start_percent,
        width_percent=end_percent - start_percent,
        display_start_utc=display_start,
        display_end_utc=display_end,
        is_beauty_camera=True,
    )


def place_record(record: TimedRecord, tw: TimeWindow, selected: date | None = None) -> PlacedInterval | None:
    """Place one record, or return None when it is dropped."""
    if not isinstance(record.start_utc, datetime):
        return None
    if record.end_utc is not None and not isinstance(record.end_utc, datetime):
        return None

    if is_beauty_camera(record):
        return _place_beauty_camera(record, tw, selected or tw.anchor_date)

    start = ensure_utc(record.start_utc)
    if record.is_zero_duration:
        end = start + timedelta(minutes=tw.duration_minutes / ZERO_DURATION_FRACTION)
    else:
        end = ensure_utc(record.end_utc)
        if end < start:
            return None

    window_start, window_end = window_range(tw)
    if start >= window_end or end <= window_start:
        return None

    start_percent = clamp_percent(instant_to_window_percent(tw, start))
    end_percent = clamp_percent(instant_to_window_percent(tw, end))
    return PlacedInterval(
        record=record,
        start_percent=start_percent,
        width_percent=max(MIN_WIDTH_PERCENT, end_percent - start_percent),
        display_start_utc=start,
        display_end_utc=end,
    )


def place(
    records: Iterable[TimedRecord],
    tw: TimeWindow,
    selected_local_date: date | None = None,
) -> list[PlacedInterval]:
    """Project `records` into `tw`, dropping the ones that do not show.

    `selected_local_date` decides which beauty cameras appear in a 24h window;
    it defaults to the window's anchor date.
    """
    if tw is None:
        raise TypeError("place() requires a TimeWindow")
    selected = selected_local_date or tw.anchor_date
    placed = []
    for record in records:
        interval = place_record(record, tw, selected)
        if interval is not None:
            placed.append(interval)
    return placed
