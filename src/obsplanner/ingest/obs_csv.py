"""
OBS schedule feed (CSV) -> event records.

The feed carries one row per transmission with a ``DD/MM/YYYY`` date and
``HH:MM[:SS]`` start/end times in Rome wall-clock time. Header spellings
vary between exports, so columns are matched ignoring case and whitespace.

Malformed rows are counted and logged, never fatal; only an empty or
unreadable file raises IngestError.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

from ..infra.exceptions import IngestError
from ..infra.logging import get_logger
from ..timeline.records import format_instant

logger = get_logger(__name__)

FEED_ZONE = ZoneInfo("Europe/Rome")

# Invalid rows logged in full before the log goes quiet
_LOGGED_INVALID_ROWS = 5

ID_COLUMNS = ("Id", "ID", "id")
CHANNEL_COLUMNS = ("ChannelName", "Channel Name")
TITLE_COLUMNS = ("Title",)
DATE_COLUMNS = ("Date",)
TX_START_COLUMNS = ("Tx Start Time", "TxStartTime")
TX_END_COLUMNS = ("Tx End Time", "TxEndTime")
TX_DURATION_COLUMNS = ("Tx Duration", "TxDuration")
TX_TYPE_COLUMNS = ("Tx Type", "TxType")
VIDEO_FEED_COLUMNS = ("VideoFeed", "Video Feed")
SOURCE_COLUMNS = ("Source",)
RIGHTS_COLUMNS = ("Rights",)
GAMES_DAY_COLUMNS = ("GamesDay", "Games Day")


@dataclass
class IngestResult:
    events: list[dict[str, Any]] = field(default_factory=list)
    total_rows: int = 0
    valid_count: int = 0
    invalid_count: int = 0

    @property
    def stats(self) -> dict[str, int]:
        return {
            "totalRows": self.total_rows,
            "validCount": self.valid_count,
            "invalidCount": self.invalid_count,
        }


def _normalize(name: str) -> str:
    return "".join(name.split()).lower()


def column_value(row: Mapping[str, Any], names: Iterable[str]) -> str:
    """First matching column's trimmed value; exact names, then loose matching."""
    names = tuple(names)
    for name in names:
        if name in row and row[name] is not None:
            return str(row[name]).strip()
    wanted = {_normalize(name) for name in names}
    for key, value in row.items():
        if key is not None and _normalize(key) in wanted and value is not None:
            return str(value).strip()
    return ""


def parse_feed_date(text: str) -> date:
    parts = text.strip().split("/")
    if len(parts) != 3:
        raise ValueError(f"Invalid date format: {text}. Expected DD/MM/YYYY")
    day, month, year = (int(part) for part in parts)
    return date(year, month, day)


def parse_clock(text: str) -> time:
    parts = text.strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid time format: {text}. Expected HH:MM:SS")
    hours, minutes = int(parts[0]), int(parts[1])
    seconds = int(parts[2]) if len(parts) > 2 and parts[2] else 0
    return time(hours, minutes, seconds)


def parse_duration(text: str) -> timedelta:
    parts = [int(part) if part.strip() else 0 for part in text.strip().split(":")]
    parts += [0] * (3 - len(parts))
    hours, minutes, seconds = parts[:3]
    return timedelta(hours=hours, minutes=minutes, seconds=seconds)


def local_to_utc(day: date, clock: time, zone: ZoneInfo = FEED_ZONE) -> datetime:
    """Interpret a feed wall-clock time in `zone` and convert it to UTC."""
    return datetime.combine(day, clock, tzinfo=zone).astimezone(timezone.utc)


def transform_row(row: Mapping[str, Any], zone: ZoneInfo = FEED_ZONE) -> dict[str, Any] | None:
    """One feed row -> event dict, or None when a required column is missing.

    Raises ValueError for rows whose date or times cannot be parsed.
    """
    event_id = column_value(row, ID_COLUMNS)
    date_text = column_value(row, DATE_COLUMNS)
    tx_start = column_value(row, TX_START_COLUMNS)
    tx_end = column_value(row, TX_END_COLUMNS)
    if not event_id or not date_text or not tx_start or not tx_end:
        return None

    day = parse_feed_date(date_text)
    start = local_to_utc(day, parse_clock(tx_start), zone)

    tx_duration = column_value(row, TX_DURATION_COLUMNS)
    if tx_duration:
        end = start + parse_duration(tx_duration)
    else:
        end_clock = parse_clock(tx_end)
        end = local_to_utc(day, end_clock, zone)
        if end < start:
            end = local_to_utc(day + timedelta(days=1), end_clock, zone)

    raw = {
        str(key).strip(): str(value).strip()
        for key, value in row.items()
        if key is not None and value not in (None, "")
    }
    return {
        "id": event_id,
        "group": column_value(row, CHANNEL_COLUMNS),
        "title": column_value(row, TITLE_COLUMNS),
        "start_time": format_instant(start),
        "end_time": format_instant(end),
        "date": date_text,
        "txStartTime": tx_start,
        "txEndTime": tx_end,
        "txType": column_value(row, TX_TYPE_COLUMNS),
        "txDuration": tx_duration,
        "videoFeed": column_value(row, VIDEO_FEED_COLUMNS),
        "source": column_value(row, SOURCE_COLUMNS),
        "rights": column_value(row, RIGHTS_COLUMNS),
        "gamesDay": column_value(row, GAMES_DAY_COLUMNS),
        "rawData": raw,
    }


def parse_obs_csv(content: str | bytes, zone: ZoneInfo = FEED_ZONE) -> IngestResult:
    """Parse a whole feed export."""
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise IngestError(f"CSV file is not valid UTF-8: {e}") from e
    if not isinstance(content, str):
        raise IngestError("Invalid file content")
    content = content.lstrip("\ufeff")
    if not content.strip():
        raise IngestError("CSV file is empty")

    try:
        reader = csv.DictReader(io.StringIO(content), skipinitialspace=True)
        if reader.fieldnames is None:
            raise IngestError("Invalid CSV header")
        reader.fieldnames = [(name or "").lstrip("\ufeff").strip() for name in reader.fieldnames]
        rows = [row for row in reader if any((value or "").strip() for value in row.values() if isinstance(value, str))]
    except csv.Error as e:
        raise IngestError(f"Failed to parse CSV: {e}") from e

    result = IngestResult(total_rows=len(rows))
    for index, row in enumerate(rows, start=1):
        try:
            event = transform_row(row, zone)
        except ValueError as e:
            event = None
            reason = str(e)
        else:
            reason = "missing required column"
        if event is None:
            result.invalid_count += 1
            if result.invalid_count <= _LOGGED_INVALID_ROWS:
                logger.warning(
                    "csv_row_invalid",
                    row=index,
                    reason=reason,
                    id=column_value(row, ID_COLUMNS),
                    date=column_value(row, DATE_COLUMNS),
                )
            continue
        result.valid_count += 1
        result.events.append(event)

    logger.info("csv_processed", **result.stats)
    return result
