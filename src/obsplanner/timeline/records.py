"""
Timeline record types.

TimedRecord is the placement engine's input unit; PlacedInterval is its
projection into one TimeWindow. Both are immutable: every data refresh builds
a fresh list and the engine treats it as a full replacement.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

# Smallest on-screen width (percent of the lane) of any interactive interval
MIN_WIDTH_PERCENT = 0.5


class RecordKind(str, Enum):
    """Where a record came from."""

    EVENT = "event"  # raw OBS feed row
    BLOCK = "block"  # derived resource-assignment block


@dataclass(frozen=True)
class TimedRecord:
    """A time-bounded item to be drawn on a lane.

    ``end_utc`` of None (or equal to ``start_utc``) means zero duration.
    ``date_label`` is the explicit ``DD/MM/YYYY`` or ``YYYY-MM-DD`` date the
    event source carries, if any.
    """

    id: str
    start_utc: datetime
    end_utc: datetime | None
    title: str
    lane_key: str
    kind: RecordKind = RecordKind.EVENT
    is_placeholder: bool = False
    date_label: str | None = None
    data: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_zero_duration(self) -> bool:
        return self.end_utc is None or self.end_utc == self.start_utc


@dataclass(frozen=True)
class PlacedInterval:
    """A TimedRecord positioned as a percentage span within a TimeWindow.

    ``display_start_utc``/``display_end_utc`` are the instants actually drawn,
    which differ from the record's own times for beauty cameras and for
    zero-duration records.
    """

    record: TimedRecord
    start_percent: float
    width_percent: float
    display_start_utc: datetime
    display_end_utc: datetime
    is_beauty_camera: bool = False

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def lane_key(self) -> str:
        return self.record.lane_key

    @property
    def end_percent(self) -> float:
        return self.start_percent + self.width_percent

    @property
    def is_placeholder(self) -> bool:
        return self.record.is_placeholder

    @property
    def is_resizable(self) -> bool:
        """Derived blocks can be resized; feed events and synthetic rows cannot."""
        return self.record.kind is RecordKind.BLOCK and not self.record.is_placeholder and not self.is_beauty_camera

    @property
    def is_movable(self) -> bool:
        return self.is_resizable


def parse_instant(value: Any) -> datetime | None:
    """Parse an ISO-8601 instant (``Z`` suffix accepted) into aware UTC.

    Returns None for empty or unparseable values; naive values are read as UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def format_instant(moment: datetime | None) -> str | None:
    """Render an instant the way the stores keep it: ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    if moment is None:
        return None
    utc = moment.astimezone(timezone.utc) if moment.tzinfo else moment.replace(tzinfo=timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
