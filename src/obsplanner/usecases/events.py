"""
OBS event store.

Ingested feed events are kept as a JSON document at ``EVENTS_PATH``; each
ingest replaces the whole set. Reads are served from memory once loaded.
"""

from __future__ import annotations

import json
import threading
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path
from typing import Any

from ..infra.exceptions import IngestError, NotFoundError, ValidationError
from ..infra.logging import get_logger
from ..infra.settings import settings
from ..ingest.obs_csv import IngestResult, parse_obs_csv
from ..runtime.subscriptions import SubscriptionRegistry, publish_change
from ..timeline.records import parse_instant

logger = get_logger(__name__)


def parse_day(value: str | date) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(f"Invalid date: {value}. Expected YYYY-MM-DD")


class EventStore:
    """JSON-file backed list of feed events."""

    def __init__(self, path: str | Path | None = None, *, registry: SubscriptionRegistry | None = None) -> None:
        self.path = Path(path or settings.events_path)
        self.registry = registry
        self._events: list[dict[str, Any]] | None = None
        self._lock = threading.Lock()

    def _load(self) -> list[dict[str, Any]]:
        if self._events is not None:
            return self._events
        events: list[dict[str, Any]] = []
        if self.path.is_file():
            try:
                text = self.path.read_text(encoding="utf-8")
                events = json.loads(text) if text.strip() else []
            except (OSError, json.JSONDecodeError) as e:
                logger.error("events_file_unreadable", path=str(self.path), error=str(e))
                events = []
            if not isinstance(events, list):
                logger.error("events_file_invalid", path=str(self.path))
                events = []
        self._events = events
        return events

    def all(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._load())

    def replace(self, events: list[dict[str, Any]]) -> None:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(events, indent=2), encoding="utf-8")
            self._events = list(events)
        publish_change(self.registry, "events", "UPDATE", {"count": len(events)})

    def list_events(self, day: str | date | None = None) -> list[dict[str, Any]]:
        """All events, or those overlapping the UTC day `day`."""
        events = self.all()
        if day is None or day == "":
            return events
        day_start = datetime.combine(parse_day(day), time(0, 0), tzinfo=timezone.utc)
        day_end = day_start + timedelta(days=1)
        selected = []
        for event in events:
            start = parse_instant(event.get("start_time"))
            end = parse_instant(event.get("end_time")) or start
            if start is None:
                continue
            if start < day_end and end > day_start:
                selected.append(event)
            elif start == end and day_start <= start < day_end:
                selected.append(event)
        return selected

    def available_dates(self) -> list[str]:
        """Sorted distinct UTC start dates."""
        dates = set()
        for event in self.all():
            start = parse_instant(event.get("start_time"))
            if start is not None:
                dates.add(start.date().isoformat())
        return sorted(dates)

    def ingest_csv(self, content: str | bytes) -> IngestResult:
        result = parse_obs_csv(content)
        self.replace(result.events)
        logger.info("events_ingested", path=str(self.path), **result.stats)
        return result


def ingest_file(store: EventStore, path: str | Path) -> IngestResult:
    csv_path = Path(path)
    if not csv_path.is_file():
        raise NotFoundError(f"File not found: {csv_path}")
    try:
        content = csv_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise IngestError(f"Could not read {csv_path}: {e}") from e
    return store.ingest_csv(content)


def load_static(store: EventStore, data_dir: str | Path | None = None, filename: str | None = None) -> dict[str, Any]:
    """Ingest a CSV dropped in the data directory (the first one, or `filename`)."""
    directory = Path(data_dir or settings.data_dir)
    if not directory.is_dir():
        raise NotFoundError(f"Data directory not found: {directory}")
    files = sorted(p.name for p in directory.iterdir() if p.suffix.lower() == ".csv")
    if not files:
        raise NotFoundError(f"No CSV file found in data directory: {directory}")
    chosen = filename or files[0]
    if chosen not in files:
        raise NotFoundError(f"File not found: {chosen}. Available: {', '.join(files)}")
    result = ingest_file(store, directory / chosen)
    return {"filename": chosen, "count": len(result.events), **result.stats}
