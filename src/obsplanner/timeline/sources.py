"""
Mapping of collaborator payloads into TimedRecords.

The event source (OBS feed) and the block source (resource assignments) hand
over plain dicts. This module turns them into TimedRecords and is where a
malformed row is logged before it is dropped; the engine itself stays silent.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

import structlog

from .records import RecordKind, TimedRecord, parse_instant

_log = structlog.get_logger(__name__)

UNASSIGNED_LANE = "No Encoder"
UNGROUPED_LANE = "No Channel"


def block_effective_times(block: Mapping[str, Any]) -> tuple[Any, Any]:
    """Broadcast times win when both are present, else the nominal pair."""
    if block.get("broadcast_start_time") and block.get("broadcast_end_time"):
        return block["broadcast_start_time"], block["broadcast_end_time"]
    return block.get("start_time"), block.get("end_time")


def planning_times(block: Mapping[str, Any], override: Mapping[str, Any] | None) -> tuple[Any, Any]:
    """A producer override on the planning lane wins over the block's own times."""
    if override and override.get("producer_broadcast_start_time") and override.get("producer_broadcast_end_time"):
        return override["producer_broadcast_start_time"], override["producer_broadcast_end_time"]
    return block_effective_times(block)


def _times(record_id: str, raw_start: Any, raw_end: Any, *, end_required: bool) -> tuple[datetime, datetime | None] | None:
    start = parse_instant(raw_start)
    if start is None:
        _log.warning("record_dropped", record_id=record_id, reason="malformed_start", value=str(raw_start))
        return None
    end = parse_instant(raw_end)
    if end is None and (raw_end not in (None, "") or end_required):
        _log.warning("record_dropped", record_id=record_id, reason="malformed_end", value=str(raw_end))
        return None
    if end is not None and end < start:
        _log.warning("record_dropped", record_id=record_id, reason="end_before_start")
        return None
    return start, end


def record_from_event(event: Mapping[str, Any], *, ungrouped_lane: str = UNGROUPED_LANE) -> TimedRecord | None:
    """``{id, title, start_time, end_time?, date?, group}`` -> TimedRecord; a blank group goes to `ungrouped_lane`."""
    record_id = str(event.get("id", ""))
    times = _times(record_id, event.get("start_time"), event.get("end_time"), end_required=False)
    if times is None:
        return None
    return TimedRecord(
        id=record_id,
        start_utc=times[0],
        end_utc=times[1],
        title=str(event.get("title") or ""),
        lane_key=str(event.get("group") or "").strip() or ungrouped_lane,
        kind=RecordKind.EVENT,
        date_label=event.get("date") or None,
        data=event,
    )


def record_from_block(
    block: Mapping[str, Any],
    *,
    lane_key: str | None = None,
    override: Mapping[str, Any] | None = None,
    unassigned_lane: str = UNASSIGNED_LANE,
) -> TimedRecord | None:
    """A block placed on its encoder lane (or `lane_key` when given)."""
    record_id = str(block.get("id", ""))
    raw_start, raw_end = planning_times(block, override) if override is not None else block_effective_times(block)
    times = _times(record_id, raw_start, raw_end, end_required=True)
    if times is None:
        return None
    if lane_key is None:
        encoder = block.get("encoder") or {}
        lane_key = encoder.get("name") or unassigned_lane
    return TimedRecord(
        id=record_id,
        start_utc=times[0],
        end_utc=times[1],
        title=str(block.get("name") or ""),
        lane_key=lane_key,
        kind=RecordKind.BLOCK,
        data=block,
    )


def records_from_events(events: Iterable[Mapping[str, Any]], *, ungrouped_lane: str = UNGROUPED_LANE) -> list[TimedRecord]:
    return [r for r in (record_from_event(e, ungrouped_lane=ungrouped_lane) for e in events) if r is not None]


def records_from_blocks(blocks: Iterable[Mapping[str, Any]], *, unassigned_lane: str = UNASSIGNED_LANE) -> list[TimedRecord]:
    return [r for r in (record_from_block(b, unassigned_lane=unassigned_lane) for b in blocks) if r is not None]


def records_for_pinned_lane(
    blocks: Iterable[Mapping[str, Any]],
    on_air_ids: Iterable[str],
    overrides: Mapping[str, Mapping[str, Any]],
    *,
    lane_key: str,
) -> list[TimedRecord]:
    """Planning lane: the on-air blocks, in planning order, with producer overrides."""
    by_id = {str(b.get("id")): b for b in blocks}
    records = []
    for block_id in on_air_ids:
        block = by_id.get(str(block_id))
        if block is None:
            continue
        record = record_from_block(block, lane_key=lane_key, override=overrides.get(str(block_id)) or {})
        if record is not None:
            records.append(record)
    return records
