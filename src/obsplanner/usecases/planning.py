"""Producer planning lane: which blocks are on air, in what order, with what override times."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..domain.entities import Block, PlanningEntry
from ..infra.exceptions import NotFoundError, ValidationError
from ..infra.logging import get_logger
from ..runtime.subscriptions import SubscriptionRegistry, publish_change
from ..timeline.records import parse_instant
from .resources import iso, parse_uuid

logger = get_logger(__name__)


def _override_to_dict(entry: PlanningEntry) -> dict[str, Any]:
    override = {
        "producer_broadcast_start_time": iso(entry.producer_broadcast_start_time),
        "producer_broadcast_end_time": iso(entry.producer_broadcast_end_time),
        "notes": entry.notes,
    }
    return {key: value for key, value in override.items() if value}


def get_planning(db: Session) -> dict[str, Any]:
    """``{onAirBlockIds, overrides}`` in planning order."""
    entries = db.execute(select(PlanningEntry).order_by(PlanningEntry.sort_order)).scalars().all()
    return {
        "onAirBlockIds": [str(entry.block_id) for entry in entries],
        "overrides": {str(entry.block_id): _override_to_dict(entry) for entry in entries},
    }


def _override_time(override: Mapping[str, Any], key: str) -> Any:
    value = override.get(key)
    if value in (None, ""):
        return None
    moment = parse_instant(value)
    if moment is None:
        raise ValidationError(f"Invalid {key}: {value}")
    return moment


def put_planning(
    db: Session,
    *,
    on_air_block_ids: Sequence[Any] | None,
    overrides: Mapping[str, Mapping[str, Any]] | None = None,
    registry: SubscriptionRegistry | None = None,
) -> dict[str, Any]:
    """Replace the whole planning lane with `on_air_block_ids` (their order is kept)."""
    ids = [parse_uuid(value, "block id") for value in (on_air_block_ids or [])]
    overrides = overrides or {}
    for block_id in ids:
        if db.get(Block, block_id) is None:
            raise NotFoundError(f"Block not found: {block_id}")

    rows = []
    seen = set()
    for index, block_id in enumerate(ids):
        if block_id in seen:
            continue
        seen.add(block_id)
        override = overrides.get(str(block_id)) or {}
        rows.append(
            PlanningEntry(
                block_id=block_id,
                producer_broadcast_start_time=_override_time(override, "producer_broadcast_start_time"),
                producer_broadcast_end_time=_override_time(override, "producer_broadcast_end_time"),
                notes=(override.get("notes") or None),
                sort_order=index,
            )
        )

    for existing in db.execute(select(PlanningEntry)).scalars().all():
        db.delete(existing)
    db.flush()
    db.add_all(rows)
    db.commit()

    result = get_planning(db)
    logger.info("planning_saved", count=len(result["onAirBlockIds"]))
    publish_change(registry, "planning", "UPDATE", result)
    return result


def set_planning_override(
    db: Session,
    block_id: Any,
    *,
    start_time: Any,
    end_time: Any,
    registry: SubscriptionRegistry | None = None,
) -> dict[str, Any]:
    """Rewrite one on-air block's producer broadcast window, adding it to the lane if needed."""
    key = parse_uuid(block_id, "block id")
    if db.get(Block, key) is None:
        raise NotFoundError(f"Block not found: {block_id}")
    override = {"producer_broadcast_start_time": start_time, "producer_broadcast_end_time": end_time}

    entry = db.get(PlanningEntry, key)
    if entry is None:
        last = db.execute(select(PlanningEntry.sort_order).order_by(PlanningEntry.sort_order.desc())).scalars().first()
        entry = PlanningEntry(block_id=key, sort_order=0 if last is None else last + 1)
        db.add(entry)
    entry.producer_broadcast_start_time = _override_time(override, "producer_broadcast_start_time")
    entry.producer_broadcast_end_time = _override_time(override, "producer_broadcast_end_time")
    db.commit()

    result = get_planning(db)
    publish_change(registry, "planning", "UPDATE", result)
    return result
