"""Persist a finished timeline gesture."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..domain.block_types import infer_block_type
from ..domain.entities import Encoder
from ..infra.exceptions import ValidationError
from ..infra.logging import get_logger
from ..infra.settings import settings
from ..runtime.subscriptions import SubscriptionRegistry
from ..timeline.gestures import FinalizedRange, GestureKind
from . import blocks as block_usecases
from . import planning as planning_usecases

logger = get_logger(__name__)

DEFAULT_NEW_BLOCK_NAME = "New Block"


def _encoder_for_lane(db: Session, lane_key: str) -> Any:
    query = select(Encoder).where(func.lower(Encoder.name) == lane_key.strip().lower())
    encoder = db.execute(query).scalars().first()
    return encoder.id if encoder is not None else None


def apply_finalized_range(
    db: Session,
    finalized: FinalizedRange,
    *,
    name: str | None = None,
    pinned_lane: str | None = None,
    registry: SubscriptionRegistry | None = None,
) -> dict[str, Any]:
    """Write a gesture result back to blocks or to the planning lane.

    - on the pinned lane, RESIZE / MOVE rewrite that block's producer override
      and CREATE adds an encoder-less block to the lane with that override;
    - CREATE elsewhere adds a block on the lane's encoder (none for unknown lanes);
    - RESIZE / MOVE rewrite the block's broadcast window.
    """
    if not finalized.start_utc < finalized.end_utc:
        raise ValidationError("Range start must be before its end")
    pinned_lane = pinned_lane or settings.pinned_lane

    if finalized.lane_key == pinned_lane and finalized.kind is not GestureKind.CREATE:
        planning = planning_usecases.set_planning_override(
            db,
            finalized.interval_id,
            start_time=finalized.start_utc,
            end_time=finalized.end_utc,
            registry=registry,
        )
        logger.info("gesture_applied", kind=finalized.kind.value, target="planning", id=finalized.interval_id)
        return {"target": "planning", "planning": planning}

    if finalized.kind is GestureKind.CREATE:
        block_name = name or DEFAULT_NEW_BLOCK_NAME
        block = block_usecases.create_block(
            db,
            name=block_name,
            start_time=finalized.start_utc,
            end_time=finalized.end_utc,
            broadcast_start_time=finalized.start_utc,
            broadcast_end_time=finalized.end_utc,
            encoder_id=_encoder_for_lane(db, finalized.lane_key),
            type=infer_block_type(block_name).value,
            registry=registry,
        )
        if finalized.lane_key == pinned_lane:
            planning = planning_usecases.set_planning_override(
                db, block["id"], start_time=finalized.start_utc, end_time=finalized.end_utc, registry=registry
            )
            logger.info("gesture_applied", kind=finalized.kind.value, target="planning", id=block["id"])
            return {"target": "planning", "block": block, "planning": planning}
    else:
        if not finalized.interval_id:
            raise ValidationError(f"{finalized.kind.value} needs an interval id")
        block = block_usecases.update_block(
            db,
            finalized.interval_id,
            {"broadcast_start_time": finalized.start_utc, "broadcast_end_time": finalized.end_utc},
            registry=registry,
        )

    logger.info("gesture_applied", kind=finalized.kind.value, target="block", id=block["id"])
    return {"target": "block", "block": block}
