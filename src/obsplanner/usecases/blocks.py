"""
Block use cases: CRUD, resource links, per-booth lookups and the live view.

A block is serialized with its encoder, producer and suite, and with its
booths (each with the network it feeds), commentators (with role) and
networks.
"""

from __future__ import annotations

import re
import uuid as uuid_module
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..domain.entities import (
    Block,
    BlockBooth,
    BlockCommentator,
    BlockNetwork,
    Booth,
    Commentator,
    Encoder,
    Network,
    Producer,
    Suite,
)
from ..domain.networks import NetworkDirectory
from ..infra.exceptions import ConstraintError, NotFoundError, ValidationError
from ..infra.logging import get_logger
from ..runtime.subscriptions import SubscriptionRegistry, publish_change
from ..timeline.records import parse_instant
from ..timeline.window import ensure_utc
from .resources import iso, parse_uuid, resource_to_dict

logger = get_logger(__name__)

# Booths that may be double-booked and never appear on the live view
SHARED_BOOTH_NAMES = ("VIS", "VOBS", "VV MH1", "VV MH2", "VV MOS")

RELATIONSHIP_KINDS = ("booths", "commentators", "networks")

_TEXT_FIELDS = ("block_id", "obs_id", "obs_group", "type")
_TIME_FIELDS = ("start_time", "end_time", "broadcast_start_time", "broadcast_end_time")
_FK_FIELDS = {"encoder_id": Encoder, "producer_id": Producer, "suite_id": Suite}


def format_duration(delta: timedelta) -> str:
    """``H:M:S`` without zero padding, e.g. ``2:5:0``."""
    total = int(delta.total_seconds())
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours}:{minutes}:{seconds}"


def _parse_time(value: Any, field_name: str, *, required: bool = False) -> datetime | None:
    if value in (None, ""):
        if required:
            raise ValidationError("Name, start_time, and end_time are required")
        return None
    moment = parse_instant(value)
    if moment is None:
        raise ValidationError(f"Invalid {field_name}: {value}")
    return moment


def _optional_text(value: Any) -> str | None:
    text = str(value).strip() if value is not None else ""
    return text or None


def _as_bool(value: Any) -> bool:
    return value is True or value == "true"


def _load_block(db: Session, block_id: Any) -> Block:
    block = db.get(Block, parse_uuid(block_id, "block id"))
    if block is None:
        raise NotFoundError(f"Block not found: {block_id}")
    return block


def _check_fk(db: Session, model: type, value: Any) -> Any:
    if value in (None, ""):
        return None
    key = parse_uuid(value, model.__tablename__[:-1] + " id")
    if db.get(model, key) is None:
        raise NotFoundError(f"{model.__name__} not found: {value}")
    return key


def _network_key(db: Session, value: Any) -> Any:
    """A network by id, or by any spelling of its canonical name ("gem", "CBC Web")."""
    if value in (None, ""):
        return None
    try:
        uuid_module.UUID(str(value))
    except ValueError:
        rows = db.execute(select(Network)).scalars().all()
        directory = NetworkDirectory.resolve({"id": row.id, "name": row.name} for row in rows)
        network_id = directory.id_for(str(value))
        if network_id is None:
            raise NotFoundError(f"Network not found: {value}")
        return parse_uuid(network_id)
    return _check_fk(db, Network, value)


def block_to_dict(block: Block) -> dict[str, Any]:
    return {
        "id": str(block.id),
        "name": block.name,
        "block_id": block.block_id,
        "obs_id": block.obs_id,
        "start_time": iso(block.start_time),
        "end_time": iso(block.end_time),
        "broadcast_start_time": iso(block.broadcast_start_time),
        "broadcast_end_time": iso(block.broadcast_end_time),
        "duration": block.duration,
        "encoder_id": str(block.encoder_id) if block.encoder_id else None,
        "producer_id": str(block.producer_id) if block.producer_id else None,
        "suite_id": str(block.suite_id) if block.suite_id else None,
        "source_event_id": block.source_event_id,
        "obs_group": block.obs_group,
        "type": block.type,
        "canadian_content": bool(block.canadian_content),
        "created_at": iso(block.created_at),
        "encoder": resource_to_dict(block.encoder) if block.encoder else None,
        "producer": resource_to_dict(block.producer) if block.producer else None,
        "suite": resource_to_dict(block.suite) if block.suite else None,
        "booths": [
            {
                "id": str(link.booth.id),
                "name": link.booth.name,
                "network_id": str(link.network_id) if link.network_id else None,
                "network": {"id": str(link.network.id), "name": link.network.name} if link.network else None,
            }
            for link in block.booth_links
        ],
        "commentators": [
            {"id": str(link.commentator.id), "name": link.commentator.name, "role": link.role}
            for link in block.commentator_links
        ],
        "networks": [{"id": str(link.network.id), "name": link.network.name} for link in block.network_links],
    }


def _block_query():
    return select(Block).options(
        selectinload(Block.encoder),
        selectinload(Block.producer),
        selectinload(Block.suite),
        selectinload(Block.booth_links).selectinload(BlockBooth.booth),
        selectinload(Block.booth_links).selectinload(BlockBooth.network),
        selectinload(Block.commentator_links).selectinload(BlockCommentator.commentator),
        selectinload(Block.network_links).selectinload(BlockNetwork.network),
    )


def list_blocks(db: Session) -> list[dict[str, Any]]:
    blocks = db.execute(_block_query().order_by(Block.start_time)).scalars().all()
    return [block_to_dict(block) for block in blocks]


def get_block(db: Session, block_id: Any) -> dict[str, Any]:
    return block_to_dict(_load_block(db, block_id))


def create_block(
    db: Session,
    *,
    name: str,
    start_time: Any,
    end_time: Any,
    broadcast_start_time: Any = None,
    broadcast_end_time: Any = None,
    duration: str | None = None,
    block_id: str | None = None,
    obs_id: str | None = None,
    encoder_id: Any = None,
    producer_id: Any = None,
    suite_id: Any = None,
    source_event_id: str | None = None,
    obs_group: str | None = None,
    type: str | None = None,
    canadian_content: Any = False,
    registry: SubscriptionRegistry | None = None,
) -> dict[str, Any]:
    """Create a block; ``duration`` is derived from the nominal times when absent."""
    if not name or not str(name).strip():
        raise ValidationError("Name, start_time, and end_time are required")
    start = _parse_time(start_time, "start_time", required=True)
    end = _parse_time(end_time, "end_time", required=True)
    if end < start:
        raise ValidationError("end_time must not be before start_time")

    block = Block(
        name=str(name).strip(),
        block_id=_optional_text(block_id),
        obs_id=_optional_text(obs_id),
        start_time=start,
        end_time=end,
        broadcast_start_time=_parse_time(broadcast_start_time, "broadcast_start_time"),
        broadcast_end_time=_parse_time(broadcast_end_time, "broadcast_end_time"),
        duration=duration or format_duration(end - start),
        encoder_id=_check_fk(db, Encoder, encoder_id),
        producer_id=_check_fk(db, Producer, producer_id),
        suite_id=_check_fk(db, Suite, suite_id),
        source_event_id=_optional_text(source_event_id),
        obs_group=_optional_text(obs_group),
        type=_optional_text(type),
        canadian_content=_as_bool(canadian_content),
    )
    db.add(block)
    db.commit()
    db.refresh(block)

    payload = block_to_dict(block)
    logger.info("block_created", id=payload["id"], name=block.name, encoder=payload["encoder_id"])
    publish_change(registry, "blocks", "INSERT", payload)
    return payload


def update_block(
    db: Session,
    block_id: Any,
    changes: Mapping[str, Any],
    *,
    registry: SubscriptionRegistry | None = None,
) -> dict[str, Any]:
    """Apply a partial update; only keys present in `changes` are touched."""
    block = _load_block(db, block_id)

    if "name" in changes:
        if not changes["name"] or not str(changes["name"]).strip():
            raise ValidationError("Name is required")
        block.name = str(changes["name"]).strip()
    for key in _TEXT_FIELDS:
        if key in changes:
            setattr(block, key, _optional_text(changes[key]))
    if "source_event_id" in changes:
        block.source_event_id = _optional_text(changes["source_event_id"])
    for key in _TIME_FIELDS:
        if key in changes:
            value = _parse_time(changes[key], key)
            if value is None and key in ("start_time", "end_time"):
                raise ValidationError(f"{key} cannot be cleared")
            setattr(block, key, value)
    for key, model in _FK_FIELDS.items():
        if key in changes:
            setattr(block, key, _check_fk(db, model, changes[key]))
    if "canadian_content" in changes:
        block.canadian_content = _as_bool(changes["canadian_content"])

    if ensure_utc(block.end_time) < ensure_utc(block.start_time):
        raise ValidationError("end_time must not be before start_time")
    if changes.get("duration"):
        block.duration = str(changes["duration"])
    elif "start_time" in changes or "end_time" in changes:
        block.duration = format_duration(ensure_utc(block.end_time) - ensure_utc(block.start_time))

    db.commit()
    db.refresh(block)

    payload = block_to_dict(block)
    publish_change(registry, "blocks", "UPDATE", payload)
    return payload


def delete_block(db: Session, block_id: Any, *, registry: SubscriptionRegistry | None = None) -> dict[str, Any]:
    block = _load_block(db, block_id)
    payload = {"id": str(block.id), "name": block.name}
    db.delete(block)
    db.commit()

    logger.info("block_deleted", **payload)
    publish_change(registry, "blocks", "DELETE", payload)
    return {"deleted": True, **payload}


def _check_kind(kind: str) -> None:
    if kind not in RELATIONSHIP_KINDS:
        raise ValidationError(f"Invalid relationship type: {kind}. Valid types: {', '.join(RELATIONSHIP_KINDS)}")


def list_block_relationships(db: Session, block_id: Any, kind: str) -> list[dict[str, Any]]:
    _check_kind(kind)
    return block_to_dict(_load_block(db, block_id))[kind]


def add_block_relationship(
    db: Session,
    block_id: Any,
    kind: str,
    resource_id: Any,
    *,
    role: str | None = None,
    network_id: Any = None,
    registry: SubscriptionRegistry | None = None,
) -> dict[str, Any]:
    """Link a booth, commentator or network to a block."""
    _check_kind(kind)
    block = _load_block(db, block_id)

    if kind == "booths":
        booth_id = _check_fk(db, Booth, resource_id)
        net_id = _network_key(db, network_id)
        if any(link.booth_id == booth_id and link.network_id == net_id for link in block.booth_links):
            raise ConstraintError("Booth is already assigned to this block for that network")
        block.booth_links.append(BlockBooth(booth_id=booth_id, network_id=net_id))
    elif kind == "commentators":
        commentator_id = _check_fk(db, Commentator, resource_id)
        if any(link.commentator_id == commentator_id for link in block.commentator_links):
            raise ConstraintError("Commentator is already assigned to this block")
        block.commentator_links.append(BlockCommentator(commentator_id=commentator_id, role=_optional_text(role)))
    else:
        net_id = _network_key(db, resource_id)
        if any(link.network_id == net_id for link in block.network_links):
            raise ConstraintError("Network is already assigned to this block")
        block.network_links.append(BlockNetwork(network_id=net_id))

    db.commit()
    db.refresh(block)

    payload = block_to_dict(block)
    publish_change(registry, f"block_{kind}", "INSERT", {"block_id": payload["id"], "resource_id": str(resource_id)})
    return payload


def remove_block_relationship(
    db: Session,
    block_id: Any,
    kind: str,
    resource_id: Any,
    *,
    network_id: Any = None,
    registry: SubscriptionRegistry | None = None,
) -> dict[str, Any]:
    _check_kind(kind)
    block = _load_block(db, block_id)
    key = parse_uuid(resource_id, "resource id")

    if kind == "booths":
        net_id = parse_uuid(network_id, "network id") if network_id not in (None, "") else None
        links = [
            link
            for link in block.booth_links
            if link.booth_id == key and (network_id in (None, "") or link.network_id == net_id)
        ]
        collection = block.booth_links
    elif kind == "commentators":
        links = [link for link in block.commentator_links if link.commentator_id == key]
        collection = block.commentator_links
    else:
        links = [link for link in block.network_links if link.network_id == key]
        collection = block.network_links
    if not links:
        raise NotFoundError(f"No {kind[:-1]} {resource_id} on block {block_id}")
    for link in links:
        collection.remove(link)

    db.commit()
    db.refresh(block)

    payload = block_to_dict(block)
    publish_change(registry, f"block_{kind}", "DELETE", {"block_id": payload["id"], "resource_id": str(resource_id)})
    return payload


def blocks_for_booth(db: Session, booth_id: Any) -> list[dict[str, Any]]:
    """Blocks a booth is assigned to, by start time."""
    key = _check_fk(db, Booth, booth_id)
    query = _block_query().join(BlockBooth, BlockBooth.block_id == Block.id).where(BlockBooth.booth_id == key)
    blocks = db.execute(query.order_by(Block.start_time)).scalars().unique().all()
    return [block_to_dict(block) for block in blocks]


def _booth_number(name: str) -> int:
    match = re.search(r"\d+", name)
    return int(match.group(0)) if match else 999


def live_blocks(db: Session, now: datetime) -> list[dict[str, Any]]:
    """Every non-shared booth with the blocks on air at `now` and their commentators.

    A block is live strictly inside its nominal window. Blocks using a shared
    booth are left out entirely.
    """
    now = ensure_utc(now)
    live = []
    for block in list_blocks(db):
        start, end = parse_instant(block["start_time"]), parse_instant(block["end_time"])
        if start is None or end is None or not (start < now < end):
            continue
        if any(booth["name"] in SHARED_BOOTH_NAMES for booth in block["booths"]):
            continue
        live.append(block)

    booths = db.execute(select(Booth)).scalars().all()
    entries: dict[str, dict[str, Any]] = {
        str(booth.id): {"booth": resource_to_dict(booth), "blocks": [], "commentators": []}
        for booth in booths
        if booth.name not in SHARED_BOOTH_NAMES
    }
    for block in live:
        for booth in block["booths"]:
            entry = entries.get(booth["id"])
            if entry is None:
                continue
            if all(b["id"] != block["id"] for b in entry["blocks"]):
                entry["blocks"].append(block)
            for commentator in block["commentators"]:
                if all(c["id"] != commentator["id"] for c in entry["commentators"]):
                    entry["commentators"].append(commentator)

    return sorted(entries.values(), key=lambda e: (_booth_number(e["booth"]["name"]), e["booth"]["name"]))
