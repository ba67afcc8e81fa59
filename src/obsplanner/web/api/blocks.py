"""
Block endpoints: CRUD, booth/commentator/network links, per-booth listing.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ...runtime.subscriptions import SubscriptionRegistry
from ...usecases import blocks
from ..deps import get_db, get_registry

router = APIRouter(prefix="/api", tags=["blocks"])


class BlockCreate(BaseModel):
    """Request model for creating a block."""
    name: str = Field("", description="Block name")
    start_time: str | None = Field(None, description="Nominal start (ISO-8601)")
    end_time: str | None = Field(None, description="Nominal end (ISO-8601)")
    broadcast_start_time: str | None = None
    broadcast_end_time: str | None = None
    duration: str | None = Field(None, description="H:M:S; derived from the times when omitted")
    block_id: str | None = None
    obs_id: str | None = None
    encoder_id: str | None = None
    producer_id: str | None = None
    suite_id: str | None = None
    source_event_id: str | None = None
    obs_group: str | None = None
    type: str | None = None
    canadian_content: bool | str = False


class BlockUpdate(BaseModel):
    """Request model for a partial block update; only sent fields change."""
    name: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    broadcast_start_time: str | None = None
    broadcast_end_time: str | None = None
    duration: str | None = None
    block_id: str | None = None
    obs_id: str | None = None
    encoder_id: str | None = None
    producer_id: str | None = None
    suite_id: str | None = None
    source_event_id: str | None = None
    obs_group: str | None = None
    type: str | None = None
    canadian_content: bool | str | None = None


class RelationshipCreate(BaseModel):
    resource_id: str = Field(..., description="Booth, commentator or network id")
    role: str | None = Field(None, description="Commentator role")
    network_id: str | None = Field(None, description="Network a booth feeds")


@router.get("/blocks")
def list_blocks(db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    return blocks.list_blocks(db)


@router.post("/blocks", status_code=201)
def create_block(
    payload: BlockCreate,
    db: Session = Depends(get_db),
    registry: SubscriptionRegistry = Depends(get_registry),
) -> dict[str, Any]:
    return blocks.create_block(db, registry=registry, **payload.model_dump())


@router.get("/blocks/{block_id}")
def get_block(block_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    return blocks.get_block(db, block_id)


@router.put("/blocks/{block_id}")
def update_block(
    block_id: str,
    payload: BlockUpdate,
    db: Session = Depends(get_db),
    registry: SubscriptionRegistry = Depends(get_registry),
) -> dict[str, Any]:
    return blocks.update_block(db, block_id, payload.model_dump(exclude_unset=True), registry=registry)


@router.delete("/blocks/{block_id}")
def delete_block(
    block_id: str,
    db: Session = Depends(get_db),
    registry: SubscriptionRegistry = Depends(get_registry),
) -> dict[str, Any]:
    return blocks.delete_block(db, block_id, registry=registry)


@router.get("/blocks/{block_id}/{kind}")
def list_relationships(block_id: str, kind: str, db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    return blocks.list_block_relationships(db, block_id, kind)


@router.post("/blocks/{block_id}/{kind}", status_code=201)
def add_relationship(
    block_id: str,
    kind: str,
    payload: RelationshipCreate,
    db: Session = Depends(get_db),
    registry: SubscriptionRegistry = Depends(get_registry),
) -> dict[str, Any]:
    return blocks.add_block_relationship(
        db,
        block_id,
        kind,
        payload.resource_id,
        role=payload.role,
        network_id=payload.network_id,
        registry=registry,
    )


@router.delete("/blocks/{block_id}/{kind}")
def remove_relationship(
    block_id: str,
    kind: str,
    resource_id: str = Query(..., description="Linked resource id"),
    network_id: str | None = Query(None, description="Only the booth link for this network"),
    db: Session = Depends(get_db),
    registry: SubscriptionRegistry = Depends(get_registry),
) -> dict[str, Any]:
    return blocks.remove_block_relationship(
        db, block_id, kind, resource_id, network_id=network_id, registry=registry
    )


@router.get("/booths/{booth_id}/blocks")
def list_booth_blocks(booth_id: str, db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    return blocks.blocks_for_booth(db, booth_id)
