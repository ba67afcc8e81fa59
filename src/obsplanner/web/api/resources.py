"""
Resource registry endpoints: ``/api/resources/{type}``.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ...runtime.subscriptions import SubscriptionRegistry
from ...usecases import resources
from ..deps import get_db, get_registry

router = APIRouter(prefix="/api/resources", tags=["resources"])


class ResourceCreate(BaseModel):
    name: str = Field("", description="Resource name (unique per type)")


class ResourceUpdate(BaseModel):
    id: str = Field(..., description="Resource id")
    name: str = Field("", description="New name")


@router.get("/{resource_type}")
def list_resources(resource_type: str, db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    return resources.list_resources(db, resource_type)


@router.post("/{resource_type}", status_code=201)
def create_resource(
    resource_type: str,
    payload: ResourceCreate,
    db: Session = Depends(get_db),
    registry: SubscriptionRegistry = Depends(get_registry),
) -> dict[str, Any]:
    return resources.add_resource(db, resource_type, name=payload.name, registry=registry)


@router.put("/{resource_type}")
def update_resource(
    resource_type: str,
    payload: ResourceUpdate,
    db: Session = Depends(get_db),
    registry: SubscriptionRegistry = Depends(get_registry),
) -> dict[str, Any]:
    return resources.update_resource(db, resource_type, payload.id, name=payload.name, registry=registry)


@router.delete("/{resource_type}")
def delete_resource(
    resource_type: str,
    id: str = Query(..., description="Resource id"),
    db: Session = Depends(get_db),
    registry: SubscriptionRegistry = Depends(get_registry),
) -> dict[str, Any]:
    return resources.delete_resource(db, resource_type, id, registry=registry)
