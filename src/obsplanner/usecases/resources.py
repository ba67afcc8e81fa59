"""Resource registry use cases (encoders, booths, commentators, producers, suites, networks)."""

from __future__ import annotations

import uuid as uuid_module
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..domain.entities import RESOURCE_MODELS, Booth, Encoder
from ..infra.exceptions import ConstraintError, NotFoundError, ValidationError
from ..infra.logging import get_logger
from ..runtime.subscriptions import SubscriptionRegistry, publish_change
from ..timeline.records import format_instant
from ..timeline.window import ensure_utc

logger = get_logger(__name__)

DEFAULT_ENCODERS = tuple(f"TX {n:02d}" for n in range(1, 28))
DEFAULT_BOOTHS = tuple(f"VT {n}" for n in range(51, 63))


def parse_uuid(value: Any, label: str = "id") -> uuid_module.UUID:
    if isinstance(value, uuid_module.UUID):
        return value
    try:
        return uuid_module.UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label}: {value}")


def iso(moment: datetime | None) -> str | None:
    return format_instant(ensure_utc(moment)) if moment is not None else None


def resource_model(resource_type: str) -> type:
    model = RESOURCE_MODELS.get(resource_type)
    if model is None:
        valid = ", ".join(RESOURCE_MODELS)
        raise ValidationError(f"Invalid resource type: {resource_type}. Valid types: {valid}")
    return model


def resource_to_dict(row: Any) -> dict[str, Any]:
    return {"id": str(row.id), "name": row.name, "created_at": iso(row.created_at)}


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Name is required")
    return cleaned


def _ensure_unique(db: Session, model: type, name: str, *, exclude: uuid_module.UUID | None = None) -> None:
    query = select(model).where(func.lower(model.name) == name.lower())
    if exclude is not None:
        query = query.where(model.id != exclude)
    if db.execute(query).scalars().first() is not None:
        raise ConstraintError(f"A {model.__tablename__[:-1]} named '{name}' already exists")


def list_resources(db: Session, resource_type: str) -> list[dict[str, Any]]:
    model = resource_model(resource_type)
    rows = db.execute(select(model).order_by(model.name)).scalars().all()
    return [resource_to_dict(row) for row in rows]


def get_resource(db: Session, resource_type: str, resource_id: Any) -> Any:
    model = resource_model(resource_type)
    row = db.get(model, parse_uuid(resource_id))
    if row is None:
        raise NotFoundError(f"{model.__name__} not found: {resource_id}")
    return row


def add_resource(
    db: Session,
    resource_type: str,
    *,
    name: str,
    registry: SubscriptionRegistry | None = None,
) -> dict[str, Any]:
    model = resource_model(resource_type)
    name = _clean_name(name)
    _ensure_unique(db, model, name)

    row = model(name=name)
    db.add(row)
    db.commit()
    db.refresh(row)

    payload = resource_to_dict(row)
    logger.info("resource_added", resource_type=resource_type, id=payload["id"], name=name)
    publish_change(registry, resource_type, "INSERT", payload)
    return payload


def update_resource(
    db: Session,
    resource_type: str,
    resource_id: Any,
    *,
    name: str,
    registry: SubscriptionRegistry | None = None,
) -> dict[str, Any]:
    row = get_resource(db, resource_type, resource_id)
    name = _clean_name(name)
    _ensure_unique(db, type(row), name, exclude=row.id)

    row.name = name
    db.commit()
    db.refresh(row)

    payload = resource_to_dict(row)
    publish_change(registry, resource_type, "UPDATE", payload)
    return payload


def delete_resource(
    db: Session,
    resource_type: str,
    resource_id: Any,
    *,
    registry: SubscriptionRegistry | None = None,
) -> dict[str, Any]:
    row = get_resource(db, resource_type, resource_id)
    payload = resource_to_dict(row)
    db.delete(row)
    db.commit()

    logger.info("resource_deleted", resource_type=resource_type, id=payload["id"])
    publish_change(registry, resource_type, "DELETE", payload)
    return {"deleted": True, **payload}


def seed_default_resources(db: Session) -> dict[str, int]:
    """Insert the standard encoders and booths that are not there yet."""
    created = {"encoders": 0, "booths": 0}
    for resource_type, model, names in (
        ("encoders", Encoder, DEFAULT_ENCODERS),
        ("booths", Booth, DEFAULT_BOOTHS),
    ):
        existing = set(db.execute(select(model.name)).scalars().all())
        for name in names:
            if name not in existing:
                db.add(model(name=name))
                created[resource_type] += 1
    db.commit()
    logger.info("resources_seeded", **created)
    return created
