"""
FastAPI dependencies.

The event store, subscription registry and clock live on ``app.state`` and
are created by ``create_app``; routes receive them through these functions so
tests can swap any of them with ``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Request

from ..infra.uow import get_db
from ..runtime.clock import Clock
from ..runtime.subscriptions import SubscriptionRegistry
from ..usecases.events import EventStore

__all__ = ["get_clock", "get_db", "get_event_store", "get_registry"]


def get_event_store(request: Request) -> EventStore:
    return request.app.state.event_store


def get_registry(request: Request) -> SubscriptionRegistry:
    return request.app.state.registry


def get_clock(request: Request) -> Clock:
    return request.app.state.clock
