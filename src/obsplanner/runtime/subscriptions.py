"""
Table-change subscriptions.

A SubscriptionRegistry is created by the application shell (web app or CLI)
and handed to the use cases that write. Use cases publish one ChangeEvent per
committed write; subscribers are notified synchronously on the publishing
thread, in subscription order.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class ChangeKind(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    kind: ChangeKind
    row: dict[str, Any] = field(default_factory=dict)


ChangeCallback = Callable[[ChangeEvent], None]
ChangeFilter = Callable[[ChangeEvent], bool]


@dataclass(frozen=True)
class _Subscription:
    token: int
    table: str
    callback: ChangeCallback
    filter: ChangeFilter | None


class SubscriptionRegistry:
    """Per-table callback registry; ``subscribe`` returns its own unsubscribe."""

    def __init__(self) -> None:
        self._subscriptions: dict[int, _Subscription] = {}
        self._tokens = itertools.count(1)
        self._lock = threading.Lock()
        self._closed = False

    def subscribe(
        self,
        table: str,
        callback: ChangeCallback,
        filter: ChangeFilter | None = None,
    ) -> Callable[[], None]:
        """Register `callback` for changes to `table` ("*" for all tables)."""
        with self._lock:
            if self._closed:
                raise RuntimeError("SubscriptionRegistry is closed")
            token = next(self._tokens)
            self._subscriptions[token] = _Subscription(token, table, callback, filter)

        def unsubscribe() -> None:
            with self._lock:
                self._subscriptions.pop(token, None)

        return unsubscribe

    def publish(self, table: str, kind: ChangeKind | str, row: dict[str, Any] | None = None) -> int:
        """Deliver one change; returns how many subscribers were called."""
        event = ChangeEvent(table=table, kind=ChangeKind(kind), row=dict(row or {}))
        with self._lock:
            targets = [s for s in self._subscriptions.values() if s.table in (table, "*")]
        delivered = 0
        for subscription in targets:
            if subscription.filter is not None and not subscription.filter(event):
                continue
            try:
                subscription.callback(event)
            except Exception:
                logger.exception("subscriber %d failed for %s %s", subscription.token, table, event.kind.value)
            delivered += 1
        return delivered

    def subscriber_count(self, table: str | None = None) -> int:
        with self._lock:
            if table is None:
                return len(self._subscriptions)
            return sum(1 for s in self._subscriptions.values() if s.table == table)

    def close(self) -> None:
        """Drop every subscription; later ``subscribe`` calls raise."""
        with self._lock:
            self._closed = True
            self._subscriptions.clear()


def publish_change(
    registry: SubscriptionRegistry | None, table: str, kind: ChangeKind | str, row: dict[str, Any] | None = None
) -> None:
    if registry is not None:
        registry.publish(table, kind, row)
