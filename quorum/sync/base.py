"""
quorum.sync.base — Document Store Interface
============================================

The core talks to storage only through :class:`SyncAdapter`:

* ``get(collection, key)``          → body or ``None``
* ``put(collection, key, patch)``   → merged body (top-level fields replaced)
* ``delete(collection, key)``       → ``True`` if something was removed
* ``query(collection, where)``      → snapshot of matching documents
* ``subscribe(collection, listener, where)`` → :class:`Subscription`

Subscribers get the current snapshot immediately and then a fresh
:class:`~quorum.engine.events.Changed` after every write to the collection.
``where`` is an equality filter on top-level fields; when the stored field
is a list, the filter matches if the list *contains* the value.

Two implementations ship: :class:`~quorum.sync.memory.InMemorySyncAdapter`
and :class:`~quorum.sync.sql.SqlSyncAdapter`.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from quorum.engine.events import Changed, ChangeListener, Snapshot

logger = logging.getLogger(__name__)

__all__ = ["Subscription", "SyncAdapter", "matches"]


def matches(body: Mapping[str, Any], where: Mapping[str, Any] | None) -> bool:
    """Equality filter; list fields match on containment."""
    if not where:
        return True
    for name, expected in where.items():
        actual = body.get(name)
        if isinstance(actual, list):
            if expected not in actual:
                return False
        elif actual != expected:
            return False
    return True


@dataclass(eq=False)
class Subscription:
    """Handle returned by :meth:`SyncAdapter.subscribe`."""

    adapter: SyncAdapter
    collection: str
    listener: ChangeListener
    where: dict[str, Any] = field(default_factory=dict)
    active: bool = True

    def unsubscribe(self) -> None:
        self.adapter._remove_subscription(self)
        self.active = False


class SyncAdapter(ABC):
    """Key-based document store with change notifications."""

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []
        self._sub_lock = threading.Lock()

    # -------------------------------------------------------------------
    # Storage primitives
    # -------------------------------------------------------------------
    @abstractmethod
    def get(self, collection: str, key: str) -> dict[str, Any] | None:
        ...

    @abstractmethod
    def put(self, collection: str, key: str, patch: Mapping[str, Any]) -> dict[str, Any]:
        ...

    @abstractmethod
    def delete(self, collection: str, key: str) -> bool:
        ...

    @abstractmethod
    def query(
        self, collection: str, where: Mapping[str, Any] | None = None
    ) -> Snapshot:
        ...

    # -------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------
    def subscribe(
        self,
        collection: str,
        listener: ChangeListener,
        where: Mapping[str, Any] | None = None,
    ) -> Subscription:
        """Register *listener* and deliver the current snapshot right away."""
        sub = Subscription(
            adapter=self, collection=collection, listener=listener, where=dict(where or {}),
        )
        with self._sub_lock:
            self._subscriptions.append(sub)
        logger.debug("Subscribed to %s where %s", collection, sub.where)
        self._deliver(sub, Changed(collection=collection, snapshot=self.query(collection, sub.where)))
        return sub

    def _remove_subscription(self, sub: Subscription) -> None:
        with self._sub_lock:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)

    def _notify(self, collection: str, key: str | None, *, deleted: bool = False) -> None:
        """Push a fresh snapshot to every subscriber of *collection*."""
        with self._sub_lock:
            subs = [s for s in self._subscriptions if s.collection == collection]
        for sub in subs:
            event = Changed(
                collection=collection,
                snapshot=self.query(collection, sub.where),
                key=key,
                deleted=deleted,
            )
            self._deliver(sub, event)

    @staticmethod
    def _deliver(sub: Subscription, event: Changed) -> None:
        if not sub.active:
            return
        try:
            sub.listener(event)
        except Exception:
            # A broken subscriber must not fail the write that triggered it
            logger.exception(
                "Change listener failed for %s/%s", event.collection, event.key,
            )
