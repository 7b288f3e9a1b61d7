"""
quorum.sync.memory — In-Memory Document Store
==============================================

Local-only :class:`~quorum.sync.base.SyncAdapter` for single-process
deployments, demos and tests.  Documents are deep-copied on the way in
and out, so callers can never mutate stored state by accident.
"""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Mapping
from typing import Any

from quorum.engine.events import Snapshot
from quorum.sync.base import SyncAdapter, matches

logger = logging.getLogger(__name__)


class InMemorySyncAdapter(SyncAdapter):
    """Thread-safe dict-of-dicts store with synchronous notifications."""

    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.Lock()
        # collection → key → body
        self._docs: dict[str, dict[str, dict[str, Any]]] = {}

    def get(self, collection: str, key: str) -> dict[str, Any] | None:
        with self._lock:
            body = self._docs.get(collection, {}).get(key)
            return copy.deepcopy(body) if body is not None else None

    def put(self, collection: str, key: str, patch: Mapping[str, Any]) -> dict[str, Any]:
        with self._lock:
            docs = self._docs.setdefault(collection, {})
            merged = {**docs.get(key, {}), **copy.deepcopy(dict(patch))}
            docs[key] = merged
            result = copy.deepcopy(merged)
        logger.debug("put %s/%s fields=%s", collection, key, sorted(patch))
        self._notify(collection, key)
        return result

    def delete(self, collection: str, key: str) -> bool:
        with self._lock:
            removed = self._docs.get(collection, {}).pop(key, None) is not None
        if removed:
            self._notify(collection, key, deleted=True)
        return removed

    def query(
        self, collection: str, where: Mapping[str, Any] | None = None
    ) -> Snapshot:
        with self._lock:
            return {
                key: copy.deepcopy(body)
                for key, body in self._docs.get(collection, {}).items()
                if matches(body, where)
            }
