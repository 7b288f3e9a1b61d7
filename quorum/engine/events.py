"""
quorum.engine.events — Change Notifications
============================================

The envelope a :class:`~quorum.sync.base.SyncAdapter` emits after every
write.  Subscribers (the live view projector, API push channels) receive
the full snapshot of the subscribed collection rather than a diff.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

__all__ = ["Changed", "ChangeListener", "Snapshot"]

# document key → body
Snapshot = dict[str, dict[str, Any]]


@dataclass(frozen=True, slots=True)
class Changed:
    """A collection changed; ``snapshot`` holds the matching documents."""

    collection: str
    snapshot: Snapshot
    key: str | None = None
    deleted: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


ChangeListener = Callable[[Changed], None]
