"""
quorum.engine.records — Board, Suggestion and Economy documents
================================================================

Plain dataclasses for the three document kinds the core reads and writes.
Each record converts to and from the JSON-shaped body stored by a
:class:`~quorum.sync.base.SyncAdapter`:

* ``boards``      — :class:`Board`
* ``suggestions`` — :class:`Suggestion`
* ``economies``   — :class:`EconomyAccount` (keyed by account key)

Vote sequences are stored as JSON arrays, so each voter's order survives a
round trip exactly; the mapping of voters itself is order-independent.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

__all__ = [
    "BOARDS",
    "ECONOMIES",
    "SUGGESTIONS",
    "Board",
    "EconomyAccount",
    "Identity",
    "Report",
    "Suggestion",
    "new_id",
    "parse_ts",
]

# Collection names
BOARDS = "boards"
SUGGESTIONS = "suggestions"
ECONOMIES = "economies"


def new_id() -> str:
    """Opaque unique identifier for a new document."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(UTC)


def parse_ts(value: Any) -> datetime:
    """Parse an ISO timestamp from a stored body; naive values are UTC."""
    if isinstance(value, datetime):
        ts = value
    elif value:
        ts = datetime.fromisoformat(str(value))
    else:
        return datetime.fromtimestamp(0, UTC)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts


# ---------------------------------------------------------------------------
# Identity (supplied by the auth collaborator, never written by the core)
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Identity:
    id: str
    display_name: str


# ---------------------------------------------------------------------------
# Board
# ---------------------------------------------------------------------------
@dataclass
class Board:
    """A scoping container for suggestions, members and one economy pool."""

    id: str
    name: str
    created_by: str
    admin_ids: list[str] = field(default_factory=list)
    member_ids: list[str] = field(default_factory=list)
    archived: bool = False
    created_at: datetime = field(default_factory=utcnow)

    def is_admin(self, user_id: str) -> bool:
        return user_id in self.admin_ids

    def is_member(self, user_id: str) -> bool:
        return user_id in self.member_ids or user_id in self.admin_ids

    @property
    def member_count(self) -> int:
        return len(set(self.member_ids) | set(self.admin_ids))

    def to_doc(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "created_by": self.created_by,
            "admin_ids": list(self.admin_ids),
            "member_ids": list(self.member_ids),
            "archived": self.archived,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_doc(cls, board_id: str, doc: dict[str, Any]) -> Board:
        return cls(
            id=board_id,
            name=doc.get("name", ""),
            created_by=doc.get("created_by", ""),
            admin_ids=list(doc.get("admin_ids") or []),
            member_ids=list(doc.get("member_ids") or []),
            archived=bool(doc.get("archived", False)),
            created_at=parse_ts(doc.get("created_at")),
        )


# ---------------------------------------------------------------------------
# Suggestion
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Report:
    """One moderation report filed against a suggestion."""

    reporter_id: str
    reason: str
    timestamp: datetime = field(default_factory=utcnow)

    def to_doc(self) -> dict[str, Any]:
        return {
            "reporter_id": self.reporter_id,
            "reason": self.reason,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_doc(cls, doc: dict[str, Any]) -> Report:
        return cls(
            reporter_id=str(doc.get("reporter_id", "")),
            reason=str(doc.get("reason", "")),
            timestamp=parse_ts(doc.get("timestamp")),
        )


@dataclass
class Suggestion:
    """A short text proposal on a board and the votes cast on it.

    ``votes`` maps voter id → chronological list of applied vote values.
    A list has length 1 after a vote and 2 after a subsequent boost.
    """

    id: str
    board_id: str
    author_id: str
    author_name: str
    text: str
    image: str | None = None
    votes: dict[str, list[int]] = field(default_factory=dict)
    reports: list[Report] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)

    def to_doc(self) -> dict[str, Any]:
        content: dict[str, Any] = {"text": self.text}
        if self.image:
            content["image"] = self.image
        return {
            "board_id": self.board_id,
            "author_id": self.author_id,
            "author_name": self.author_name,
            "content": content,
            "votes": copy.deepcopy(self.votes),
            "reports": [r.to_doc() for r in self.reports],
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_doc(cls, suggestion_id: str, doc: dict[str, Any]) -> Suggestion:
        content = doc.get("content") or {}
        votes = {
            str(voter): [int(v) for v in seq]
            for voter, seq in (doc.get("votes") or {}).items()
        }
        return cls(
            id=suggestion_id,
            board_id=str(doc.get("board_id", "")),
            author_id=str(doc.get("author_id", "")),
            author_name=str(doc.get("author_name", "")),
            text=str(content.get("text", "")),
            image=content.get("image"),
            votes=votes,
            reports=[Report.from_doc(r) for r in doc.get("reports") or []],
            created_at=parse_ts(doc.get("created_at")),
        )


# ---------------------------------------------------------------------------
# Economy
# ---------------------------------------------------------------------------
@dataclass
class EconomyAccount:
    """Fragments earned by voting and boosts available to spend."""

    key: str
    fragments: int = 0
    boosts: int = 0

    def to_doc(self) -> dict[str, Any]:
        return {"fragments": self.fragments, "boosts": self.boosts}

    @classmethod
    def from_doc(cls, key: str, doc: dict[str, Any] | None) -> EconomyAccount:
        doc = doc or {}
        return cls(
            key=key,
            fragments=max(int(doc.get("fragments", 0) or 0), 0),
            boosts=max(int(doc.get("boosts", 0) or 0), 0),
        )
