"""
quorum.engine.views — View Projector
=====================================

Derives what a viewer sees from a snapshot of a board's suggestions.
Nothing here is stored; views are recomputed on every change.

* **pending** — not yet voted by the viewer and not authored by them.
* **review**  — voted by the viewer, or authored by them.
* **ranked**  — passes the quorum predicate; score descending, then
  oldest first, then id.

``pending`` and ``review`` are disjoint.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from quorum.engine.ledger import QuorumPredicate, has_voted, make_quorum_predicate, score
from quorum.engine.records import Suggestion

__all__ = [
    "AuthorStats",
    "BoardViews",
    "author_stats",
    "feed_order",
    "pending",
    "project",
    "ranked",
    "review",
]


def feed_order(suggestions: Iterable[Suggestion]) -> list[Suggestion]:
    """Newest first, as a board's feed is displayed."""
    return sorted(suggestions, key=lambda s: (s.created_at, s.id), reverse=True)


def pending(suggestions: Iterable[Suggestion], viewer_id: str) -> list[Suggestion]:
    return [
        s for s in suggestions
        if not has_voted(s.votes, viewer_id) and s.author_id != viewer_id
    ]


def review(suggestions: Iterable[Suggestion], viewer_id: str) -> list[Suggestion]:
    return [
        s for s in suggestions
        if has_voted(s.votes, viewer_id) or s.author_id == viewer_id
    ]


def ranked(
    suggestions: Iterable[Suggestion],
    *,
    member_count: int = 0,
    quorum: QuorumPredicate | None = None,
) -> list[Suggestion]:
    quorum = quorum or make_quorum_predicate()
    eligible = [s for s in suggestions if quorum(s.votes, s.author_id, member_count)]
    return sorted(eligible, key=lambda s: (-score(s.votes), s.created_at, s.id))


@dataclass
class BoardViews:
    """The three views for one viewer on one board."""

    viewer_id: str
    pending: list[Suggestion] = field(default_factory=list)
    review: list[Suggestion] = field(default_factory=list)
    ranked: list[Suggestion] = field(default_factory=list)


def project(
    suggestions: Iterable[Suggestion],
    viewer_id: str,
    *,
    member_count: int = 0,
    quorum: QuorumPredicate | None = None,
) -> BoardViews:
    ordered = feed_order(suggestions)
    return BoardViews(
        viewer_id=viewer_id,
        pending=pending(ordered, viewer_id),
        review=review(ordered, viewer_id),
        ranked=ranked(ordered, member_count=member_count, quorum=quorum),
    )


# ---------------------------------------------------------------------------
# Author profile
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class AuthorStats:
    author_id: str
    count: int
    total_score: int
    history: tuple[Suggestion, ...] = ()


def author_stats(suggestions: Iterable[Suggestion], author_id: str) -> AuthorStats:
    """Suggestion count, summed score and history for one author."""
    mine = feed_order(s for s in suggestions if s.author_id == author_id)
    return AuthorStats(
        author_id=author_id,
        count=len(mine),
        total_score=sum(score(s.votes) for s in mine),
        history=tuple(mine),
    )
