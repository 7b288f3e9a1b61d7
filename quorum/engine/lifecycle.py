"""
quorum.engine.lifecycle — Suggestion State Transitions
=======================================================

Pure next-state functions for a suggestion.  Each takes the current
records, validates, and returns a *new* record; nothing is mutated in
place and nothing is persisted here.

Per (suggestion, voter) the states are::

    NOT_VOTED ──vote──▶ VOTED ──boost──▶ BOOSTED (terminal)

No transition removes or decrements a vote.
"""

from __future__ import annotations

import copy
from dataclasses import replace
from datetime import datetime

from quorum.constants import VOTE_VALUES
from quorum.engine.errors import (
    AlreadyVoted,
    BoardArchived,
    BoostAlreadyUsed,
    EmptyContent,
    EmptyReason,
    Forbidden,
    InvalidVoteValue,
    SelfVote,
)
from quorum.engine.ledger import BoostRule, boost_used, has_voted, resolve_boost_value
from quorum.engine.records import Board, Report, Suggestion, new_id, utcnow

__all__ = [
    "add_boost",
    "add_report",
    "cast_vote",
    "check_delete",
    "clear_reports",
    "ensure_active",
    "new_suggestion",
]


def ensure_active(board: Board) -> None:
    if board.archived:
        raise BoardArchived(f"Board {board.id} is archived")


def new_suggestion(
    board: Board,
    author_id: str,
    author_name: str,
    text: str,
    image: str | None = None,
    *,
    now: datetime | None = None,
) -> Suggestion:
    """Build a fresh suggestion with no votes and no reports."""
    ensure_active(board)
    text = (text or "").strip()
    image = (image or "").strip() or None
    if not text and image is None:
        raise EmptyContent()
    return Suggestion(
        id=new_id(),
        board_id=board.id,
        author_id=author_id,
        author_name=author_name,
        text=text,
        image=image,
        created_at=now or utcnow(),
    )


def cast_vote(
    suggestion: Suggestion, board: Board, voter_id: str, value: int
) -> Suggestion:
    """Record *voter_id*'s first vote.  Raises instead of overwriting."""
    ensure_active(board)
    if isinstance(value, bool) or value not in VOTE_VALUES:
        raise InvalidVoteValue(f"Vote value must be -1, 0 or 1, got {value!r}")
    if voter_id == suggestion.author_id:
        raise SelfVote()
    if has_voted(suggestion.votes, voter_id):
        raise AlreadyVoted()

    votes = copy.deepcopy(suggestion.votes)
    votes[voter_id] = [int(value)]
    return replace(suggestion, votes=votes)


def add_boost(
    suggestion: Suggestion,
    board: Board,
    voter_id: str,
    rule: BoostRule | str = BoostRule.REINFORCE,
) -> tuple[Suggestion, int]:
    """Append one boost for *voter_id*.  Returns ``(suggestion, applied_value)``.

    The economy debit is the caller's job; this only checks that a boost
    is still allowed on the ledger.  Only the sequence length is tracked,
    so a voter who never voted may boost twice (``[1, 1]``).
    """
    ensure_active(board)
    if voter_id == suggestion.author_id:
        raise SelfVote("Authors cannot boost their own suggestion")
    if boost_used(suggestion.votes, voter_id):
        raise BoostAlreadyUsed()

    applied = resolve_boost_value(suggestion.votes, voter_id, rule)
    votes = copy.deepcopy(suggestion.votes)
    sequence = votes.get(voter_id) or []
    votes[voter_id] = [*sequence, applied]
    return replace(suggestion, votes=votes), applied


def check_delete(suggestion: Suggestion, board: Board | None, requester_id: str) -> None:
    """Only the author or an admin of the owning board may delete."""
    if requester_id == suggestion.author_id:
        return
    if board is not None and board.is_admin(requester_id):
        return
    raise Forbidden()


def add_report(
    suggestion: Suggestion,
    reporter_id: str,
    reason: str,
    *,
    now: datetime | None = None,
) -> Suggestion:
    reason = (reason or "").strip()
    if not reason:
        raise EmptyReason()
    report = Report(reporter_id=reporter_id, reason=reason, timestamp=now or utcnow())
    return replace(suggestion, reports=[*suggestion.reports, report])


def clear_reports(suggestion: Suggestion, board: Board, requester_id: str) -> Suggestion:
    if not board.is_admin(requester_id):
        raise Forbidden("Only a board admin may dismiss reports")
    return replace(suggestion, reports=[])
