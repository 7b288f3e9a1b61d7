"""
quorum.engine.ledger — Vote Ledger
===================================

Pure functions over a suggestion's ``votes`` mapping (voter id → applied
vote values).  No store I/O happens here.

Also hosts the two pluggable policies that read the ledger:

* **Quorum predicates** decide whether a suggestion is eligible for the
  ranked view.
* **Boost rules** decide which value a boost appends to a voter's sequence.
"""

from __future__ import annotations

import enum
import math
from collections.abc import Callable, Mapping, Sequence

from quorum.constants import (
    DEFAULT_BOOST_VALUE,
    DEFAULT_QUORUM_RATIO,
    MAX_VOTES_PER_VOTER,
)

__all__ = [
    "BoostRule",
    "QuorumMode",
    "QuorumPredicate",
    "boost_used",
    "has_voted",
    "make_quorum_predicate",
    "member_quorum",
    "resolve_boost_value",
    "score",
    "voters_excluding_author",
]

Votes = Mapping[str, Sequence[int]]

# (votes, author_id, member_count) → eligible for ranking?
QuorumPredicate = Callable[[Votes, str, int], bool]


# ---------------------------------------------------------------------------
# Ledger reads
# ---------------------------------------------------------------------------
def score(votes: Votes | None) -> int:
    """Sum of every applied value across every voter."""
    return sum(sum(seq) for seq in (votes or {}).values())


def has_voted(votes: Votes | None, voter_id: str) -> bool:
    return bool((votes or {}).get(voter_id))


def boost_used(votes: Votes | None, voter_id: str) -> bool:
    return len((votes or {}).get(voter_id) or ()) >= MAX_VOTES_PER_VOTER


def voters_excluding_author(votes: Votes | None, author_id: str) -> int:
    """Number of distinct voters other than the author."""
    return sum(1 for uid, seq in (votes or {}).items() if uid != author_id and seq)


# ---------------------------------------------------------------------------
# Quorum
# ---------------------------------------------------------------------------
class QuorumMode(enum.StrEnum):
    ANY = "any"          # at least one external voter
    MEMBERS = "members"  # a share of the board's other members


def member_quorum(member_count: int, ratio: float = DEFAULT_QUORUM_RATIO) -> int:
    """Voters needed when the quorum is a share of the other members.

    Never less than one, so an unvoted suggestion is never ranked.
    """
    # round() first so 10 * 0.3 == 3.0000000000000004 does not ceil to 4
    return max(1, math.ceil(round(max(member_count - 1, 0) * ratio, 9)))


def make_quorum_predicate(
    mode: QuorumMode | str = QuorumMode.ANY,
    ratio: float = DEFAULT_QUORUM_RATIO,
) -> QuorumPredicate:
    mode = QuorumMode(mode)
    if mode is QuorumMode.ANY:
        def _any(votes: Votes, author_id: str, member_count: int) -> bool:
            return voters_excluding_author(votes, author_id) >= 1
        return _any

    def _members(votes: Votes, author_id: str, member_count: int) -> bool:
        return voters_excluding_author(votes, author_id) >= member_quorum(
            member_count, ratio
        )
    return _members


# ---------------------------------------------------------------------------
# Boost value
# ---------------------------------------------------------------------------
class BoostRule(enum.StrEnum):
    REINFORCE = "reinforce"  # repeat the prior vote
    TIE_BREAK = "tie_break"  # a neutral prior vote pushes against the score


def resolve_boost_value(
    votes: Votes | None,
    voter_id: str,
    rule: BoostRule | str = BoostRule.REINFORCE,
) -> int:
    """Value a boost by *voter_id* appends to their sequence.

    With no prior vote the boost counts as ``+1``.  Otherwise the prior
    vote is repeated; under :attr:`BoostRule.TIE_BREAK` a prior ``0`` takes
    the opposite sign of the current score instead (``0`` when level).
    """
    prior = (votes or {}).get(voter_id) or ()
    if not prior:
        return DEFAULT_BOOST_VALUE

    last = int(prior[-1])
    if BoostRule(rule) is BoostRule.TIE_BREAK and last == 0:
        current = score(votes)
        if current > 0:
            return -1
        if current < 0:
            return 1
        return 0
    return last
