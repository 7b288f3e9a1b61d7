"""
quorum.engine.economy — Fragments & Boosts
===========================================

Pure calculation of the voting economy.  No store I/O.

Every first vote on someone else's suggestion earns one fragment; every
``FRAGMENTS_PER_BOOST`` fragments convert into one boost.  The conversion
runs on every update (and on every :func:`normalize`), so an account that
was written with an overflowing fragment count by a delayed or out-of-order
writer is repaired by the next update instead of staying unconverted.

Which account a vote credits is decided by :class:`EconomyScope` — a
shared pool per board, or one account per member per board.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace

from quorum.constants import FRAGMENTS_PER_BOOST, FRAGMENTS_PER_VOTE
from quorum.engine.errors import InsufficientBoosts
from quorum.engine.ledger import has_voted
from quorum.engine.records import EconomyAccount, Suggestion

logger = logging.getLogger(__name__)

__all__ = [
    "EarningResult",
    "EconomyScope",
    "normalize",
    "record_vote_earning",
    "spend_boost",
]


class EconomyScope(enum.StrEnum):
    """Who owns the fragments and boosts earned on a board."""

    BOARD = "board"    # one shared pool per board
    MEMBER = "member"  # one account per user per board

    def account_key(self, board_id: str, user_id: str) -> str:
        if self is EconomyScope.BOARD:
            return board_id
        return f"{board_id}:{user_id}"


@dataclass(frozen=True, slots=True)
class EarningResult:
    """Outcome of :func:`record_vote_earning`."""

    account: EconomyAccount
    fragments_added: int = 0
    boosts_minted: int = 0

    @property
    def changed(self) -> bool:
        return self.fragments_added > 0 or self.boosts_minted > 0


def normalize(
    account: EconomyAccount, per_boost: int = FRAGMENTS_PER_BOOST
) -> tuple[EconomyAccount, int]:
    """Convert overflowing fragments into boosts.

    Returns ``(account, boosts_minted)``.  Never loses fragments:
    ``fragments_in == fragments_out + per_boost * boosts_minted``.
    """
    fragments = max(account.fragments, 0)
    minted, remainder = divmod(fragments, per_boost)
    if minted == 0 and fragments == account.fragments:
        return account, 0
    return (
        replace(account, fragments=remainder, boosts=max(account.boosts, 0) + minted),
        minted,
    )


def record_vote_earning(
    account: EconomyAccount,
    voter_id: str,
    suggestion: Suggestion,
    *,
    per_boost: int = FRAGMENTS_PER_BOOST,
) -> EarningResult:
    """Credit *voter_id*'s first vote on *suggestion* (pre-vote state).

    No-op for the author and for a voter who already voted, so voting
    twice never pays twice.
    """
    if voter_id == suggestion.author_id or has_voted(suggestion.votes, voter_id):
        logger.debug(
            "No earning for %s on suggestion %s (author or repeat)",
            voter_id, suggestion.id,
        )
        return EarningResult(account=account)

    credited = replace(account, fragments=account.fragments + FRAGMENTS_PER_VOTE)
    converted, minted = normalize(credited, per_boost)
    if minted:
        logger.info(
            "Account %s minted %d boost(s) — now %d boosts, %d fragments",
            converted.key, minted, converted.boosts, converted.fragments,
        )
    return EarningResult(
        account=converted,
        fragments_added=FRAGMENTS_PER_VOTE,
        boosts_minted=minted,
    )


def spend_boost(account: EconomyAccount) -> EconomyAccount:
    """Debit one boost, or raise :class:`InsufficientBoosts`."""
    if account.boosts <= 0:
        raise InsufficientBoosts()
    return replace(account, boosts=account.boosts - 1)
