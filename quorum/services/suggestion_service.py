"""
quorum.services.suggestion_service — Suggestion Lifecycle
==========================================================

Glue between the pure lifecycle in :mod:`quorum.engine.lifecycle` and the
document store.  Every mutation follows the same pattern:

  1. Load the suggestion and its board; the actor must be a member
  2. Compute the next state (raises before any write on rejection)
  3. Patch only the field the operation owns (``votes`` or ``reports``)
  4. Apply the economy side effect, as a separate write

There is no transaction spanning steps 3 and 4.  A failure in step 4
surfaces a :class:`~quorum.engine.errors.TransportError` with the vote
already recorded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from quorum.engine import lifecycle
from quorum.engine.economy import EarningResult
from quorum.engine.errors import NotFound
from quorum.engine.records import SUGGESTIONS, EconomyAccount, Identity, Suggestion
from quorum.engine.views import feed_order

if TYPE_CHECKING:
    from quorum.config import QuorumConfig
    from quorum.services.board_service import BoardRegistry
    from quorum.services.economy_service import EconomyService
    from quorum.sync.base import SyncAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VoteOutcome:
    suggestion: Suggestion
    earning: EarningResult

    @property
    def boost_minted(self) -> bool:
        return self.earning.boosts_minted > 0


@dataclass(frozen=True, slots=True)
class BoostOutcome:
    suggestion: Suggestion
    applied_value: int
    account: EconomyAccount


class SuggestionStore:
    """Suggestion records scoped to boards, persisted through the store."""

    def __init__(
        self,
        config: QuorumConfig,
        store: SyncAdapter,
        boards: BoardRegistry,
        economy: EconomyService,
    ) -> None:
        self._config = config
        self._store = store
        self._boards = boards
        self._economy = economy

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get(self, suggestion_id: str) -> Suggestion:
        doc = self._store.get(SUGGESTIONS, suggestion_id)
        if doc is None:
            raise NotFound(f"Suggestion {suggestion_id} not found")
        return Suggestion.from_doc(suggestion_id, doc)

    def list_for_board(self, board_id: str | None) -> list[Suggestion]:
        """All suggestions on a board, newest first."""
        board_id = self._boards.resolve_id(board_id)
        snapshot = self._store.query(SUGGESTIONS, {"board_id": board_id})
        return feed_order(Suggestion.from_doc(k, d) for k, d in snapshot.items())

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def create_suggestion(
        self,
        board_id: str | None,
        author: Identity,
        text: str,
        image: str | None = None,
    ) -> Suggestion:
        board = self._boards.require_member(self._boards.get_board(board_id), author.id)
        suggestion = lifecycle.new_suggestion(
            board, author.id, author.display_name, text, image,
        )
        self._store.put(SUGGESTIONS, suggestion.id, suggestion.to_doc())
        logger.info(
            "Suggestion %s created on board %s by %s",
            suggestion.id, board.id, author.id,
        )
        return suggestion

    def vote(self, suggestion_id: str, voter_id: str, value: int) -> VoteOutcome:
        """Cast *voter_id*'s one vote and credit the economy."""
        before = self.get(suggestion_id)
        board = self._boards.require_member(
            self._boards.get_board(before.board_id), voter_id,
        )
        try:
            after = lifecycle.cast_vote(before, board, voter_id, value)
        except Exception as exc:
            logger.debug("Vote by %s on %s rejected: %s", voter_id, suggestion_id, exc)
            raise

        self._store.put(SUGGESTIONS, after.id, {"votes": after.votes})
        earning = self._economy.credit_vote(board.id, voter_id, before)
        logger.info("User %s voted %+d on suggestion %s", voter_id, value, after.id)
        return VoteOutcome(suggestion=after, earning=earning)

    def apply_boost(self, suggestion_id: str, voter_id: str) -> BoostOutcome:
        """Spend one boost to append a second vote for *voter_id*."""
        before = self.get(suggestion_id)
        board = self._boards.require_member(
            self._boards.get_board(before.board_id), voter_id,
        )
        after, applied = lifecycle.add_boost(
            before, board, voter_id, self._config.boost_rule,
        )
        # Balance check before the first write, so a rejection changes nothing
        self._economy.ensure_boost(board.id, voter_id)

        self._store.put(SUGGESTIONS, after.id, {"votes": after.votes})
        account = self._economy.debit_boost(board.id, voter_id)
        logger.info(
            "User %s boosted suggestion %s with %+d", voter_id, after.id, applied,
        )
        return BoostOutcome(suggestion=after, applied_value=applied, account=account)

    def delete_suggestion(self, suggestion_id: str, requester_id: str) -> None:
        """Remove permanently.  A repeat delete raises :class:`NotFound`."""
        suggestion = self.get(suggestion_id)
        board = self._boards.find_board(suggestion.board_id)
        lifecycle.check_delete(suggestion, board, requester_id)
        if not self._store.delete(SUGGESTIONS, suggestion_id):
            raise NotFound(f"Suggestion {suggestion_id} already deleted")
        logger.info("Suggestion %s deleted by %s", suggestion_id, requester_id)

    def report(self, suggestion_id: str, reporter_id: str, reason: str) -> Suggestion:
        current = self.get(suggestion_id)
        self._boards.require_member(self._boards.get_board(current.board_id), reporter_id)
        suggestion = lifecycle.add_report(current, reporter_id, reason)
        self._store.put(
            SUGGESTIONS, suggestion.id,
            {"reports": [r.to_doc() for r in suggestion.reports]},
        )
        logger.info("Suggestion %s reported by %s", suggestion.id, reporter_id)
        return suggestion

    def dismiss_reports(self, suggestion_id: str, requester_id: str) -> Suggestion:
        current = self.get(suggestion_id)
        board = self._boards.get_board(current.board_id)
        suggestion = lifecycle.clear_reports(current, board, requester_id)
        self._store.put(SUGGESTIONS, suggestion.id, {"reports": []})
        logger.info("Reports on suggestion %s dismissed by %s", suggestion.id, requester_id)
        return suggestion
