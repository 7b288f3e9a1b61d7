"""
quorum.services.economy_service — Economy Account Persistence
==============================================================

Loads and saves :class:`~quorum.engine.records.EconomyAccount` documents.
The configured :class:`~quorum.engine.economy.EconomyScope` decides which
account a board member's activity lands in; nothing outside this module
knows whether that is a shared board pool or a personal account.

Only two code paths write an account:

* :meth:`EconomyService.credit_vote` — fragment increment (+ conversion)
* :meth:`EconomyService.debit_boost` — boost decrement
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from quorum.engine.economy import EarningResult, normalize, record_vote_earning, spend_boost
from quorum.engine.records import ECONOMIES, EconomyAccount, Suggestion

if TYPE_CHECKING:
    from quorum.config import QuorumConfig
    from quorum.sync.base import SyncAdapter

logger = logging.getLogger(__name__)


class EconomyService:
    def __init__(self, config: QuorumConfig, store: SyncAdapter) -> None:
        self._config = config
        self._store = store

    def account_key(self, board_id: str, user_id: str) -> str:
        return self._config.economy_scope.account_key(board_id, user_id)

    def get_account(self, board_id: str, user_id: str) -> EconomyAccount:
        """Current balance, with any unconverted overflow already folded in."""
        key = self.account_key(board_id, user_id)
        account = EconomyAccount.from_doc(key, self._store.get(ECONOMIES, key))
        account, _ = normalize(account, self._config.fragments_per_boost)
        return account

    def credit_vote(
        self, board_id: str, voter_id: str, suggestion: Suggestion
    ) -> EarningResult:
        """Credit a first vote; *suggestion* is the state before the vote."""
        account = self.get_account(board_id, voter_id)
        result = record_vote_earning(
            account, voter_id, suggestion,
            per_boost=self._config.fragments_per_boost,
        )
        if result.changed:
            self._store.put(ECONOMIES, account.key, result.account.to_doc())
        return result

    def ensure_boost(self, board_id: str, user_id: str) -> EconomyAccount:
        """Raise :class:`InsufficientBoosts` now, before any other write."""
        account = self.get_account(board_id, user_id)
        spend_boost(account)
        return account

    def debit_boost(self, board_id: str, user_id: str) -> EconomyAccount:
        account = spend_boost(self.get_account(board_id, user_id))
        self._store.put(ECONOMIES, account.key, account.to_doc())
        logger.info("Account %s spent a boost — %d left", account.key, account.boosts)
        return account
