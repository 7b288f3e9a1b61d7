"""
quorum.services.view_service — View Projection over the Store
==============================================================

:class:`ViewProjector` answers one-off view requests; :class:`LiveViews`
subscribes to a board's suggestions and recomputes the views for one
viewer every time the store reports a change.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from quorum.engine.events import Changed
from quorum.engine.ledger import QuorumPredicate, make_quorum_predicate
from quorum.engine.records import SUGGESTIONS, Suggestion
from quorum.engine.views import AuthorStats, BoardViews, author_stats, project

if TYPE_CHECKING:
    from quorum.config import QuorumConfig
    from quorum.services.board_service import BoardRegistry
    from quorum.services.suggestion_service import SuggestionStore
    from quorum.sync.base import Subscription, SyncAdapter

logger = logging.getLogger(__name__)


class ViewProjector:
    def __init__(
        self,
        config: QuorumConfig,
        store: SyncAdapter,
        boards: BoardRegistry,
        suggestions: SuggestionStore,
    ) -> None:
        self._store = store
        self._boards = boards
        self._suggestions = suggestions
        self.quorum: QuorumPredicate = make_quorum_predicate(
            config.quorum_mode, config.quorum_ratio,
        )

    def views_for(self, board_id: str | None, viewer_id: str) -> BoardViews:
        board = self._boards.require_member(self._boards.get_board(board_id), viewer_id)
        return project(
            self._suggestions.list_for_board(board.id),
            viewer_id,
            member_count=board.member_count,
            quorum=self.quorum,
        )

    def author_stats(self, board_id: str | None, author_id: str) -> AuthorStats:
        return author_stats(self._suggestions.list_for_board(board_id), author_id)

    def watch(
        self,
        board_id: str | None,
        viewer_id: str,
        on_update: Callable[[BoardViews], None] | None = None,
    ) -> LiveViews:
        board = self._boards.require_member(self._boards.get_board(board_id), viewer_id)
        return LiveViews(
            self._store, self._boards, board.id, viewer_id,
            quorum=self.quorum, on_update=on_update,
        )


class LiveViews:
    """Keeps :attr:`current` in step with the store's change feed.

    Call :meth:`close` to stop receiving updates.
    """

    def __init__(
        self,
        store: SyncAdapter,
        boards: BoardRegistry,
        board_id: str,
        viewer_id: str,
        *,
        quorum: QuorumPredicate,
        on_update: Callable[[BoardViews], None] | None = None,
    ) -> None:
        self._boards = boards
        self.board_id = board_id
        self.viewer_id = viewer_id
        self._quorum = quorum
        self._on_update = on_update
        self._lock = threading.Lock()
        self.current = BoardViews(viewer_id=viewer_id)
        self._subscription: Subscription = store.subscribe(
            SUGGESTIONS, self._handle_change, {"board_id": board_id},
        )

    def _handle_change(self, event: Changed) -> None:
        board = self._boards.find_board(self.board_id)
        member_count = board.member_count if board is not None else 0
        views = project(
            (Suggestion.from_doc(k, d) for k, d in event.snapshot.items()),
            self.viewer_id,
            member_count=member_count,
            quorum=self._quorum,
        )
        with self._lock:
            self.current = views
        logger.debug(
            "Views for %s on %s: %d pending, %d review, %d ranked",
            self.viewer_id, self.board_id,
            len(views.pending), len(views.review), len(views.ranked),
        )
        if self._on_update is not None:
            self._on_update(views)

    def close(self) -> None:
        self._subscription.unsubscribe()
