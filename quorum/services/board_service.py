"""
quorum.services.board_service — Board Registry
===============================================

Boards a user can act within: creation, lookup, the admin/member roster,
and the archived flag the suggestion lifecycle checks.

Two scopes are supported (see :class:`~quorum.config.BoardScope`):

* ``multi``  — users create and join explicit boards.
* ``global`` — every request acts on one implicit board, created on first
  use; board ids supplied by callers are ignored.

Each write patches only the fields it owns (``member_ids``,
``admin_ids``, ``name``, ``archived``).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from quorum.config import BoardScope
from quorum.constants import DEFAULT_GLOBAL_BOARD_NAME
from quorum.engine.errors import EmptyName, Forbidden, NotFound
from quorum.engine.records import BOARDS, Board, Identity, new_id

if TYPE_CHECKING:
    from quorum.config import QuorumConfig
    from quorum.sync.base import SyncAdapter

logger = logging.getLogger(__name__)


class BoardRegistry:
    """Reads and writes ``boards`` documents through the injected store."""

    def __init__(self, config: QuorumConfig, store: SyncAdapter) -> None:
        self._config = config
        self._store = store

    @property
    def is_global(self) -> bool:
        return self._config.board_scope is BoardScope.GLOBAL

    def resolve_id(self, board_id: str | None) -> str:
        """Map a caller-supplied board id onto the configured scope."""
        if self.is_global:
            return self._config.global_board_id
        if not board_id:
            raise NotFound("No board selected")
        return board_id

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get_board(self, board_id: str | None) -> Board:
        """Return the board, or raise :class:`NotFound`."""
        board_id = self.resolve_id(board_id)
        doc = self._store.get(BOARDS, board_id)
        if doc is None:
            if self.is_global:
                return self._create_global_board()
            raise NotFound(f"Board {board_id} not found")
        board = Board.from_doc(board_id, doc)
        if self.is_global:
            # Configured admins hold even if the roster predates them
            board.admin_ids += [
                uid for uid in self._config.global_admin_ids if uid not in board.admin_ids
            ]
        return board

    def find_board(self, board_id: str | None) -> Board | None:
        try:
            return self.get_board(board_id)
        except NotFound:
            return None

    def require_member(self, board: Board, user_id: str) -> Board:
        """Return *board* if *user_id* may act in it, else raise :class:`Forbidden`.

        The global board is open to everyone: a first-time user is joined.
        """
        if board.is_member(user_id):
            return board
        if self.is_global:
            return self.join_board(board.id, user_id)
        logger.warning("User %s is not a member of board %s", user_id, board.id)
        raise Forbidden("Only board members may do this")

    def boards_for_user(self, user_id: str) -> list[Board]:
        """Boards *user_id* belongs to, oldest first."""
        if self.is_global:
            return [self.get_board(None)]
        snapshot = self._store.query(BOARDS, {"member_ids": user_id})
        boards = [Board.from_doc(key, doc) for key, doc in snapshot.items()]
        return sorted(boards, key=lambda b: (b.created_at, b.id))

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def create_board(self, name: str, creator: Identity) -> Board:
        """Create a board; the creator becomes its first admin and member."""
        name = (name or "").strip()
        if not name:
            raise EmptyName()
        if self.is_global:
            raise Forbidden("Boards cannot be created in global scope")

        board = Board(
            id=new_id(),
            name=name,
            created_by=creator.id,
            admin_ids=[creator.id],
            member_ids=[creator.id],
        )
        self._store.put(BOARDS, board.id, board.to_doc())
        logger.info("Board %s (%r) created by %s", board.id, board.name, creator.id)
        return board

    def _create_global_board(self) -> Board:
        admins = list(self._config.global_admin_ids)
        board = Board(
            id=self._config.global_board_id,
            name=DEFAULT_GLOBAL_BOARD_NAME,
            created_by=admins[0] if admins else "",
            admin_ids=admins,
            member_ids=list(admins),
        )
        self._store.put(BOARDS, board.id, board.to_doc())
        logger.info("Global board %s initialised", board.id)
        return board

    def join_board(self, board_id: str | None, user_id: str) -> Board:
        """Add *user_id* to the member roster.  Idempotent."""
        board = self.get_board(board_id)
        if user_id in board.member_ids:
            return board
        board.member_ids.append(user_id)
        self._store.put(BOARDS, board.id, {"member_ids": board.member_ids})
        logger.info("User %s joined board %s", user_id, board.id)
        return board

    def leave_board(self, board_id: str | None, user_id: str) -> Board:
        """Remove *user_id* from both members and admins."""
        board = self.get_board(board_id)
        if not board.is_member(user_id):
            return board
        board.member_ids = [m for m in board.member_ids if m != user_id]
        board.admin_ids = [a for a in board.admin_ids if a != user_id]
        self._store.put(
            BOARDS, board.id,
            {"member_ids": board.member_ids, "admin_ids": board.admin_ids},
        )
        logger.info("User %s left board %s", user_id, board.id)
        return board

    def rename_board(self, board_id: str | None, requester_id: str, name: str) -> Board:
        board = self._admin_board(board_id, requester_id)
        name = (name or "").strip()
        if not name:
            raise EmptyName()
        board.name = name
        self._store.put(BOARDS, board.id, {"name": name})
        return board

    def set_archived(self, board_id: str | None, requester_id: str, archived: bool) -> Board:
        """Archive or restore a board.  Archived boards reject every mutation."""
        board = self._admin_board(board_id, requester_id)
        board.archived = bool(archived)
        self._store.put(BOARDS, board.id, {"archived": board.archived})
        logger.info(
            "Board %s %s by %s",
            board.id, "archived" if board.archived else "restored", requester_id,
        )
        return board

    def _admin_board(self, board_id: str | None, requester_id: str) -> Board:
        board = self.get_board(board_id)
        if not board.is_admin(requester_id):
            logger.warning("User %s is not an admin of board %s", requester_id, board.id)
            raise Forbidden("Only a board admin may do this")
        return board
