"""
quorum.api.routes.boards — Board, economy and view endpoints
=============================================================

In ``global`` board scope the ``{board_id}`` path segment is ignored and
every request resolves to the single shared board.
"""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from quorum.api.deps import ContextDep, IdentityDep
from quorum.api.serializers import account_dict, author_stats_dict, board_dict, views_dict

router = APIRouter(prefix="/boards", tags=["boards"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class BoardCreate(BaseModel):
    name: str


class BoardUpdate(BaseModel):
    name: str | None = None
    archived: bool | None = None


# ---------------------------------------------------------------------------
# Boards
# ---------------------------------------------------------------------------
@router.get("")
def list_my_boards(ctx: ContextDep, user: IdentityDep):
    """Boards the caller belongs to, oldest first."""
    return [board_dict(b, user.id) for b in ctx.boards.boards_for_user(user.id)]


@router.post("", status_code=201)
def create_board(body: BoardCreate, ctx: ContextDep, user: IdentityDep):
    return board_dict(ctx.boards.create_board(body.name, user), user.id)


@router.get("/{board_id}")
def get_board(board_id: str, ctx: ContextDep, user: IdentityDep):
    return board_dict(ctx.boards.get_board(board_id), user.id)


@router.patch("/{board_id}")
def update_board(board_id: str, body: BoardUpdate, ctx: ContextDep, user: IdentityDep):
    """Rename and/or archive a board (admins only)."""
    board = ctx.boards.get_board(board_id)
    if body.name is not None:
        board = ctx.boards.rename_board(board.id, user.id, body.name)
    if body.archived is not None:
        board = ctx.boards.set_archived(board.id, user.id, body.archived)
    return board_dict(board, user.id)


@router.post("/{board_id}/join")
def join_board(board_id: str, ctx: ContextDep, user: IdentityDep):
    return board_dict(ctx.boards.join_board(board_id, user.id), user.id)


@router.post("/{board_id}/leave")
def leave_board(board_id: str, ctx: ContextDep, user: IdentityDep):
    return board_dict(ctx.boards.leave_board(board_id, user.id), user.id)


# ---------------------------------------------------------------------------
# Economy & views
# ---------------------------------------------------------------------------
@router.get("/{board_id}/economy")
def get_economy(board_id: str, ctx: ContextDep, user: IdentityDep):
    """The caller's spendable balance on this board."""
    board = ctx.boards.require_member(ctx.boards.get_board(board_id), user.id)
    return account_dict(ctx.economy.get_account(board.id, user.id))


@router.get("/{board_id}/views")
def get_views(board_id: str, ctx: ContextDep, user: IdentityDep):
    """Pending, review and ranked lists for the caller."""
    return views_dict(ctx.views.views_for(board_id, user.id))


@router.get("/{board_id}/authors/{author_id}")
def get_author_stats(board_id: str, author_id: str, ctx: ContextDep, user: IdentityDep):
    ctx.boards.require_member(ctx.boards.get_board(board_id), user.id)
    return author_stats_dict(ctx.views.author_stats(board_id, author_id))
