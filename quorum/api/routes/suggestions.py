"""
quorum.api.routes.suggestions — Suggestion lifecycle endpoints
===============================================================

Repeat votes and repeat deletes are answered with ``{"status": "noop"}``
instead of an error: the request's intent already holds.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter
from pydantic import BaseModel, Field

from quorum.api.deps import ContextDep, IdentityDep
from quorum.api.serializers import account_dict, suggestion_dict
from quorum.engine.errors import AlreadyVoted, NotFound

logger = logging.getLogger(__name__)

router = APIRouter(tags=["suggestions"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class SuggestionCreate(BaseModel):
    text: str = ""
    image: str | None = None


class VoteCast(BaseModel):
    value: int = Field(..., ge=-1, le=1)


class ReportCreate(BaseModel):
    reason: str = ""


# ---------------------------------------------------------------------------
# Board feed
# ---------------------------------------------------------------------------
@router.get("/boards/{board_id}/suggestions")
def list_suggestions(board_id: str, ctx: ContextDep, user: IdentityDep):
    """Every suggestion on the board, newest first."""
    ctx.boards.require_member(ctx.boards.get_board(board_id), user.id)
    return [suggestion_dict(s, user.id) for s in ctx.suggestions.list_for_board(board_id)]


@router.post("/boards/{board_id}/suggestions", status_code=201)
def create_suggestion(
    board_id: str, body: SuggestionCreate, ctx: ContextDep, user: IdentityDep,
):
    suggestion = ctx.suggestions.create_suggestion(board_id, user, body.text, body.image)
    return suggestion_dict(suggestion, user.id)


# ---------------------------------------------------------------------------
# Single suggestion
# ---------------------------------------------------------------------------
@router.get("/suggestions/{suggestion_id}")
def get_suggestion(suggestion_id: str, ctx: ContextDep, user: IdentityDep):
    return suggestion_dict(ctx.suggestions.get(suggestion_id), user.id)


@router.post("/suggestions/{suggestion_id}/vote")
def vote(suggestion_id: str, body: VoteCast, ctx: ContextDep, user: IdentityDep):
    try:
        outcome = ctx.suggestions.vote(suggestion_id, user.id, body.value)
    except AlreadyVoted:
        return {"status": "noop", "code": "AlreadyVoted"}
    return {
        "status": "ok",
        "suggestion": suggestion_dict(outcome.suggestion, user.id),
        "economy": account_dict(outcome.earning.account),
        "boost_minted": outcome.boost_minted,
    }


@router.post("/suggestions/{suggestion_id}/boost")
def boost(suggestion_id: str, ctx: ContextDep, user: IdentityDep):
    outcome = ctx.suggestions.apply_boost(suggestion_id, user.id)
    return {
        "status": "ok",
        "suggestion": suggestion_dict(outcome.suggestion, user.id),
        "applied_value": outcome.applied_value,
        "economy": account_dict(outcome.account),
    }


@router.delete("/suggestions/{suggestion_id}")
def delete_suggestion(suggestion_id: str, ctx: ContextDep, user: IdentityDep):
    try:
        ctx.suggestions.delete_suggestion(suggestion_id, user.id)
    except NotFound:
        logger.debug("Delete of missing suggestion %s treated as done", suggestion_id)
        return {"status": "noop", "code": "NotFound"}
    return {"status": "ok"}


@router.post("/suggestions/{suggestion_id}/reports")
def report_suggestion(
    suggestion_id: str, body: ReportCreate, ctx: ContextDep, user: IdentityDep,
):
    suggestion = ctx.suggestions.report(suggestion_id, user.id, body.reason)
    return suggestion_dict(suggestion, user.id)


@router.delete("/suggestions/{suggestion_id}/reports")
def dismiss_reports(suggestion_id: str, ctx: ContextDep, user: IdentityDep):
    suggestion = ctx.suggestions.dismiss_reports(suggestion_id, user.id)
    return suggestion_dict(suggestion, user.id)
