"""
quorum.api.serializers — Response shaping
==========================================
"""

from __future__ import annotations

from quorum.engine.ledger import boost_used, has_voted, score, voters_excluding_author
from quorum.engine.records import Board, EconomyAccount, Suggestion
from quorum.engine.views import AuthorStats, BoardViews


def suggestion_dict(s: Suggestion, viewer_id: str | None = None) -> dict:
    data = {
        "id": s.id,
        "board_id": s.board_id,
        "author_id": s.author_id,
        "author_name": s.author_name,
        "content": {"text": s.text, "image": s.image},
        "votes": s.votes,
        "score": score(s.votes),
        "voters": voters_excluding_author(s.votes, s.author_id),
        "report_count": len(s.reports),
        "created_at": s.created_at.isoformat(),
    }
    if viewer_id is not None:
        data["has_voted"] = has_voted(s.votes, viewer_id)
        data["boost_used"] = boost_used(s.votes, viewer_id)
        data["is_author"] = s.author_id == viewer_id
    return data


def board_dict(b: Board, viewer_id: str | None = None) -> dict:
    data = {
        "id": b.id,
        "name": b.name,
        "created_by": b.created_by,
        "admin_ids": b.admin_ids,
        "member_ids": b.member_ids,
        "archived": b.archived,
        "created_at": b.created_at.isoformat(),
    }
    if viewer_id is not None:
        data["is_admin"] = b.is_admin(viewer_id)
    return data


def account_dict(a: EconomyAccount) -> dict:
    return {"fragments": a.fragments, "boosts": a.boosts}


def views_dict(v: BoardViews) -> dict:
    return {
        "viewer_id": v.viewer_id,
        "pending": [suggestion_dict(s, v.viewer_id) for s in v.pending],
        "review": [suggestion_dict(s, v.viewer_id) for s in v.review],
        "ranked": [suggestion_dict(s, v.viewer_id) for s in v.ranked],
    }


def author_stats_dict(stats: AuthorStats) -> dict:
    return {
        "author_id": stats.author_id,
        "count": stats.count,
        "total_score": stats.total_score,
        "history": [suggestion_dict(s) for s in stats.history],
    }
