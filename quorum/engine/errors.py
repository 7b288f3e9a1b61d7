"""
quorum.engine.errors — Domain Error Taxonomy
=============================================

Every failure in the core is scoped to the single requested operation and
leaves prior state untouched.  The five families are:

* :class:`ValidationError`   — bad input, rejected before any write.
* :class:`PermissionDenied`  — the actor may not do this (no retry).
* :class:`StateConflict`     — the state already reflects the request;
  callers usually treat these as benign no-ops.
* :class:`ResourceExhausted` — not enough currency to proceed.
* :class:`TransportError`    — the document store could not be reached.

The API layer maps ``http_status`` straight onto the response.
"""

from __future__ import annotations

__all__ = [
    "AlreadyVoted",
    "BoardArchived",
    "BoostAlreadyUsed",
    "EmptyContent",
    "EmptyName",
    "EmptyReason",
    "Forbidden",
    "InsufficientBoosts",
    "InvalidVoteValue",
    "NotFound",
    "PermissionDenied",
    "QuorumError",
    "ResourceExhausted",
    "SelfVote",
    "StateConflict",
    "TransportError",
    "ValidationError",
]


class QuorumError(Exception):
    """Base class for all domain failures."""

    http_status: int = 400
    benign: bool = False
    default_message: str = "Operation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def code(self) -> str:
        return type(self).__name__


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
class ValidationError(QuorumError):
    http_status = 422


class EmptyContent(ValidationError):
    default_message = "Suggestion text is empty"


class EmptyReason(ValidationError):
    default_message = "A report needs a reason"


class EmptyName(ValidationError):
    default_message = "Board name is empty"


class InvalidVoteValue(ValidationError):
    default_message = "Vote value must be -1, 0 or 1"


# ---------------------------------------------------------------------------
# Permission
# ---------------------------------------------------------------------------
class PermissionDenied(QuorumError):
    http_status = 403


class Forbidden(PermissionDenied):
    default_message = "Only the author or a board admin may do this"


class SelfVote(PermissionDenied):
    default_message = "Authors cannot vote on their own suggestion"


# ---------------------------------------------------------------------------
# State conflicts
# ---------------------------------------------------------------------------
class StateConflict(QuorumError):
    http_status = 409
    benign = True


class AlreadyVoted(StateConflict):
    default_message = "Already voted on this suggestion"


class BoostAlreadyUsed(StateConflict):
    default_message = "Boost already applied to this suggestion"


class NotFound(StateConflict):
    http_status = 404
    default_message = "Not found"


class BoardArchived(StateConflict):
    benign = False
    default_message = "Board is archived"


# ---------------------------------------------------------------------------
# Resources & transport
# ---------------------------------------------------------------------------
class ResourceExhausted(QuorumError):
    http_status = 402


class InsufficientBoosts(ResourceExhausted):
    default_message = "No boosts available"


class TransportError(QuorumError):
    http_status = 503
    default_message = "Document store unreachable"
