"""
quorum.constants — Shared Constants
=====================================

Single source of truth for the vote alphabet and the economy exchange rate.
Import from here instead of duplicating in the engine, services and API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Votes
# ---------------------------------------------------------------------------
VOTE_VALUES: frozenset[int] = frozenset({-1, 0, 1})

# One initial vote plus at most one boost
MAX_VOTES_PER_VOTER = 2

# Applied when a voter boosts without a prior vote
DEFAULT_BOOST_VALUE = 1

# ---------------------------------------------------------------------------
# Economy
# ---------------------------------------------------------------------------
FRAGMENTS_PER_BOOST = 10
FRAGMENTS_PER_VOTE = 1

# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------
DEFAULT_QUORUM_RATIO = 0.3

# ---------------------------------------------------------------------------
# Global board scope
# ---------------------------------------------------------------------------
DEFAULT_GLOBAL_BOARD_ID = "global"
DEFAULT_GLOBAL_BOARD_NAME = "Mural"
