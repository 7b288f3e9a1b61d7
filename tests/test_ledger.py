"""
tests/test_ledger.py — Vote Ledger, Quorum & Boost Rule Tests
==============================================================
"""

from __future__ import annotations

import pytest

from quorum.engine.ledger import (
    BoostRule,
    QuorumMode,
    boost_used,
    has_voted,
    make_quorum_predicate,
    member_quorum,
    resolve_boost_value,
    score,
    voters_excluding_author,
)


class TestScore:
    def test_empty_votes_score_zero(self):
        assert score({}) == 0
        assert score(None) == 0

    def test_sums_every_sequence(self):
        votes = {"u1": [1, 1], "u2": [-1], "u3": [0, 0], "u4": [1]}
        assert score(votes) == 2

    def test_negative_total(self):
        assert score({"u1": [-1, -1], "u2": [1]}) == -1


class TestVoterState:
    def test_has_voted(self):
        votes = {"u1": [1], "u2": []}
        assert has_voted(votes, "u1")
        assert not has_voted(votes, "u2")  # empty sequence = never voted
        assert not has_voted(votes, "u3")

    def test_boost_used_only_after_second_entry(self):
        votes = {"u1": [1], "u2": [0, 0]}
        assert not boost_used(votes, "u1")
        assert boost_used(votes, "u2")
        assert not boost_used(votes, "missing")

    def test_voters_excluding_author(self):
        votes = {"u0": [1], "u1": [1], "u2": [-1], "u3": []}
        assert voters_excluding_author(votes, "u0") == 2


class TestQuorum:
    def test_any_mode_needs_one_external_voter(self):
        quorum = make_quorum_predicate(QuorumMode.ANY)
        assert not quorum({}, "u0", 10)
        assert quorum({"u1": [0]}, "u0", 10)

    @pytest.mark.parametrize(
        "members, expected",
        [(0, 1), (1, 1), (2, 1), (4, 1), (5, 2), (11, 3), (21, 6)],
    )
    def test_member_quorum_threshold(self, members, expected):
        """ceil((members - 1) * 0.3), never below one."""
        assert member_quorum(members, 0.3) == expected

    def test_members_mode(self):
        quorum = make_quorum_predicate("members", 0.3)
        votes = {"u1": [1], "u2": [1]}
        assert not quorum(votes, "u0", 11)   # needs 3
        votes["u3"] = [-1]
        assert quorum(votes, "u0", 11)

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            make_quorum_predicate("sometimes")


class TestBoostValue:
    def test_no_prior_vote_defaults_to_plus_one(self):
        assert resolve_boost_value({"u1": [1]}, "u2") == 1

    @pytest.mark.parametrize("prior", [-1, 0, 1])
    def test_reinforce_repeats_prior_vote(self, prior):
        assert resolve_boost_value({"u1": [prior]}, "u1", BoostRule.REINFORCE) == prior

    def test_tie_break_neutral_on_level_score(self):
        """A neutral vote boosted on a level board stays neutral."""
        votes = {"u1": [0]}
        assert resolve_boost_value(votes, "u1", BoostRule.TIE_BREAK) == 0

    def test_tie_break_pushes_against_positive_score(self):
        votes = {"u1": [0], "u2": [1]}
        assert resolve_boost_value(votes, "u1", "tie_break") == -1

    def test_tie_break_pushes_against_negative_score(self):
        votes = {"u1": [0], "u2": [-1], "u3": [-1]}
        assert resolve_boost_value(votes, "u1", "tie_break") == 1

    def test_tie_break_still_reinforces_non_neutral(self):
        votes = {"u1": [-1], "u2": [1], "u3": [1]}
        assert resolve_boost_value(votes, "u1", BoostRule.TIE_BREAK) == -1
