"""
tests/test_config.py — YAML Configuration Loader Tests
=======================================================
"""

from __future__ import annotations

import pytest

from quorum.config import BoardScope, StoreKind, config_from_dict, load_config
from quorum.engine.economy import EconomyScope
from quorum.engine.ledger import BoostRule, QuorumMode


def test_defaults_from_minimal_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text('community_name: "Sugestões"\n', encoding="utf-8")

    cfg = load_config(path)

    assert cfg.community_name == "Sugestões"
    assert cfg.board_scope is BoardScope.MULTI
    assert cfg.store is StoreKind.MEMORY
    assert cfg.economy_scope is EconomyScope.BOARD
    assert cfg.boost_rule is BoostRule.REINFORCE
    assert cfg.quorum_mode is QuorumMode.ANY
    assert cfg.fragments_per_boost == 10


def test_every_variant_read(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "community_name: Office\n"
        "board_scope: global\n"
        "global_board_id: mural\n"
        "store: sql\n"
        "economy_scope: member\n"
        "boost_rule: tie_break\n"
        "quorum_mode: members\n"
        "quorum_ratio: 0.5\n"
        "fragments_per_boost: 5\n"
        "api_port: 9000\n",
        encoding="utf-8",
    )

    cfg = load_config(path)

    assert cfg.board_scope is BoardScope.GLOBAL
    assert cfg.global_board_id == "mural"
    assert cfg.store is StoreKind.SQL
    assert cfg.economy_scope is EconomyScope.MEMBER
    assert cfg.boost_rule is BoostRule.TIE_BREAK
    assert cfg.quorum_mode is QuorumMode.MEMBERS
    assert cfg.quorum_ratio == 0.5
    assert cfg.fragments_per_boost == 5
    assert cfg.api_port == 9000


def test_missing_file_raises_with_hint(tmp_path):
    with pytest.raises(FileNotFoundError, match="config.yaml.example"):
        load_config(tmp_path / "nope.yaml")


def test_missing_community_name():
    with pytest.raises(KeyError):
        config_from_dict({})


@pytest.mark.parametrize(
    "key, value",
    [("board_scope", "some"), ("economy_scope", "team"), ("boost_rule", "double"), ("store", "redis")],
)
def test_unknown_choice_rejected(key, value):
    with pytest.raises(ValueError):
        config_from_dict({"community_name": "x", key: value})


@pytest.mark.parametrize("value", [0, -10])
def test_exchange_rate_must_be_positive(value):
    with pytest.raises(ValueError):
        config_from_dict({"community_name": "x", "fragments_per_boost": value})


def test_config_is_frozen():
    cfg = config_from_dict({"community_name": "x"})
    with pytest.raises(AttributeError):
        cfg.community_name = "y"


def test_global_admin_ids_read_as_strings():
    cfg = config_from_dict({"community_name": "x", "global_admin_ids": [42, "u1"]})
    assert cfg.global_admin_ids == ("42", "u1")
    assert config_from_dict({"community_name": "x"}).global_admin_ids == ()
