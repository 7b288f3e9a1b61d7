"""
quorum.config — YAML Configuration Loader
==========================================

Reads ``config.yaml`` for deployment settings: which store to use, whether
the app runs one global board or many, and the gameplay variants the
engine supports (economy scope, boost rule, ranking quorum).

Secrets (``DATABASE_URL``, ``JWT_SECRET``) stay in the environment / ``.env``.

Usage::

    from quorum.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.community_name)    # "Sugestões"
    print(cfg.economy_scope)     # EconomyScope.BOARD
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path

import yaml

from quorum.constants import (
    DEFAULT_GLOBAL_BOARD_ID,
    DEFAULT_QUORUM_RATIO,
    FRAGMENTS_PER_BOOST,
)
from quorum.engine.economy import EconomyScope
from quorum.engine.ledger import BoostRule, QuorumMode


class BoardScope(enum.StrEnum):
    """Single shared board for everyone, or explicit user-created boards."""

    GLOBAL = "global"
    MULTI = "multi"


class StoreKind(enum.StrEnum):
    MEMORY = "memory"
    SQL = "sql"


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class QuorumConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    community_name: str

    # Deployment variant
    board_scope: BoardScope = BoardScope.MULTI
    global_board_id: str = DEFAULT_GLOBAL_BOARD_ID
    global_admin_ids: tuple[str, ...] = ()
    store: StoreKind = StoreKind.MEMORY

    # Gameplay
    economy_scope: EconomyScope = EconomyScope.BOARD
    boost_rule: BoostRule = BoostRule.REINFORCE
    quorum_mode: QuorumMode = QuorumMode.ANY
    quorum_ratio: float = DEFAULT_QUORUM_RATIO
    fragments_per_boost: int = FRAGMENTS_PER_BOOST

    # API
    api_port: int = 8000


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> QuorumConfig:
    """Read *path* and return a :class:`QuorumConfig` instance.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    ValueError
        If an enum-valued key holds an unknown choice, or
        ``fragments_per_boost`` is not positive.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return config_from_dict(raw)


def config_from_dict(raw: dict) -> QuorumConfig:
    """Build a :class:`QuorumConfig` from an already-parsed mapping."""
    fragments_per_boost = int(raw.get("fragments_per_boost", FRAGMENTS_PER_BOOST))
    if fragments_per_boost <= 0:
        raise ValueError("fragments_per_boost must be a positive integer")

    return QuorumConfig(
        community_name=raw["community_name"],
        board_scope=BoardScope(raw.get("board_scope", BoardScope.MULTI)),
        global_board_id=str(raw.get("global_board_id") or DEFAULT_GLOBAL_BOARD_ID),
        global_admin_ids=tuple(str(uid) for uid in raw.get("global_admin_ids") or ()),
        store=StoreKind(raw.get("store", StoreKind.MEMORY)),
        economy_scope=EconomyScope(raw.get("economy_scope", EconomyScope.BOARD)),
        boost_rule=BoostRule(raw.get("boost_rule", BoostRule.REINFORCE)),
        quorum_mode=QuorumMode(raw.get("quorum_mode", QuorumMode.ANY)),
        quorum_ratio=float(raw.get("quorum_ratio", DEFAULT_QUORUM_RATIO)),
        fragments_per_boost=fragments_per_boost,
        api_port=int(raw.get("api_port", 8000)),
    )
