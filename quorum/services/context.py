"""
quorum.services.context — Application Wiring
=============================================

Builds the document store once at startup and hands it to every service.
Nothing in Quorum looks up the store or the identity through a global;
callers pass a :class:`QuorumContext` (or the individual services) around.

Usage::

    cfg = load_config()
    ctx = build_context(cfg)
    ctx.suggestions.vote(suggestion_id, user.id, 1)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from quorum.config import QuorumConfig, StoreKind
from quorum.services.board_service import BoardRegistry
from quorum.services.economy_service import EconomyService
from quorum.services.suggestion_service import SuggestionStore
from quorum.services.view_service import ViewProjector
from quorum.sync.base import SyncAdapter
from quorum.sync.memory import InMemorySyncAdapter

logger = logging.getLogger(__name__)


@dataclass
class QuorumContext:
    """Every service, sharing one configuration and one store."""

    config: QuorumConfig
    store: SyncAdapter
    boards: BoardRegistry = field(init=False)
    economy: EconomyService = field(init=False)
    suggestions: SuggestionStore = field(init=False)
    views: ViewProjector = field(init=False)

    def __post_init__(self) -> None:
        self.boards = BoardRegistry(self.config, self.store)
        self.economy = EconomyService(self.config, self.store)
        self.suggestions = SuggestionStore(
            self.config, self.store, self.boards, self.economy,
        )
        self.views = ViewProjector(
            self.config, self.store, self.boards, self.suggestions,
        )

    def close(self) -> None:
        stop = getattr(self.store, "stop_listener", None)
        if stop is not None:
            stop()


def build_store(config: QuorumConfig, database_url: str | None = None) -> SyncAdapter:
    """Create the adapter selected by ``config.store``."""
    if config.store is StoreKind.MEMORY:
        logger.info("Using in-memory document store")
        return InMemorySyncAdapter()

    from quorum.database.engine import create_db_engine, init_db
    from quorum.sync.sql import SqlSyncAdapter

    engine = create_db_engine(database_url)
    init_db(engine)
    adapter = SqlSyncAdapter(engine)
    adapter.start_listener()
    return adapter


def build_context(
    config: QuorumConfig,
    store: SyncAdapter | None = None,
    *,
    database_url: str | None = None,
) -> QuorumContext:
    return QuorumContext(config=config, store=store or build_store(config, database_url))
