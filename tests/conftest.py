"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of quorum.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402

# ---------------------------------------------------------------------------
# Make JSONB columns work in SQLite for testing.
# SQLite doesn't support JSONB natively, but SQLAlchemy's JSON type works.
# ---------------------------------------------------------------------------
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB  # noqa: E402

from quorum.config import config_from_dict  # noqa: E402
from quorum.database.models import Base  # noqa: E402
from quorum.engine.records import Identity  # noqa: E402
from quorum.services.context import QuorumContext, build_context  # noqa: E402
from quorum.sync.memory import InMemorySyncAdapter  # noqa: E402

_jsonb_sqlite_registered = False


def _register_jsonb_sqlite_compat():
    """Register SQLite compilation for PG JSONB type (idempotent)."""
    global _jsonb_sqlite_registered
    if _jsonb_sqlite_registered:
        return
    from sqlalchemy.ext.compiler import compiles

    @compiles(PG_JSONB, "sqlite")
    def _compile_jsonb_as_text(type_, compiler, **kw):
        return "TEXT"

    _jsonb_sqlite_registered = True


_register_jsonb_sqlite_compat()


@pytest.fixture
def db_engine() -> Engine:
    """In-memory SQLite engine with the documents table.

    Uses StaticPool so every session shares the same in-memory database.
    """
    from sqlalchemy.pool import StaticPool

    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------
def make_config(**overrides):
    raw = {"community_name": "Test Board"}
    raw.update(overrides)
    return config_from_dict(raw)


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def store() -> InMemorySyncAdapter:
    return InMemorySyncAdapter()


@pytest.fixture
def ctx(config, store) -> QuorumContext:
    return build_context(config, store)


@pytest.fixture
def alice() -> Identity:
    return Identity(id="u0", display_name="Alice")


@pytest.fixture
def bob() -> Identity:
    return Identity(id="u1", display_name="Bob")


@pytest.fixture
def carol() -> Identity:
    return Identity(id="u2", display_name="Carol")


@pytest.fixture
def board(ctx, alice, bob, carol):
    """A board created by Alice with Bob and Carol as members."""
    b = ctx.boards.create_board("Ideias", alice)
    ctx.boards.join_board(b.id, bob.id)
    ctx.boards.join_board(b.id, carol.id)
    return ctx.boards.get_board(b.id)


@pytest.fixture
def suggestion(ctx, board, alice):
    """A suggestion authored by Alice on ``board``."""
    return ctx.suggestions.create_suggestion(board.id, alice, "Pizza on Fridays")


def grant_boosts(ctx: QuorumContext, board_id: str, user_id: str, boosts: int) -> None:
    """Seed an economy account directly (tests only)."""
    key = ctx.economy.account_key(board_id, user_id)
    ctx.store.put("economies", key, {"fragments": 0, "boosts": boosts})


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------
def make_token(sub: str = "u0", name: str = "Alice") -> str:
    """Create an identity JWT.  Usable as both a fixture helper and a factory."""
    import jwt

    from quorum.api.deps import JWT_ALGORITHM, JWT_SECRET

    return jwt.encode({"sub": sub, "name": name}, JWT_SECRET, algorithm=JWT_ALGORITHM)


def auth(sub: str = "u0", name: str = "Alice") -> dict:
    return {"Authorization": f"Bearer {make_token(sub, name)}"}


@pytest.fixture
def client(ctx):
    """FastAPI TestClient wired to the in-memory ``ctx``."""
    from fastapi.testclient import TestClient

    from quorum.api.deps import get_context
    from quorum.api.main import app

    app.dependency_overrides[get_context] = lambda: ctx
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.pop(get_context, None)
