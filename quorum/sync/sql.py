"""
quorum.sync.sql — SQL Document Store with PG LISTEN/NOTIFY
===========================================================

Shared, multi-client :class:`~quorum.sync.base.SyncAdapter` backed by the
``documents`` table.

Writes merge the patch into the stored body inside one transaction with a
row lock (``SELECT … FOR UPDATE`` on PostgreSQL), so two clients patching
*different* fields of the same document never clobber each other.  A
read-modify-write spanning ``get`` and ``put`` is still last-write-wins:
the economy stays best-effort under contention.

Change propagation:

1. Local subscribers are notified synchronously after commit.
2. On PostgreSQL a ``NOTIFY quorum_changes`` fires atomically with the
   commit.  Other processes pick it up on their listener thread
   (:meth:`SqlSyncAdapter.start_listener`) and notify *their* subscribers.
   Each adapter tags its payloads with an ``origin`` id and skips its own.
"""

from __future__ import annotations

import json
import logging
import random
import select as _select
import threading
import uuid
from collections.abc import Iterator, Mapping
from contextlib import closing, contextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import Select, or_, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from quorum.database.engine import get_session
from quorum.database.models import Document
from quorum.engine.errors import TransportError
from quorum.engine.events import Snapshot
from quorum.sync.base import SyncAdapter, matches

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

# The PG channel name used for document change notifications
NOTIFY_CHANNEL = "quorum_changes"

LISTEN_MAX_ATTEMPTS = 10
LISTEN_POLL_SECONDS = 5.0


@contextmanager
def _transport(action: str, collection: str, key: str | None = None) -> Iterator[None]:
    """Translate driver/ORM failures into :class:`TransportError`."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Store %s failed for %s/%s", action, collection, key)
        raise TransportError(f"Store {action} failed for {collection}") from exc


def query_statement(
    collection: str, where: Mapping[str, Any] | None = None, *, postgres: bool = False
) -> Select:
    """SELECT for one collection.  On PostgreSQL the ``where`` fields become
    JSONB containment tests (``body @> {field: value}`` or, for list fields,
    ``body @> {field: [value]}``) so the filter runs in the database.
    """
    stmt = select(Document).where(Document.collection == collection)
    if postgres:
        for name, expected in (where or {}).items():
            stmt = stmt.where(or_(
                Document.body.contains({name: expected}),
                Document.body.contains({name: [expected]}),
            ))
    return stmt


def reconnect_delay(attempt: int, *, base: float = 1.0, cap: float = 60.0) -> float:
    """Seconds to wait before reconnect *attempt* (1-based): doubling, capped,
    plus up to 50% jitter.
    """
    step = min(base * 2 ** (attempt - 1), cap)
    return step + random.uniform(0, step / 2)


class SqlSyncAdapter(SyncAdapter):
    """Document store on any SQLAlchemy engine (PostgreSQL in production)."""

    def __init__(self, engine: Engine, *, origin: str | None = None) -> None:
        super().__init__()
        self._engine = engine
        self.origin = origin or uuid.uuid4().hex

        self._listener_healthy: bool = False
        self._listener_failed: bool = False
        self._listener_thread: threading.Thread | None = None
        self._shutdown_event = threading.Event()

    @property
    def _is_postgres(self) -> bool:
        return self._engine.dialect.name == "postgresql"

    # -------------------------------------------------------------------
    # Storage primitives
    # -------------------------------------------------------------------
    def get(self, collection: str, key: str) -> dict[str, Any] | None:
        with _transport("get", collection, key), Session(self._engine) as session:
            row = session.get(Document, (collection, key))
            return dict(row.body) if row is not None else None

    def put(self, collection: str, key: str, patch: Mapping[str, Any]) -> dict[str, Any]:
        with _transport("put", collection, key):
            with get_session(self._engine) as session:
                row = session.scalar(
                    select(Document)
                    .where(Document.collection == collection, Document.key == key)
                    .with_for_update()
                )
                if row is None:
                    row = Document(collection=collection, key=key, body=dict(patch), version=1)
                    session.add(row)
                else:
                    # Assign a new dict so the JSON column is flagged dirty
                    row.body = {**row.body, **patch}
                    row.version = (row.version or 0) + 1
                session.flush()
                merged = dict(row.body)
                self._notify_before_commit(session, collection, key, deleted=False)
        logger.debug("put %s/%s fields=%s", collection, key, sorted(patch))
        self._notify(collection, key)
        return merged

    def delete(self, collection: str, key: str) -> bool:
        with _transport("delete", collection, key):
            with get_session(self._engine) as session:
                row = session.get(Document, (collection, key))
                if row is None:
                    return False
                session.delete(row)
                self._notify_before_commit(session, collection, key, deleted=True)
        self._notify(collection, key, deleted=True)
        return True

    def query(
        self, collection: str, where: Mapping[str, Any] | None = None
    ) -> Snapshot:
        with _transport("query", collection), Session(self._engine) as session:
            rows = session.scalars(
                query_statement(collection, where, postgres=self._is_postgres)
            ).all()
            # The SQL filter may over-match; matches() has the final say
            return {
                row.key: dict(row.body)
                for row in rows
                if matches(row.body, where)
            }

    # -------------------------------------------------------------------
    # Cross-process notification
    # -------------------------------------------------------------------
    def _notify_before_commit(
        self, session: Session, collection: str, key: str, *, deleted: bool
    ) -> None:
        """Queue a NOTIFY that fires atomically with the commit (PG only)."""
        if not self._is_postgres:
            return
        payload = json.dumps({
            "origin": self.origin,
            "collection": collection,
            "key": key,
            "deleted": deleted,
        })
        session.execute(
            text("SELECT pg_notify(:channel, :payload)"),
            {"channel": NOTIFY_CHANNEL, "payload": payload},
        )

    def handle_notify(self, raw_payload: str) -> None:
        """Fan a NOTIFY from another process out to local subscribers."""
        try:
            data = json.loads(raw_payload)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Invalid change payload (not JSON): %s", raw_payload)
            return

        if data.get("origin") == self.origin:
            return
        collection = data.get("collection")
        if not collection:
            logger.warning("Change payload missing 'collection': %s", raw_payload)
            return
        self._notify(collection, data.get("key"), deleted=bool(data.get("deleted")))

    @property
    def listener_healthy(self) -> bool:
        """Return True if the LISTEN thread is alive and connected."""
        return self._listener_healthy and not self._listener_failed

    @property
    def listener_failed(self) -> bool:
        """Return True if the listener exhausted reconnect attempts."""
        return self._listener_failed

    def stop_listener(self) -> None:
        """Signal the listener thread to stop and wait for it to exit."""
        self._shutdown_event.set()
        if self._listener_thread is not None and self._listener_thread.is_alive():
            self._listener_thread.join(timeout=5)
            logger.info("PG NOTIFY listener thread stopped")

    def start_listener(self) -> None:
        """Run :meth:`_listen_forever` on a daemon thread (PostgreSQL only).

        Subscribers are invoked on that thread.
        """
        if not self._is_postgres:
            logger.info("Change listener skipped: %s has no LISTEN/NOTIFY",
                        self._engine.dialect.name)
            return
        thread = threading.Thread(
            target=self._listen_forever, daemon=True, name="quorum-change-listener",
        )
        self._listener_thread = thread
        thread.start()

    def _listen_forever(self) -> None:
        import psycopg2

        # render_as_string keeps the password that str(url) masks
        dsn = self._engine.url.render_as_string(hide_password=False).replace(
            "postgresql+psycopg2://", "postgresql://"
        )
        failures = 0
        while not self._shutdown_event.is_set():
            try:
                with closing(psycopg2.connect(dsn)) as conn:
                    conn.autocommit = True
                    conn.cursor().execute(f"LISTEN {NOTIFY_CHANNEL};")
                    logger.info("Listening for changes on '%s'", NOTIFY_CHANNEL)
                    failures = 0
                    self._listener_healthy = True
                    while not self._shutdown_event.is_set():
                        self._drain(conn)
            except (psycopg2.Error, OSError):
                self._listener_healthy = False
                failures += 1
                if failures >= LISTEN_MAX_ATTEMPTS:
                    logger.critical(
                        "Change listener gave up after %d attempts; "
                        "updates from other processes will not arrive",
                        failures,
                    )
                    self._listener_failed = True
                    return
                delay = reconnect_delay(failures)
                logger.exception(
                    "Change listener lost its connection (%d/%d), retry in %.1fs",
                    failures, LISTEN_MAX_ATTEMPTS, delay,
                )
                self._shutdown_event.wait(timeout=delay)
        self._listener_healthy = False

    def _drain(self, conn: Any, timeout: float = LISTEN_POLL_SECONDS) -> int:
        """Wait up to *timeout* for NOTIFYs on *conn* and dispatch them.

        Returns how many were handled.
        """
        if _select.select([conn], [], [], timeout) == ([], [], []):
            return 0
        conn.poll()
        handled = 0
        while conn.notifies:
            payload = conn.notifies.pop(0).payload or ""
            try:
                self.handle_notify(payload)
            except Exception:
                logger.exception("Subscriber failed on change %s", payload)
            handled += 1
        return handled
