"""
tests/test_sync.py — Document Store Adapter Tests
==================================================

Both adapters are exercised against the same behaviour: merge-on-put,
delete reporting, containment queries and snapshot subscriptions.  The
SQL adapter runs over the in-memory SQLite engine from conftest.
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from quorum.engine.errors import TransportError
from quorum.engine.records import Suggestion
from quorum.sync.base import matches
from quorum.sync.memory import InMemorySyncAdapter
from quorum.sync.sql import SqlSyncAdapter, query_statement, reconnect_delay


@pytest.fixture(params=["memory", "sql"])
def adapter(request, db_engine):
    if request.param == "memory":
        return InMemorySyncAdapter()
    return SqlSyncAdapter(db_engine, origin="test-origin")


class TestMatches:
    def test_no_filter_matches_everything(self):
        assert matches({"a": 1}, None)
        assert matches({"a": 1}, {})

    def test_equality_and_containment(self):
        body = {"board_id": "b1", "member_ids": ["u1", "u2"]}
        assert matches(body, {"board_id": "b1"})
        assert not matches(body, {"board_id": "b2"})
        assert matches(body, {"member_ids": "u2"})
        assert not matches(body, {"member_ids": "u9"})


class TestPrimitives:
    def test_get_missing_returns_none(self, adapter):
        assert adapter.get("suggestions", "nope") is None

    def test_put_merges_top_level_fields(self, adapter):
        adapter.put("suggestions", "s1", {"board_id": "b1", "votes": {}, "reports": []})
        merged = adapter.put("suggestions", "s1", {"votes": {"u1": [1]}})
        assert merged == {"board_id": "b1", "votes": {"u1": [1]}, "reports": []}
        assert adapter.get("suggestions", "s1") == merged

    def test_concurrent_field_patches_do_not_clobber(self, adapter):
        adapter.put("suggestions", "s1", {"votes": {}, "reports": []})
        adapter.put("suggestions", "s1", {"votes": {"u1": [1]}})
        adapter.put("suggestions", "s1", {"reports": [{"reporter_id": "u2", "reason": "x"}]})
        doc = adapter.get("suggestions", "s1")
        assert doc["votes"] == {"u1": [1]}
        assert len(doc["reports"]) == 1

    def test_delete_reports_whether_removed(self, adapter):
        adapter.put("suggestions", "s1", {"x": 1})
        assert adapter.delete("suggestions", "s1") is True
        assert adapter.delete("suggestions", "s1") is False
        assert adapter.get("suggestions", "s1") is None

    def test_query_filters_by_field(self, adapter):
        adapter.put("suggestions", "s1", {"board_id": "b1"})
        adapter.put("suggestions", "s2", {"board_id": "b2"})
        adapter.put("boards", "b1", {"member_ids": ["u1"]})
        assert set(adapter.query("suggestions")) == {"s1", "s2"}
        assert set(adapter.query("suggestions", {"board_id": "b1"})) == {"s1"}
        assert set(adapter.query("boards", {"member_ids": "u1"})) == {"b1"}

    def test_returned_documents_are_copies(self, adapter):
        adapter.put("suggestions", "s1", {"votes": {"u1": [1]}})
        doc = adapter.get("suggestions", "s1")
        doc["votes"]["u2"] = [1]
        assert adapter.get("suggestions", "s1") == {"votes": {"u1": [1]}}

    def test_vote_sequence_order_survives_round_trip(self, adapter):
        s = Suggestion(
            id="s1", board_id="b1", author_id="u0", author_name="A", text="x",
            votes={"u1": [0, -1], "u2": [1]},
        )
        adapter.put("suggestions", s.id, s.to_doc())
        loaded = Suggestion.from_doc(s.id, adapter.get("suggestions", s.id))
        assert loaded.votes == {"u1": [0, -1], "u2": [1]}
        assert loaded.created_at == s.created_at


class TestSubscriptions:
    def test_initial_snapshot_then_change(self, adapter):
        adapter.put("suggestions", "s1", {"board_id": "b1"})
        events = []
        adapter.subscribe("suggestions", events.append, {"board_id": "b1"})

        assert set(events[0].snapshot) == {"s1"}
        assert events[0].key is None

        adapter.put("suggestions", "s2", {"board_id": "b1"})
        assert set(events[-1].snapshot) == {"s1", "s2"}
        assert events[-1].key == "s2"

    def test_filtered_snapshot_excludes_other_boards(self, adapter):
        events = []
        adapter.subscribe("suggestions", events.append, {"board_id": "b1"})
        adapter.put("suggestions", "s9", {"board_id": "b2"})
        assert events[-1].snapshot == {}

    def test_other_collections_do_not_notify(self, adapter):
        events = []
        adapter.subscribe("suggestions", events.append)
        adapter.put("economies", "b1", {"fragments": 1})
        assert len(events) == 1

    def test_delete_notifies(self, adapter):
        adapter.put("suggestions", "s1", {"board_id": "b1"})
        events = []
        adapter.subscribe("suggestions", events.append)
        adapter.delete("suggestions", "s1")
        assert events[-1].deleted
        assert events[-1].snapshot == {}

    def test_unsubscribe(self, adapter):
        events = []
        sub = adapter.subscribe("suggestions", events.append)
        sub.unsubscribe()
        adapter.put("suggestions", "s1", {})
        assert len(events) == 1
        assert not sub.active

    def test_failing_listener_does_not_fail_the_write(self, adapter):
        calls = []

        def boom(event):
            calls.append(event)
            if len(calls) > 1:
                raise RuntimeError("listener broke")

        adapter.subscribe("suggestions", boom)
        adapter.put("suggestions", "s1", {"x": 1})
        assert adapter.get("suggestions", "s1") == {"x": 1}
        assert len(calls) == 2


# ---------------------------------------------------------------------------
# SQL-specific behaviour
# ---------------------------------------------------------------------------
class TestSqlAdapter:
    def test_version_bumps_on_each_put(self, db_engine):
        from sqlalchemy.orm import Session

        from quorum.database.models import Document

        store = SqlSyncAdapter(db_engine)
        store.put("boards", "b1", {"name": "A"})
        store.put("boards", "b1", {"name": "B"})
        with Session(db_engine) as session:
            row = session.get(Document, ("boards", "b1"))
            assert row.version == 2
            assert row.body == {"name": "B"}

    def test_driver_errors_become_transport_errors(self, db_engine):
        store = SqlSyncAdapter(db_engine)
        with patch("quorum.sync.sql.Session") as session_cls:
            session_cls.return_value.__enter__.return_value.get.side_effect = (
                OperationalError("SELECT", {}, Exception("connection reset"))
            )
            with pytest.raises(TransportError):
                store.get("boards", "b1")

    def test_listener_not_started_on_sqlite(self, db_engine):
        store = SqlSyncAdapter(db_engine)
        store.start_listener()
        assert store._listener_thread is None
        assert not store.listener_healthy
        store.stop_listener()


class TestQueryStatement:
    def _sql(self, stmt, dialect) -> str:
        return str(stmt.compile(dialect=dialect))

    def test_postgres_filters_in_the_database(self):
        from sqlalchemy.dialects import postgresql

        stmt = query_statement("suggestions", {"board_id": "b1"}, postgres=True)
        sql = self._sql(stmt, postgresql.dialect())
        assert sql.count("@>") == 2
        assert "documents.collection" in sql

    def test_without_postgres_only_the_collection_is_filtered(self):
        from sqlalchemy.dialects import sqlite

        stmt = query_statement("suggestions", {"board_id": "b1"})
        sql = self._sql(stmt, sqlite.dialect())
        assert "@>" not in sql
        assert "documents.collection" in sql

    def test_no_filter_adds_no_containment(self):
        from sqlalchemy.dialects import postgresql

        stmt = query_statement("boards", None, postgres=True)
        assert "@>" not in self._sql(stmt, postgresql.dialect())

class TestListener:
    @pytest.mark.parametrize("attempt, low, high", [(1, 1.0, 1.5), (3, 4.0, 6.0), (20, 60.0, 90.0)])
    def test_reconnect_delay_doubles_then_caps(self, attempt, low, high):
        for _ in range(20):
            assert low <= reconnect_delay(attempt) <= high

    def test_drain_dispatches_every_pending_notify(self, db_engine):
        store = SqlSyncAdapter(db_engine, origin="me")
        store.handle_notify = MagicMock(side_effect=[RuntimeError("bad subscriber"), None])
        conn = MagicMock()
        conn.notifies = [MagicMock(payload="a"), MagicMock(payload=None)]
        with patch("quorum.sync.sql._select.select", return_value=([conn], [], [])):
            assert store._drain(conn) == 2
        assert [c.args for c in store.handle_notify.call_args_list] == [("a",), ("",)]
        assert conn.notifies == []

    def test_drain_idle_timeout_handles_nothing(self, db_engine):
        store = SqlSyncAdapter(db_engine)
        conn = MagicMock()
        with patch("quorum.sync.sql._select.select", return_value=([], [], [])):
            assert store._drain(conn, timeout=0.01) == 0
        conn.poll.assert_not_called()


class TestHandleNotify:
    def _store(self, db_engine):
        store = SqlSyncAdapter(db_engine, origin="me")
        store._notify = MagicMock()
        return store

    def test_foreign_payload_fans_out(self, db_engine):
        store = self._store(db_engine)
        store.handle_notify(json.dumps(
            {"origin": "other", "collection": "suggestions", "key": "s1", "deleted": True}
        ))
        store._notify.assert_called_once_with("suggestions", "s1", deleted=True)

    def test_own_payload_skipped(self, db_engine):
        store = self._store(db_engine)
        store.handle_notify(json.dumps({"origin": "me", "collection": "suggestions"}))
        store._notify.assert_not_called()

    def test_bad_json_ignored(self, db_engine):
        store = self._store(db_engine)
        store.handle_notify("not json{")
        store._notify.assert_not_called()

    def test_missing_collection_ignored(self, db_engine):
        store = self._store(db_engine)
        store.handle_notify(json.dumps({"origin": "other"}))
        store._notify.assert_not_called()

    def test_remote_change_reaches_local_subscriber(self, db_engine):
        writer = SqlSyncAdapter(db_engine, origin="writer")
        reader = SqlSyncAdapter(db_engine, origin="reader")
        events = []
        reader.subscribe("suggestions", events.append)

        writer.put("suggestions", "s1", {"board_id": "b1"})
        assert len(events) == 1  # no NOTIFY on SQLite

        reader.handle_notify(json.dumps(
            {"origin": "writer", "collection": "suggestions", "key": "s1"}
        ))
        assert set(events[-1].snapshot) == {"s1"}
