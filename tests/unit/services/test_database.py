"""Tests for database engine and session management used by SqlStore."""

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from rack_tracker.models.ledger_record import LedgerRecord
from rack_tracker.services.database import (
    create_database_engine,
    create_session_factory,
    init_database,
    session_scope,
    verify_database,
)


@pytest.fixture
def engine():
    engine = create_database_engine("sqlite:///:memory:")
    init_database(engine)
    yield engine
    engine.dispose()


class TestEngine:
    """Tests for engine creation and initialization."""

    def test_foreign_keys_enabled(self, engine):
        with engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1

    def test_verify_after_init(self, engine):
        assert verify_database(engine) is True

    def test_verify_before_init(self):
        engine = create_database_engine("sqlite:///:memory:")
        assert verify_database(engine) is False
        engine.dispose()

    def test_init_is_idempotent(self, engine):
        init_database(engine)
        assert verify_database(engine) is True

    def test_default_url_comes_from_config(self, monkeypatch, tmp_path):
        monkeypatch.setenv("RACK_TRACKER_DATA_DIR", str(tmp_path))
        engine = create_database_engine()
        assert str(engine.url).endswith("rack_tracker.db")
        engine.dispose()

    def test_sql_store_engine_is_initialized(self, sql_store):
        assert verify_database(sql_store.engine) is True


class TestSessionScope:
    """Tests for session_scope()."""

    def test_commits_on_success(self, engine):
        factory = create_session_factory(engine)
        with session_scope(factory) as session:
            session.add(LedgerRecord.from_dict("inventory", 0, {"id": 1}))

        with session_scope(factory) as session:
            rows = session.query(LedgerRecord).all()
            assert [row.to_dict() for row in rows] == [{"id": 1}]

    def test_rolls_back_on_error(self, engine):
        factory = create_session_factory(engine)
        with pytest.raises(RuntimeError):
            with session_scope(factory) as session:
                session.add(LedgerRecord.from_dict("inventory", 0, {"id": 1}))
                session.flush()
                raise RuntimeError("boom")

        with session_scope(factory) as session:
            assert session.query(LedgerRecord).count() == 0

    def test_position_unique_per_collection(self, engine):
        factory = create_session_factory(engine)
        with session_scope(factory) as session:
            session.add(LedgerRecord.from_dict("inventory", 0, {"id": 1}))
            session.add(LedgerRecord.from_dict("transactions", 0, {"id": 1}))

        with pytest.raises(IntegrityError):
            with session_scope(factory) as session:
                session.add(LedgerRecord.from_dict("inventory", 0, {"id": 2}))
