"""Pytest configuration and fixtures for Rack Tracker tests."""

from datetime import datetime, timedelta, timezone

import pytest

from rack_tracker.services.inventory_ledger import InventoryLedger
from rack_tracker.services.store import JsonFileStore, MemoryStore, SqlStore
from rack_tracker.utils.config import reset_config


class FakeClock:
    """Clock that advances one second per call, starting at `start`."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Keep the config singleton and environment from leaking between tests."""
    for name in ("RACK_TRACKER_ENV", "RACK_TRACKER_STORE", "RACK_TRACKER_DATA_DIR"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def clock():
    """Deterministic clock starting 2025-03-10 09:00 UTC."""
    return FakeClock(datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def memory_store():
    """Provide an empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def json_store(tmp_path):
    """Provide a JSON file store in a temporary directory."""
    return JsonFileStore(tmp_path / "data")


@pytest.fixture
def sql_store():
    """Provide a SQL store on an in-memory SQLite database."""
    store = SqlStore(database_url="sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture(params=["memory", "json", "sqlite"])
def any_store(request, tmp_path):
    """Parametrize a test over every store backend."""
    if request.param == "memory":
        yield MemoryStore()
    elif request.param == "json":
        yield JsonFileStore(tmp_path / "data")
    else:
        store = SqlStore(database_url="sqlite:///:memory:")
        yield store
        store.close()


@pytest.fixture
def ledger(memory_store, clock):
    """Provide a ledger over an empty in-memory store."""
    return InventoryLedger(memory_store, clock=clock)


@pytest.fixture
def item_fields():
    """Valid create_item fields."""
    return {
        "name": "Hex bolt",
        "make": "Bossard",
        "model": "ISO 4017",
        "specification": "M6x20",
        "rack": "A",
        "bin": "3",
        "quantity": 12,
    }


@pytest.fixture
def sample_item(ledger, item_fields):
    """Provide an item created through the ledger."""
    return ledger.create_item(item_fields, actor="pasu").unwrap()
