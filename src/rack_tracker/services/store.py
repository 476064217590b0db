"""
Store Adapter - read/write contract for named collections of records.

The ledger never touches files or tables directly. It reads a whole
collection, changes it in memory and writes the whole collection back
through a StoreAdapter. Backends:

- MemoryStore: in-process, for tests and embedding
- JsonFileStore: one pretty-printed JSON array per collection
- SqlStore: SQLAlchemy table of JSON payloads (SQLite by default)

A read-then-write sequence is not atomic across callers. CollectionLocks
provides the per-collection mutual exclusion the ledger and the
transaction log hold around every read-modify-write.

Example Usage:
      >>> store = MemoryStore()
      >>> store.write("inventory", [{"id": 1, "name": "Bolt"}])
      True
      >>> store.read("inventory")
      [{'id': 1, 'name': 'Bolt'}]
      >>> store.read("never_written")
      []
"""

import contextlib
import copy
import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..models.ledger_record import LedgerRecord
from ..utils.config import Config, get_config
from .database import (
    create_database_engine,
    create_session_factory,
    init_database,
    session_scope,
    verify_database,
)
from .exceptions import StorageError
from .logging_utils import get_service_logger

logger = get_service_logger(__name__)

Record = Dict[str, Any]


class CollectionLocks:
    """
    One re-entrant lock per collection name.

    Share a single instance between every component that writes the same
    store so they serialize against each other.
    """

    def __init__(self):
        self._locks: Dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def lock_for(self, collection: str) -> threading.RLock:
        """Get (creating on first use) the lock for `collection`."""
        with self._guard:
            lock = self._locks.get(collection)
            if lock is None:
                lock = threading.RLock()
                self._locks[collection] = lock
            return lock


class StoreAdapter(ABC):
    """Read/write contract for named, ordered collections of records."""

    @abstractmethod
    def read(self, collection: str) -> List[Record]:
        """
        Read every record of a collection in stored order.

        Returns:
            List of records; empty if the collection was never written

        Raises:
            StorageError: If backing storage exists but cannot be read
        """

    @abstractmethod
    def write(self, collection: str, records: Sequence[Record]) -> bool:
        """
        Replace the whole collection with `records`.

        Returns:
            True if the write was durable, False otherwise
        """

    @abstractmethod
    def exists(self, collection: str) -> bool:
        """Check whether the collection has been initialized."""

    def initialize(self, *collections: str) -> None:
        """
        Create empty collections for those that don't exist yet.

        Raises:
            StorageError: If an empty collection could not be written
        """
        for collection in collections:
            if self.exists(collection):
                continue
            if not self.write(collection, []):
                raise StorageError(f"Failed to initialize collection '{collection}'")
            logger.info(f"Initialized empty collection '{collection}'")


class MemoryStore(StoreAdapter):
    """Collections held in process memory. Reads and writes copy records."""

    def __init__(self, initial: Optional[Dict[str, Sequence[Record]]] = None):
        self._collections: Dict[str, List[Record]] = {}
        self._lock = threading.Lock()
        for name, records in (initial or {}).items():
            self._collections[name] = copy.deepcopy(list(records))

    def read(self, collection: str) -> List[Record]:
        with self._lock:
            return copy.deepcopy(self._collections.get(collection, []))

    def write(self, collection: str, records: Sequence[Record]) -> bool:
        with self._lock:
            self._collections[collection] = copy.deepcopy(list(records))
        return True

    def exists(self, collection: str) -> bool:
        with self._lock:
            return collection in self._collections


class JsonFileStore(StoreAdapter):
    """
    Each collection is a JSON array in `<directory>/<collection>.json`.

    Writes go to a temporary file in the same directory that is then
    renamed over the target, so a reader never sees a half-written file.
    """

    def __init__(self, directory: Path):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, collection: str) -> Path:
        """File holding `collection`."""
        return self._directory / f"{collection}.json"

    def read(self, collection: str) -> List[Record]:
        path = self.path_for(collection)

        if not path.exists():
            return []

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (ValueError, OSError) as e:
            # ValueError covers both JSONDecodeError and UnicodeDecodeError
            logger.error(f"Failed to read {path}: {e}")
            raise StorageError(f"Failed to read collection '{collection}'", original_error=e)

        if not isinstance(data, list):
            logger.error(f"Expected a JSON array in {path}, got {type(data).__name__}")
            raise StorageError(f"Collection '{collection}' is not a list of records")
        return data

    def write(self, collection: str, records: Sequence[Record]) -> bool:
        path = self.path_for(collection)
        tmp_name = None

        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._directory, prefix=f".{collection}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(list(records), f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write {path}: {e}")
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.remove(tmp_name)
            return False

    def exists(self, collection: str) -> bool:
        return self.path_for(collection).exists()

    def __repr__(self) -> str:
        return f"JsonFileStore(directory='{self._directory}')"


class SqlStore(StoreAdapter):
    """
    Collections stored as rows of the `ledger_records` table.

    A write deletes the collection's rows and inserts the new ones inside
    one session transaction, so either the whole new collection is visible
    or the old one still is.
    """

    def __init__(self, engine: Optional[Engine] = None, database_url: Optional[str] = None):
        """
        Initialize the SQL store.

        Args:
            engine: Engine to use. If None, one is created from database_url.
            database_url: URL used when no engine is given (defaults to config)

        Raises:
            StorageError: If the records table is missing after initialization
        """
        self._engine = engine or create_database_engine(database_url)
        init_database(self._engine)
        if not verify_database(self._engine):
            raise StorageError(f"Database at {self._engine.url} has no ledger_records table")
        self._session_factory = create_session_factory(self._engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    def read(self, collection: str) -> List[Record]:
        try:
            with session_scope(self._session_factory) as session:
                rows = (
                    session.query(LedgerRecord)
                    .filter(LedgerRecord.collection == collection)
                    .order_by(LedgerRecord.position.asc())
                    .all()
                )
                return [row.to_dict() for row in rows]
        except (SQLAlchemyError, ValueError) as e:
            logger.error(f"Failed to read collection '{collection}': {e}")
            raise StorageError(f"Failed to read collection '{collection}'", original_error=e)

    def write(self, collection: str, records: Sequence[Record]) -> bool:
        try:
            with session_scope(self._session_factory) as session:
                session.query(LedgerRecord).filter(
                    LedgerRecord.collection == collection
                ).delete(synchronize_session=False)
                session.add_all(
                    LedgerRecord.from_dict(collection, position, record)
                    for position, record in enumerate(records)
                )
            return True
        except (SQLAlchemyError, TypeError, ValueError) as e:
            logger.error(f"Failed to write collection '{collection}': {e}")
            return False

    def exists(self, collection: str) -> bool:
        # An empty collection has no rows, so it only exists once a record was written
        try:
            with session_scope(self._session_factory) as session:
                return (
                    session.query(LedgerRecord.id)
                    .filter(LedgerRecord.collection == collection)
                    .first()
                    is not None
                )
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to inspect collection '{collection}'", original_error=e)

    def close(self) -> None:
        """Dispose of the engine's connections."""
        self._engine.dispose()


def create_store(config: Optional[Config] = None) -> StoreAdapter:
    """
    Create the store adapter selected by configuration.

    Args:
        config: Configuration to use. If None, uses the global config.

    Returns:
        StoreAdapter for the configured backend
    """
    config = config or get_config()

    if config.store_backend == "memory":
        return MemoryStore()

    config.ensure_directories()
    if config.store_backend == "sqlite":
        return SqlStore(database_url=config.database_url)
    return JsonFileStore(config.data_dir)
