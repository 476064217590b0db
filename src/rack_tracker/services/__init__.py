"""Services package - Business logic layer for Rack Tracker.

Architecture:
- Store adapters: read/write whole collections (memory, JSON files, SQLite)
- Inventory ledger: the only writer of items; pairs every quantity change
  with a transaction
- Transaction log: append-only audit trail
- Analytics: read-only summaries over both collections
- Exceptions: Consistent error handling via ServiceError hierarchy, carried
  to callers inside OperationResult

Service Modules:
- inventory_ledger: Item create/update/delete with audit transactions
- transaction_log: Append-only transaction collection
- analytics_service: Monthly summaries, low stock, recent activity
- store: StoreAdapter contract, backends and collection locks
- identity: Next-id allocation

Infrastructure:
- exceptions: Custom exception classes for service layer errors
- database: SQLAlchemy engine and session management for SqlStore
- dto: OperationResult and Summary
- logging_utils: Structured operation logging
"""

from .exceptions import (
    ServiceError,
    ValidationError,
    NotFoundError,
    ItemNotFound,
    StorageError,
    PartialWriteError,
)
from .dto import OperationResult, Summary
from .identity import next_id
from .store import (
    StoreAdapter,
    MemoryStore,
    JsonFileStore,
    SqlStore,
    CollectionLocks,
    create_store,
)
from .transaction_log import TransactionLog
from .inventory_ledger import InventoryLedger
from .analytics_service import AnalyticsAggregator, summarize, stock_status

__all__ = [
    # Exceptions
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "ItemNotFound",
    "StorageError",
    "PartialWriteError",
    # Results
    "OperationResult",
    "Summary",
    # Store
    "StoreAdapter",
    "MemoryStore",
    "JsonFileStore",
    "SqlStore",
    "CollectionLocks",
    "create_store",
    # Core
    "next_id",
    "TransactionLog",
    "InventoryLedger",
    "AnalyticsAggregator",
    "summarize",
    "stock_status",
]
