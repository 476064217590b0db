"""
Transaction Log - append-only audit trail of inventory changes.

Records are immutable once written and are never edited or removed. Each
append re-reads the collection under the transaction lock, checks that the
new record's id is exactly one above the current maximum and writes the
whole collection back.

Only the InventoryLedger appends. Everything else reads.

Example Usage:
      >>> log = TransactionLog(MemoryStore())
      >>> txn = log.record(
      ...     item_id=1, item_name="M6 bolt", type="added",
      ...     quantity=50, user="pasu", timestamp="2025-03-01T09:00:00.000Z",
      ... )
      >>> txn.id
      1
      >>> [t.type for t in log.list_transactions()]
      ['added']
"""

import logging
from typing import List, Optional, Sequence

from ..models.transaction import Transaction
from ..utils.constants import TRANSACTIONS_COLLECTION, TRANSACTION_TYPES
from ..utils.datetime_utils import EARLIEST
from ..utils.validators import validate_positive_integer
from .exceptions import StorageError, ValidationError
from .identity import next_id
from .logging_utils import get_service_logger, log_operation
from .store import CollectionLocks, Record, StoreAdapter

logger = get_service_logger(__name__)


def _load_transactions(records: Sequence[Record], collection: str) -> List[Transaction]:
    try:
        return [Transaction.from_record(record) for record in records]
    except (KeyError, TypeError, ValueError) as e:
        raise StorageError(f"Malformed record in collection '{collection}'", original_error=e)


def sort_recent(
    transactions: Sequence[Transaction], newest_id_first: bool = False
) -> List[Transaction]:
    """
    Order transactions newest first.

    Transactions with a malformed timestamp sort as the earliest possible
    instant.

    Args:
        transactions: Transactions in insertion order
        newest_id_first: Break timestamp ties by id descending. Otherwise the
            sort is stable and ties keep their insertion order.
    """
    if newest_id_first:
        return sorted(
            transactions,
            key=lambda t: (t.occurred_at or EARLIEST, t.id),
            reverse=True,
        )
    return sorted(transactions, key=lambda t: t.occurred_at or EARLIEST, reverse=True)


class TransactionLog:
    """Append-only collection of Transaction records."""

    def __init__(
        self,
        store: StoreAdapter,
        locks: Optional[CollectionLocks] = None,
        collection: str = TRANSACTIONS_COLLECTION,
    ):
        """
        Initialize the transaction log.

        Args:
            store: Store adapter holding the collection
            locks: Lock registry shared with the ledger; a private one if None
            collection: Collection name
        """
        self._store = store
        self._collection = collection
        self._locks = locks or CollectionLocks()
        self._lock = self._locks.lock_for(collection)

    @property
    def collection(self) -> str:
        return self._collection

    def list_transactions(self) -> List[Transaction]:
        """
        All transactions in insertion order.

        Raises:
            StorageError: If the collection cannot be read
        """
        return _load_transactions(self._store.read(self._collection), self._collection)

    def recent(self, limit: Optional[int] = None) -> List[Transaction]:
        """Transactions newest first (ties by id descending), optionally truncated to `limit`."""
        ordered = sort_recent(self.list_transactions(), newest_id_first=True)
        if limit is not None:
            return ordered[:limit]
        return ordered

    def for_item(self, item_id: int) -> List[Transaction]:
        """Audit trail of one item in insertion order, including after deletion."""
        return [t for t in self.list_transactions() if t.item_id == item_id]

    def append(self, transaction: Transaction) -> Transaction:
        """
        Append a fully built transaction.

        Args:
            transaction: Record whose id must be max(existing ids) + 1

        Returns:
            The appended transaction

        Raises:
            ValidationError: If the id is out of sequence, the quantity is
                not a positive integer or the type is unknown
            StorageError: If the collection cannot be read or written
        """
        with self._lock:
            records = self._read_records()
            return self._append_locked(records, transaction)

    def record(
        self,
        item_id: int,
        item_name: str,
        type: str,
        quantity: int,
        user: str,
        timestamp: str,
    ) -> Transaction:
        """
        Allocate the next id and append a new transaction.

        Returns:
            The appended transaction

        Raises:
            ValidationError: If quantity or type is invalid
            StorageError: If the collection cannot be read or written
        """
        with self._lock:
            records = self._read_records()
            transaction = Transaction(
                id=next_id(records),
                item_id=item_id,
                item_name=item_name,
                type=type,
                quantity=quantity,
                user=user,
                timestamp=timestamp,
            )
            return self._append_locked(records, transaction)

    def _read_records(self) -> List[Record]:
        """Raw records, checked to be well-formed before an id is derived from them."""
        records = self._store.read(self._collection)
        _load_transactions(records, self._collection)
        return records

    def _append_locked(self, records: List[Record], transaction: Transaction) -> Transaction:
        """Validate and write. Caller holds the transaction lock."""
        errors = []
        expected_id = next_id(records)
        if transaction.id != expected_id:
            errors.append(f"id: Expected {expected_id}, got {transaction.id}")
        is_valid, error = validate_positive_integer(transaction.quantity, "quantity")
        if not is_valid:
            errors.append(error)
        if transaction.type not in TRANSACTION_TYPES:
            errors.append(f"type: Must be one of {TRANSACTION_TYPES}")

        if errors:
            log_operation(
                logger,
                operation="append",
                outcome="validation_failed",
                item_id=transaction.item_id,
                errors=errors,
            )
            raise ValidationError(errors)

        records.append(transaction.to_record())
        if not self._store.write(self._collection, records):
            log_operation(
                logger,
                operation="append",
                outcome="storage_failed",
                level=logging.ERROR,
                item_id=transaction.item_id,
                transaction_id=transaction.id,
            )
            raise StorageError(f"Failed to write collection '{self._collection}'")

        log_operation(
            logger,
            operation="append",
            outcome="success",
            level=logging.DEBUG,
            transaction_id=transaction.id,
            item_id=transaction.item_id,
            transaction_type=transaction.type,
            quantity=transaction.quantity,
        )
        return transaction
