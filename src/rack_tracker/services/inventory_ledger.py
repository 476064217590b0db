"""Inventory Ledger - authoritative item state with a paired audit trail.

This module owns every change to inventory items. Each quantity-changing
operation writes the item collection first and then appends exactly one
Transaction to the TransactionLog.

Key Features:
- Create, update, delete and list items held at rack/bin locations
- Quantity never goes negative; offending operations are rejected, not clamped
- One transaction per quantity change: "added", "taken" or "deleted"
- Per-collection locking so concurrent callers never lose updates or
  allocate the same id
- Discriminated OperationResult instead of exceptions for callers

Write ordering:
    1. Acquire the item lock
    2. Read the item collection, validate and compute the new state
    3. Write the item collection (failure -> StorageError, no transaction)
    4. Append the transaction under the transaction lock
       (failure -> PartialWriteError, the item write stays)
    5. Release the item lock

Known limitation: there is no cross-collection transaction. When step 4
fails after step 3 succeeded, item state and audit trail disagree. The
operation reports PartialWriteError and nothing is rolled back or retried;
reconcile() lists the items whose quantity no longer matches their history.

Example Usage:
      >>> ledger = InventoryLedger(MemoryStore())
      >>> result = ledger.create_item(
      ...     {"name": "Hex bolt", "make": "Bossard", "model": "ISO 4017",
      ...      "specification": "M6x20", "rack": "A", "bin": "3", "quantity": 40},
      ...     actor="pasu",
      ... )
      >>> result.success, result.value.id
      (True, 1)
      >>> ledger.adjust_quantity(1, -5, actor="kim").value.quantity
      35
      >>> [(t.type, t.quantity) for t in ledger.transactions.list_transactions()]
      [('added', 40), ('taken', 5)]
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from ..models.item import Item, ItemPatch
from ..utils.constants import (
    ITEMS_COLLECTION,
    ITEM_MANAGED_FIELDS,
    ITEM_TEXT_FIELDS,
    TRANSACTIONS_COLLECTION,
    TRANSACTION_ADDED,
    TRANSACTION_DELETED,
    TRANSACTION_TAKEN,
    ERROR_REQUIRED_FIELD,
)
from ..utils.datetime_utils import to_iso, utc_now
from ..utils.validators import (
    validate_actor,
    validate_integer,
    validate_non_negative_integer,
    validate_required_string,
)
from .dto import OperationResult
from .exceptions import (
    ItemNotFound,
    NotFoundError,
    PartialWriteError,
    ServiceError,
    StorageError,
    ValidationError,
)
from .identity import next_id
from .logging_utils import get_service_logger, log_operation
from .store import CollectionLocks, StoreAdapter
from .transaction_log import TransactionLog

logger = get_service_logger(__name__)

Clock = Callable[[], datetime]


# =============================================================================
# Validation
# =============================================================================


def _validate_new_item(fields: Mapping[str, Any], actor: Any) -> List[str]:
    """Collect every problem with a create request."""
    errors = []

    for key in fields:
        if key in ITEM_MANAGED_FIELDS:
            errors.append(f"{key}: Cannot be set directly")
        elif key not in ITEM_TEXT_FIELDS and key != "quantity":
            errors.append(f"{key}: Unknown field")

    for name in ITEM_TEXT_FIELDS:
        is_valid, error = validate_required_string(fields.get(name), name)
        if not is_valid:
            errors.append(error)

    if fields.get("quantity") is None:
        errors.append(f"quantity: {ERROR_REQUIRED_FIELD}")
    else:
        is_valid, error = validate_non_negative_integer(fields["quantity"], "quantity")
        if not is_valid:
            errors.append(error)

    is_valid, error = validate_actor(actor)
    if not is_valid:
        errors.append(error)

    return errors


def _validate_patch(patch: ItemPatch, actor: Any) -> List[str]:
    """Collect every problem with the fields present in a patch."""
    errors = []

    for name in patch.changed_fields():
        value = getattr(patch, name)
        if name == "quantity":
            is_valid, error = validate_non_negative_integer(value, "quantity")
        else:
            is_valid, error = validate_required_string(value, name)
        if not is_valid:
            errors.append(error)

    is_valid, error = validate_actor(actor)
    if not is_valid:
        errors.append(error)

    return errors


def _mismatch(item_id: int, item_name: str, quantity: int, transaction_net: int) -> Dict[str, Any]:
    return {
        "item_id": item_id,
        "item_name": item_name,
        "quantity": quantity,
        "transaction_net": transaction_net,
        "difference": quantity - transaction_net,
    }


def _find_index(items: List[Item], item_id: int) -> int:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    raise ItemNotFound(item_id)


# =============================================================================
# Ledger
# =============================================================================


class InventoryLedger:
    """
    Owns the item collection and emits audit transactions.

    All mutations go through this class. Share one CollectionLocks instance
    between ledgers that use the same store (one ledger per store is the
    normal setup).

    Attributes:
        transactions: Read access to the TransactionLog this ledger appends to
    """

    def __init__(
        self,
        store: StoreAdapter,
        locks: Optional[CollectionLocks] = None,
        clock: Clock = utc_now,
        items_collection: str = ITEMS_COLLECTION,
        transactions_collection: str = TRANSACTIONS_COLLECTION,
    ):
        """
        Initialize the ledger.

        Args:
            store: Store adapter holding both collections
            locks: Shared lock registry; a private one if None
            clock: Callable returning the current aware datetime
            items_collection: Collection name for items
            transactions_collection: Collection name for transactions
        """
        self._store = store
        self._locks = locks or CollectionLocks()
        self._clock = clock
        self._items_collection = items_collection
        self._items_lock = self._locks.lock_for(items_collection)
        self._transactions = TransactionLog(store, self._locks, transactions_collection)

    @property
    def transactions(self) -> TransactionLog:
        return self._transactions

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_items(self) -> List[Item]:
        """
        All items in persisted insertion order.

        Raises:
            StorageError: If the item collection cannot be read
        """
        return self._read_items()

    def get_item(self, item_id: int) -> OperationResult[Item]:
        """Look up one item by id."""

        def _get_item_impl() -> Item:
            items = self._read_items()
            return items[_find_index(items, item_id)]

        return self._run("get_item", _get_item_impl, level=logging.DEBUG, item_id=item_id)

    def search_items(self, query: str) -> List[Item]:
        """
        Case-insensitive search across name, make, model, specification, rack and bin.

        Args:
            query: Text to look for; a blank query returns every item

        Returns:
            Matching items in insertion order
        """
        items = self._read_items()
        if not query or not query.strip():
            return items
        return [item for item in items if item.matches(query)]

    def reconcile(self) -> List[Dict[str, Any]]:
        """
        Compare each item's quantity with the net of its transactions.

        Use after a PartialWriteError to find the items whose audit trail
        is out of step. Items that no longer exist are checked too: their
        added, taken and deleted transactions must net to zero, so a delete
        whose "deleted" transaction was lost shows up with quantity 0.

        Returns:
            List of dicts for mismatched items with keys item_id, item_name,
            quantity, transaction_net and difference (quantity - net).
            Existing items come first in item order, then deleted ones by id.
        """
        with self._items_lock:
            items = self._read_items()
            transactions = self._transactions.list_transactions()

        # Net stock per item id (added - taken) and what is left after deletion
        net: Dict[int, int] = {}
        remaining: Dict[int, int] = {}
        last_name: Dict[int, str] = {}
        for transaction in transactions:
            item_id = transaction.item_id
            if transaction.type in (TRANSACTION_ADDED, TRANSACTION_TAKEN):
                net[item_id] = net.get(item_id, 0) + transaction.signed_quantity
            remaining[item_id] = remaining.get(item_id, 0) + transaction.signed_quantity
            last_name[item_id] = transaction.item_name

        mismatches = []
        for item in items:
            transaction_net = net.get(item.id, 0)
            if transaction_net != item.quantity:
                mismatches.append(_mismatch(item.id, item.name, item.quantity, transaction_net))

        present = {item.id for item in items}
        for item_id in sorted(remaining):
            if item_id not in present and remaining[item_id] != 0:
                mismatches.append(
                    _mismatch(item_id, last_name[item_id], 0, remaining[item_id])
                )

        if mismatches:
            log_operation(
                logger,
                operation="reconcile",
                outcome="mismatch",
                level=logging.WARNING,
                item_ids=[m["item_id"] for m in mismatches],
            )
        return mismatches

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create_item(self, fields: Mapping[str, Any], actor: str) -> OperationResult[Item]:
        """
        Create an item and record its initial stock.

        Transactions always carry a positive quantity, so an item created
        with quantity 0 gets no "added" transaction.

        Args:
            fields: name, make, model, specification, rack, bin (non-empty
                strings) and quantity (integer >= 0)
            actor: Authenticated user making the change

        Returns:
            OperationResult with the new Item. Errors:
            - ValidationError: missing/blank fields, bad quantity, unknown keys
            - StorageError: item collection could not be written
            - PartialWriteError: item written, "added" transaction not
        """
        return self._run(
            "create_item",
            lambda: self._create_item_impl(fields, actor),
            actor=actor,
        )

    def _create_item_impl(self, fields: Mapping[str, Any], actor: str) -> Item:
        errors = _validate_new_item(fields, actor)
        if errors:
            raise ValidationError(errors)

        with self._items_lock:
            items = self._read_items()
            now = to_iso(self._clock())
            item = Item(
                id=next_id(items),
                name=fields["name"],
                make=fields["make"],
                model=fields["model"],
                specification=fields["specification"],
                rack=fields["rack"],
                bin=fields["bin"],
                quantity=fields["quantity"],
                created_at=now,
                updated_at=now,
                updated_by=actor,
            )
            items.append(item)
            self._write_items(items)

            if item.quantity > 0:
                self._append_transaction(
                    "create_item", item, TRANSACTION_ADDED, item.quantity, actor, now
                )
        return item

    def update_item(
        self,
        item_id: int,
        patch: Union[ItemPatch, Mapping[str, Any]],
        actor: str,
    ) -> OperationResult[Item]:
        """
        Merge a partial update into an item.

        If the merged quantity differs from the previous one, one "added"
        or "taken" transaction for the absolute difference is appended.

        Args:
            item_id: Item to update
            patch: ItemPatch, or a mapping converted with ItemPatch.from_mapping
            actor: Authenticated user making the change

        Returns:
            OperationResult with the updated Item. Errors:
            - NotFoundError: no item with item_id
            - ValidationError: negative quantity, blank text, unknown keys
            - StorageError / PartialWriteError: as for create_item
        """
        return self._run(
            "update_item",
            lambda: self._update_item_impl(item_id, patch, actor),
            item_id=item_id,
            actor=actor,
        )

    def _update_item_impl(
        self,
        item_id: int,
        patch: Union[ItemPatch, Mapping[str, Any]],
        actor: str,
    ) -> Item:
        with self._items_lock:
            items = self._read_items()
            index = _find_index(items, item_id)

            if not isinstance(patch, ItemPatch):
                patch = ItemPatch.from_mapping(patch)
            errors = _validate_patch(patch, actor)
            if errors:
                raise ValidationError(errors)

            current = items[index]
            now = to_iso(self._clock())
            updated = patch.apply_to(current, updated_at=now, updated_by=actor)
            items[index] = updated
            self._write_items(items)

            delta = updated.quantity - current.quantity
            if delta > 0:
                self._append_transaction(
                    "update_item", updated, TRANSACTION_ADDED, delta, actor, now
                )
            elif delta < 0:
                self._append_transaction(
                    "update_item", updated, TRANSACTION_TAKEN, -delta, actor, now
                )
        return updated

    def adjust_quantity(self, item_id: int, delta: int, actor: str) -> OperationResult[Item]:
        """
        Add (delta > 0) or take (delta < 0) stock relative to the current quantity.

        The current quantity is read under the item lock, so concurrent
        adjustments never overwrite each other.

        Returns:
            OperationResult with the updated Item. Errors as for update_item;
            taking more than is on hand is a ValidationError.
        """
        return self._run(
            "adjust_quantity",
            lambda: self._adjust_quantity_impl(item_id, delta, actor),
            item_id=item_id,
            actor=actor,
            delta=delta,
        )

    def _adjust_quantity_impl(self, item_id: int, delta: int, actor: str) -> Item:
        with self._items_lock:
            items = self._read_items()
            current = items[_find_index(items, item_id)]

            is_valid, error = validate_integer(delta, "delta")
            if not is_valid:
                raise ValidationError([error])
            if current.quantity + delta < 0:
                raise ValidationError([
                    f"quantity: Cannot take {-delta}, only {current.quantity} on hand"
                ])

            return self._update_item_impl(
                item_id, ItemPatch(quantity=current.quantity + delta), actor
            )

    def delete_item(self, item_id: int, actor: str) -> OperationResult[Item]:
        """
        Remove an item and record the stock that left with it.

        Deleting an item that holds 0 units appends no "deleted" transaction.

        Args:
            item_id: Item to delete
            actor: Authenticated user making the change

        Returns:
            OperationResult with the removed Item. Errors:
            - NotFoundError: no item with item_id
            - ValidationError: blank actor
            - StorageError / PartialWriteError: as for create_item
        """
        return self._run(
            "delete_item",
            lambda: self._delete_item_impl(item_id, actor),
            item_id=item_id,
            actor=actor,
        )

    def _delete_item_impl(self, item_id: int, actor: str) -> Item:
        with self._items_lock:
            items = self._read_items()
            index = _find_index(items, item_id)

            is_valid, error = validate_actor(actor)
            if not is_valid:
                raise ValidationError([error])

            removed = items.pop(index)
            self._write_items(items)

            if removed.quantity > 0:
                now = to_iso(self._clock())
                self._append_transaction(
                    "delete_item", removed, TRANSACTION_DELETED, removed.quantity, actor, now
                )
        return removed

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _read_items(self) -> List[Item]:
        records = self._store.read(self._items_collection)
        try:
            return [Item.from_record(record) for record in records]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(
                f"Malformed record in collection '{self._items_collection}'",
                original_error=e,
            )

    def _write_items(self, items: List[Item]) -> None:
        if not self._store.write(self._items_collection, [item.to_record() for item in items]):
            raise StorageError(f"Failed to write collection '{self._items_collection}'")

    def _append_transaction(
        self,
        operation: str,
        item: Item,
        transaction_type: str,
        quantity: int,
        actor: str,
        timestamp: str,
    ) -> None:
        """Append after a successful item write. Caller holds the item lock."""
        try:
            self._transactions.record(
                item_id=item.id,
                item_name=item.name,
                type=transaction_type,
                quantity=quantity,
                user=actor,
                timestamp=timestamp,
            )
        except ServiceError as e:
            raise PartialWriteError(operation, item.id, original_error=e) from e

    def _run(
        self,
        operation: str,
        impl: Callable[[], Any],
        level: int = logging.INFO,
        **context: Any,
    ) -> OperationResult:
        """Run an operation and convert service errors into a failed result."""
        try:
            value = impl()
        except ValidationError as e:
            log_operation(logger, operation, "validation_failed", errors=e.errors, **context)
            return OperationResult.failure(e)
        except NotFoundError as e:
            log_operation(logger, operation, "not_found", **context)
            return OperationResult.failure(e)
        except PartialWriteError as e:
            log_operation(
                logger,
                operation,
                "partial_write",
                level=logging.ERROR,
                error=str(e),
                partial=True,
                **context,
            )
            return OperationResult.failure(e)
        except StorageError as e:
            log_operation(
                logger, operation, "storage_failed", level=logging.ERROR, error=str(e), **context
            )
            return OperationResult.failure(e)

        if isinstance(value, Item):
            context.setdefault("item_id", value.id)
        log_operation(logger, operation, "success", level=level, **context)
        return OperationResult.ok(value)
