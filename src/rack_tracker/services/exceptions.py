"""Service layer exception classes for Rack Tracker.

This module defines all custom exceptions used by the service layer to provide
consistent error handling across the application. Ledger operations do not
raise these to their callers; they carry them inside an OperationResult.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    ├── NotFoundError
    │   └── ItemNotFound
    └── StorageError
        └── PartialWriteError
"""

from typing import List, Optional


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions should inherit from this class.
    """

    kind = "service"


class ValidationError(ServiceError):
    """Raised when input validation fails. No state was changed."""

    kind = "validation"

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        error_msg = "; ".join(self.errors)
        super().__init__(f"Validation failed: {error_msg}")


class NotFoundError(ServiceError):
    """Raised when a referenced record does not exist."""

    kind = "not_found"


class ItemNotFound(NotFoundError):
    """Raised when an inventory item cannot be found by ID."""

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"Item with ID {item_id} not found")


class StorageError(ServiceError):
    """Raised when the store adapter fails to read or write a collection."""

    kind = "storage"
    partial = False

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Storage error: {message}")


class PartialWriteError(StorageError):
    """
    Raised when the item write succeeded but the transaction append failed.

    The item collection and the transaction log now disagree. Nothing is
    rolled back; operators reconcile manually (see InventoryLedger.reconcile).
    """

    kind = "partial"
    partial = True
    TAG = "partial: item updated, transaction log not updated"

    def __init__(
        self,
        operation: str,
        item_id: int,
        original_error: Optional[Exception] = None,
    ):
        self.operation = operation
        self.item_id = item_id
        super().__init__(f"{self.TAG} ({operation} item {item_id})", original_error)
