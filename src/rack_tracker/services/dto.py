"""Data Transfer Objects for service layer.

This module provides the result types handed to outer layers:

- OperationResult: discriminated success/failure result of a ledger operation
- Summary: analytics summary with the persisted field names
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

from .exceptions import ServiceError

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Result of a ledger operation: a value on success, an error otherwise.

    The HTTP layer (or any other caller) maps `error_kind` to its own
    status codes instead of catching exceptions.

    Attributes:
        success: True if the operation completed
        value: Result value (None on failure)
        error: The ServiceError describing the failure (None on success)

    Examples:
        result = ledger.update_item(3, ItemPatch(quantity=4), actor="pasu")
        if result.success:
            print(result.value.quantity)
        elif result.error_kind == "not_found":
            ...
    """

    success: bool
    value: Optional[T] = None
    error: Optional[ServiceError] = None

    @classmethod
    def ok(cls, value: T) -> "OperationResult[T]":
        """Build a successful result."""
        return cls(success=True, value=value)

    @classmethod
    def failure(cls, error: ServiceError) -> "OperationResult[T]":
        """Build a failed result carrying `error`."""
        return cls(success=False, error=error)

    @property
    def error_kind(self) -> Optional[str]:
        """One of "validation", "not_found", "storage", "partial", or None on success."""
        if self.error is None:
            return None
        return self.error.kind

    @property
    def message(self) -> str:
        """Human readable error message (empty on success)."""
        return str(self.error) if self.error is not None else ""

    def unwrap(self) -> T:
        """Return the value, or raise the carried error.

        Raises:
            ServiceError: The error of a failed result
        """
        if not self.success:
            raise self.error
        return self.value

    def __bool__(self) -> bool:
        return self.success


@dataclass
class Summary:
    """Analytics summary for one time window.

    Attributes mirror the persisted/consumer field names returned by
    to_dict(): totalItems, lowStockItems, totalTransactions, itemsConsumed,
    itemsAdded, activeUsers, recentTransactions, lowStockAlerts.
    """

    total_items: int = 0
    low_stock_items: int = 0
    total_transactions: int = 0
    items_consumed: int = 0
    items_added: int = 0
    active_users: int = 0
    recent_transactions: List[Any] = field(default_factory=list)
    low_stock_alerts: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the consumer-facing mapping with records serialised."""
        return {
            "totalItems": self.total_items,
            "lowStockItems": self.low_stock_items,
            "totalTransactions": self.total_transactions,
            "itemsConsumed": self.items_consumed,
            "itemsAdded": self.items_added,
            "activeUsers": self.active_users,
            "recentTransactions": [t.to_record() for t in self.recent_transactions],
            "lowStockAlerts": [i.to_record() for i in self.low_stock_alerts],
        }
