"""
Analytics Service - summaries derived from items and the transaction log.

summarize() is a pure function of its inputs. AnalyticsAggregator reads a
point-in-time copy of both collections through the store adapter and never
takes the ledger's locks, so summaries may be slightly stale but never
block writers.

Summary fields (consumer names in parentheses):
- total_items (totalItems): number of items
- low_stock_items (lowStockItems): items with quantity <= threshold
- low_stock_alerts (lowStockAlerts): those items, in item order
- total_transactions (totalTransactions): transactions in the window
- items_consumed (itemsConsumed): sum of "taken" quantities in the window
- items_added (itemsAdded): sum of "added" quantities in the window
- active_users (activeUsers): distinct users with a transaction in the window
- recent_transactions (recentTransactions): newest transactions overall

Transactions whose timestamp cannot be parsed are left out of the window and
sort as the earliest possible instant in recent_transactions. That sort is
stable: transactions with equal timestamps keep their insertion order.
"""

import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from ..models.item import Item
from ..models.transaction import Transaction
from ..utils.constants import (
    ITEMS_COLLECTION,
    LOW_STOCK_THRESHOLD,
    MEDIUM_STOCK_THRESHOLD,
    RECENT_TRANSACTIONS_LIMIT,
    STOCK_STATUS_IN,
    STOCK_STATUS_LOW,
    STOCK_STATUS_MEDIUM,
    STOCK_STATUS_OUT,
    TRANSACTIONS_COLLECTION,
    TRANSACTION_ADDED,
    TRANSACTION_TAKEN,
)
from ..utils.datetime_utils import current_month_window, ensure_aware, month_window
from .dto import Summary
from .exceptions import StorageError
from .logging_utils import get_service_logger, log_operation
from .store import StoreAdapter
from .transaction_log import sort_recent

logger = get_service_logger(__name__)


def stock_status(quantity: int) -> str:
    """
    Classify a stock level.

    Returns:
        "Out of Stock" (0), "Low Stock" (<= 5), "Medium Stock" (<= 20)
        or "In Stock"

    Example:
        >>> stock_status(3)
        'Low Stock'
    """
    if quantity <= 0:
        return STOCK_STATUS_OUT
    if quantity <= LOW_STOCK_THRESHOLD:
        return STOCK_STATUS_LOW
    if quantity <= MEDIUM_STOCK_THRESHOLD:
        return STOCK_STATUS_MEDIUM
    return STOCK_STATUS_IN


def summarize(
    items: Sequence[Item],
    transactions: Sequence[Transaction],
    window_start: datetime,
    window_end: datetime,
    low_stock_threshold: int = LOW_STOCK_THRESHOLD,
    recent_limit: int = RECENT_TRANSACTIONS_LIMIT,
) -> Summary:
    """
    Compute the analytics summary for the half-open window [window_start, window_end).

    Args:
        items: Current items
        transactions: Full transaction history in insertion order
        window_start: Inclusive window start (naive values are treated as UTC)
        window_end: Exclusive window end
        low_stock_threshold: Quantity at or below which an item is low on stock
        recent_limit: Number of transactions in recent_transactions

    Returns:
        Summary; empty inputs give zero counts and empty lists

    Example:
        >>> start, end = month_window(2025, 3)
        >>> summarize([], [], start, end).to_dict()["totalItems"]
        0
    """
    window_start = ensure_aware(window_start)
    window_end = ensure_aware(window_end)

    windowed = []
    malformed = 0
    for transaction in transactions:
        occurred_at = transaction.occurred_at
        if occurred_at is None:
            malformed += 1
            continue
        if window_start <= occurred_at < window_end:
            windowed.append(transaction)

    if malformed:
        log_operation(
            logger,
            operation="summarize",
            outcome="malformed_timestamps",
            level=logging.WARNING,
            count=malformed,
        )

    low_stock = [item for item in items if item.quantity <= low_stock_threshold]

    return Summary(
        total_items=len(items),
        low_stock_items=len(low_stock),
        total_transactions=len(windowed),
        items_consumed=sum(t.quantity for t in windowed if t.type == TRANSACTION_TAKEN),
        items_added=sum(t.quantity for t in windowed if t.type == TRANSACTION_ADDED),
        active_users=len({t.user for t in windowed}),
        recent_transactions=sort_recent(transactions)[:recent_limit],
        low_stock_alerts=low_stock,
    )


class AnalyticsAggregator:
    """Read-only analytics over a store's item and transaction collections."""

    def __init__(
        self,
        store: StoreAdapter,
        items_collection: str = ITEMS_COLLECTION,
        transactions_collection: str = TRANSACTIONS_COLLECTION,
        low_stock_threshold: int = LOW_STOCK_THRESHOLD,
        recent_limit: int = RECENT_TRANSACTIONS_LIMIT,
    ):
        self._store = store
        self._items_collection = items_collection
        self._transactions_collection = transactions_collection
        self._low_stock_threshold = low_stock_threshold
        self._recent_limit = recent_limit

    def snapshot(self) -> Tuple[List[Item], List[Transaction]]:
        """
        Read a point-in-time copy of items and transactions.

        Raises:
            StorageError: If either collection cannot be read or holds
                malformed records
        """
        item_records = self._store.read(self._items_collection)
        transaction_records = self._store.read(self._transactions_collection)
        try:
            items = [Item.from_record(record) for record in item_records]
            transactions = [Transaction.from_record(record) for record in transaction_records]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError("Malformed record in analytics snapshot", original_error=e)
        return items, transactions

    def summarize(self, window_start: datetime, window_end: datetime) -> Summary:
        """
        Summary for the half-open window [window_start, window_end).

        Raises:
            StorageError: If the collections cannot be read
        """
        items, transactions = self.snapshot()
        summary = summarize(
            items,
            transactions,
            window_start,
            window_end,
            low_stock_threshold=self._low_stock_threshold,
            recent_limit=self._recent_limit,
        )
        log_operation(
            logger,
            operation="summarize",
            outcome="success",
            level=logging.DEBUG,
            total_items=summary.total_items,
            total_transactions=summary.total_transactions,
        )
        return summary

    def summarize_month(self, year: Optional[int] = None, month: Optional[int] = None) -> Summary:
        """
        Summary for a calendar month (UTC). Defaults to the current month.

        Raises:
            ValueError: If only one of year/month is given or month is out of range
        """
        if year is None and month is None:
            start, end = current_month_window()
        elif year is None or month is None:
            raise ValueError("year and month must be given together")
        else:
            start, end = month_window(year, month)
        return self.summarize(start, end)
