"""
Tests for the analytics service.

Tests cover:
- summarize() on empty input and on the monthly scenario
- Window boundaries and malformed timestamps
- recent_transactions ordering and limit
- stock_status()
- AnalyticsAggregator snapshot and month selection
"""

from datetime import datetime, timezone

import pytest

from rack_tracker.models.item import Item
from rack_tracker.models.transaction import Transaction
from rack_tracker.services.analytics_service import (
    AnalyticsAggregator,
    stock_status,
    summarize,
)
from rack_tracker.services.exceptions import StorageError
from rack_tracker.services.store import MemoryStore
from rack_tracker.utils.datetime_utils import month_window

MARCH = month_window(2025, 3)


def make_item(id, quantity, name=None):
    return Item(
        id=id,
        name=name or f"Item {id}",
        make="Make",
        model="Model",
        specification="Spec",
        rack="A",
        bin=str(id),
        quantity=quantity,
        created_at="2025-03-01T00:00:00.000Z",
        updated_at="2025-03-01T00:00:00.000Z",
        updated_by="pasu",
    )


def make_txn(id, type="added", quantity=1, user="a", timestamp="2025-03-15T12:00:00.000Z"):
    return Transaction(
        id=id,
        item_id=1,
        item_name="Item 1",
        type=type,
        quantity=quantity,
        user=user,
        timestamp=timestamp,
    )


class TestSummarize:
    """Tests for summarize()."""

    def test_empty_collections(self):
        assert summarize([], [], *MARCH).to_dict() == {
            "totalItems": 0,
            "lowStockItems": 0,
            "totalTransactions": 0,
            "itemsConsumed": 0,
            "itemsAdded": 0,
            "activeUsers": 0,
            "recentTransactions": [],
            "lowStockAlerts": [],
        }

    def test_monthly_scenario(self):
        items = [make_item(1, 3), make_item(2, 10)]
        transactions = [
            make_txn(1, "added", 5, user="a"),
            make_txn(2, "taken", 2, user="b"),
        ]

        summary = summarize(items, transactions, *MARCH)

        assert summary.total_items == 2
        assert summary.low_stock_items == 1
        assert summary.items_added == 5
        assert summary.items_consumed == 2
        assert summary.active_users == 2
        assert summary.total_transactions == 2
        assert [item.id for item in summary.low_stock_alerts] == [1]

    def test_deleted_counts_as_transaction_but_not_consumption(self):
        summary = summarize([], [make_txn(1, "deleted", 12)], *MARCH)
        assert summary.total_transactions == 1
        assert summary.items_consumed == 0
        assert summary.items_added == 0

    def test_low_stock_threshold_is_inclusive(self):
        items = [make_item(1, 5), make_item(2, 6), make_item(3, 0)]
        assert summarize(items, [], *MARCH).low_stock_items == 2

    def test_custom_threshold(self):
        items = [make_item(1, 8)]
        assert summarize(items, [], *MARCH, low_stock_threshold=10).low_stock_items == 1

    def test_window_is_half_open(self):
        transactions = [
            make_txn(1, timestamp="2025-02-28T23:59:59.999Z"),
            make_txn(2, timestamp="2025-03-01T00:00:00.000Z"),
            make_txn(3, timestamp="2025-03-31T23:59:59.999Z"),
            make_txn(4, timestamp="2025-04-01T00:00:00.000Z"),
        ]
        summary = summarize([], transactions, *MARCH)
        assert summary.total_transactions == 2
        assert summary.items_added == 2

    def test_same_user_counted_once(self):
        transactions = [make_txn(i, user="a") for i in range(1, 4)]
        assert summarize([], transactions, *MARCH).active_users == 1

    def test_naive_window_treated_as_utc(self):
        start = datetime(2025, 3, 1)
        end = datetime(2025, 4, 1)
        assert summarize([], [make_txn(1)], start, end).total_transactions == 1

    def test_malformed_timestamp_excluded_and_logged(self, caplog):
        transactions = [make_txn(1), make_txn(2, timestamp="yesterday")]
        with caplog.at_level("WARNING"):
            summary = summarize([], transactions, *MARCH)
        assert summary.total_transactions == 1
        assert "malformed_timestamps" in caplog.text
        # Still listed, as the oldest entry
        assert [t.id for t in summary.recent_transactions] == [1, 2]

    def test_offset_timestamps_compared_as_instants(self):
        # 2025-04-01T01:00+02:00 is 2025-03-31T23:00Z
        summary = summarize([], [make_txn(1, timestamp="2025-04-01T01:00:00+02:00")], *MARCH)
        assert summary.total_transactions == 1


class TestRecentTransactions:
    """Tests for the recent_transactions field."""

    def test_fifteen_stored_returns_ten_newest_first(self):
        transactions = [
            make_txn(i, timestamp=f"2025-03-{i:02d}T08:00:00.000Z") for i in range(1, 16)
        ]
        recent = summarize([], transactions, *MARCH).recent_transactions
        assert [t.id for t in recent] == list(range(15, 5, -1))

    def test_stable_on_ties(self):
        transactions = [make_txn(i, timestamp="2025-03-02T08:00:00.000Z") for i in range(1, 4)]
        transactions.append(make_txn(4, timestamp="2025-03-01T08:00:00.000Z"))
        recent = summarize([], transactions, *MARCH).recent_transactions
        assert [t.id for t in recent] == [1, 2, 3, 4]

    def test_not_limited_to_window(self):
        transactions = [make_txn(1, timestamp="2024-12-01T00:00:00.000Z")]
        summary = summarize([], transactions, *MARCH)
        assert summary.total_transactions == 0
        assert [t.id for t in summary.recent_transactions] == [1]

    def test_serialised_with_persisted_names(self):
        record = summarize([], [make_txn(1)], *MARCH).to_dict()["recentTransactions"][0]
        assert record["itemId"] == 1
        assert record["itemName"] == "Item 1"


class TestStockStatus:
    """Tests for stock_status()."""

    @pytest.mark.parametrize(
        "quantity,expected",
        [
            (0, "Out of Stock"),
            (1, "Low Stock"),
            (5, "Low Stock"),
            (6, "Medium Stock"),
            (20, "Medium Stock"),
            (21, "In Stock"),
        ],
    )
    def test_levels(self, quantity, expected):
        assert stock_status(quantity) == expected


class TestAnalyticsAggregator:
    """Tests for AnalyticsAggregator."""

    @pytest.fixture
    def store(self):
        return MemoryStore({
            "inventory": [make_item(1, 3).to_record(), make_item(2, 10).to_record()],
            "transactions": [
                make_txn(1, "added", 5, user="a").to_record(),
                make_txn(2, "taken", 2, user="b").to_record(),
            ],
        })

    def test_summarize_reads_store(self, store):
        summary = AnalyticsAggregator(store).summarize(*MARCH)
        assert summary.total_items == 2
        assert summary.items_added == 5
        assert summary.items_consumed == 2

    def test_summarize_month(self, store):
        assert AnalyticsAggregator(store).summarize_month(2025, 3).total_transactions == 2
        assert AnalyticsAggregator(store).summarize_month(2025, 4).total_transactions == 0

    def test_summarize_month_requires_both_parts(self, store):
        with pytest.raises(ValueError):
            AnalyticsAggregator(store).summarize_month(year=2025)

    def test_summarize_month_rejects_bad_month(self, store):
        with pytest.raises(ValueError):
            AnalyticsAggregator(store).summarize_month(2025, 13)

    def test_summarize_current_month(self, store):
        summary = AnalyticsAggregator(store).summarize_month()
        assert summary.total_items == 2

    def test_empty_store(self):
        summary = AnalyticsAggregator(MemoryStore()).summarize(*MARCH)
        assert summary.to_dict()["totalItems"] == 0

    def test_recent_limit(self, store):
        summary = AnalyticsAggregator(store, recent_limit=1).summarize(*MARCH)
        assert len(summary.recent_transactions) == 1

    def test_malformed_record_raises_storage_error(self):
        store = MemoryStore({"inventory": [{"id": 1}]})
        with pytest.raises(StorageError):
            AnalyticsAggregator(store).snapshot()

    def test_snapshot_returns_models(self, store):
        items, transactions = AnalyticsAggregator(store).snapshot()
        assert items[0] == make_item(1, 3)
        assert transactions[1].type == "taken"

    def test_window_bounds_accept_aware_datetimes(self, store):
        start = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)
        end = datetime(2025, 3, 15, 12, 0, 1, tzinfo=timezone.utc)
        assert AnalyticsAggregator(store).summarize(start, end).total_transactions == 2
