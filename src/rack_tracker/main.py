"""
Command-line entry point for Rack Tracker.

Simple command-line interface over the inventory ledger and analytics.
Output is JSON on stdout; failures print the error to stderr and exit 1.

Usage Examples:
    # Create empty collections in the configured store
    rack-tracker init

    # Add an item
    rack-tracker add --actor pasu --name "Hex bolt" --make Bossard \\
        --model "ISO 4017" --specification M6x20 --rack A --bin 3 --quantity 40

    # Take two units out of item 1
    rack-tracker take 1 2 --actor kim

    # Summary for March 2025
    rack-tracker summary --year 2025 --month 3
"""

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from .services.analytics_service import AnalyticsAggregator, stock_status
from .services.dto import OperationResult
from .services.exceptions import StorageError
from .services.inventory_ledger import InventoryLedger
from .services.store import StoreAdapter, create_store
from .utils.config import get_config
from .utils.constants import ALL_COLLECTIONS, ITEM_TEXT_FIELDS

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.WARNING) -> None:
    """Configure root logging for CLI use."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def _emit_result(result: OperationResult) -> int:
    """Print a ledger result and return the exit code."""
    if result.success:
        _print_json(result.value.to_record())
        return 0
    print(f"ERROR ({result.error_kind}): {result.message}", file=sys.stderr)
    return 1


def _item_fields(args: argparse.Namespace) -> dict:
    fields = {name: getattr(args, name) for name in ITEM_TEXT_FIELDS}
    fields["quantity"] = args.quantity
    return fields


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        prog="rack-tracker",
        description="Inventory ledger for rack/bin stock",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at INFO level")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("init", help="Create empty collections")
    subparsers.add_parser("list", help="List all items")

    search_parser = subparsers.add_parser("search", help="Search items")
    search_parser.add_argument("query", help="Text to match in any descriptive field")

    add_parser = subparsers.add_parser("add", help="Create an item")
    add_parser.add_argument("--actor", required=True)
    for name in ITEM_TEXT_FIELDS:
        add_parser.add_argument(f"--{name}", required=True)
    add_parser.add_argument("--quantity", type=int, required=True)

    update_parser = subparsers.add_parser("update", help="Update fields of an item")
    update_parser.add_argument("item_id", type=int)
    update_parser.add_argument("--actor", required=True)
    for name in ITEM_TEXT_FIELDS:
        update_parser.add_argument(f"--{name}")
    update_parser.add_argument("--quantity", type=int)

    for command, help_text in (("take", "Take stock out"), ("restock", "Put stock back")):
        adjust_parser = subparsers.add_parser(command, help=help_text)
        adjust_parser.add_argument("item_id", type=int)
        adjust_parser.add_argument("amount", type=int)
        adjust_parser.add_argument("--actor", required=True)

    delete_parser = subparsers.add_parser("delete", help="Delete an item")
    delete_parser.add_argument("item_id", type=int)
    delete_parser.add_argument("--actor", required=True)

    history_parser = subparsers.add_parser("history", help="Show transactions, newest first")
    history_parser.add_argument("--item", dest="item_id", type=int)
    history_parser.add_argument("--limit", type=int)

    subparsers.add_parser("reconcile", help="List items whose quantity disagrees with history")

    summary_parser = subparsers.add_parser("summary", help="Monthly analytics summary")
    summary_parser.add_argument("--year", type=int)
    summary_parser.add_argument("--month", type=int)

    return parser


def run(args: argparse.Namespace, store: StoreAdapter) -> int:
    """Execute a parsed command against `store`. Returns the exit code."""
    ledger = InventoryLedger(store)

    if args.command == "init":
        store.initialize(*ALL_COLLECTIONS)
        print("Collections initialized")
        return 0

    if args.command in ("list", "search"):
        items = ledger.search_items(args.query) if args.command == "search" else ledger.list_items()
        _print_json([
            {**item.to_record(), "status": stock_status(item.quantity)} for item in items
        ])
        return 0

    if args.command == "add":
        return _emit_result(ledger.create_item(_item_fields(args), actor=args.actor))

    if args.command == "update":
        patch = {
            name: getattr(args, name)
            for name in ITEM_TEXT_FIELDS + ["quantity"]
            if getattr(args, name) is not None
        }
        return _emit_result(ledger.update_item(args.item_id, patch, actor=args.actor))

    if args.command in ("take", "restock"):
        if args.amount <= 0:
            print("ERROR (validation): amount must be greater than zero", file=sys.stderr)
            return 1
        delta = -args.amount if args.command == "take" else args.amount
        return _emit_result(ledger.adjust_quantity(args.item_id, delta, actor=args.actor))

    if args.command == "delete":
        return _emit_result(ledger.delete_item(args.item_id, actor=args.actor))

    if args.command == "history":
        if args.item_id is not None:
            transactions = list(reversed(ledger.transactions.for_item(args.item_id)))
            if args.limit is not None:
                transactions = transactions[: args.limit]
        else:
            transactions = ledger.transactions.recent(args.limit)
        _print_json([t.to_record() for t in transactions])
        return 0

    if args.command == "reconcile":
        _print_json(ledger.reconcile())
        return 0

    if args.command == "summary":
        aggregator = AnalyticsAggregator(store)
        _print_json(aggregator.summarize_month(args.year, args.month).to_dict())
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = get_config()
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    # Development runs log at DEBUG without needing -v
    if config.is_development:
        configure_logging(logging.DEBUG)
    else:
        configure_logging(logging.INFO if args.verbose else logging.WARNING)
    logger.info(f"Using {config!r}")

    try:
        return run(args, create_store(config))
    except StorageError as e:
        print(f"ERROR (storage): {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
