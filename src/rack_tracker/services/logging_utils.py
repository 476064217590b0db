"""Service layer logging utilities.

Provides structured logging functions for service operations, enabling
consistent log format and context across the ledger, the transaction log
and the store backends.

Usage:
    from rack_tracker.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    log_operation(
        logger,
        operation="create_item",
        outcome="success",
        item_id=12,
        actor="pasu",
    )

    log_operation(
        logger,
        operation="update_item",
        outcome="validation_failed",
        item_id=12,
        errors=["quantity: Cannot be negative"],
    )
"""

import logging
from typing import Any


def get_service_logger(name: str) -> logging.Logger:
    """
    Get a logger configured for service operations.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger instance with the 'rack_tracker.services' prefix.

    Example:
        >>> logger = get_service_logger("rack_tracker.services.inventory_ledger")
        >>> logger.name
        'rack_tracker.services.inventory_ledger'
    """
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"rack_tracker.services.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    The context is passed via the 'extra' parameter for structured logging.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "create_item", "append")
        outcome: Outcome description (e.g., "success", "not_found", "storage_failed")
        level: Log level (default: INFO)
        **context: Additional context fields. Common fields:
            - item_id: Item being changed
            - transaction_id: Transaction appended
            - actor: Who made the change
            - error: Error message if outcome is a failure
    """
    extra = {
        "operation": operation,
        "outcome": outcome,
        **context,
    }
    logger.log(level, f"{operation}: {outcome}", extra=extra)
