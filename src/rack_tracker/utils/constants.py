"""
Constants for the Rack Tracker application.

This module defines all system-wide constants including:
- Application metadata
- Collection names used by the store adapters
- Transaction types
- Stock level thresholds
- Validation messages
"""

from typing import List

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Rack Tracker"
APP_VERSION = "0.1.0"
DATABASE_FILENAME = "rack_tracker.db"

# ============================================================================
# Collections
# ============================================================================

ITEMS_COLLECTION = "inventory"
TRANSACTIONS_COLLECTION = "transactions"

ALL_COLLECTIONS: List[str] = [ITEMS_COLLECTION, TRANSACTIONS_COLLECTION]

# ============================================================================
# Transactions
# ============================================================================

TRANSACTION_ADDED = "added"
TRANSACTION_TAKEN = "taken"
TRANSACTION_DELETED = "deleted"

TRANSACTION_TYPES: List[str] = [
    TRANSACTION_ADDED,
    TRANSACTION_TAKEN,
    TRANSACTION_DELETED,
]

# ============================================================================
# Items
# ============================================================================

# Descriptive fields that must be non-empty on every item
ITEM_TEXT_FIELDS: List[str] = [
    "name",
    "make",
    "model",
    "specification",
    "rack",
    "bin",
]

# Fields set by the ledger, never by callers
ITEM_MANAGED_FIELDS: List[str] = ["id", "createdAt", "updatedAt", "updatedBy"]

MAX_TEXT_LENGTH = 200

# ============================================================================
# Analytics
# ============================================================================

LOW_STOCK_THRESHOLD = 5
MEDIUM_STOCK_THRESHOLD = 20
RECENT_TRANSACTIONS_LIMIT = 10

STOCK_STATUS_OUT = "Out of Stock"
STOCK_STATUS_LOW = "Low Stock"
STOCK_STATUS_MEDIUM = "Medium Stock"
STOCK_STATUS_IN = "In Stock"

# ============================================================================
# Error Messages
# ============================================================================

ERROR_REQUIRED_FIELD = "This field is required"
ERROR_INVALID_INTEGER = "Must be a whole number"
ERROR_INVALID_NON_NEGATIVE = "Cannot be negative"
ERROR_INVALID_POSITIVE = "Must be greater than zero"
ERROR_TEXT_TOO_LONG = f"Must be {MAX_TEXT_LENGTH} characters or less"
