"""
Models package.

Item and Transaction are the ledger's records; LedgerRecord is the
SQLAlchemy table used by the SQL store backend.
"""

from .base import Base
from .item import Item, ItemPatch, UNSET
from .transaction import Transaction
from .ledger_record import LedgerRecord

__all__ = [
    "Base",
    "Item",
    "ItemPatch",
    "UNSET",
    "Transaction",
    "LedgerRecord",
]
