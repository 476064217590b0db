"""
Transaction model - immutable audit record of one quantity-changing event.

Transactions are append-only. item_name is a snapshot copied when the
transaction is written so the history stays readable after the item
itself has been deleted.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from ..utils.datetime_utils import parse_timestamp


@dataclass(frozen=True)
class Transaction:
    """
    Audit record for an inventory change.

    Attributes:
        id: Strictly increasing identifier, assigned in insertion order
        item_id: Item the change applied to (may no longer exist)
        item_name: Item name at the time of the change
        type: "added", "taken" or "deleted"
        quantity: Magnitude of the change (> 0)
        user: Actor that made the change
        timestamp: ISO-8601 UTC timestamp
    """

    id: int
    item_id: int
    item_name: str
    type: str
    quantity: int
    user: str
    timestamp: str

    def to_record(self) -> Dict[str, Any]:
        """Convert to the persisted mapping."""
        return {
            "id": self.id,
            "itemId": self.item_id,
            "itemName": self.item_name,
            "type": self.type,
            "quantity": self.quantity,
            "user": self.user,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Transaction":
        """Build a Transaction from a persisted mapping."""
        return cls(
            id=int(record["id"]),
            item_id=int(record["itemId"]),
            item_name=record.get("itemName", ""),
            type=record["type"],
            quantity=int(record["quantity"]),
            user=record.get("user", ""),
            timestamp=record.get("timestamp", ""),
        )

    @property
    def occurred_at(self) -> Optional[datetime]:
        """Parsed timestamp, or None if the stored value is malformed."""
        return parse_timestamp(self.timestamp)

    @property
    def signed_quantity(self) -> int:
        """Quantity change as a signed delta (deleted counts as removal)."""
        if self.type == "added":
            return self.quantity
        return -self.quantity

    def __repr__(self) -> str:
        return (
            f"Transaction(id={self.id}, item_id={self.item_id}, "
            f"type='{self.type}', quantity={self.quantity})"
        )
