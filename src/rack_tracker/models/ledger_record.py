"""
LedgerRecord model - one persisted record of a named collection.

The SQL store backend keeps every collection in this single table. A
collection is the ordered list of rows sharing a `collection` value,
ordered by `position`; the record itself is stored as JSON text so the
store stays agnostic of what the ledger keeps in it.
"""

import json
from typing import Any, Dict

from sqlalchemy import Column, Integer, String, Text, UniqueConstraint, Index

from .base import Base


class LedgerRecord(Base):
    """
    A single record within a collection.

    Attributes:
        collection: Collection name (e.g. "inventory", "transactions")
        position: Zero-based position within the collection
        payload: JSON-encoded record
    """

    __tablename__ = "ledger_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    collection = Column(String(50), nullable=False)
    position = Column(Integer, nullable=False)
    payload = Column(Text, nullable=False)

    __table_args__ = (
        UniqueConstraint("collection", "position", name="uq_ledger_record_position"),
        Index("idx_ledger_record_collection", "collection"),
    )

    @classmethod
    def from_dict(cls, collection: str, position: int, record: Dict[str, Any]) -> "LedgerRecord":
        """Create a row for `record` at `position` in `collection`."""
        return cls(collection=collection, position=position, payload=json.dumps(record))

    def to_dict(self) -> Dict[str, Any]:
        """Decode the stored record."""
        return json.loads(self.payload)

    def __repr__(self) -> str:
        """String representation of the record row."""
        return (
            f"LedgerRecord(id={self.id}, collection='{self.collection}', "
            f"position={self.position})"
        )
