"""
Item model for tracking stock held in rack/bin locations.

Items are plain records owned by the inventory ledger. They are persisted
through a store adapter as mappings with camelCase keys, which are a
compatibility contract with existing consumers.

ItemPatch is the typed partial update: each field is independently present
(a value) or absent (UNSET), so validation stays exhaustive.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Mapping

from ..utils.constants import ITEM_TEXT_FIELDS, ITEM_MANAGED_FIELDS


class _Unset:
    """Marker for a patch field that was not supplied."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass(frozen=True)
class Item:
    """
    An inventory item stored at a rack/bin location.

    Attributes:
        id: Unique identifier (>= 1), allocated by the ledger
        name: Display name
        make: Manufacturer
        model: Manufacturer model
        specification: Free-form specification (size, rating, ...)
        rack: Rack location
        bin: Bin location within the rack
        quantity: Units on hand (>= 0)
        created_at: ISO-8601 UTC creation timestamp
        updated_at: ISO-8601 UTC timestamp of the last change
        updated_by: Actor that made the last change
    """

    id: int
    name: str
    make: str
    model: str
    specification: str
    rack: str
    bin: str
    quantity: int
    created_at: str
    updated_at: str
    updated_by: str

    def to_record(self) -> Dict[str, Any]:
        """Convert to the persisted mapping."""
        return {
            "id": self.id,
            "name": self.name,
            "make": self.make,
            "model": self.model,
            "specification": self.specification,
            "rack": self.rack,
            "bin": self.bin,
            "quantity": self.quantity,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "updatedBy": self.updated_by,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Item":
        """
        Build an Item from a persisted mapping.

        Raises:
            KeyError: If a required key is missing
        """
        return cls(
            id=int(record["id"]),
            name=record["name"],
            make=record["make"],
            model=record["model"],
            specification=record["specification"],
            rack=record["rack"],
            bin=record["bin"],
            quantity=int(record["quantity"]),
            created_at=record.get("createdAt", ""),
            updated_at=record.get("updatedAt", ""),
            updated_by=record.get("updatedBy", ""),
        )

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match across the descriptive fields."""
        needle = query.strip().lower()
        return any(needle in getattr(self, name).lower() for name in ITEM_TEXT_FIELDS)

    def __repr__(self) -> str:
        return (
            f"Item(id={self.id}, name='{self.name}', "
            f"quantity={self.quantity}, location='{self.rack}/{self.bin}')"
        )


_PATCHABLE_FIELDS = set(ITEM_TEXT_FIELDS) | {"quantity"}


@dataclass(frozen=True)
class ItemPatch:
    """
    Partial update for an Item.

    Fields left as UNSET are not touched by the merge.

    Example:
        >>> patch = ItemPatch(quantity=4)
        >>> patch.changed_fields()
        ['quantity']
    """

    name: Any = field(default=UNSET)
    make: Any = field(default=UNSET)
    model: Any = field(default=UNSET)
    specification: Any = field(default=UNSET)
    rack: Any = field(default=UNSET)
    bin: Any = field(default=UNSET)
    quantity: Any = field(default=UNSET)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ItemPatch":
        """
        Build a patch from a request-style mapping.

        Raises:
            ValidationError: If the mapping contains managed or unknown keys
        """
        from ..services.exceptions import ValidationError

        errors: List[str] = []
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in ITEM_MANAGED_FIELDS:
                errors.append(f"{key}: Cannot be changed directly")
            elif key in _PATCHABLE_FIELDS:
                values[key] = value
            else:
                errors.append(f"{key}: Unknown field")

        if errors:
            raise ValidationError(errors)
        return cls(**values)

    def changed_fields(self) -> List[str]:
        """Names of the fields present in this patch."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not UNSET]

    def apply_to(self, item: Item, updated_at: str, updated_by: str) -> Item:
        """Return a copy of `item` with the present fields merged in and the stamp updated."""
        changes = {name: getattr(self, name) for name in self.changed_fields()}
        return replace(item, updated_at=updated_at, updated_by=updated_by, **changes)
