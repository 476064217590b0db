"""Identity allocation for collection records.

Identifiers are derived from the current contents of a collection, so the
caller must hold that collection's lock from the read until the write that
uses the new identifier.
"""

from typing import Any, Iterable


def _record_id(record: Any) -> int:
    if isinstance(record, dict):
        return int(record["id"])
    return int(record.id)


def next_id(records: Iterable[Any]) -> int:
    """
    Allocate the next identifier for a collection.

    Args:
        records: Current records, as mappings with an "id" key or objects
            with an `id` attribute

    Returns:
        max(existing ids) + 1, or 1 if the collection is empty

    Example:
        >>> next_id([])
        1
        >>> next_id([{"id": 3}, {"id": 7}])
        8
    """
    return max((_record_id(record) for record in records), default=0) + 1
