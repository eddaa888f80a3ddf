"""Item store contract and the in-process implementation.

The grouping services only talk to an ``ItemStore``. ``SQLiteItemStore``
(see ``items.py``) is the persistent implementation; ``MemoryItemStore``
keeps everything in a dict and is used by tests and embedding callers.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Mapping, Protocol

from ..config.constants import ITEM_KINDS
from ..exceptions import NotFoundError, ValidationError
from .types import CodexItem, GroupStats, ItemPatch

logger = logging.getLogger(__name__)

ITEM_DEFAULTS: dict[str, Any] = {
    "title": "",
    "description": None,
    "tags": [],
    "url": None,
    "size": None,
    "group_id": None,
    "is_group_parent": False,
    "group_name": None,
    "group_description": None,
    "part_number": None,
    "total_parts": None,
}

IMMUTABLE_FIELDS = frozenset({"id", "created_at"})
PATCHABLE_FIELDS = frozenset(ITEM_DEFAULTS) | {"owner", "kind"}


class ItemStore(Protocol):
    """Protocol for the archive item store the grouping engine runs on."""

    def list_by_owner(self, owner_id: str) -> list[CodexItem]:
        """Return every item owned by ``owner_id`` in insertion order."""
        ...

    def list_by_group(self, group_id: str, owner_id: str) -> list[CodexItem]:
        """Return the owner's items whose group_id is ``group_id``, parent included."""
        ...

    def get(self, item_id: str) -> CodexItem | None:
        """Return an item by id regardless of owner, or None."""
        ...

    def insert(self, item: Mapping[str, Any]) -> CodexItem:
        """Insert an item, assigning id/created_at when missing."""
        ...

    def update(self, item_id: str, patch: ItemPatch) -> CodexItem:
        """Apply ``patch`` and return the updated item."""
        ...

    def delete(self, item_id: str) -> None:
        """Delete an item."""
        ...

    def aggregate(self, group_id: str, owner_id: str) -> GroupStats | None:
        """Return child count/size for the owner's group, or None when nothing is materialized."""
        ...


def new_item_id() -> str:
    return uuid.uuid4().hex


def normalize_item(data: Mapping[str, Any]) -> CodexItem:
    """Build a complete item from ``data``, filling defaults.

    Raises:
        ValidationError: If owner is missing or kind is unknown
    """
    owner = data.get("owner")
    if not owner:
        raise ValidationError("Item owner is required", field="owner")

    kind = data.get("kind")
    if kind not in ITEM_KINDS:
        raise ValidationError(
            f"Unknown item kind {kind!r}. Valid kinds: {', '.join(ITEM_KINDS)}",
            field="kind",
        )

    item: dict[str, Any] = {
        "id": data.get("id") or new_item_id(),
        "owner": owner,
        "kind": kind,
    }
    for field, default in ITEM_DEFAULTS.items():
        value = data.get(field, default)
        item[field] = list(value) if isinstance(value, (list, tuple)) else value
    if item["tags"] is None:
        item["tags"] = []
    item["is_group_parent"] = bool(item["is_group_parent"])
    item["created_at"] = data.get("created_at") or datetime.now().isoformat()
    return item  # type: ignore[return-value]


def validate_patch(item_id: str, patch: Mapping[str, Any]) -> dict[str, Any]:
    """Reject immutable or unknown fields in ``patch``."""
    frozen = IMMUTABLE_FIELDS.intersection(patch)
    if frozen:
        raise ValidationError(
            f"Cannot change immutable field(s): {', '.join(sorted(frozen))}",
            item_id=item_id,
        )
    unknown = set(patch) - PATCHABLE_FIELDS
    if unknown:
        raise ValidationError(
            f"Unknown field(s): {', '.join(sorted(unknown))}",
            item_id=item_id,
        )
    if "kind" in patch and patch["kind"] not in ITEM_KINDS:
        raise ValidationError(f"Unknown item kind {patch['kind']!r}", field="kind")
    return dict(patch)


def _copy(item: CodexItem) -> CodexItem:
    copied = dict(item)
    copied["tags"] = list(item["tags"])
    return copied  # type: ignore[return-value]


class MemoryItemStore:
    """Dict-backed ``ItemStore``.

    Items are returned as copies so callers cannot mutate stored state.
    ``materialize_aggregates=False`` makes ``aggregate`` always return None,
    which is how a backend without the aggregate query behaves.
    """

    def __init__(self, materialize_aggregates: bool = True) -> None:
        self._items: dict[str, CodexItem] = {}
        self.materialize_aggregates = materialize_aggregates

    def list_by_owner(self, owner_id: str) -> list[CodexItem]:
        return [_copy(i) for i in self._items.values() if i["owner"] == owner_id]

    def list_by_group(self, group_id: str, owner_id: str) -> list[CodexItem]:
        return [
            _copy(i)
            for i in self._items.values()
            if i["group_id"] == group_id and i["owner"] == owner_id
        ]

    def get(self, item_id: str) -> CodexItem | None:
        item = self._items.get(item_id)
        return _copy(item) if item is not None else None

    def insert(self, item: Mapping[str, Any]) -> CodexItem:
        record = normalize_item(item)
        if record["id"] in self._items:
            raise ValidationError("Item id already exists", item_id=record["id"])
        self._items[record["id"]] = record
        logger.debug("Inserted item %s (%s)", record["id"], record["kind"])
        return _copy(record)

    def update(self, item_id: str, patch: ItemPatch) -> CodexItem:
        changes = validate_patch(item_id, patch)
        item = self._items.get(item_id)
        if item is None:
            raise NotFoundError(item_id=item_id)
        if "tags" in changes:
            changes["tags"] = list(changes["tags"] or [])
        item.update(changes)  # type: ignore[typeddict-item]
        return _copy(item)

    def delete(self, item_id: str) -> None:
        if self._items.pop(item_id, None) is None:
            raise NotFoundError(item_id=item_id)

    def aggregate(self, group_id: str, owner_id: str) -> GroupStats | None:
        if not self.materialize_aggregates:
            return None
        children = [
            i for i in self._items.values()
            if i["group_id"] == group_id and i["owner"] == owner_id and not i["is_group_parent"]
        ]
        if not children:
            return None
        return {
            "item_count": len(children),
            "total_size": sum(i["size"] or 0 for i in children),
        }
