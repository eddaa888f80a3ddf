"""Invariant and validation helpers shared by the grouping services."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from ..config.constants import GROUPABLE_KINDS
from ..database.store import ItemStore
from ..database.types import CodexItem
from ..exceptions import InvalidKindError, NotFoundError, ValidationError


def is_groupable(item: CodexItem) -> bool:
    """Return True if the item's kind may be grouped or become a parent."""
    return item["kind"] in GROUPABLE_KINDS


def require_groupable(item: CodexItem) -> None:
    """Raise InvalidKindError unless the item's kind is groupable."""
    if not is_groupable(item):
        raise InvalidKindError(kind=item["kind"], item_id=item["id"])


def require_owned_item(store: ItemStore, item_id: str, owner_id: str) -> CodexItem:
    """Get an item owned by ``owner_id``.

    An item owned by someone else is reported exactly like a missing one.

    Raises:
        NotFoundError: If the item is missing or owned by another user
    """
    item = store.get(item_id)
    if item is None or item["owner"] != owner_id:
        raise NotFoundError(item_id=item_id)
    return item


def require_part_number(part_number: int | None) -> int:
    """Validate a part number (integer, >= 1)."""
    if part_number is None or isinstance(part_number, bool) or not isinstance(part_number, int):
        raise ValidationError(
            "A part number is required; ask the view for the next free one",
            field="part_number",
        )
    if part_number < 1:
        raise ValidationError(
            f"Part number must be >= 1, got {part_number}",
            field="part_number",
        )
    return part_number


def require_group_name(name: str | None) -> str:
    if name is None or not name.strip():
        raise ValidationError("Group name cannot be empty", field="name")
    return name.strip()


def find_group_parent(
    store: ItemStore,
    group_id: str,
    owner_id: str | None = None,
) -> CodexItem | None:
    """Find the parent item of a group.

    Groups are normally keyed by their parent's id, so the direct lookup
    is tried first. Groups created under a synthetic id are resolved by
    scanning the owner's members.
    """
    candidate = store.get(group_id)
    if candidate and candidate["is_group_parent"] and candidate["group_id"] == group_id:
        return candidate

    if owner_id is not None:
        for item in store.list_by_group(group_id, owner_id):
            if item["is_group_parent"]:
                return item
    return None


def find_invariant_violations(items: Iterable[CodexItem]) -> list[str]:
    """Audit a snapshot of items and describe every broken grouping rule.

    Returns:
        Human-readable problem descriptions (empty when consistent)
    """
    problems: list[str] = []
    parents: dict[str, list[str]] = defaultdict(list)
    members: dict[str, list[CodexItem]] = defaultdict(list)

    for item in items:
        group_id = item["group_id"]
        if item["is_group_parent"]:
            if group_id is None:
                problems.append(f"Item {item['id']} is flagged as a parent but has no group")
            else:
                parents[group_id].append(item["id"])
        if group_id is None:
            if item["part_number"] is not None:
                problems.append(f"Ungrouped item {item['id']} has part number {item['part_number']}")
            continue

        members[group_id].append(item)
        if not is_groupable(item):
            problems.append(f"Item {item['id']} of kind {item['kind']!r} is grouped in {group_id}")
        part_number = item["part_number"]
        if part_number is not None and part_number < 1:
            problems.append(f"Item {item['id']} in {group_id} has part number {part_number}")

    for group_id, parent_ids in parents.items():
        if len(parent_ids) > 1:
            problems.append(
                f"Group {group_id} has {len(parent_ids)} parents: {', '.join(parent_ids)}"
            )

    for group_id, group_items in members.items():
        if group_id not in parents:
            ids = ", ".join(i["id"] for i in group_items)
            problems.append(f"Group {group_id} has no parent (members: {ids})")

    return problems
