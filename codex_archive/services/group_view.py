"""Read-only group views over the item store.

Nothing here mutates state. Views are recomputed from the store on every
call; after a membership change the caller simply asks again.
"""

from __future__ import annotations

import logging
from typing import Iterable

from ..database.store import ItemStore
from ..database.types import CodexItem, GroupStats, GroupView, NestedEntry
from ..exceptions import NotFoundError
from .validation import find_group_parent

logger = logging.getLogger(__name__)


def _child_sort_key(item: CodexItem) -> tuple[bool, int, str]:
    # Missing part numbers go last; ties fall back to creation time
    part_number = item["part_number"]
    return (part_number is None, part_number or 0, item["created_at"] or "")


def item_matches(item: CodexItem, query: str | None, kind: str | None) -> bool:
    """Search filter used by the archive listing."""
    if kind is not None and item["kind"] != kind:
        return False
    if not query:
        return True

    needle = query.lower()
    haystack = [item["title"] or "", item["description"] or "", *item["tags"]]
    if item["is_group_parent"]:
        haystack.append(item["group_name"] or "")
    return any(needle in text.lower() for text in haystack)


class GroupViewAggregator:
    """Group statistics and the nested parent + children view."""

    def __init__(self, store: ItemStore) -> None:
        self.store = store

    @staticmethod
    def partition_top_level(items: Iterable[CodexItem]) -> list[CodexItem]:
        """Keep group parents and ungrouped items, never a group's children.

        Parents come first, then standalone items; newest first within each.
        """
        top_level = [i for i in items if i["is_group_parent"] or i["group_id"] is None]
        top_level.sort(key=lambda i: i["created_at"] or "", reverse=True)
        top_level.sort(key=lambda i: 0 if i["is_group_parent"] else 1)
        return top_level

    def get_group_items(self, group_id: str, owner_id: str) -> list[CodexItem]:
        """Return a group's children (parent excluded) in part order."""
        children = [
            item for item in self.store.list_by_group(group_id, owner_id)
            if not item["is_group_parent"]
        ]
        children.sort(key=_child_sort_key)
        return children

    def get_group_stats(self, group_id: str, owner_id: str | None = None) -> GroupStats:
        """Child count and total size for a group.

        Without ``owner_id`` the owner is taken from the group's parent.
        The store's aggregate is used when it has data. When it returns
        nothing the numbers are computed from the group's children, so a
        group with visible children never reports zero items.

        Raises:
            NotFoundError: If ``owner_id`` is omitted and the group has no parent
        """
        if owner_id is None:
            parent = find_group_parent(self.store, group_id)
            if parent is None:
                raise NotFoundError(
                    "Group has no parent; pass owner_id to count its items",
                    group_id=group_id,
                )
            owner_id = parent["owner"]

        stats = self.store.aggregate(group_id, owner_id)
        if stats and stats["item_count"] > 0:
            return stats

        children = self.get_group_items(group_id, owner_id)
        logger.debug("Aggregate empty for group %s, counted %d child(ren)", group_id, len(children))
        return {
            "item_count": len(children),
            "total_size": sum(child["size"] or 0 for child in children),
        }

    def suggest_next_part_number(self, group_id: str, owner_id: str) -> int:
        """Return max(part_number) + 1 over the group's children, or 1."""
        part_numbers = [
            child["part_number"]
            for child in self.get_group_items(group_id, owner_id)
            if child["part_number"] is not None
        ]
        return max(part_numbers) + 1 if part_numbers else 1

    def list_user_groups(self, owner_id: str) -> list[CodexItem]:
        """Return the owner's group parents, newest first."""
        parents = [i for i in self.store.list_by_owner(owner_id) if i["is_group_parent"]]
        parents.sort(key=lambda i: i["created_at"] or "", reverse=True)
        return parents

    def load_top_level(
        self,
        owner_id: str,
        query: str | None = None,
        kind: str | None = None,
    ) -> list[CodexItem]:
        """Load the owner's items, filter them and partition to the top level.

        ``query`` matches title, description and tags case-insensitively,
        plus the group name on parents. ``kind`` keeps one item kind.
        """
        items = [i for i in self.store.list_by_owner(owner_id) if item_matches(i, query, kind)]
        return self.partition_top_level(items)

    def expand_group(self, group_id: str, owner_id: str) -> GroupView:
        """Fetch one group's parent, ordered children, stats and next part number.

        Raises:
            NotFoundError: If the owner has neither a parent nor children for the group
        """
        parent = find_group_parent(self.store, group_id, owner_id)
        if parent is not None and parent["owner"] != owner_id:
            parent = None

        children = self.get_group_items(group_id, owner_id)
        if parent is None and not children:
            raise NotFoundError("Group not found", group_id=group_id)

        part_numbers = [c["part_number"] for c in children if c["part_number"] is not None]
        return {
            "group_id": group_id,
            "parent": parent,
            "items": children,
            "stats": self.get_group_stats(group_id, owner_id),
            "next_part_number": max(part_numbers) + 1 if part_numbers else 1,
        }

    def nested_view(
        self,
        owner_id: str,
        expanded: Iterable[str] = (),
        query: str | None = None,
        kind: str | None = None,
    ) -> list[NestedEntry]:
        """Top-level rows; only groups listed in ``expanded`` carry children."""
        wanted = set(expanded)
        entries: list[NestedEntry] = []
        for item in self.load_top_level(owner_id, query=query, kind=kind):
            group_id = item["group_id"]
            if item["is_group_parent"] and group_id in wanted:
                entries.append({
                    "item": item,
                    "children": self.get_group_items(group_id, owner_id),
                    "stats": self.get_group_stats(group_id, owner_id),
                })
            else:
                entries.append({"item": item, "children": None, "stats": None})
        return entries
