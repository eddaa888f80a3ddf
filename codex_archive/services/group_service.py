"""Group membership management for Codex items.

A group is not stored on its own: it is the set of items sharing a
``group_id``, and the item flagged ``is_group_parent`` carries the group's
name and description. A group created from an item is keyed by that
item's id. Every mutation here goes straight to the item store; callers
reload their views afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from ..config.constants import GROUPABLE_KINDS
from ..database.store import ItemStore
from ..database.types import CodexItem, ItemPatch
from ..exceptions import (
    AlreadyGroupedError,
    CrossOwnerError,
    InvalidKindError,
    NotFoundError,
    PartialDeleteError,
    ValidationError,
)
from .validation import (
    find_group_parent,
    is_groupable,
    require_group_name,
    require_groupable,
    require_owned_item,
    require_part_number,
)

logger = logging.getLogger(__name__)

DETACH_PATCH: ItemPatch = {"group_id": None, "part_number": None, "is_group_parent": False}


@dataclass
class GroupDeletion:
    """Result of dissolving a group."""

    group_id: str
    parent_id: str
    detached_ids: list[str] = field(default_factory=list)


@dataclass
class GroupBulkResult:
    """Result of creating a group together with its items."""

    parent: CodexItem
    children: list[CodexItem] = field(default_factory=list)

    @property
    def group_id(self) -> str:
        group_id = self.parent["group_id"]
        if group_id is None:
            raise NotFoundError("Group not found", item_id=self.parent["id"])
        return group_id


class GroupMembershipManager:
    """Create, extend, shrink and dissolve groups over an ``ItemStore``."""

    def __init__(self, store: ItemStore) -> None:
        self.store = store

    # ── Group lifecycle ──────────────────────────────────────────

    def create_group(
        self,
        owner_id: str,
        name: str,
        description: str | None,
        parent_item_id: str,
    ) -> CodexItem:
        """Turn an existing item into the parent of a new group.

        The group is keyed by the parent's own id.

        Raises:
            NotFoundError: If the item is missing or not owned by ``owner_id``
            InvalidKindError: If the item kind cannot be grouped
            AlreadyGroupedError: If the item is already a parent or a member
        """
        item = require_owned_item(self.store, parent_item_id, owner_id)
        require_groupable(item)

        if item["is_group_parent"]:
            raise AlreadyGroupedError(
                "Item is already a group parent",
                item_id=parent_item_id,
                group_id=item["group_id"],
            )
        if item["group_id"] is not None:
            raise AlreadyGroupedError(
                "Item belongs to another group; remove it first",
                item_id=parent_item_id,
                group_id=item["group_id"],
            )

        group_name = require_group_name(name)
        parent = self.store.update(
            parent_item_id,
            {
                "is_group_parent": True,
                "group_id": parent_item_id,
                "group_name": group_name,
                "group_description": description,
                "part_number": None,
                "total_parts": 1,
            },
        )
        logger.info("Created group %s (%r) for owner %s", parent_item_id, group_name, owner_id)
        return parent

    def create_group_bulk(
        self,
        owner_id: str,
        name: str,
        description: str | None,
        items: Sequence[Mapping[str, Any]],
    ) -> GroupBulkResult:
        """Insert several new items as one group.

        The first item becomes the parent; the rest are attached with part
        numbers 2..N. Every entry is validated before anything is written.

        Raises:
            ValidationError: If ``items`` is empty or the name is blank
            InvalidKindError: If any entry has a non-groupable kind
        """
        if not items:
            raise ValidationError("A group needs at least one item", field="items")
        group_name = require_group_name(name)

        prepared: list[dict[str, Any]] = []
        for entry in items:
            data = dict(entry)
            data.setdefault("kind", "link")
            data["owner"] = owner_id
            for key in ("id", "group_id", "is_group_parent", "part_number", "total_parts"):
                data.pop(key, None)
            if data["kind"] not in GROUPABLE_KINDS:
                raise InvalidKindError(kind=data["kind"])
            prepared.append(data)

        first, *rest = prepared
        parent = self.store.insert(first)
        parent = self.create_group(owner_id, group_name, description, parent["id"])

        children = []
        for part_number, data in enumerate(rest, start=2):
            child = self.store.insert(data)
            children.append(self.add_item_to_group(child["id"], parent["id"], part_number, owner_id))

        result = GroupBulkResult(parent=self.store.get(parent["id"]) or parent, children=children)
        logger.info("Created group %s with %d item(s)", result.group_id, len(prepared))
        return result

    def add_item_to_group(
        self,
        item_id: str,
        group_id: str,
        part_number: int,
        owner_id: str,
    ) -> CodexItem:
        """Attach an item to an existing group at ``part_number``.

        The manager never picks the part number itself; use
        ``GroupViewAggregator.suggest_next_part_number`` for that.

        Raises:
            ValidationError: If ``part_number`` is missing or < 1
            NotFoundError: If the item or the group does not exist
            CrossOwnerError: If the item or group belongs to another owner
            InvalidKindError: If the item kind cannot be grouped
            AlreadyGroupedError: If the item is a parent or already in another group
        """
        require_part_number(part_number)

        item = self.store.get(item_id)
        if item is None:
            raise NotFoundError(item_id=item_id)
        if item["owner"] != owner_id:
            raise CrossOwnerError(item_id=item_id, group_id=group_id)

        parent = find_group_parent(self.store, group_id, owner_id)
        if parent is None:
            raise NotFoundError("Group not found", group_id=group_id)
        if parent["owner"] != owner_id:
            raise CrossOwnerError(item_id=item_id, group_id=group_id)

        require_groupable(item)

        if item["is_group_parent"]:
            raise AlreadyGroupedError(
                "Item is a group parent and cannot join a group",
                item_id=item_id,
                group_id=item["group_id"],
            )
        if item["group_id"] is not None and item["group_id"] != group_id:
            raise AlreadyGroupedError(
                "Item belongs to another group; remove it first",
                item_id=item_id,
                group_id=item["group_id"],
            )

        updated = self.store.update(
            item_id,
            {"group_id": group_id, "part_number": part_number, "is_group_parent": False},
        )
        self.refresh_total_parts(group_id, owner_id)
        logger.info("Added item %s to group %s as part %d", item_id, group_id, part_number)
        return updated

    def remove_item_from_group(self, item_id: str, owner_id: str) -> CodexItem:
        """Detach an item from its group.

        Removing an ungrouped item is a no-op. A group parent cannot be
        removed this way; use ``delete_group``.

        Raises:
            NotFoundError: If the item is missing or not owned by ``owner_id``
            ValidationError: If the item is a group parent
        """
        item = require_owned_item(self.store, item_id, owner_id)

        if item["is_group_parent"]:
            raise ValidationError(
                "Cannot remove a group's parent item; delete the group instead",
                item_id=item_id,
            )

        group_id = item["group_id"]
        if group_id is None:
            logger.debug("Item %s is not grouped, nothing to remove", item_id)
            return item

        updated = self.store.update(item_id, DETACH_PATCH)
        self.refresh_total_parts(group_id, owner_id)
        logger.info("Removed item %s from group %s", item_id, group_id)
        return updated

    def delete_group(self, group_id: str, owner_id: str) -> GroupDeletion:
        """Dissolve a group: detach every child, then delete the parent.

        Children are detached before the parent is deleted so that a failure
        never leaves children pointing at a parent that no longer exists.
        Re-running after a PartialDeleteError is safe.

        Raises:
            NotFoundError: If the group has no parent owned by ``owner_id``
            PartialDeleteError: If a step failed after the deletion started
        """
        parent = find_group_parent(self.store, group_id, owner_id)
        if parent is None or parent["owner"] != owner_id:
            raise NotFoundError("Group not found", group_id=group_id)

        children = [
            item for item in self.store.list_by_group(group_id, owner_id)
            if item["id"] != parent["id"]
        ]

        detached: list[str] = []
        for child in children:
            try:
                self.store.update(child["id"], DETACH_PATCH)
            except Exception as e:
                logger.error("Detaching %s from group %s failed: %s", child["id"], group_id, e)
                raise PartialDeleteError(
                    f"Could not detach item {child['id']}",
                    step="detach_children",
                    group_id=group_id,
                    detached=detached,
                ) from e
            detached.append(child["id"])

        try:
            self.store.delete(parent["id"])
        except Exception as e:
            logger.error("Deleting parent %s of group %s failed: %s", parent["id"], group_id, e)
            raise PartialDeleteError(
                "Children were detached but the parent item could not be deleted",
                step="delete_parent",
                group_id=group_id,
                detached=detached,
            ) from e

        logger.info("Deleted group %s, detached %d item(s)", group_id, len(detached))
        return GroupDeletion(group_id=group_id, parent_id=parent["id"], detached_ids=detached)

    def update_group_info(
        self,
        group_id: str,
        owner_id: str,
        name: str | None = None,
        description: str | None = None,
    ) -> CodexItem:
        """Rename or re-describe a group. Only the parent item changes.

        Raises:
            NotFoundError: If the group has no parent owned by ``owner_id``
            ValidationError: If ``name`` is given but blank
        """
        parent = find_group_parent(self.store, group_id, owner_id)
        if parent is None or parent["owner"] != owner_id:
            raise NotFoundError("Group not found", group_id=group_id)

        patch: ItemPatch = {}
        if name is not None:
            patch["group_name"] = require_group_name(name)
        if description is not None:
            patch["group_description"] = description

        if not patch:
            logger.debug("No group changes for %s", group_id)
            return parent

        updated = self.store.update(parent["id"], patch)
        logger.info("Updated group %s: %s", group_id, ", ".join(patch))
        return updated

    # ── Items ────────────────────────────────────────────────────

    def delete_item(self, item_id: str, owner_id: str) -> GroupDeletion | None:
        """Delete a single item.

        Deleting a group parent dissolves its group (children are detached).
        Deleting any other item never touches its siblings.

        Returns:
            The GroupDeletion when a parent was deleted, otherwise None
        """
        item = require_owned_item(self.store, item_id, owner_id)
        if item["is_group_parent"] and item["group_id"] is not None:
            return self.delete_group(item["group_id"], owner_id)

        self.store.delete(item_id)
        if item["group_id"] is not None:
            self.refresh_total_parts(item["group_id"], owner_id)
        logger.info("Deleted item %s", item_id)
        return None

    def refresh_total_parts(self, group_id: str, owner_id: str) -> int | None:
        """Recount a group's items (parent included) onto the parent.

        Returns:
            The new total, or None when the group has no parent
        """
        members = self.store.list_by_group(group_id, owner_id)
        parent = next((i for i in members if i["is_group_parent"]), None)
        if parent is None:
            return None

        total = len(members)
        if parent["total_parts"] != total:
            self.store.update(parent["id"], {"total_parts": total})
        return total

    def can_group(self, item: CodexItem) -> bool:
        """True when ``item`` could be made a parent or added to a group now."""
        return is_groupable(item) and item["group_id"] is None
