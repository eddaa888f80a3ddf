"""TypedDict definitions for the item store and group views."""

from __future__ import annotations

from typing import TypedDict

# ── Item types ─────────────────────────────────────────────────────────


class CodexItem(TypedDict):
    """A single archive item as stored in the codex_items table."""

    id: str
    owner: str
    kind: str
    title: str
    description: str | None
    tags: list[str]
    url: str | None
    size: int | None
    group_id: str | None
    is_group_parent: bool
    group_name: str | None
    group_description: str | None
    part_number: int | None
    total_parts: int | None
    created_at: str


class ItemPatch(TypedDict, total=False):
    """Partial update for an item. ``id`` and ``created_at`` are immutable."""

    owner: str
    kind: str
    title: str
    description: str | None
    tags: list[str]
    url: str | None
    size: int | None
    group_id: str | None
    is_group_parent: bool
    group_name: str | None
    group_description: str | None
    part_number: int | None
    total_parts: int | None


# ── Group types ────────────────────────────────────────────────────────


class GroupStats(TypedDict):
    """Aggregate numbers for a group's children (parent excluded)."""

    item_count: int
    total_size: int


class GroupView(TypedDict):
    """An expanded group: parent, ordered children and stats."""

    group_id: str
    parent: CodexItem | None
    items: list[CodexItem]
    stats: GroupStats
    next_part_number: int


class NestedEntry(TypedDict):
    """A top-level row; ``children``/``stats`` are only set when expanded."""

    item: CodexItem
    children: list[CodexItem] | None
    stats: GroupStats | None
