"""
Codex item store package

- connection: SQLite connection management and schema
- items: SQLite-backed item store
- store: the ItemStore protocol and an in-memory store
- types: TypedDict row and view shapes
"""

from .connection import DatabaseConnection
from .items import SQLiteItemStore
from .store import ItemStore, MemoryItemStore, normalize_item
from .types import CodexItem, GroupStats, GroupView, ItemPatch, NestedEntry

__all__ = [
    "CodexItem",
    "DatabaseConnection",
    "GroupStats",
    "GroupView",
    "ItemPatch",
    "ItemStore",
    "MemoryItemStore",
    "NestedEntry",
    "SQLiteItemStore",
    "normalize_item",
]
