"""Shared helpers for CLI command modules."""

from typing import Any

import typer

from ..database import SQLiteItemStore
from ..database.types import CodexItem
from ..services import GroupMembershipManager, GroupViewAggregator

OWNER_OPTION: Any = typer.Option(
    ..., "--owner", "-o", envvar="CODEX_OWNER", help="Owner (user id) to act as"
)
JSON_OPTION: Any = typer.Option(False, "--json", help="Output as JSON")


def get_store() -> SQLiteItemStore:
    """Open the configured item store, creating the schema if needed."""
    return SQLiteItemStore()


def get_services() -> tuple[GroupMembershipManager, GroupViewAggregator]:
    store = get_store()
    return GroupMembershipManager(store), GroupViewAggregator(store)


def kind_icon(item: CodexItem) -> str:
    return {
        "audio": "🎧",
        "video": "🎬",
        "link": "🔗",
        "document": "📄",
        "note": "📝",
    }.get(item["kind"], "•")
