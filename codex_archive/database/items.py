"""
SQLite-backed item store for the Codex archive
"""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Mapping, Optional

from ..config.constants import ITEMS_TABLE
from ..exceptions import NotFoundError, StoreQueryError, ValidationError
from .connection import DatabaseConnection
from .store import ITEM_DEFAULTS, normalize_item, validate_patch
from .types import CodexItem, GroupStats, ItemPatch

logger = logging.getLogger(__name__)

COLUMNS = ["id", "owner", "kind", *ITEM_DEFAULTS.keys(), "created_at"]


def _row_to_item(row: sqlite3.Row) -> CodexItem:
    item = dict(row)
    item["tags"] = json.loads(item["tags"]) if item["tags"] else []
    item["is_group_parent"] = bool(item["is_group_parent"])
    return item  # type: ignore[return-value]


def _to_column(field: str, value: Any) -> Any:
    if field == "tags":
        return json.dumps(list(value or []))
    if field == "is_group_parent":
        return 1 if value else 0
    return value


class SQLiteItemStore:
    """``ItemStore`` over the codex_items table.

    A connection is opened per operation; the schema is created on
    construction unless ``ensure_schema=False``.
    """

    def __init__(
        self,
        db_path: Optional[Path] = None,
        connection: Optional[DatabaseConnection] = None,
        ensure_schema: bool = True,
    ):
        self._connection = connection or DatabaseConnection(db_path)
        if ensure_schema:
            self._connection.ensure_schema()

    @property
    def db_path(self) -> Path:
        return self._connection.db_path

    def _query(self, sql: str, params: tuple = ()) -> list[CodexItem]:
        try:
            with self._connection.get_connection() as conn:
                cursor = conn.execute(sql, params)
                return [_row_to_item(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise StoreQueryError(str(e), query=sql) from e

    def list_by_owner(self, owner_id: str) -> list[CodexItem]:
        return self._query(
            f"SELECT * FROM {ITEMS_TABLE} WHERE owner = ? ORDER BY rowid",
            (owner_id,),
        )

    def list_by_group(self, group_id: str, owner_id: str) -> list[CodexItem]:
        return self._query(
            f"SELECT * FROM {ITEMS_TABLE} WHERE group_id = ? AND owner = ? ORDER BY rowid",
            (group_id, owner_id),
        )

    def get(self, item_id: str) -> Optional[CodexItem]:
        rows = self._query(f"SELECT * FROM {ITEMS_TABLE} WHERE id = ?", (item_id,))
        return rows[0] if rows else None

    def insert(self, item: Mapping[str, Any]) -> CodexItem:
        record = normalize_item(item)
        placeholders = ", ".join("?" for _ in COLUMNS)
        sql = f"INSERT INTO {ITEMS_TABLE} ({', '.join(COLUMNS)}) VALUES ({placeholders})"
        values = [_to_column(c, record[c]) for c in COLUMNS]  # type: ignore[literal-required]

        try:
            with self._connection.get_connection() as conn:
                conn.execute(sql, values)
                conn.commit()
        except sqlite3.IntegrityError as e:
            raise ValidationError("Item id already exists", item_id=record["id"]) from e
        except sqlite3.Error as e:
            raise StoreQueryError(str(e), query=sql) from e

        logger.debug("Inserted item %s (%s)", record["id"], record["kind"])
        return record

    def update(self, item_id: str, patch: ItemPatch) -> CodexItem:
        updates = validate_patch(item_id, patch)
        if not updates:
            item = self.get(item_id)
            if item is None:
                raise NotFoundError(item_id=item_id)
            return item

        set_clause = ", ".join(f"{k} = ?" for k in updates.keys())
        values = [_to_column(k, v) for k, v in updates.items()] + [item_id]
        sql = f"UPDATE {ITEMS_TABLE} SET {set_clause} WHERE id = ?"

        try:
            with self._connection.get_connection() as conn:
                cursor = conn.execute(sql, values)
                conn.commit()
                updated = cursor.rowcount
        except sqlite3.Error as e:
            raise StoreQueryError(str(e), query=sql) from e

        if updated == 0:
            raise NotFoundError(item_id=item_id)

        item = self.get(item_id)
        if item is None:
            raise NotFoundError(item_id=item_id)
        return item

    def delete(self, item_id: str) -> None:
        sql = f"DELETE FROM {ITEMS_TABLE} WHERE id = ?"
        try:
            with self._connection.get_connection() as conn:
                cursor = conn.execute(sql, (item_id,))
                conn.commit()
                deleted = cursor.rowcount
        except sqlite3.Error as e:
            raise StoreQueryError(str(e), query=sql) from e

        if deleted == 0:
            raise NotFoundError(item_id=item_id)

    def aggregate(self, group_id: str, owner_id: str) -> Optional[GroupStats]:
        """Child count and summed size for the owner's group, None if it has no children."""
        sql = f"""
            SELECT COUNT(*) AS item_count, COALESCE(SUM(size), 0) AS total_size
            FROM {ITEMS_TABLE}
            WHERE group_id = ? AND owner = ? AND is_group_parent = 0
        """
        try:
            with self._connection.get_connection() as conn:
                row = conn.execute(sql, (group_id, owner_id)).fetchone()
        except sqlite3.Error as e:
            raise StoreQueryError(str(e), query=sql) from e

        if row is None or row["item_count"] == 0:
            return None
        return {"item_count": int(row["item_count"]), "total_size": int(row["total_size"])}
