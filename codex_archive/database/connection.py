"""
Database connection management for the Codex item store
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from ..config.constants import ITEMS_TABLE
from ..config.settings import get_db_path
from ..exceptions import StoreConnectionError


class DatabaseConnection:
    """SQLite database connection manager for the item store"""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path is not None else get_db_path()

    @contextmanager
    def get_connection(self):
        """Get a database connection with context manager"""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StoreConnectionError(str(e), db_path=str(self.db_path)) from e
        conn.row_factory = sqlite3.Row  # Enable column access by name

        try:
            yield conn
        finally:
            conn.close()

    def ensure_schema(self):
        """Ensure the items table and its indexes exist"""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self.get_connection() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {ITEMS_TABLE} (
                    id TEXT PRIMARY KEY,
                    owner TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    title TEXT NOT NULL DEFAULT '',
                    description TEXT,
                    tags TEXT NOT NULL DEFAULT '[]',
                    url TEXT,
                    size INTEGER,
                    group_id TEXT,
                    is_group_parent BOOLEAN NOT NULL DEFAULT FALSE,
                    group_name TEXT,
                    group_description TEXT,
                    part_number INTEGER,
                    total_parts INTEGER,
                    created_at TEXT NOT NULL
                )
            """
            )

            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{ITEMS_TABLE}_owner ON {ITEMS_TABLE}(owner)"
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{ITEMS_TABLE}_group ON {ITEMS_TABLE}(group_id)"
            )

            conn.commit()
