"""
SQLite State Store for learnloop.

A durable key -> JSON value map used for:
- the answer ledger and earned achievements
- the generated question cache
- weakness profiles and assessment history

Database location: ~/.learnloop/state.db (see ``Settings.store_path``).
Last write wins; there are no transactions spanning several keys.
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any

from loguru import logger


class StateStore:
    """
    SQLite-backed key/value persistence.

    Values are stored as JSON text. A value that no longer decodes is
    reported and treated as missing.
    """

    DEFAULT_DB_PATH = Path.home() / ".learnloop" / "state.db"

    def __init__(self, db_path: Path | str | None = None):
        """
        Initialize the state store.

        Args:
            db_path: Custom database path (defaults to ~/.learnloop/state.db).
                ``":memory:"`` keeps everything in process.
        """
        if db_path == ":memory:":
            self.db_path: Path | None = None
        else:
            self.db_path = Path(db_path) if db_path else self.DEFAULT_DB_PATH
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn: sqlite3.Connection | None = None
        self._init_schema()

        logger.debug(f"StateStore initialized at {self.db_path or ':memory:'}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            target = str(self.db_path) if self.db_path else ":memory:"
            self._conn = sqlite3.connect(target)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_schema(self) -> None:
        """Initialize database schema."""
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        self.conn.commit()

    def get(self, key: str, default: Any = None) -> Any:
        """Return the decoded value for ``key`` or ``default``."""
        row = self.conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        if row is None:
            return default
        try:
            return json.loads(row["value"])
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Discarding unreadable value for '{key}': {e}")
            return default

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` (must be JSON serializable) under ``key``."""
        payload = json.dumps(value)
        self.conn.execute(
            """
            INSERT INTO kv_store (key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = CURRENT_TIMESTAMP
            """,
            (key, payload),
        )
        self.conn.commit()

    def delete(self, key: str) -> bool:
        cursor = self.conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        self.conn.commit()
        return cursor.rowcount > 0

    def keys(self) -> list[str]:
        return [row["key"] for row in self.conn.execute("SELECT key FROM kv_store ORDER BY key")]

    def clear(self) -> None:
        self.conn.execute("DELETE FROM kv_store")
        self.conn.commit()

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
