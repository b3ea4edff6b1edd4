"""
Durable key/value substrate for the tutor's records.

Each record (progress, content cache) is stored whole under a fixed name.
Database location: ~/.commerce_tutor/state.db
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Protocol

from loguru import logger


class KeyValueStore(Protocol):
    """Byte storage addressed by record name."""

    def get(self, name: str) -> bytes | None: ...

    def set(self, name: str, value: bytes) -> None: ...

    def delete(self, name: str) -> None: ...


class MemoryKeyValueStore:
    """Process-local substrate, used for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, bytes] | None = None):
        self._data: dict[str, bytes] = dict(initial or {})

    def get(self, name: str) -> bytes | None:
        return self._data.get(name)

    def set(self, name: str, value: bytes) -> None:
        self._data[name] = bytes(value)

    def delete(self, name: str) -> None:
        self._data.pop(name, None)


class SQLiteKeyValueStore:
    """
    SQLite-backed substrate.

    One table, one row per record name. Writes commit immediately.
    """

    DEFAULT_DB_PATH = Path.home() / ".commerce_tutor" / "state.db"

    def __init__(self, db_path: Path | None = None):
        """
        Initialize the store.

        Args:
            db_path: Custom database path (defaults to ~/.commerce_tutor/state.db)
        """
        self.db_path = db_path or self.DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn: sqlite3.Connection | None = None
        self._init_schema()

        logger.debug(f"Key/value store initialized at {self.db_path}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
        return self._conn

    def _init_schema(self) -> None:
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS records (
                name TEXT PRIMARY KEY,
                value BLOB NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        self.conn.commit()

    def get(self, name: str) -> bytes | None:
        row = self.conn.execute("SELECT value FROM records WHERE name = ?", (name,)).fetchone()
        if row is None:
            return None
        return bytes(row[0])

    def set(self, name: str, value: bytes) -> None:
        self.conn.execute(
            """
            INSERT INTO records (name, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(name) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
        """,
            (name, sqlite3.Binary(value)),
        )
        self.conn.commit()

    def delete(self, name: str) -> None:
        self.conn.execute("DELETE FROM records WHERE name = ?", (name,))
        self.conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
