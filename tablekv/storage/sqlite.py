"""
SQLite Record Store

Persists entries in the ``key_value_pairs`` table of a SQLite database.
The table is created on open if it does not exist yet.
"""

import logging
import sqlite3
from typing import List, Optional, Tuple

from ..errors import StoreError
from .base import RecordStore

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS key_value_pairs (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
)
"""


class SQLiteRecordStore(RecordStore):
    """
    Record store backed by a single SQLite connection.

    The connection is opened with ``check_same_thread=False`` because the
    executor runs store calls in worker threads. Callers must serialize
    access; the executor's lock does that.

    Usage:
        store = SQLiteRecordStore("kv_store.db")
        store.insert("name", "alice")
        store.get("name")  # "alice"
        store.close()

    Attributes:
        database: Path of the database file (or ":memory:")
    """

    def __init__(self, database: str):
        self.database = database
        try:
            self._conn = sqlite3.connect(database, check_same_thread=False)
            self._conn.execute(SCHEMA)
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"failed to open database {database}: {exc}") from exc
        logger.debug(f"Opened record store at {database}")

    def get(self, key: str) -> Optional[str]:
        row = self._query_one("SELECT value FROM key_value_pairs WHERE key = ?", (key,))
        return row[0] if row is not None else None

    def exists(self, key: str) -> bool:
        row = self._query_one("SELECT 1 FROM key_value_pairs WHERE key = ?", (key,))
        return row is not None

    def insert(self, key: str, value: str) -> None:
        self._execute("INSERT INTO key_value_pairs (key, value) VALUES (?, ?)", (key, value))

    def update(self, key: str, value: str) -> None:
        self._execute("UPDATE key_value_pairs SET value = ? WHERE key = ?", (value, key))

    def delete(self, key: str) -> None:
        self._execute("DELETE FROM key_value_pairs WHERE key = ?", (key,))

    def list(self) -> List[Tuple[str, str]]:
        try:
            rows = self._conn.execute(
                "SELECT key, value FROM key_value_pairs ORDER BY key"
            ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"failed to list key-value pairs: {exc}") from exc
        return [(key, value) for key, value in rows]

    def close(self) -> None:
        try:
            self._conn.close()
        except sqlite3.Error as exc:
            raise StoreError(f"failed to close database: {exc}") from exc

    def _query_one(self, sql: str, params: tuple) -> Optional[tuple]:
        try:
            return self._conn.execute(sql, params).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"failed to query database: {exc}") from exc

    def _execute(self, sql: str, params: tuple) -> None:
        try:
            with self._conn:
                self._conn.execute(sql, params)
        except sqlite3.Error as exc:
            raise StoreError(f"failed to write database: {exc}") from exc
