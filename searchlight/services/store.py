"""
Key-Value Store - Byte-valued persistence for usage and settings state.

Two implementations:
  - SqliteKeyValueStore: single table in a WAL-mode SQLite database
  - MemoryKeyValueStore: plain dict, used for tests and as a fallback when
    the database cannot be opened
"""

import sqlite3
import threading
from pathlib import Path
from typing import Optional, Protocol, Union

from loguru import logger

DEFAULT_DB_PATH = Path.home() / ".local" / "share" / "searchlight" / "state.db"


class StoreError(Exception):
    """Raised when the backing store cannot be read or written."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[bytes]: ...

    def set(self, key: str, value: bytes) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """In-memory store. Nothing survives the process."""

    def __init__(self):
        self._data: dict[str, bytes] = {}

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SqliteKeyValueStore:
    """
    Store backed by a SQLite database.

    Args:
        db_path: Database file, created with its parent directory if missing
    """

    def __init__(self, db_path: Union[Path, str] = DEFAULT_DB_PATH):
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        # One connection shared across threads, guarded by our own lock
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._init_database()
        logger.debug(f"SqliteKeyValueStore initialized with db at {self.db_path}")

    def _init_database(self):
        """Create the kv table if it doesn't exist."""
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value BLOB NOT NULL
            )
        """)
        self._conn.commit()

    def get(self, key: str) -> Optional[bytes]:
        try:
            with self._lock:
                row = self._conn.execute(
                    "SELECT value FROM kv WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read '{key}': {e}") from e
        return bytes(row[0]) if row else None

    def set(self, key: str, value: bytes) -> None:
        try:
            with self._lock:
                self._conn.execute("""
                    INSERT INTO kv (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """, (key, sqlite3.Binary(value)))
                self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to write '{key}': {e}") from e

    def delete(self, key: str) -> None:
        try:
            with self._lock:
                self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to delete '{key}': {e}") from e

    def close(self) -> None:
        with self._lock:
            self._conn.close()


def open_store(db_path: Union[Path, str] = DEFAULT_DB_PATH) -> KeyValueStore:
    """
    Open the SQLite store, falling back to memory if that fails.

    Returns:
        A usable KeyValueStore. Durability is lost on fallback.
    """
    try:
        return SqliteKeyValueStore(db_path)
    except (sqlite3.Error, OSError):
        logger.exception(f"Could not open state db at {db_path}, using in-memory store")
        return MemoryKeyValueStore()
