"""SQLite key-value store."""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from ..exceptions import ReadError, WriteError
from ..values import decode_value, encode_value
from .base import KeyValueStore

logger = logging.getLogger(__name__)


class SqliteStore(KeyValueStore):
    """Store keeping one JSON-encoded value per row of an SQLite table.

    Values are encoded exactly like the file-backed store, so both accept and
    return the same data.
    """

    def __init__(self, db_path: Path | str, create_missing_directories: bool = True):
        self.db_path = Path(db_path)
        self.create_missing_directories = create_missing_directories
        self._lock = threading.RLock()
        self.conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the connection, opening it and creating the schema on first use."""
        if self.conn is None:
            parent = self.db_path.parent
            if not parent.is_dir():
                if not self.create_missing_directories:
                    raise WriteError(self.db_path, f"directory {parent} does not exist")
                logger.debug(f"Creating directory {parent}")
                parent.mkdir(parents=True, exist_ok=True)

            self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self.conn.execute("PRAGMA journal_mode=WAL")
            self.conn.execute(
                "CREATE TABLE IF NOT EXISTS store (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )
            self.conn.commit()
        return self.conn

    @contextmanager
    def _reading(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                yield self.connection
            except (sqlite3.Error, OSError) as e:
                raise ReadError(self.db_path, str(e)) from e

    @contextmanager
    def _writing(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                conn = self.connection
                with conn:
                    yield conn
            except (sqlite3.Error, OSError) as e:
                raise WriteError(self.db_path, str(e)) from e

    def _set_impl(self, key: str, value: Any) -> None:
        payload = encode_value(value).decode("utf-8")
        with self._writing() as conn:
            conn.execute(
                """
                INSERT INTO store (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, payload),
            )

    def _is_absent(self) -> bool:
        return self.conn is None and not self.db_path.exists()

    def _get_impl(self, key: str, default: Any) -> Any:
        if self._is_absent():
            return default
        with self._reading() as conn:
            row = conn.execute("SELECT value FROM store WHERE key = ?", (key,)).fetchone()
        if row is None:
            return default
        return decode_value(row[0])

    def _remove_impl(self, key: str) -> bool:
        with self._writing() as conn:
            cursor = conn.execute("DELETE FROM store WHERE key = ?", (key,))
            return cursor.rowcount > 0

    def _has_impl(self, key: str) -> bool:
        if self._is_absent():
            return False
        with self._reading() as conn:
            cursor = conn.execute("SELECT 1 FROM store WHERE key = ? LIMIT 1", (key,))
            return cursor.fetchone() is not None

    def clear(self) -> None:
        """Delete all rows."""
        with self._writing() as conn:
            conn.execute("DELETE FROM store")

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self.conn is not None:
                self.conn.close()
                self.conn = None
