"""Interchangeable key-value store backends.

- **JsonFileStore**: whole key space in one JSON file, atomic and lock-safe
- **SqliteStore**: one row per key in an SQLite database
- **MemoryStore**: process-local dict, useful for tests
- **NullStore**: discards all writes

All backends share the validation rules and error types of
``KeyValueStore``.
"""

from .base import KeyValueStore
from .json_file import JsonFileStore
from .memory import MemoryStore
from .null import NullStore
from .sqlite import SqliteStore

__all__ = [
    "KeyValueStore",
    "JsonFileStore",
    "MemoryStore",
    "NullStore",
    "SqliteStore",
]
