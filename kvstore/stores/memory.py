"""In-memory key-value store."""

from copy import deepcopy
from threading import RLock
from typing import Any

from .base import KeyValueStore


class MemoryStore(KeyValueStore):
    """Process-local store backed by a dict.

    Values are copied on the way in and out, so callers can never mutate
    stored data through a reference they hold. Accepted values are the same
    as for the file-backed store.
    """

    def __init__(self):
        self._lock = RLock()
        self._data: dict[str, Any] = {}

    def _set_impl(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = deepcopy(value)

    def _get_impl(self, key: str, default: Any) -> Any:
        with self._lock:
            if key in self._data:
                return deepcopy(self._data[key])
            return default

    def _remove_impl(self, key: str) -> bool:
        with self._lock:
            if key in self._data:
                del self._data[key]
                return True
            return False

    def _has_impl(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def clear(self) -> None:
        """Clear all data."""
        with self._lock:
            self._data.clear()

    def get_size(self) -> int:
        """Get the number of stored items."""
        with self._lock:
            return len(self._data)
