"""Store that discards everything written to it."""

from typing import Any

from .base import KeyValueStore


class NullStore(KeyValueStore):
    """Accepts every valid write and forgets it immediately.

    Keys and values are still validated, so code exercised against a
    ``NullStore`` fails the same way it would against a real backend.
    """

    def _set_impl(self, key: str, value: Any) -> None:
        pass

    def _get_impl(self, key: str, default: Any) -> Any:
        return default

    def _remove_impl(self, key: str) -> bool:
        return False

    def _has_impl(self, key: str) -> bool:
        return False

    def clear(self) -> None:
        pass
