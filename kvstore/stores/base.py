"""Base key-value store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..validators import check_value, normalize_key


class KeyValueStore(ABC):
    """Abstract base class for key-value stores.

    Keys are strings or integers and are normalized to strings, so ``1`` and
    ``"1"`` refer to the same entry. Values must belong to the closed domain
    described in ``kvstore.values``.

    Public methods validate their input and then delegate to the ``_*_impl``
    hooks, so no backend ever sees a malformed key or unsupported value.
    """

    def set(self, key: str | int, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value.

        Raises:
            InvalidKeyError: If the key is not a string or integer.
            UnsupportedValueError: If the value is outside the storable domain.
            SerializationFailedError: If the value cannot be encoded.
            WriteError: If the store cannot be written.
        """
        name = normalize_key(key)
        check_value(value)
        self._set_impl(name, value)

    def get(self, key: str | int, default: Any = None) -> Any:
        """Return the value of ``key``, or ``default`` if it is not set.

        Raises:
            InvalidKeyError: If the key is not a string or integer.
            ReadError: If the store cannot be read.
        """
        return self._get_impl(normalize_key(key), default)

    def remove(self, key: str | int) -> bool:
        """Remove ``key``; return whether it was present.

        Raises:
            InvalidKeyError: If the key is not a string or integer.
            WriteError: If the store cannot be written.
        """
        return self._remove_impl(normalize_key(key))

    def has(self, key: str | int) -> bool:
        """Return whether ``key`` is set.

        Raises:
            InvalidKeyError: If the key is not a string or integer.
            ReadError: If the store cannot be read.
        """
        return self._has_impl(normalize_key(key))

    @abstractmethod
    def clear(self) -> None:
        """Remove all keys.

        Raises:
            WriteError: If the store cannot be written.
        """
        pass

    @abstractmethod
    def _set_impl(self, key: str, value: Any) -> None:
        """Store an already validated value."""
        pass

    @abstractmethod
    def _get_impl(self, key: str, default: Any) -> Any:
        """Look up a normalized key."""
        pass

    @abstractmethod
    def _remove_impl(self, key: str) -> bool:
        """Remove a normalized key."""
        pass

    @abstractmethod
    def _has_impl(self, key: str) -> bool:
        """Test a normalized key."""
        pass

    def close(self) -> None:
        """Release backend resources (no-op by default)."""
        pass

    def __enter__(self) -> KeyValueStore:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
