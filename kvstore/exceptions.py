"""Exception classes shared by every key-value store backend."""

from __future__ import annotations

from pathlib import Path
from typing import Any


class StoreError(Exception):
    """Base exception for key-value store errors."""

    pass


class InvalidKeyError(StoreError, TypeError):
    """Raised when a key is neither a string nor an integer."""

    def __init__(self, key: Any, message: str | None = None):
        """Initialize with the offending key."""
        self.key = key
        super().__init__(
            message
            or f"Keys must be strings or integers, got {type(key).__name__}: {key!r}"
        )


class UnsupportedValueError(StoreError, ValueError):
    """Raised when a value lies outside the storable value domain."""

    def __init__(self, value: Any, reason: str):
        """Initialize with the rejected value and the reason."""
        self.value = value
        self.reason = reason
        super().__init__(f"Unsupported value of type {type(value).__name__}: {reason}")


class SerializationFailedError(StoreError):
    """Raised when a supported value still fails to encode."""

    def __init__(self, value: Any, details: str = ""):
        """Initialize with the value and encoder details."""
        self.value = value
        message = f"Could not serialize value of type {type(value).__name__}"
        if details:
            message += f": {details}"
        super().__init__(message)


class _IOStoreError(StoreError):
    """Common base for I/O failures that keep the OS error details."""

    action = "access"

    def __init__(
        self,
        path: Path | str | None,
        details: str = "",
        errno: int | None = None,
    ):
        """Initialize with path, details and optional OS error number."""
        self.path = str(path) if path is not None else None
        self.errno = errno
        self.strerror = details or None
        message = f"Could not {self.action} store"
        if self.path:
            message += f" at {self.path}"
        if details:
            message += f": {details}"
        super().__init__(message)

    @classmethod
    def from_os_error(cls, path: Path | str | None, error: OSError):
        """Build the exception from an ``OSError``."""
        return cls(path, error.strerror or str(error), errno=error.errno)


class ReadError(_IOStoreError):
    """Raised when the backing storage cannot be read."""

    action = "read"


class WriteError(_IOStoreError):
    """Raised when the backing storage cannot be written."""

    action = "write"


class CorruptDocumentError(ReadError):
    """Raised when the stored document is not a JSON object."""

    def __init__(self, path: Path | str | None, details: str = ""):
        """Initialize with path and decoder details."""
        super().__init__(path, details or "document is not a JSON object")


class ConfigError(StoreError, ValueError):
    """Raised when store configuration is invalid."""

    pass
