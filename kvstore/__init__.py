"""Key-value storage with interchangeable backends.

Stores accept string or integer keys and values from a closed JSON-like
domain (null, bool, int, float, str, list, dict). The reference backend,
``JsonFileStore``, keeps the whole key space in one JSON document with
atomic, lock-protected updates that are safe across processes.
"""

from kvstore.config import StoreConfig, create_store, load_config
from kvstore.engine import AtomicFileEngine
from kvstore.exceptions import (
    ConfigError,
    CorruptDocumentError,
    InvalidKeyError,
    ReadError,
    SerializationFailedError,
    StoreError,
    UnsupportedValueError,
    WriteError,
)
from kvstore.stores import (
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
    NullStore,
    SqliteStore,
)
from kvstore.validators import check_value, normalize_key, validate_key
from kvstore.values import MAX_DEPTH, MAX_FLOAT, ValueKind, classify

__version__ = "1.0.0"

__all__ = [
    "MAX_DEPTH",
    "MAX_FLOAT",
    "AtomicFileEngine",
    "ConfigError",
    "CorruptDocumentError",
    "InvalidKeyError",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "NullStore",
    "ReadError",
    "SerializationFailedError",
    "SqliteStore",
    "StoreConfig",
    "StoreError",
    "UnsupportedValueError",
    "ValueKind",
    "WriteError",
    "check_value",
    "classify",
    "create_store",
    "load_config",
    "normalize_key",
    "validate_key",
]
