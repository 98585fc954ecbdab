"""Storable values and their JSON document encoding.

The set of values a store accepts is closed. Every value is exactly one
of the ``ValueKind`` variants:

- NULL: ``None``
- BOOL: ``True`` / ``False``
- INT: ``int`` within the signed 64-bit range
- FLOAT: finite ``float`` with ``abs(value) <= MAX_FLOAT``
- STRING: ``str``
- LIST: ``list`` of values
- MAP: ``dict`` from ``str`` to values

Anything else (bytes, tuples, sets, file objects, sockets, arbitrary
objects) is rejected by ``classify`` instead of failing later at encode
time. Documents are encoded and decoded with ``msgspec.json``.
"""

from __future__ import annotations

import enum
import math
from typing import Any

import msgspec

from .exceptions import CorruptDocumentError, SerializationFailedError, UnsupportedValueError

# Chosen interoperability bound: integral floats up to 2**53 also fit exactly
# in readers that parse numbers as integers. Larger finite floats would still
# round-trip through msgspec but are rejected.
MAX_FLOAT = float(2**53)

# Deepest container nesting accepted in a value.
MAX_DEPTH = 256

INT_MIN = -(2**63)
INT_MAX = 2**63 - 1

_encoder = msgspec.json.Encoder()
_document_decoder = msgspec.json.Decoder(dict[str, Any])
_value_decoder = msgspec.json.Decoder()


class ValueKind(enum.Enum):
    """Variants of the storable value domain."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    LIST = "list"
    MAP = "map"

    @property
    def is_container(self) -> bool:
        return self in (ValueKind.LIST, ValueKind.MAP)


def classify(value: Any) -> ValueKind:
    """Return the variant of a single value without descending into it.

    Raises:
        UnsupportedValueError: If the value is not one of the variants.
    """
    if value is None:
        return ValueKind.NULL
    # bool subclasses int, so it must be checked first
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        if not INT_MIN <= value <= INT_MAX:
            raise UnsupportedValueError(value, "integer outside the 64-bit range")
        return ValueKind.INT
    if isinstance(value, float):
        if not math.isfinite(value):
            raise UnsupportedValueError(value, "non-finite floats cannot be stored")
        if abs(value) > MAX_FLOAT:
            raise UnsupportedValueError(
                value, f"float magnitude exceeds MAX_FLOAT ({MAX_FLOAT!r})"
            )
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, list):
        return ValueKind.LIST
    if isinstance(value, dict):
        return ValueKind.MAP
    if isinstance(value, (bytes, bytearray, memoryview)):
        raise UnsupportedValueError(value, "binary data cannot be stored")
    raise UnsupportedValueError(value, "only null, bool, int, float, str, list and dict are storable")


def encode_value(value: Any) -> bytes:
    """Encode one already validated value to JSON bytes."""
    try:
        return _encoder.encode(value)
    except (msgspec.EncodeError, TypeError, ValueError, OverflowError) as e:
        raise SerializationFailedError(value, str(e)) from e


def decode_value(data: bytes | str) -> Any:
    """Decode JSON produced by ``encode_value``."""
    return _value_decoder.decode(data)


def encode_document(document: dict[str, Any]) -> bytes:
    """Encode a whole key space to a JSON object document."""
    try:
        return _encoder.encode(document) + b"\n"
    except (msgspec.EncodeError, TypeError, ValueError, OverflowError) as e:
        raise SerializationFailedError(document, str(e)) from e


def decode_document(data: bytes, path: Any = None) -> dict[str, Any]:
    """Decode document bytes; empty input is an empty document.

    Raises:
        CorruptDocumentError: If the bytes are not a JSON object.
    """
    if not data.strip():
        return {}
    try:
        return _document_decoder.decode(data)
    except msgspec.DecodeError as e:
        raise CorruptDocumentError(path, str(e)) from e
