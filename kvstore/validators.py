"""Key and value validation shared by all store backends.

Validation always runs before any I/O, so a malformed key or an
unsupported value never reaches a backend.

Keys are normalized with ``str()``. The integer ``1`` and the string
``"1"`` therefore address the same entry in every backend.
"""

from __future__ import annotations

from typing import Any

from .exceptions import InvalidKeyError, UnsupportedValueError
from .values import INT_MAX, INT_MIN, MAX_DEPTH, ValueKind, classify


def validate_key(key: Any) -> None:
    """Check that a key is a string or a 64-bit integer.

    Args:
        key: Key supplied by the caller.

    Raises:
        InvalidKeyError: If the key has any other type.
    """
    if isinstance(key, bool) or not isinstance(key, (str, int)):
        raise InvalidKeyError(key)
    if isinstance(key, int) and not INT_MIN <= key <= INT_MAX:
        raise InvalidKeyError(key, f"Integer key out of 64-bit range: {key}")


def normalize_key(key: Any) -> str:
    """Validate a key and return its string form."""
    validate_key(key)
    return str(key)


def check_value(value: Any) -> ValueKind:
    """Check that a value and everything it contains is storable.

    The walk uses an explicit stack, so arbitrarily deep input is rejected
    with ``UnsupportedValueError`` rather than exhausting the interpreter's
    recursion limit.

    Args:
        value: Value supplied by the caller.

    Returns:
        The variant of the top-level value.

    Raises:
        UnsupportedValueError: If any part of the value lies outside the
            storable domain, nests deeper than ``MAX_DEPTH``, or a container
            references itself.
    """
    top = classify(value)

    # (item, depth, leaving): leaving entries pop a container off the path
    stack: list[tuple[Any, int, bool]] = [(value, 1, False)]
    path: set[int] = set()
    while stack:
        item, depth, leaving = stack.pop()
        if leaving:
            path.discard(id(item))
            continue

        kind = classify(item)
        if not kind.is_container:
            continue
        if depth > MAX_DEPTH:
            raise UnsupportedValueError(value, f"nesting too deep (more than {MAX_DEPTH} levels)")
        if id(item) in path:
            raise UnsupportedValueError(value, "self-referencing containers cannot be stored")

        path.add(id(item))
        stack.append((item, depth, True))
        if kind is ValueKind.LIST:
            children = item
        else:
            for name in item:
                if not isinstance(name, str):
                    raise UnsupportedValueError(
                        value, f"mapping keys must be strings, got {type(name).__name__}"
                    )
            children = item.values()
        stack.extend((child, depth + 1, False) for child in children)
    return top
