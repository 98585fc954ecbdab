"""Key-value store persisted as a single JSON document."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ..engine import AtomicFileEngine
from ..values import MAX_FLOAT
from .base import KeyValueStore

logger = logging.getLogger(__name__)


class JsonFileStore(KeyValueStore):
    """Durable store keeping the whole key space in one JSON file.

    Every call re-reads the file, so changes made by other handles or other
    processes are always visible. Writes are serialized with an advisory lock
    and published atomically.

    JSON restricts the accepted values: binary data is rejected, and floats
    must be finite with a magnitude of at most ``MAX_FLOAT``.
    """

    MAX_FLOAT = MAX_FLOAT

    def __init__(self, path: Path | str, create_missing_directories: bool = True):
        """Bind the store to ``path``.

        Args:
            path: Location of the JSON document. Neither the file nor its
                directory need to exist yet.
            create_missing_directories: Create missing parent directories on
                the first write instead of failing with ``WriteError``.
        """
        self._engine = AtomicFileEngine(path, create_missing_directories)

    @property
    def path(self) -> Path:
        return self._engine.path

    def _set_impl(self, key: str, value: Any) -> None:
        def apply(document: dict[str, Any]) -> tuple[bool, None]:
            document[key] = value
            return True, None

        self._engine.mutate(apply)
        logger.debug(f"Set {key!r} in {self.path}")

    def _get_impl(self, key: str, default: Any) -> Any:
        return self._engine.read().get(key, default)

    def _remove_impl(self, key: str) -> bool:
        def apply(document: dict[str, Any]) -> tuple[bool, bool]:
            if key not in document:
                return False, False
            del document[key]
            return True, True

        return self._engine.mutate(apply, create=False)

    def _has_impl(self, key: str) -> bool:
        return key in self._engine.read()

    def clear(self) -> None:
        """Empty the document; the file itself is kept.

        A corrupt document is replaced as well, since its contents are not
        needed.
        """
        self._engine.reset()

    def __repr__(self) -> str:
        return f"JsonFileStore({str(self.path)!r})"
