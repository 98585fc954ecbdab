"""Atomic, lock-disciplined access to a single JSON document on disk.

Every mutation runs as a read-modify-write cycle under an exclusive
``flock`` and publishes the new document with an atomic rename, so readers
only ever see a complete document. Reads run under a shared lock.

The lock lives on a sidecar ``<name>.lock`` file next to the document:
the document itself is replaced on every write and so cannot carry a
stable lock. Each call opens its own lock descriptor, which makes the
lock exclusive between threads of one process as well as between
processes.
"""

from __future__ import annotations

import errno
import fcntl
import logging
import os
import stat
import tempfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

from .exceptions import CorruptDocumentError, ReadError, WriteError
from .values import decode_document, encode_document

logger = logging.getLogger(__name__)

T = TypeVar("T")

Mutation = Callable[[dict[str, Any]], tuple[bool, T]]


class AtomicFileEngine:
    """Owns the on-disk document at ``path``."""

    LOCK_SUFFIX = ".lock"

    def __init__(self, path: Path | str, create_missing_directories: bool = True):
        """Bind the engine to a document path.

        Args:
            path: Location of the JSON document.
            create_missing_directories: Create missing parent directories on
                the first write. When False a missing directory makes writes
                fail with ``WriteError``.
        """
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + self.LOCK_SUFFIX)
        self.create_missing_directories = create_missing_directories

    @contextmanager
    def _locked(self, exclusive: bool) -> Iterator[None]:
        """Hold the advisory lock for the duration of the block.

        Only the exclusive path creates the lock file. Shared locks open an
        existing lock file read-only, so readers need no write access to the
        directory. Without a lock file no writer has run yet, and the read
        goes ahead unlocked: documents are only ever published by rename.
        """
        if exclusive:
            fd = os.open(self.lock_path, os.O_RDWR | os.O_CREAT, 0o644)
        else:
            try:
                fd = os.open(self.lock_path, os.O_RDONLY)
            except FileNotFoundError:
                yield
                return

        try:
            fcntl.flock(fd, fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
            logger.debug(
                f"Acquired {'exclusive' if exclusive else 'shared'} lock on {self.lock_path}"
            )
            try:
                yield
            finally:
                fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)

    def read(self) -> dict[str, Any]:
        """Return the current document as a fresh dict.

        A missing document (or missing directory) reads as empty and is
        not created.

        Raises:
            CorruptDocumentError: If the file is not a JSON object.
            ReadError: On any OS-level failure.
        """
        if not self.path.exists():
            return {}
        try:
            with self._locked(exclusive=False):
                return self._load()
        except OSError as e:
            raise ReadError.from_os_error(self.path, e) from e

    def mutate(self, mutation: Mutation[T], create: bool = True) -> T:
        """Apply ``mutation`` to the document under the exclusive lock.

        The mutation receives the decoded document, changes it in place and
        returns ``(changed, result)``. The document is only rewritten when
        ``changed`` is true.

        Args:
            mutation: Callable performing the change.
            create: Provision the directory and an empty document if they are
                missing. With False, a missing document is treated as empty
                and left absent.

        Returns:
            The ``result`` half of the mutation's return value.

        Raises:
            WriteError: On OS-level failures, a missing directory that may not
                be created, or a corrupt existing document.
        """
        try:
            if create:
                self._ensure_directory()
            elif not self.path.parent.is_dir():
                return mutation({})[1]

            with self._locked(exclusive=True):
                if create and not self.path.exists():
                    logger.debug(f"Initializing empty document at {self.path}")
                    self._replace({})
                try:
                    document = self._load()
                except CorruptDocumentError as e:
                    raise WriteError(self.path, e.strerror or str(e)) from e

                changed, result = mutation(document)
                if changed:
                    self._replace(document)
                return result
        except OSError as e:
            raise WriteError.from_os_error(self.path, e) from e

    def reset(self) -> None:
        """Replace the document with an empty one under the exclusive lock.

        The old contents are not decoded, so this also recovers a corrupt
        document. A missing document stays missing and an already empty one
        is not rewritten.

        Raises:
            WriteError: On OS-level failures.
        """
        if not self.path.parent.is_dir():
            return
        try:
            with self._locked(exclusive=True):
                if not self.path.exists():
                    return
                try:
                    if not self._load():
                        return
                except CorruptDocumentError:
                    logger.warning(f"Discarding corrupt document at {self.path}")
                self._replace({})
        except OSError as e:
            raise WriteError.from_os_error(self.path, e) from e

    def _ensure_directory(self) -> None:
        parent = self.path.parent
        if parent.is_dir():
            return
        if not self.create_missing_directories:
            raise WriteError(
                self.path,
                f"directory {parent} does not exist",
                errno=errno.ENOENT,
            )
        logger.debug(f"Creating directory {parent}")
        parent.mkdir(parents=True, exist_ok=True)

    def _load(self) -> dict[str, Any]:
        try:
            data = self.path.read_bytes()
        except FileNotFoundError:
            return {}
        return decode_document(data, self.path)

    def _replace(self, document: dict[str, Any]) -> None:
        """Write ``document`` to a temp file and rename it over the path."""
        payload = encode_document(document)

        temp_fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with open(temp_fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            self._copy_mode(temp_path)
            os.replace(temp_path, self.path)
        except Exception:
            Path(temp_path).unlink(missing_ok=True)
            raise

        logger.debug(f"Replaced {self.path} ({len(payload)} bytes, {len(document)} keys)")
        self._sync_directory()

    def _copy_mode(self, temp_path: str) -> None:
        # mkstemp creates 0600 files; keep the permissions of an existing document
        try:
            mode = stat.S_IMODE(os.stat(self.path).st_mode)
        except FileNotFoundError:
            return
        os.chmod(temp_path, mode)

    def _sync_directory(self) -> None:
        try:
            dir_fd = os.open(self.path.parent, os.O_RDONLY)
        except OSError:
            return
        try:
            os.fsync(dir_fd)
        except OSError as e:
            logger.debug(f"Directory fsync not supported for {self.path.parent}: {e}")
        finally:
            os.close(dir_fd)
