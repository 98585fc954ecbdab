"""Store configuration and explicit store construction.

Configuration is read from a YAML file and overridden by environment
variables:

- ``KVSTORE_BACKEND``: ``json``, ``sqlite``, ``memory`` or ``null``
- ``KVSTORE_PATH``: path of the backing file
- ``KVSTORE_CREATE_MISSING_DIRECTORIES``: ``1``/``true``/``yes``/``on`` or
  ``0``/``false``/``no``/``off``

There is no implicit default location: file backends must be given a path.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import msgspec
import yaml

from .exceptions import ConfigError
from .stores import JsonFileStore, KeyValueStore, MemoryStore, NullStore, SqliteStore

Backend = Literal["json", "sqlite", "memory", "null"]

FILE_BACKENDS = ("json", "sqlite")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class StoreConfig(msgspec.Struct, frozen=True, kw_only=True, forbid_unknown_fields=True):
    """Settings needed to construct a store."""

    backend: Backend = "json"
    path: str | None = None
    create_missing_directories: bool = True


def read_config_file(path: Path) -> dict[str, Any]:
    """Load a configuration mapping from a YAML file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Error reading config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def env_overrides() -> dict[str, Any]:
    """Collect configuration values from ``KVSTORE_*`` variables."""
    overrides: dict[str, Any] = {}
    if backend := os.environ.get("KVSTORE_BACKEND"):
        overrides["backend"] = backend.strip().lower()
    if path := os.environ.get("KVSTORE_PATH"):
        overrides["path"] = path
    if (raw := os.environ.get("KVSTORE_CREATE_MISSING_DIRECTORIES")) is not None:
        overrides["create_missing_directories"] = _parse_bool(
            "KVSTORE_CREATE_MISSING_DIRECTORIES", raw
        )
    return overrides


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def load_config(config_file: Path | str | None = None, **overrides: Any) -> StoreConfig:
    """Build a ``StoreConfig`` from a file, the environment and keyword overrides.

    Later sources win: file, then environment, then ``overrides``.

    Raises:
        ConfigError: If a source is unreadable or a field is invalid.
    """
    data: dict[str, Any] = {}
    if config_file is not None:
        data.update(read_config_file(Path(config_file)))
    data.update(env_overrides())
    data.update({k: v for k, v in overrides.items() if v is not None})

    if isinstance(data.get("path"), Path):
        data["path"] = str(data["path"])

    try:
        return msgspec.convert(data, StoreConfig)
    except msgspec.ValidationError as e:
        raise ConfigError(f"Invalid store configuration: {e}") from e


def create_store(config: StoreConfig) -> KeyValueStore:
    """Construct the backend described by ``config``.

    Raises:
        ConfigError: If a file backend has no path.
    """
    if config.backend in FILE_BACKENDS and not config.path:
        raise ConfigError(f"The {config.backend!r} backend requires a path")

    if config.backend == "json":
        return JsonFileStore(config.path, config.create_missing_directories)
    if config.backend == "sqlite":
        return SqliteStore(config.path, config.create_missing_directories)
    if config.backend == "memory":
        return MemoryStore()
    return NullStore()
