"""Pytest configuration and fixtures."""

import os
import tempfile
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolate_environment():
    """Isolate environment variables for each test.

    Prevents ``KVSTORE_*`` variables set by one test from leaking into
    another.
    """
    original_env = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def temp_dir():
    """Temporary directory for test data."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store_path(temp_dir):
    """Path of a JSON document that does not exist yet."""
    return temp_dir / "data.json"
