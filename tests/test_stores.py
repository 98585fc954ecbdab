"""Tests for key-value store implementations.

Every backend must conform to the same interface and pass the same
contract tests. ``JsonFileStore`` is the reference implementation; the
other backends are checked for equivalent behavior (same error types,
same key normalization).
"""

import socket
import threading

import pytest

from kvstore import (
    MAX_FLOAT,
    InvalidKeyError,
    JsonFileStore,
    MemoryStore,
    NullStore,
    SqliteStore,
    UnsupportedValueError,
)

STORABLE_VALUES = [
    None,
    True,
    False,
    0,
    -1,
    2**63 - 1,
    -(2**63),
    0.0,
    3.14,
    -2.5,
    1.0e-300,
    MAX_FLOAT,
    -MAX_FLOAT,
    "",
    "foo",
    "αβγδ",
    "Line\nbreak and\ttab",
    [],
    [1, "a", None, [True, 1.5]],
    {},
    {"nested": {"list": [1, 2, 3], "dict": {"a": "b"}, "null": None, "bool": True}},
]

INVALID_KEYS = [None, 1.5, True, b"key", ("a",), ["a"], {"a": 1}, object(), 2**64]


def _nested(depth):
    value = []
    for _ in range(depth):
        value = [value]
    return value


def _self_referencing_list():
    value = [1]
    value.append(value)
    return value


class StoreContract:
    """Contract tests that all backends must pass."""

    def test_set_then_get(self, store):
        """set("foo", "bar") makes get("foo") return "bar"."""
        store.set("foo", "bar")

        assert store.get("foo") == "bar"

    def test_missing_key(self, store):
        """Missing keys are absent and return the default."""
        assert store.has("missing") is False
        assert store.get("missing") is None
        assert store.get("missing", "def") == "def"

    @pytest.mark.parametrize("value", STORABLE_VALUES)
    def test_round_trip(self, store, value):
        """Every value of the closed domain comes back equal."""
        store.set("key", value)

        assert store.get("key") == value
        assert type(store.get("key")) is type(value)

    def test_overwrite_existing_key(self, store):
        """Setting an existing key replaces its value."""
        store.set("key", {"version": 1})
        store.set("key", {"version": 2})

        assert store.get("key") == {"version": 2}

    def test_remove_semantics(self, store):
        """remove() is True once per insert, then False."""
        store.set("foo", "bar")

        assert store.remove("foo") is True
        assert store.remove("foo") is False
        assert store.has("foo") is False

    def test_remove_never_set(self, store):
        assert store.remove("never") is False

    def test_clear_removes_all_keys(self, store):
        """clear() removes every key."""
        store.set("a", 1)
        store.set("b", 2)

        store.clear()

        assert store.has("a") is False
        assert store.has("b") is False
        assert store.get("a") is None

    def test_clear_twice(self, store):
        store.set("a", 1)
        store.clear()
        store.clear()

        assert store.has("a") is False

    def test_store_usable_after_clear(self, store):
        store.set("a", 1)
        store.clear()
        store.set("a", 2)

        assert store.get("a") == 2

    def test_integer_keys(self, store):
        """Integer keys work for every operation."""
        store.set(42, "answer")

        assert store.has(42) is True
        assert store.get(42) == "answer"
        assert store.remove(42) is True
        assert store.has(42) is False

    def test_integer_and_string_keys_collide(self, store):
        """1 and "1" normalize to the same key."""
        store.set(1, "int")

        assert store.get("1") == "int"

        store.set("1", "str")

        assert store.get(1) == "str"
        assert store.remove(1) is True
        assert store.has("1") is False

    @pytest.mark.parametrize("key", INVALID_KEYS)
    def test_invalid_keys_rejected(self, store, key):
        """Keys that are not str or int raise InvalidKeyError everywhere."""
        with pytest.raises(InvalidKeyError):
            store.set(key, "value")
        with pytest.raises(InvalidKeyError):
            store.get(key)
        with pytest.raises(InvalidKeyError):
            store.has(key)
        with pytest.raises(InvalidKeyError):
            store.remove(key)

    @pytest.mark.parametrize(
        "value",
        [
            b"binary",
            bytearray(b"\x00\xff"),
            memoryview(b"abc"),
            float("inf"),
            float("-inf"),
            float("nan"),
            1.0e400,
            MAX_FLOAT * 2,
            ("tuple",),
            {"set"},
            object(),
            2**64,
            {1: "non-string key"},
            [1, b"nested binary"],
            {"deep": {"deeper": [float("nan")]}},
        ],
    )
    def test_unsupported_values_rejected(self, store, value):
        """Values outside the domain raise UnsupportedValueError."""
        with pytest.raises(UnsupportedValueError):
            store.set("key", value)

        assert store.has("key") is False

    def test_opaque_handles_rejected(self, store, temp_dir):
        """File objects, sockets and locks are not storable."""
        with open(temp_dir / "handle.txt", "w") as handle:
            with pytest.raises(UnsupportedValueError):
                store.set("bin", handle)

        with socket.socket() as sock:
            with pytest.raises(UnsupportedValueError):
                store.set("bin", sock)

        with pytest.raises(UnsupportedValueError):
            store.set("bin", threading.Lock())

    def test_self_referencing_value_rejected(self, store):
        with pytest.raises(UnsupportedValueError, match="self-referencing"):
            store.set("loop", _self_referencing_list())

    def test_deeply_nested_value_rejected(self, store):
        with pytest.raises(UnsupportedValueError, match="nesting too deep"):
            store.set("deep", _nested(1500))

        assert store.has("deep") is False

    def test_shared_subvalue_accepted(self, store):
        """The same object may appear twice as long as it is not a cycle."""
        shared = [1, 2]
        store.set("key", {"a": shared, "b": shared})

        assert store.get("key") == {"a": [1, 2], "b": [1, 2]}

    def test_float_boundary(self, store):
        """1.0e400 is rejected, 3.14 round-trips exactly."""
        with pytest.raises(UnsupportedValueError):
            store.set("f", 1.0e400)

        store.set("f", 3.14)

        assert store.get("f") == 3.14

    def test_returned_values_are_copies(self, store):
        """Mutating a returned value does not change the stored value."""
        store.set("key", {"list": [1, 2]})

        value = store.get("key")
        value["list"].append(3)

        assert store.get("key") == {"list": [1, 2]}

    def test_stored_values_are_copies(self, store):
        value = {"list": [1, 2]}
        store.set("key", value)
        value["list"].append(3)

        assert store.get("key") == {"list": [1, 2]}

    def test_concurrent_writers(self, store):
        """Threads writing disjoint keys lose no update."""
        errors = []

        def writer(prefix, count):
            try:
                for i in range(count):
                    store.set(f"{prefix}_{i}", {"value": i})
            except Exception as e:
                errors.append(e)

        threads = [
            threading.Thread(target=writer, args=(f"thread{i}", 10)) for i in range(3)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        for i in range(3):
            for j in range(10):
                assert store.get(f"thread{i}_{j}") == {"value": j}


class TestJsonFileStore(StoreContract):
    """Run the contract against the file-backed store."""

    @pytest.fixture
    def store(self, store_path):
        return JsonFileStore(store_path)

    def test_invalid_key_never_touches_disk(self, store, store_path):
        with pytest.raises(InvalidKeyError):
            store.set(None, "value")

        assert not store_path.exists()
        assert not store_path.parent.joinpath("data.json.lock").exists()

    def test_unsupported_value_never_touches_disk(self, store, store_path):
        with pytest.raises(UnsupportedValueError):
            store.set("key", b"binary")

        assert not store_path.exists()

    def test_max_float_exposed_on_class(self):
        assert JsonFileStore.MAX_FLOAT == MAX_FLOAT


class TestMemoryStore(StoreContract):
    """Run the contract against the in-memory store."""

    @pytest.fixture
    def store(self):
        return MemoryStore()

    def test_get_size(self, store):
        store.set("a", 1)
        store.set(1, 2)
        store.set("1", 3)

        assert store.get_size() == 2


class TestSqliteStore(StoreContract):
    """Run the contract against the SQLite store."""

    @pytest.fixture
    def store(self, temp_dir):
        store = SqliteStore(temp_dir / "store.db")
        yield store
        store.close()

    def test_reads_do_not_create_database(self, temp_dir):
        path = temp_dir / "missing" / "store.db"
        store = SqliteStore(path)

        assert store.get("key", "def") == "def"
        assert store.has("key") is False
        assert not path.parent.exists()

    def test_creates_missing_directories(self, temp_dir):
        path = temp_dir / "new" / "store.db"
        with SqliteStore(path) as store:
            store.set("foo", "bar")

        assert path.exists()

    def test_persists_across_connections(self, temp_dir):
        path = temp_dir / "store.db"
        with SqliteStore(path) as store:
            store.set("foo", [1, 2.5, "x"])

        with SqliteStore(path) as store:
            assert store.get("foo") == [1, 2.5, "x"]


class TestNullStore:
    """NullStore validates like every backend but keeps nothing."""

    @pytest.fixture
    def store(self):
        return NullStore()

    def test_forgets_writes(self, store):
        store.set("foo", "bar")

        assert store.has("foo") is False
        assert store.get("foo", "def") == "def"
        assert store.remove("foo") is False

    def test_clear_is_noop(self, store):
        store.clear()

    @pytest.mark.parametrize("key", INVALID_KEYS)
    def test_invalid_keys_rejected(self, store, key):
        with pytest.raises(InvalidKeyError):
            store.set(key, "value")

    def test_unsupported_values_rejected(self, store):
        with pytest.raises(UnsupportedValueError):
            store.set("key", b"binary")
