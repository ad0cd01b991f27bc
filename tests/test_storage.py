"""Tests for the key-value store implementations."""
import json
from pathlib import Path

import pytest

from event_reminder.errors import PersistenceError
from event_reminder.storage import JsonFileKeyValueStore, MemoryKeyValueStore
from event_reminder.store import EventStore


def test_memory_store_get_set_clear() -> None:
    kv = MemoryKeyValueStore()
    assert kv.get("missing") is None
    assert kv.set("key", "value") is True
    assert kv.get("key") == "value"
    kv.clear()
    assert kv.get("key") is None


def test_memory_store_failure_injection() -> None:
    kv = MemoryKeyValueStore({"key": "value"})
    kv.fail_writes = True
    assert kv.set("key", "other") is False
    assert kv.data["key"] == "value"
    kv.fail_reads = True
    with pytest.raises(PersistenceError):
        kv.get("key")


def test_json_file_store_round_trip(tmp_path: Path) -> None:
    """Several keys share one JSON object file."""
    path = tmp_path / "nested" / "data.json"
    kv = JsonFileKeyValueStore(path)
    assert kv.get("a") is None
    assert kv.set("a", "1") is True
    assert kv.set("b", "[]") is True

    assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1", "b": "[]"}
    assert JsonFileKeyValueStore(path).get("a") == "1"
    assert not path.with_suffix(".json.tmp").exists()


def test_json_file_store_clear(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    kv = JsonFileKeyValueStore(path)
    kv.set("a", "1")
    kv.clear()
    assert not path.exists()
    kv.clear()


def test_json_file_store_corrupt_file_raises_on_read(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    path.write_text("{broken", encoding="utf-8")
    with pytest.raises(PersistenceError):
        JsonFileKeyValueStore(path).get("a")


def test_json_file_store_moves_corrupt_file_aside_on_write(tmp_path: Path) -> None:
    """The unreadable file is kept as data.json.corrupt, not silently lost."""
    path = tmp_path / "data.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    kv = JsonFileKeyValueStore(path)
    assert kv.set("a", "1") is True
    assert kv.get("a") == "1"
    assert (tmp_path / "data.json.corrupt").read_text(encoding="utf-8") == "[1, 2, 3]"


def test_json_file_store_write_failure_returns_false(tmp_path: Path) -> None:
    """A path that cannot be written reports failure instead of raising."""
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory", encoding="utf-8")
    kv = JsonFileKeyValueStore(blocker / "data.json")
    assert kv.set("a", "1") is False


def test_event_store_recovers_from_corrupt_file(tmp_path: Path) -> None:
    """The event store starts empty over a corrupt data file and can still save."""
    path = tmp_path / "data.json"
    path.write_text("{broken", encoding="utf-8")
    store = EventStore(JsonFileKeyValueStore(path))
    assert store.count() == 0

    store.add("Fresh start", "2026-01-01")
    assert store.last_save_ok is True
    assert EventStore(JsonFileKeyValueStore(path)).count() == 1
