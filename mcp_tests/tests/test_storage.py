import json

import pytest

from core.errors import StorageError
from storage.json_file_store import JsonFileStore
from storage.memory_store import MemoryStore


def test_memory_store_get_set_remove():
    s = MemoryStore()

    assert s.get("k") is None
    s.set("k", "v")
    assert s.get("k") == "v"
    s.remove("k")
    s.remove("k")
    assert s.get("k") is None


def test_json_file_store_survives_reopen(tmp_path):
    path = tmp_path / "state" / "governor.json"

    s = JsonFileStore(path)
    s.set("membership_a@example.com", "basic")
    s.set("dev_test_tier", "expert")
    s.remove("dev_test_tier")

    reopened = JsonFileStore(path)
    assert reopened.get("membership_a@example.com") == "basic"
    assert reopened.get("dev_test_tier") is None
    assert json.loads(path.read_text(encoding="utf-8")) == {"membership_a@example.com": "basic"}


def test_json_file_store_missing_file_is_empty(tmp_path):
    s = JsonFileStore(tmp_path / "nope.json")
    assert s.keys() == []


@pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
def test_json_file_store_corrupt_file_is_empty(tmp_path, content):
    path = tmp_path / "state.json"
    path.write_text(content, encoding="utf-8")

    s = JsonFileStore(path)
    assert s.keys() == []


def test_json_file_store_write_failure_raises_storage_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    s = JsonFileStore(blocker / "state.json")
    with pytest.raises(StorageError):
        s.set("k", "v")
