from __future__ import annotations

import json
from pathlib import Path

from serverdeck.core.storage import JsonFileStore, MemoryStore


def test_values_survive_reopen(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    store = JsonFileStore(path)
    store.set("hosts", {"https://a": {"url": "https://a"}})
    store.set("sidebar_closed", True)

    reopened = JsonFileStore(path)

    assert reopened.get("hosts") == {"https://a": {"url": "https://a"}}
    assert reopened.get("sidebar_closed") is True
    assert reopened.get("missing", "fallback") == "fallback"


def test_returned_values_are_copies(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "state.json")
    store.set("sort_order", ["https://a"])

    order = store.get("sort_order")
    order.append("https://b")

    assert store.get("sort_order") == ["https://a"]


def test_corrupt_file_falls_back_to_backup(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    store = JsonFileStore(path)
    store.set("active_host", "https://a")
    store.set("active_host", "https://b")  # previous version becomes the .bak
    path.write_text("{not json", encoding="utf-8")

    recovered = JsonFileStore(path)

    assert recovered.get("active_host") == "https://a"


def test_corrupt_file_without_backup_starts_empty(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    store = JsonFileStore(path)

    assert store.get("hosts") is None


def test_remove_and_clear_are_persisted(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    store = JsonFileStore(path)
    store.set("a", 1)
    store.set("b", 2)
    store.remove("a")

    assert json.loads(path.read_text(encoding="utf-8")) == {"b": 2}

    store.clear()
    assert json.loads(path.read_text(encoding="utf-8")) == {}


def test_non_json_value_is_refused(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "state.json")
    store.set("bad", object())

    assert store.get("bad") is None


def test_memory_store_snapshot() -> None:
    store = MemoryStore({"a": 1})
    store.set("b", [1, 2])
    store.remove("a")

    assert store.snapshot() == {"b": [1, 2]}
