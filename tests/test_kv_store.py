# tests/test_kv_store.py

from __future__ import annotations

from pathlib import Path

from study_planner.storage.kv_store import MemoryKeyValueStore, SQLiteKeyValueStore
from study_planner.tasks.task_store import TaskStore

from .fakes import FakeClock, task_data


def test_sqlite_store_persists_across_instances(tmp_path: Path) -> None:
    db = tmp_path / "nested" / "storage.sqlite3"
    kv = SQLiteKeyValueStore(db)

    assert kv.get("missing") is None
    kv.set("k", "v1")
    kv.set("k", "v2")
    kv.set("other", "x")

    reopened = SQLiteKeyValueStore(db)
    assert reopened.get("k") == "v2"
    assert reopened.count_keys() == 2

    reopened.remove("k")
    reopened.remove("k")
    assert kv.get("k") is None
    assert kv.count_keys() == 1


def test_task_store_over_sqlite(tmp_path: Path, clock: FakeClock) -> None:
    kv = SQLiteKeyValueStore(tmp_path / "storage.sqlite3")
    added = TaskStore(kv, "student@example.com", clock=clock).add(task_data())

    assert TaskStore(SQLiteKeyValueStore(kv.db_path), "student@example.com", clock=clock).list() == [added]


def test_memory_store() -> None:
    kv = MemoryKeyValueStore({"a": "1"})
    assert kv.get("a") == "1"
    kv.set("b", "2")
    kv.remove("a")
    kv.remove("a")
    assert (kv.get("a"), kv.get("b")) == (None, "2")
