"""Shared pytest fixtures for codex tests."""

import pytest

from codex_archive.database import MemoryItemStore, SQLiteItemStore
from codex_archive.services import GroupMembershipManager, GroupViewAggregator

OWNER = "u1"
OTHER_OWNER = "u2"


@pytest.fixture(autouse=True)
def isolate_test_database(tmp_path, monkeypatch):
    """Point CODEX_TEST_DB at a temp file so no test touches a real archive."""
    db_path = tmp_path / "codex-test.db"
    monkeypatch.setenv("CODEX_TEST_DB", str(db_path))
    monkeypatch.delenv("CODEX_DB_PATH", raising=False)
    monkeypatch.delenv("CODEX_OWNER", raising=False)
    return db_path


@pytest.fixture
def memory_store():
    """An empty in-memory item store."""
    return MemoryItemStore()


@pytest.fixture
def sqlite_store(isolate_test_database):
    """An empty SQLite item store in a temp file."""
    return SQLiteItemStore(isolate_test_database)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, isolate_test_database):
    """Each store implementation in turn."""
    if request.param == "memory":
        return MemoryItemStore()
    return SQLiteItemStore(isolate_test_database)


@pytest.fixture
def manager(store):
    return GroupMembershipManager(store)


@pytest.fixture
def aggregator(store):
    return GroupViewAggregator(store)


@pytest.fixture
def make_item(store):
    """Insert an item with sensible defaults; created_at increases per call."""
    counter = {"n": 0}

    def _make(title, kind="audio", owner=OWNER, **fields):
        counter["n"] += 1
        fields.setdefault("created_at", f"2024-05-01T10:00:{counter['n']:02d}")
        return store.insert({"owner": owner, "kind": kind, "title": title, **fields})

    return _make


@pytest.fixture
def interview_group(manager, make_item):
    """The Mayor Interview group: a parent plus parts 2 and 3."""
    parent = make_item("Interview.mp3", size=1_000_000)
    part2 = make_item("Part2.mp3", size=800_000)
    part3 = make_item("Part3.mp3", size=900_000)

    manager.create_group(OWNER, "Mayor Interview", "City hall, May 2024", parent["id"])
    manager.add_item_to_group(part2["id"], parent["id"], 2, OWNER)
    manager.add_item_to_group(part3["id"], parent["id"], 3, OWNER)

    return {"group_id": parent["id"], "parent": parent, "part2": part2, "part3": part3}
