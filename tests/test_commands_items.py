"""Tests for item CLI commands."""

import json
import re

import pytest
from typer.testing import CliRunner

from codex_archive.commands.items import app
from codex_archive.services import GroupMembershipManager

from conftest import OTHER_OWNER, OWNER

runner = CliRunner()


def _out(result) -> str:
    """Strip ANSI escape sequences from CliRunner output for assertions."""
    return re.sub(r"\x1b\[[0-9;]*m", "", result.stdout)


@pytest.fixture
def saved(sqlite_store):
    """A few items of different kinds."""
    return {
        "audio": sqlite_store.insert({"owner": OWNER, "kind": "audio", "title": "Interview.mp3",
                                      "size": 2048, "created_at": "2024-05-01T10:00:01"}),
        "note": sqlite_store.insert({"owner": OWNER, "kind": "note", "title": "Follow up",
                                     "tags": ["todo"], "created_at": "2024-05-01T10:00:02"}),
        "theirs": sqlite_store.insert({"owner": OTHER_OWNER, "kind": "link", "title": "Other",
                                       "created_at": "2024-05-01T10:00:03"}),
    }


class TestSaveCommand:
    """Tests for the save command."""

    def test_save_text(self, sqlite_store):
        result = runner.invoke(app, ["save", "Meeting notes", "-o", OWNER])
        out = _out(result)
        assert result.exit_code == 0
        assert "Saved note" in out
        assert len(sqlite_store.list_by_owner(OWNER)) == 1

    def test_save_json_with_fields(self, sqlite_store):
        result = runner.invoke(app, [
            "save", "Council stream",
            "--kind", "video",
            "--description", "Budget session",
            "--tag", "council",
            "--tag", "budget",
            "--size", "5000",
            "--url", "https://example.com/stream",
            "-o", OWNER,
            "--json",
        ])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["kind"] == "video"
        assert data["tags"] == ["council", "budget"]
        assert data["size"] == 5000
        assert sqlite_store.get(data["id"])["url"] == "https://example.com/stream"

    def test_save_unknown_kind(self, sqlite_store):
        result = runner.invoke(app, ["save", "Sheet", "--kind", "spreadsheet", "-o", OWNER])
        assert result.exit_code == 1
        assert "Validation error" in _out(result)
        assert sqlite_store.list_by_owner(OWNER) == []


class TestListCommand:
    """Tests for the list command."""

    def test_list_json_newest_first(self, saved):
        result = runner.invoke(app, ["list", "-o", OWNER, "--json"])
        assert result.exit_code == 0
        titles = [i["title"] for i in json.loads(result.stdout)]
        assert titles == ["Follow up", "Interview.mp3"]

    def test_list_includes_group_children(self, sqlite_store, saved):
        manager = GroupMembershipManager(sqlite_store)
        part = sqlite_store.insert({"owner": OWNER, "kind": "audio", "title": "Part2.mp3"})
        manager.create_group(OWNER, "Interview", None, saved["audio"]["id"])
        manager.add_item_to_group(part["id"], saved["audio"]["id"], 2, OWNER)

        result = runner.invoke(app, ["list", "-o", OWNER, "--json"])
        titles = {i["title"] for i in json.loads(result.stdout)}
        assert "Part2.mp3" in titles

    def test_list_kind_filter(self, saved):
        result = runner.invoke(app, ["list", "--kind", "note", "-o", OWNER, "--json"])
        assert [i["id"] for i in json.loads(result.stdout)] == [saved["note"]["id"]]

    def test_list_query_matches_tags(self, saved):
        result = runner.invoke(app, ["list", "-q", "TODO", "-o", OWNER, "--json"])
        assert [i["title"] for i in json.loads(result.stdout)] == ["Follow up"]

    def test_list_table(self, saved):
        result = runner.invoke(app, ["list", "-o", OWNER])
        assert result.exit_code == 0
        assert saved["note"]["id"] in _out(result)

    def test_list_empty(self):
        result = runner.invoke(app, ["list", "-o", OWNER])
        assert result.exit_code == 0
        assert "No items found" in _out(result)


class TestShowCommand:
    """Tests for the show command."""

    def test_show_text(self, saved):
        result = runner.invoke(app, ["show", saved["note"]["id"], "-o", OWNER])
        out = _out(result)
        assert result.exit_code == 0
        assert "Follow up" in out
        assert "Tags: todo" in out

    def test_show_other_owner(self, saved):
        result = runner.invoke(app, ["show", saved["theirs"]["id"], "-o", OWNER])
        assert result.exit_code == 1
        assert "Item not found" in _out(result)


class TestDeleteCommand:
    """Tests for the delete command."""

    def test_delete_item(self, sqlite_store, saved):
        result = runner.invoke(app, ["delete", saved["note"]["id"], "--force", "-o", OWNER])
        assert result.exit_code == 0
        assert "Deleted item" in _out(result)
        assert sqlite_store.get(saved["note"]["id"]) is None

    def test_delete_group_parent_ungroups_children(self, sqlite_store, saved):
        manager = GroupMembershipManager(sqlite_store)
        part = sqlite_store.insert({"owner": OWNER, "kind": "audio", "title": "Part2.mp3"})
        manager.create_group(OWNER, "Interview", None, saved["audio"]["id"])
        manager.add_item_to_group(part["id"], saved["audio"]["id"], 2, OWNER)

        result = runner.invoke(app, ["delete", saved["audio"]["id"], "-o", OWNER])
        out = _out(result)
        assert result.exit_code == 0
        assert "Ungrouped 1 item(s)" in out
        assert sqlite_store.get(part["id"])["group_id"] is None

    def test_delete_other_owner(self, sqlite_store, saved):
        result = runner.invoke(app, ["delete", saved["theirs"]["id"], "--force", "-o", OWNER])
        assert result.exit_code == 1
        assert sqlite_store.get(saved["theirs"]["id"]) is not None
