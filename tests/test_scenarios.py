"""End-to-end grouping walkthrough: the Mayor Interview group.

Runs against both store implementations.
"""

import pytest

from codex_archive.exceptions import InvalidKindError
from codex_archive.services import find_invariant_violations

from conftest import OWNER


class TestMayorInterview:
    """Create, extend, shrink and dissolve one group step by step."""

    def test_create_group_from_audio_item(self, manager, make_item):
        item = make_item("Interview.mp3", size=1_000_000)

        parent = manager.create_group(OWNER, "Mayor Interview", None, item["id"])

        assert parent["is_group_parent"] is True
        assert parent["group_name"] == "Mayor Interview"

    def test_parts_listed_in_order(self, aggregator, interview_group):
        items = aggregator.get_group_items(interview_group["group_id"], OWNER)
        assert [i["title"] for i in items] == ["Part2.mp3", "Part3.mp3"]

    def test_stats_exclude_parent(self, aggregator, interview_group):
        stats = aggregator.get_group_stats(interview_group["group_id"])
        assert stats == {"item_count": 2, "total_size": 1_700_000}

    def test_remove_part(self, manager, aggregator, interview_group, store):
        manager.remove_item_from_group(interview_group["part2"]["id"], OWNER)

        items = aggregator.get_group_items(interview_group["group_id"], OWNER)
        assert [i["title"] for i in items] == ["Part3.mp3"]
        assert store.get(interview_group["part2"]["id"])["group_id"] is None

    def test_delete_group(self, manager, aggregator, interview_group, store):
        manager.remove_item_from_group(interview_group["part2"]["id"], OWNER)
        manager.delete_group(interview_group["group_id"], OWNER)

        assert store.get(interview_group["part3"]["id"])["group_id"] is None
        assert store.get(interview_group["group_id"]) is None
        assert aggregator.get_group_items(interview_group["group_id"], OWNER) == []
        assert find_invariant_violations(store.list_by_owner(OWNER)) == []

    def test_note_cannot_start_a_group(self, manager, make_item, store):
        note = make_item("Thoughts on the interview", kind="note")

        with pytest.raises(InvalidKindError):
            manager.create_group(OWNER, "Notes", None, note["id"])

        assert store.get(note["id"]) == note
