"""
Unit Tests for MarkingStore

Tests for ignored ids and markings, in memory and file backed.
"""

import json

import pytest

from icon_toolkit.core.models import Marking, MarkType
from icon_toolkit.engine.markings_store import MarkingStore


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    """Run every test against both storage modes."""
    if request.param == "memory":
        return MarkingStore()
    return MarkingStore(tmp_path / "markings.json")


class TestIgnoredIds:
    """Tests for ignore() / unignore()."""

    def test_ignore_when_new_id_then_listed(self, store):
        store.ignore("1:2")

        assert store.ignored_ids() == frozenset({"1:2"})

    def test_ignore_when_twice_then_stored_once(self, store):
        store.ignore("1:2")
        store.ignore("1:2")

        assert len(store.ignored_ids()) == 1

    def test_unignore_when_ignored_then_removed(self, store):
        store.ignore("1:2")
        store.ignore("1:3")

        store.unignore("1:2")

        assert store.ignored_ids() == frozenset({"1:3"})

    def test_unignore_when_unknown_then_noop(self, store):
        store.unignore("9:9")

        assert store.ignored_ids() == frozenset()


class TestMarkings:
    """Tests for mark() / clear()."""

    def test_mark_when_swap_then_flag_set(self, store):
        store.mark("1:2", MarkType.SWAP)

        assert store.markings() == {"1:2": Marking(is_marked_for_swap=True)}

    def test_mark_when_remarked_then_replaced(self, store):
        store.mark("1:2", MarkType.SWAP)
        store.mark("1:2", MarkType.IGNORE)

        assert store.markings()["1:2"] == Marking(is_ignored=True)

    def test_mark_when_unmark_then_removed(self, store):
        store.mark("1:2", MarkType.SWAP)

        store.mark("1:2", MarkType.UNMARK)

        assert store.markings() == {}

    def test_clear_when_marked_and_ignored_then_only_markings_cleared(self, store):
        """The ignore list is separate from the ignore mark."""
        store.ignore("1:3")
        store.mark("1:2", MarkType.IGNORE)

        store.clear()

        ignored, markings = store.load()
        assert markings == {}
        assert ignored == frozenset({"1:3"})


class TestFilePersistence:
    """Tests specific to the JSON file backend."""

    def test_store_when_reopened_then_state_survives(self, tmp_path):
        path = tmp_path / "markings.json"
        MarkingStore(path).ignore("1:2")
        MarkingStore(path).mark("1:3", MarkType.SWAP)

        ignored, markings = MarkingStore(path).load()

        assert ignored == frozenset({"1:2"})
        assert markings["1:3"].is_marked_for_swap

    def test_store_when_written_then_camel_case_file(self, tmp_path):
        path = tmp_path / "markings.json"

        MarkingStore(path).mark("1:3", MarkType.SWAP)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data == {
            "ignoredIds": [],
            "markings": {"1:3": {"isIgnored": False, "isMarkedForSwap": True}},
        }

    def test_store_when_file_missing_then_empty(self, tmp_path):
        ignored, markings = MarkingStore(tmp_path / "absent.json").load()

        assert ignored == frozenset()
        assert markings == {}
