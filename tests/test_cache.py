"""Tests for the deleted-message cache in wabot/core/cache.py."""

import pytest

from conftest import GROUP_ID, make_message
from wabot.core.cache import DeletedMessageCache, last_deleted_key


def _record(message_id: str, text: str = "halo"):
    return make_message(text=text, message_id=message_id, conversation_id=GROUP_ID)


class TestPutAndGet:
    def test_get_returns_inserted_record(self):
        cache = DeletedMessageCache(max_entries=10)
        record = _record("A")
        cache.put("A", record)
        assert cache.get("A") is record
        assert "A" in cache

    def test_get_missing_returns_none(self):
        cache = DeletedMessageCache(max_entries=10)
        assert cache.get("nope") is None

    def test_overwrite_replaces_record_without_growing(self):
        cache = DeletedMessageCache(max_entries=10)
        cache.put("A", _record("A", "first"))
        cache.put("A", _record("A", "second"))
        assert len(cache) == 1
        assert cache.get("A").text_surface == "second"

    def test_rejects_non_positive_bound(self):
        with pytest.raises(ValueError):
            DeletedMessageCache(max_entries=0)


class TestEviction:
    def test_size_never_exceeds_bound(self):
        cache = DeletedMessageCache(max_entries=5)
        for i in range(23):
            cache.put(f"id{i}", _record(f"id{i}"))
            assert len(cache) == min(i + 1, 5)

    def test_survivors_are_most_recent_insertions(self):
        cache = DeletedMessageCache(max_entries=3)
        for i in range(10):
            cache.put(f"id{i}", _record(f"id{i}"))
        assert [f"id{i}" in cache for i in range(10)] == [False] * 7 + [True] * 3

    def test_lookup_does_not_refresh_entry(self):
        cache = DeletedMessageCache(max_entries=2)
        cache.put("old", _record("old"))
        cache.put("mid", _record("mid"))
        cache.get("old")
        cache.put("new", _record("new"))
        assert "old" not in cache
        assert "mid" in cache and "new" in cache

    def test_reinsert_counts_as_newest(self):
        cache = DeletedMessageCache(max_entries=2)
        cache.put("a", _record("a"))
        cache.put("b", _record("b"))
        cache.put("a", _record("a"))
        cache.put("c", _record("c"))
        assert "b" not in cache
        assert "a" in cache and "c" in cache

    def test_default_bound_is_one_thousand(self):
        cache = DeletedMessageCache()
        for i in range(1200):
            cache.put(str(i), _record(str(i)))
        assert len(cache) == 1000
        assert "199" not in cache
        assert "200" in cache


class TestDeletionSlot:
    def test_record_deletion_of_cached_message(self):
        cache = DeletedMessageCache()
        record = _record("A")
        cache.put("A", record)
        assert cache.record_deletion(GROUP_ID, "A") is True
        assert cache.get_last_deleted(GROUP_ID) is record

    def test_unknown_id_leaves_slot_absent(self):
        cache = DeletedMessageCache()
        assert cache.record_deletion(GROUP_ID, "never-seen") is False
        assert cache.get_last_deleted(GROUP_ID) is None

    def test_unknown_id_leaves_previous_slot_unchanged(self):
        cache = DeletedMessageCache()
        first = _record("A")
        cache.put("A", first)
        cache.record_deletion(GROUP_ID, "A")
        cache.record_deletion(GROUP_ID, "ghost")
        assert cache.get_last_deleted(GROUP_ID) is first

    def test_evicted_message_is_unrecoverable(self):
        cache = DeletedMessageCache(max_entries=1)
        cache.put("A", _record("A"))
        cache.put("B", _record("B"))
        assert cache.record_deletion(GROUP_ID, "A") is False
        assert cache.get_last_deleted(GROUP_ID) is None

    def test_newer_deletion_overwrites_slot(self):
        cache = DeletedMessageCache()
        cache.put("A", _record("A", "satu"))
        cache.put("B", _record("B", "dua"))
        cache.record_deletion(GROUP_ID, "A")
        cache.record_deletion(GROUP_ID, "B")
        assert cache.get_last_deleted(GROUP_ID).text_surface == "dua"

    def test_slots_are_per_conversation(self):
        cache = DeletedMessageCache()
        cache.put("A", _record("A"))
        cache.record_deletion(GROUP_ID, "A")
        assert cache.get_last_deleted("other@g.us") is None

    def test_slot_survives_primary_eviction(self):
        cache = DeletedMessageCache(max_entries=1)
        record = _record("A")
        cache.put("A", record)
        cache.record_deletion(GROUP_ID, "A")
        cache.put("B", _record("B"))
        assert cache.get_last_deleted(GROUP_ID) is record

    def test_slot_key_format(self):
        assert last_deleted_key(GROUP_ID) == f"{GROUP_ID}:lastDeleted"
