"""
Unit tests for the local entry cache and the remote-first journal repository.
"""
import json
import uuid
from unittest.mock import MagicMock

import pytest

from brigade.core.cache import InMemoryCache
from brigade.models.enums import RecordSource
from brigade.services.entry_store import JournalRepository, LocalEntryCache, PendingMutation
from tests.lib import InMemoryRecordStore, make_entry
from tests.lib.stores import DEFAULT_USER_ID as USER_ID


@pytest.fixture
def cache_backend():
    return InMemoryCache()


@pytest.fixture
def local(cache_backend):
    return LocalEntryCache(cache_backend)


@pytest.fixture
def remote():
    return InMemoryRecordStore()


@pytest.fixture
def repository(remote, local):
    return JournalRepository(remote, local)


class TestLocalEntryCache:
    """Test the per-user cache mirror."""

    def test_round_trip_uses_user_scoped_key(self, local, cache_backend):
        entry = make_entry("2024-03-10T12:00:00Z", mood=4)
        local.save(USER_ID, [entry])

        assert cache_backend.get(f"journal_entries_{USER_ID}") is not None
        assert local.load(USER_ID) == [entry]

    def test_missing_key_is_empty(self, local):
        assert local.load(USER_ID) == []

    def test_corrupt_json_is_treated_as_empty(self, local, cache_backend):
        cache_backend.set(f"journal_entries_{USER_ID}", "{not json")
        assert local.load(USER_ID) == []

    def test_malformed_item_is_skipped(self, local, cache_backend):
        good = make_entry("2024-03-10T12:00:00Z")
        cache_backend.set(
            f"journal_entries_{USER_ID}",
            json.dumps([{"content": "missing fields"}, good.model_dump(mode="json")]),
        )
        assert local.load(USER_ID) == [good]

    def test_malformed_queued_mutation_is_dropped(self, local, cache_backend):
        entry = make_entry("2024-03-10T12:00:00Z")
        queued = PendingMutation(op="delete", entry_id=entry.id)
        cache_backend.set(
            f"journal_pending_{USER_ID}",
            json.dumps([{"op": "bogus"}, queued.model_dump(mode="json")]),
        )
        assert local.pending(USER_ID) == [queued]

    def test_malformed_queue_does_not_block_reads(self, repository, remote, cache_backend):
        entry = make_entry("2024-03-10T12:00:00Z")
        remote.rows[entry.id] = entry
        cache_backend.set(f"journal_pending_{USER_ID}", json.dumps([{"op": "bogus"}]))

        result = repository.list_entries(USER_ID)

        assert result.source == RecordSource.REMOTE
        assert result.value == [entry]

    def test_backend_failure_is_treated_as_empty(self):
        backend = MagicMock()
        backend.get.side_effect = ConnectionError("redis down")
        assert LocalEntryCache(backend).load(USER_ID) == []

    def test_pending_queue_preserves_order(self, local):
        first = PendingMutation(op="delete", entry_id=make_entry("2024-03-10T12:00:00Z").id)
        second = PendingMutation(op="update", entry_id=first.entry_id, patch={"mood": 2})
        local.enqueue(USER_ID, first)
        local.enqueue(USER_ID, second)

        assert local.pending(USER_ID) == [first, second]


class TestRemoteAvailable:
    """Remote is authoritative and refreshes the mirror."""

    def test_list_reads_remote_newest_first(self, repository, remote, local):
        older = make_entry("2024-03-09T12:00:00Z")
        newer = make_entry("2024-03-10T12:00:00Z")
        remote.rows = {older.id: older, newer.id: newer}

        result = repository.list_entries(USER_ID)

        assert result.source == RecordSource.REMOTE
        assert result.degraded is False
        assert result.value == [newer, older]
        assert local.load(USER_ID) == [newer, older]

    def test_insert_writes_remote_and_mirror(self, repository, remote, local):
        entry = make_entry("2024-03-10T12:00:00Z")

        result = repository.insert_entry(entry)

        assert result.source == RecordSource.REMOTE
        assert entry.id in remote.rows
        assert local.load(USER_ID) == [entry]

    def test_update_patches_remote_and_mirror(self, repository, remote, local):
        entry = make_entry("2024-03-10T12:00:00Z", mood=2)
        repository.insert_entry(entry)

        repository.update_entry(USER_ID, entry.id, {"mood": 5, "created_at": "ignored"})

        assert remote.rows[entry.id].mood == 5
        assert remote.rows[entry.id].created_at == entry.created_at
        assert local.load(USER_ID)[0].mood == 5

    def test_delete_removes_everywhere(self, repository, remote, local):
        entry = make_entry("2024-03-10T12:00:00Z")
        repository.insert_entry(entry)

        result = repository.delete_entry(USER_ID, entry.id)

        assert result.source == RecordSource.REMOTE
        assert remote.rows == {}
        assert local.load(USER_ID) == []


class TestRemoteUnavailable:
    """Failures fall back to the mirror and queue the write."""

    def test_list_falls_back_to_mirror(self, repository, remote, local):
        cached = make_entry("2024-03-10T12:00:00Z")
        local.save(USER_ID, [cached])
        remote.available = False

        result = repository.list_entries(USER_ID)

        assert result.source == RecordSource.LOCAL
        assert result.degraded is True
        assert "remote unreachable" in result.error
        assert result.value == [cached]

    def test_insert_is_kept_locally_and_queued(self, repository, remote, local):
        remote.available = False
        entry = make_entry("2024-03-10T12:00:00Z")

        result = repository.insert_entry(entry)

        assert result.degraded is True
        assert result.value == entry
        assert local.load(USER_ID) == [entry]
        assert [m.op for m in local.pending(USER_ID)] == ["insert"]

    def test_delete_is_optimistic(self, repository, remote, local):
        entry = make_entry("2024-03-10T12:00:00Z")
        repository.insert_entry(entry)
        remote.available = False

        result = repository.delete_entry(USER_ID, entry.id)

        assert result.degraded is True
        assert local.load(USER_ID) == []
        assert entry.id in remote.rows
        assert [m.op for m in local.pending(USER_ID)] == ["delete"]


class TestReplay:
    """Queued writes are replayed before the next remote call."""

    def test_queued_writes_replay_in_order(self, repository, remote, local):
        remote.available = False
        entry = make_entry("2024-03-10T12:00:00Z", mood=3)
        repository.insert_entry(entry)
        repository.update_entry(USER_ID, entry.id, {"mood": 4})
        remote.available = True

        result = repository.list_entries(USER_ID)

        assert result.source == RecordSource.REMOTE
        assert remote.rows[entry.id].mood == 4
        assert [e.id for e in result.value] == [entry.id]
        assert local.pending(USER_ID) == []

    def test_insert_then_delete_while_offline(self, repository, remote, local):
        remote.available = False
        entry = make_entry("2024-03-10T12:00:00Z")
        repository.insert_entry(entry)
        repository.delete_entry(USER_ID, entry.id)
        remote.available = True

        assert repository.list_entries(USER_ID).value == []
        assert remote.rows == {}

    def test_failed_replay_keeps_remaining_queue(self, repository, remote, local):
        remote.available = False
        first = make_entry("2024-03-09T12:00:00Z")
        second = make_entry("2024-03-10T12:00:00Z")
        repository.insert_entry(first)
        repository.insert_entry(second)

        remote.available = True
        real_insert = remote.insert
        calls = {"n": 0}

        def insert_once(entry):
            calls["n"] += 1
            if calls["n"] > 1:
                remote.available = False
            return real_insert(entry)

        remote.insert = insert_once
        result = repository.list_entries(USER_ID)

        assert result.degraded is True
        assert first.id in remote.rows
        assert second.id not in remote.rows
        assert [m.entry_id for m in local.pending(USER_ID)] == [second.id]
        assert {e.id for e in result.value} == {first.id, second.id}

    def test_queued_delete_skips_other_users_rows(self, repository, remote, local):
        other = make_entry("2024-03-10T12:00:00Z", user_id=uuid.uuid4())
        remote.rows[other.id] = other
        remote.available = False
        repository.delete_entry(USER_ID, other.id)
        remote.available = True

        result = repository.list_entries(USER_ID)

        assert result.source == RecordSource.REMOTE
        assert other.id in remote.rows
        assert local.pending(USER_ID) == []
