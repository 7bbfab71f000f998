# tests/test_profile_store.py
"""
Profile Store Tests
In-memory fake and Redis adapter (mocked), both enforcing version checks.
"""

from unittest.mock import MagicMock, call, patch

import pytest
import redis

from progressive_profile.core.exceptions import (
    CorruptProfileException,
    DatabaseConnectionException,
    StaleProfileVersion,
)
from progressive_profile.repositories.base import ProfileStore
from progressive_profile.repositories.memory_store import InMemoryProfileStore
from progressive_profile.repositories.redis_store import RedisProfileStore
from progressive_profile.services.profile_service import ProgressiveProfileService


@pytest.fixture
def first_profile(consolidator, parent_aligned):
    return consolidator.consolidate(None, parent_aligned)


@pytest.fixture
def second_profile(consolidator, first_profile, teacher_aligned):
    return consolidator.consolidate(first_profile, teacher_aligned)


class TestChildKey:

    def test_normalizes_case_and_spacing(self):
        assert ProfileStore.child_key("  Maya   CHEN ") == "maya chen"


# =============================================================================
# IN-MEMORY STORE
# =============================================================================

class TestInMemoryProfileStore:

    def test_load_missing(self, store):
        assert store.load("nope") is None

    def test_round_trip(self, store, first_profile):
        """load(save(p).id) == p"""
        saved = store.save(first_profile)
        assert store.load(saved.id).model_dump() == first_profile.model_dump()
        assert len(store) == 1

    def test_sequential_versions_accepted(self, store, first_profile, second_profile):
        store.save(first_profile)
        store.save(second_profile)
        assert store.load(first_profile.id).version == 2

    def test_resaving_same_version_rejected(self, store, first_profile):
        store.save(first_profile)
        with pytest.raises(StaleProfileVersion) as exc_info:
            store.save(first_profile)
        assert exc_info.value.expected_version == 0
        assert exc_info.value.actual_version == 1

    def test_skipped_version_rejected(self, store, second_profile):
        with pytest.raises(StaleProfileVersion):
            store.save(second_profile)

    def test_second_new_profile_for_child_rejected(self, store, consolidator, first_profile, parent_aligned):
        store.save(first_profile)
        duplicate = consolidator.consolidate(None, parent_aligned)
        assert duplicate.id != first_profile.id
        with pytest.raises(StaleProfileVersion):
            store.save(duplicate)

    def test_find_by_child_name(self, store, first_profile):
        store.save(first_profile)
        found = store.find_by_child_name("  maya   CHEN ")
        assert found.id == first_profile.id
        assert store.find_by_child_name("Someone Else") is None

    def test_returns_copies(self, store, first_profile):
        store.save(first_profile)
        loaded = store.load(first_profile.id)
        loaded.strengths.append("Mutated")
        assert "Mutated" not in store.load(first_profile.id).strengths

    def test_instances_do_not_share_state(self, first_profile):
        a, b = InMemoryProfileStore(), InMemoryProfileStore()
        a.save(first_profile)
        assert b.load(first_profile.id) is None


# =============================================================================
# REDIS STORE (mocked client)
# =============================================================================

@pytest.fixture
def redis_client():
    with patch("progressive_profile.repositories.redis_store.redis.from_url") as mock_from_url:
        client = MagicMock()
        mock_from_url.return_value = client
        yield client


@pytest.fixture
def redis_store(redis_client):
    return RedisProfileStore(url="redis://test:6379/0", key_prefix="profile")


@pytest.fixture
def pipe(redis_client):
    pipeline = MagicMock()
    redis_client.pipeline.return_value.__enter__.return_value = pipeline
    return pipeline


class TestRedisProfileStore:

    def test_init_uses_url(self):
        with patch("progressive_profile.repositories.redis_store.redis.from_url") as mock_from_url:
            RedisProfileStore(url="redis://test:6379/0")
            mock_from_url.assert_called_once_with(
                "redis://test:6379/0", decode_responses=True, socket_connect_timeout=5,
            )

    def test_load_hit(self, redis_store, redis_client, first_profile):
        redis_client.get.return_value = first_profile.model_dump_json()

        loaded = redis_store.load(first_profile.id)

        redis_client.get.assert_called_once_with(f"profile:{first_profile.id}")
        assert loaded.model_dump() == first_profile.model_dump()

    def test_load_miss(self, redis_store, redis_client):
        redis_client.get.return_value = None
        assert redis_store.load("missing") is None

    def test_save_new_profile(self, redis_store, pipe, first_profile):
        pipe.get.side_effect = [None, None]

        assert redis_store.save(first_profile) is first_profile

        key = f"profile:{first_profile.id}"
        pipe.watch.assert_called_once_with(key, "profile:child:maya chen")
        pipe.multi.assert_called_once()
        pipe.set.assert_has_calls([
            call(key, first_profile.model_dump_json()),
            call("profile:child:maya chen", first_profile.id),
        ])
        pipe.execute.assert_called_once()

    def test_save_next_version(self, redis_store, pipe, first_profile, second_profile):
        pipe.get.side_effect = [first_profile.model_dump_json(), first_profile.id]
        redis_store.save(second_profile)
        pipe.execute.assert_called_once()

    def test_save_stale_version(self, redis_store, pipe, first_profile, second_profile):
        pipe.get.side_effect = [second_profile.model_dump_json(), first_profile.id]

        with pytest.raises(StaleProfileVersion):
            redis_store.save(second_profile)
        pipe.multi.assert_not_called()

    def test_concurrent_write_surfaces_as_stale(self, redis_store, pipe, first_profile):
        pipe.get.side_effect = [None, None]
        pipe.execute.side_effect = redis.WatchError()

        with pytest.raises(StaleProfileVersion):
            redis_store.save(first_profile)

    def test_connection_failure(self, redis_store, redis_client):
        redis_client.get.side_effect = redis.ConnectionError("refused")
        with pytest.raises(DatabaseConnectionException):
            redis_store.load("any")

    def test_find_by_child_name(self, redis_store, redis_client, first_profile):
        redis_client.get.side_effect = [first_profile.id, first_profile.model_dump_json()]

        found = redis_store.find_by_child_name("Maya Chen")

        assert found.id == first_profile.id
        redis_client.get.assert_any_call("profile:child:maya chen")

    def test_find_by_child_name_miss(self, redis_store, redis_client):
        redis_client.get.return_value = None
        assert redis_store.find_by_child_name("Nobody") is None

    def test_delete(self, redis_store, redis_client, first_profile):
        redis_client.get.return_value = first_profile.model_dump_json()
        redis_store.delete(first_profile.id)
        redis_client.delete.assert_called_once_with(
            f"profile:{first_profile.id}", "profile:child:maya chen",
        )


REDIS_FAILURES = [
    redis.ConnectionError("refused"),
    redis.TimeoutError("timed out"),
    redis.ResponseError("WRONGTYPE Operation against a key holding the wrong kind of value"),
]


class TestRedisFailures:
    """Every Redis error and unreadable data surface as repository exceptions."""

    @pytest.mark.parametrize("error", REDIS_FAILURES)
    def test_load(self, redis_store, redis_client, error):
        redis_client.get.side_effect = error
        with pytest.raises(DatabaseConnectionException):
            redis_store.load("any")

    @pytest.mark.parametrize("error", REDIS_FAILURES)
    def test_find_by_child_name(self, redis_store, redis_client, error):
        redis_client.get.side_effect = error
        with pytest.raises(DatabaseConnectionException):
            redis_store.find_by_child_name("Maya Chen")

    @pytest.mark.parametrize("error", REDIS_FAILURES)
    def test_save(self, redis_store, pipe, first_profile, error):
        pipe.get.side_effect = [None, None]
        pipe.execute.side_effect = error
        with pytest.raises(DatabaseConnectionException):
            redis_store.save(first_profile)

    @pytest.mark.parametrize("error", REDIS_FAILURES)
    def test_delete(self, redis_store, redis_client, first_profile, error):
        redis_client.get.return_value = first_profile.model_dump_json()
        redis_client.delete.side_effect = error
        with pytest.raises(DatabaseConnectionException):
            redis_store.delete(first_profile.id)

    def test_corrupt_profile_on_load(self, redis_store, redis_client):
        redis_client.get.return_value = '{"id": "p-1", "version": "not-a-number"}'
        with pytest.raises(CorruptProfileException) as exc_info:
            redis_store.load("p-1")
        assert exc_info.value.key == "profile:p-1"

    def test_corrupt_profile_on_save(self, redis_store, pipe, first_profile):
        pipe.get.side_effect = ["not json", first_profile.id]
        with pytest.raises(CorruptProfileException):
            redis_store.save(first_profile)
        pipe.multi.assert_not_called()

    def test_timeout_becomes_error_outcome(self, redis_store, redis_client, consolidator, parent_aligned):
        redis_client.get.side_effect = redis.TimeoutError("timed out")
        service = ProgressiveProfileService(redis_store, consolidator)

        outcome = service.submit(parent_aligned)

        assert not outcome.ok
        assert outcome.error.error_code == "DATABASE_CONNECTION_ERROR"
        assert outcome.error.http_status == 503

    def test_corrupt_data_becomes_error_outcome(self, redis_store, redis_client, consolidator, parent_aligned):
        redis_client.get.side_effect = ["p-1", "{}"]
        service = ProgressiveProfileService(redis_store, consolidator)

        outcome = service.submit(parent_aligned)

        assert outcome.error.error_code == "CORRUPT_PROFILE_DATA"
        assert outcome.error.http_status == 500
