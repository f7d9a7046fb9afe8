"""
Unit tests for the key-value cache backends.
"""
from unittest.mock import MagicMock, patch

from brigade.core.cache import InMemoryCache, RedisCache, create_cache


class TestInMemoryCache:
    """Test the process-local cache."""

    def test_set_then_get(self):
        cache = InMemoryCache()
        cache.set("journal_entries_1", "[]")
        assert cache.get("journal_entries_1") == "[]"

    def test_missing_key_returns_none(self):
        assert InMemoryCache().get("absent") is None

    def test_delete(self):
        cache = InMemoryCache()
        cache.set("k", "v")
        cache.delete("k")
        cache.delete("k")
        assert cache.get("k") is None

    def test_expired_value_is_dropped(self):
        cache = InMemoryCache()
        with patch("brigade.core.cache.time.monotonic", return_value=100.0):
            cache.set("k", "v", ex=5)
        with patch("brigade.core.cache.time.monotonic", return_value=104.0):
            assert cache.get("k") == "v"
        with patch("brigade.core.cache.time.monotonic", return_value=106.0):
            assert cache.get("k") is None

    def test_keys_by_prefix(self):
        cache = InMemoryCache()
        cache.set("journal_entries_a", "[]")
        cache.set("journal_pending_a", "[]")
        assert list(cache.keys("journal_entries_")) == ["journal_entries_a"]


class TestCreateCache:
    """Test backend selection."""

    def test_in_memory_without_url(self):
        assert isinstance(create_cache(None), InMemoryCache)

    def test_redis_with_url(self):
        with patch("brigade.core.cache.redis.Redis.from_url", return_value=MagicMock()) as from_url:
            cache = create_cache("redis://localhost:6379/0")
        assert isinstance(cache, RedisCache)
        from_url.assert_called_once_with("redis://localhost:6379/0", decode_responses=True)

    def test_redis_cache_delegates(self):
        client = MagicMock()
        client.get.return_value = "value"
        with patch("brigade.core.cache.redis.Redis.from_url", return_value=client):
            cache = RedisCache("redis://localhost:6379/0")

        assert cache.get("k") == "value"
        cache.set("k", "v", ex=30)
        client.set.assert_called_once_with("k", "v", ex=30)
