"""
Key-value string caches backing the journal fallback store.

Two interchangeable backends share the ``get`` / ``set`` / ``delete``
interface: a process-local dictionary and Redis.
"""
import logging
import threading
import time
from typing import Dict, Iterable, Optional, Tuple

import redis

from brigade.core.logging_config import LogCategory

logger = logging.getLogger(LogCategory.APP.value)


class InMemoryCache:
    """Thread-safe dictionary cache with optional per-key expiry."""

    def __init__(self):
        self._store: Dict[str, Tuple[str, Optional[float]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            item = self._store.get(key)
            if item is None:
                return None
            value, expires_at = item
            if expires_at is not None and expires_at <= time.monotonic():
                del self._store[key]
                return None
            return value

    def set(self, key: str, value: str, ex: Optional[int] = None) -> None:
        expires_at = time.monotonic() + ex if ex else None
        with self._lock:
            self._store[key] = (value, expires_at)

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def keys(self, prefix: str = "") -> Iterable[str]:
        with self._lock:
            return [key for key in self._store if key.startswith(prefix)]


class RedisCache:
    """Redis-backed cache; values are stored as UTF-8 strings."""

    def __init__(self, redis_url: str):
        self._redis = redis.Redis.from_url(redis_url, decode_responses=True)

    def get(self, key: str) -> Optional[str]:
        return self._redis.get(key)

    def set(self, key: str, value: str, ex: Optional[int] = None) -> None:
        self._redis.set(key, value, ex=ex)

    def delete(self, key: str) -> None:
        self._redis.delete(key)

    def keys(self, prefix: str = "") -> Iterable[str]:
        return list(self._redis.scan_iter(match=f"{prefix}*"))


def create_cache(redis_url: Optional[str] = None):
    """Return a Redis cache when a URL is configured, otherwise an in-memory one."""
    if redis_url:
        logger.info("Using Redis cache backend")
        return RedisCache(redis_url)
    logger.info("Using in-memory cache backend")
    return InMemoryCache()
