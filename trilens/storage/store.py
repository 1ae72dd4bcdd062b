"""
Key-Value Store Abstraction

The minimal string/list key-value surface the state manager needs.
Two implementations: InMemoryStore (tests, local runs, degraded mode)
and RedisStore (redis-py).

SEMANTICS:
==========
- Values are strings; callers serialize before writing
- List ranges use Redis inclusive, negative-index semantics
  (range_list(key, -3, -1) is the last three items)
- Expiry is per key, in seconds; expired keys read as absent
"""

from __future__ import annotations
import fnmatch
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

import redis

from ..config import StoreConfig

logger = logging.getLogger(__name__)


class StoreUnavailable(RuntimeError):
    """The configured backend could not be reached."""


class KeyValueStore(ABC):
    """Backend-agnostic key-value operations."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def set_with_expiry(self, key: str, seconds: int, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, *keys: str) -> int:
        """Delete keys (strings or lists); returns how many existed."""
        pass

    @abstractmethod
    def list_keys(self, pattern: str) -> List[str]:
        """Keys matching a glob pattern."""
        pass

    @abstractmethod
    def append_to_list(self, key: str, *values: str) -> int:
        """Push to the tail; returns the new length."""
        pass

    @abstractmethod
    def range_list(self, key: str, start: int, stop: int) -> List[str]:
        pass

    @abstractmethod
    def trim_list(self, key: str, start: int, stop: int) -> None:
        pass

    @abstractmethod
    def set_expiry(self, key: str, seconds: int) -> bool:
        pass

    @abstractmethod
    def ping(self) -> bool:
        pass

    def close(self) -> None:
        pass


def _slice_bounds(length: int, start: int, stop: int):
    """Redis LRANGE/LTRIM index normalisation to a Python slice."""
    if start < 0:
        start = max(length + start, 0)
    if stop < 0:
        stop = length + stop
    stop = min(stop, length - 1)
    if start > stop:
        return 0, 0
    return start, stop + 1


# =============================================================================
# IN-MEMORY
# =============================================================================

class InMemoryStore(KeyValueStore):
    """
    Dict-backed store with lazy expiry.

    ``clock`` returns seconds; inject a fake one to test TTLs.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._data: Dict[str, str] = {}
        self._lists: Dict[str, List[str]] = {}
        self._expiry: Dict[str, float] = {}

    def _expired(self, key: str) -> bool:
        deadline = self._expiry.get(key)
        if deadline is not None and self._clock() >= deadline:
            self._data.pop(key, None)
            self._lists.pop(key, None)
            del self._expiry[key]
            return True
        return False

    def _exists(self, key: str) -> bool:
        if self._expired(key):
            return False
        return key in self._data or key in self._lists

    def get(self, key: str) -> Optional[str]:
        if self._expired(key):
            return None
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._expiry.pop(key, None)

    def set_with_expiry(self, key: str, seconds: int, value: str) -> None:
        self._data[key] = value
        self._expiry[key] = self._clock() + seconds

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if not self._exists(key):
                continue
            if self._data.pop(key, None) is not None:
                removed += 1
            if self._lists.pop(key, None) is not None:
                removed += 1
            self._expiry.pop(key, None)
        return removed

    def list_keys(self, pattern: str) -> List[str]:
        candidates = list(self._data) + [k for k in self._lists if k not in self._data]
        return [k for k in candidates if not self._expired(k) and fnmatch.fnmatchcase(k, pattern)]

    def append_to_list(self, key: str, *values: str) -> int:
        self._expired(key)
        items = self._lists.setdefault(key, [])
        items.extend(values)
        return len(items)

    def range_list(self, key: str, start: int, stop: int) -> List[str]:
        if self._expired(key):
            return []
        items = self._lists.get(key, [])
        lo, hi = _slice_bounds(len(items), start, stop)
        return items[lo:hi]

    def trim_list(self, key: str, start: int, stop: int) -> None:
        if self._expired(key) or key not in self._lists:
            return
        items = self._lists[key]
        lo, hi = _slice_bounds(len(items), start, stop)
        kept = items[lo:hi]
        if kept:
            self._lists[key] = kept
        else:
            del self._lists[key]
            self._expiry.pop(key, None)

    def set_expiry(self, key: str, seconds: int) -> bool:
        if not self._exists(key):
            return False
        self._expiry[key] = self._clock() + seconds
        return True

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        self._data.clear()
        self._lists.clear()
        self._expiry.clear()


# =============================================================================
# REDIS
# =============================================================================

class RedisStore(KeyValueStore):
    """Thin adapter over a ``redis.Redis`` client with decoded responses."""

    def __init__(self, client: redis.Redis):
        self._client = client

    @classmethod
    def from_config(cls, config: StoreConfig) -> RedisStore:
        client = redis.Redis.from_url(
            config.redis_url(),
            decode_responses=True,
            socket_timeout=config.socket_timeout,
            socket_connect_timeout=config.socket_timeout,
        )
        return cls(client)

    def get(self, key: str) -> Optional[str]:
        return self._client.get(key)

    def set(self, key: str, value: str) -> None:
        self._client.set(key, value)

    def set_with_expiry(self, key: str, seconds: int, value: str) -> None:
        self._client.setex(key, seconds, value)

    def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(self._client.delete(*keys))

    def list_keys(self, pattern: str) -> List[str]:
        return list(self._client.scan_iter(match=pattern))

    def append_to_list(self, key: str, *values: str) -> int:
        return int(self._client.rpush(key, *values))

    def range_list(self, key: str, start: int, stop: int) -> List[str]:
        return list(self._client.lrange(key, start, stop))

    def trim_list(self, key: str, start: int, stop: int) -> None:
        self._client.ltrim(key, start, stop)

    def set_expiry(self, key: str, seconds: int) -> bool:
        return bool(self._client.expire(key, seconds))

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            logger.warning("Redis ping failed: %s", e)
            return False

    def close(self) -> None:
        self._client.close()


def build_store(config: StoreConfig) -> KeyValueStore:
    """
    Select the backend named by ``config.backend``.

    A redis backend that does not answer a ping raises StoreUnavailable,
    unless ``degrade_to_memory`` is set, in which case an InMemoryStore
    is returned and a warning logged.
    """
    if config.backend == "memory":
        return InMemoryStore()
    if config.backend != "redis":
        raise ValueError(f"Unknown store backend: {config.backend!r}")

    store = RedisStore.from_config(config)
    if store.ping():
        logger.info("Connected to Redis at %s", config.redis_url())
        return store

    store.close()
    if config.degrade_to_memory:
        logger.warning("Redis unavailable at %s; falling back to in-memory store", config.redis_url())
        return InMemoryStore()
    raise StoreUnavailable(f"Redis unavailable at {config.redis_url()}")
