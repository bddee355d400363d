# app/client/cache.py
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import redis

logger = logging.getLogger(__name__)


class CacheBackend(ABC):
    """Key-value store holding JSON-serialisable entries for the client."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def invalidate_prefix(self, prefix: str) -> int:
        """Remove every key starting with ``prefix``; returns how many were removed."""


class MemoryCache(CacheBackend):
    def __init__(self):
        self._entries: Dict[str, str] = {}

    def get(self, key: str) -> Optional[Any]:
        raw = self._entries.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        # stored serialised so callers never share mutable state with the cache
        self._entries[key] = json.dumps(value)

    def invalidate_prefix(self, prefix: str) -> int:
        doomed = [key for key in self._entries if key.startswith(prefix)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def keys(self):
        return list(self._entries)


class RedisCache(CacheBackend):
    """Redis-backed cache. Entries carry no expiry: staleness is decided by the
    reader from the entry timestamp, and stale entries stay usable as fallback."""

    def __init__(self, client: redis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCache":
        return cls(redis.from_url(url, decode_responses=True))

    def get(self, key: str) -> Optional[Any]:
        raw = self.client.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Dropping undecodable cache entry %s", key)
            self.client.delete(key)
            return None

    def set(self, key: str, value: Any) -> None:
        self.client.set(key, json.dumps(value))

    def invalidate_prefix(self, prefix: str) -> int:
        keys = list(self.client.scan_iter(match=f"{prefix}*"))
        if not keys:
            return 0
        return self.client.delete(*keys)
