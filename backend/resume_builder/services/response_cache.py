"""
In-process TTL cache for AI responses (cache-aside).
"""
import hashlib
import json
import logging
import time
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


def make_cache_key(prefix: str, data: Any) -> str:
    """Stable key from a feature prefix and its input."""
    payload = data if isinstance(data, str) else json.dumps(data, sort_keys=True, default=str)
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
    return f"{prefix}:{digest}"


class ResponseCache:
    """Bounded LRU cache with per-entry expiry and hit/miss counters."""

    def __init__(self, ttl_seconds: int = 1800, max_entries: int = 256, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, tuple[float, Any]]" = OrderedDict()
        self.stats = {"hits": 0, "misses": 0, "sets": 0, "evictions": 0}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            self.stats["misses"] += 1
            return None

        expires_at, value = entry
        if expires_at <= self._clock():
            del self._entries[key]
            self.stats["misses"] += 1
            return None

        self._entries.move_to_end(key)
        self.stats["hits"] += 1
        return value

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        self._entries[key] = (self._clock() + ttl, value)
        self._entries.move_to_end(key)
        self.stats["sets"] += 1

        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
            self.stats["evictions"] += 1

    async def get_or_set(self, key: str, factory: Callable[[], Awaitable[Any]], ttl_seconds: Optional[int] = None) -> Any:
        cached = self.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        value = await factory()
        if value is not None:
            self.set(key, value, ttl_seconds)
        return value

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> dict:
        lookups = self.stats["hits"] + self.stats["misses"]
        return {
            **self.stats,
            "size": len(self._entries),
            "hit_rate": round(self.stats["hits"] / lookups, 3) if lookups else 0.0,
        }
