"""
In-memory cache store with lazy expiry and LRU eviction.
"""
import time
from typing import Any, Callable, Dict, List, Optional

from ..types import CacheEntry, CacheStore, DEFAULT_CACHE_TTL_SECONDS


class MemoryCacheStore(CacheStore):
    """
    In-memory cache store.

    Expired entries are purged when they are next accessed; there is no
    background sweep. When ``max_entries`` is set the least recently used
    entry is evicted to make room.
    """

    def __init__(
        self,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be > 0 when provided")
        self._cache: Dict[str, CacheEntry] = {}
        self._max_entries = max_entries
        self._clock = clock

    def _move_to_end(self, key: str) -> None:
        """Move an entry to the end of the LRU queue."""
        entry = self._cache.pop(key)
        self._cache[key] = entry

    def _evict_if_needed(self) -> None:
        if self._max_entries is None:
            return
        while len(self._cache) >= self._max_entries:
            oldest_key = next(iter(self._cache))
            del self._cache[oldest_key]

    async def get(self, key: str) -> Optional[Any]:
        """Get a stored value; expired entries are removed and reported missing."""
        entry = self._cache.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            del self._cache[key]
            return None

        self._move_to_end(key)
        return entry.value

    async def set(self, key: str, value: Any, ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS) -> None:
        """Store a value."""
        if key in self._cache:
            del self._cache[key]
        else:
            self._evict_if_needed()

        self._cache[key] = CacheEntry(value=value, expires_at=self._clock() + ttl_seconds)

    async def delete(self, key: str) -> None:
        """Delete a stored value."""
        self._cache.pop(key, None)

    async def clear(self) -> None:
        """Clear all entries."""
        self._cache.clear()

    def cleanup(self) -> int:
        """Purge every expired entry now. Returns the number removed."""
        now = self._clock()
        expired_keys = [key for key, entry in self._cache.items() if entry.is_expired(now)]
        for key in expired_keys:
            del self._cache[key]
        return len(expired_keys)

    def size(self) -> int:
        """Number of entries held, including ones not yet purged."""
        return len(self._cache)

    def keys(self) -> List[str]:
        """Keys in LRU order (oldest first)."""
        return list(self._cache.keys())


def create_memory_cache_store(
    max_entries: Optional[int] = None,
    clock: Callable[[], float] = time.time,
) -> MemoryCacheStore:
    """Create a memory cache store."""
    return MemoryCacheStore(max_entries=max_entries, clock=clock)
