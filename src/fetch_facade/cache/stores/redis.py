"""
Redis cache store implementation.
Suitable for sharing cached responses across processes.
"""
import json
import logging
from typing import Any, AsyncIterator, Optional, Protocol

from ...types import HttpResponse
from ..types import CacheStore, DEFAULT_CACHE_TTL_SECONDS

logger = logging.getLogger("fetch_facade.cache.redis")


class RedisClientProtocol(Protocol):
    """Protocol for Redis client (compatible with redis-py async)"""

    async def get(self, name: str) -> Any:
        ...

    async def set(self, name: str, value: Any, px: Optional[int] = None) -> Any:
        ...

    async def delete(self, *names: str) -> int:
        ...

    def scan_iter(self, match: Optional[str] = None) -> AsyncIterator[Any]:
        ...

    async def close(self) -> None:
        ...


class RedisCacheStore(CacheStore):
    """
    Redis implementation of CacheStore.

    Responses are stored as JSON via ``HttpResponse.to_dict`` and expire
    through Redis' own millisecond TTL, so expiry is lazy from the caller's
    point of view. Values that cannot be serialized are skipped with a
    warning.
    """

    def __init__(self, client: RedisClientProtocol, key_prefix: str = "http_cache:") -> None:
        """
        Create a new RedisCacheStore.

        Args:
            client: Redis client (async redis-py instance)
            key_prefix: Prefix for all keys. Default: 'http_cache:'
        """
        self._client = client
        self._key_prefix = key_prefix

    def _get_key(self, key: str) -> str:
        """Get the full key with prefix"""
        return f"{self._key_prefix}{key}"

    async def get(self, key: str) -> Optional[Any]:
        raw = await self._client.get(self._get_key(key))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")

        try:
            item = json.loads(raw)
        except ValueError:
            logger.warning(f"RedisCacheStore.get: dropping unreadable entry {key!r}")
            await self.delete(key)
            return None

        if item.get("kind") == "response":
            return HttpResponse.from_dict(item["payload"])
        return item.get("payload")

    async def set(self, key: str, value: Any, ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS) -> None:
        if isinstance(value, HttpResponse):
            item = {"kind": "response", "payload": value.to_dict()}
        else:
            item = {"kind": "value", "payload": value}

        try:
            encoded = json.dumps(item)
        except (TypeError, ValueError) as e:
            logger.warning(f"RedisCacheStore.set: value for {key!r} is not serializable: {e}")
            return

        await self._client.set(self._get_key(key), encoded, px=max(1, int(ttl_seconds * 1000)))

    async def delete(self, key: str) -> None:
        await self._client.delete(self._get_key(key))

    async def clear(self) -> None:
        """Delete every key under this store's prefix."""
        keys = [key async for key in self._client.scan_iter(match=f"{self._key_prefix}*")]
        if keys:
            await self._client.delete(*keys)

    async def close(self) -> None:
        """Close the store and cleanup resources"""
        await self._client.close()


def create_redis_cache_store(
    client: RedisClientProtocol, key_prefix: str = "http_cache:"
) -> RedisCacheStore:
    """Create a new RedisCacheStore instance."""
    return RedisCacheStore(client, key_prefix)
