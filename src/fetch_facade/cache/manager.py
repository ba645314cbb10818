"""
Response cache manager.
"""
import copy
import logging
from dataclasses import fields, replace
from typing import Any, Optional

from ..types import HttpResponse, RequestConfig
from .keys import generate_cache_key
from .stores.memory import MemoryCacheStore
from .types import CacheConfig, CacheStore, DEFAULT_CACHE_TTL_SECONDS

logger = logging.getLogger("fetch_facade.cache")


DEFAULT_CACHE_CONFIG = CacheConfig(
    enabled=False,
    ttl_seconds=DEFAULT_CACHE_TTL_SECONDS,
    methods=["GET"],
    key_generator=None,
    is_cacheable=None,
)


def merge_cache_config(
    base: Optional[CacheConfig] = None,
    override: Optional[CacheConfig] = None,
) -> CacheConfig:
    """
    Merge two cache configs field by field.

    ``override`` wins for every field it sets; ``None`` fields inherit from
    ``base``. With no base the defaults are used.
    """
    base = base if base is not None else DEFAULT_CACHE_CONFIG
    merged = {}
    for f in fields(CacheConfig):
        value = getattr(override, f.name) if override is not None else None
        if value is None:
            value = getattr(base, f.name)
        merged[f.name] = list(value) if isinstance(value, list) else value
    return CacheConfig(**merged)


def default_is_cacheable(response: HttpResponse[Any]) -> bool:
    """Store only 2xx responses."""
    return 200 <= response.status < 300


def _detach(value: Any) -> Any:
    # Cached responses never share mutable data with a caller
    if isinstance(value, HttpResponse):
        return replace(value, data=copy.deepcopy(value.data))
    return value


class CacheManager:
    """
    Looks up and stores responses for cacheable requests.

    The manager owns the client-level cache settings; the ``cache`` field of
    each request is layered on top of them, so a single call can enable,
    disable or re-key caching without touching the client.

    Example:
        manager = CacheManager(CacheConfig(enabled=True, ttl_seconds=60))

        cached = await manager.get(config)
        if cached is None:
            response = await adapter.request(config)
            if manager.should_store(config, response):
                await manager.set(config, response)
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        store: Optional[CacheStore] = None,
    ) -> None:
        self._config = merge_cache_config(DEFAULT_CACHE_CONFIG, config)
        self._store = store or MemoryCacheStore()

    def resolve(self, config: RequestConfig) -> CacheConfig:
        """Effective cache settings for one request."""
        return merge_cache_config(self._config, config.cache)

    def is_cacheable_method(self, method: str, cache_config: Optional[CacheConfig] = None) -> bool:
        """Check if a request method is cacheable."""
        methods = (cache_config or self._config).methods or ["GET"]
        return method.upper() in (m.upper() for m in methods)

    def applies_to(self, config: RequestConfig) -> bool:
        """True when caching is enabled and the method is cacheable."""
        effective = self.resolve(config)
        return bool(effective.enabled) and self.is_cacheable_method(
            config.resolved_method, effective
        )

    def generate_key(self, config: RequestConfig) -> str:
        """Generate the cache key for a request."""
        key_generator = self.resolve(config).key_generator or generate_cache_key
        return key_generator(config)

    def should_store(self, config: RequestConfig, response: HttpResponse[Any]) -> bool:
        """Check the storage eligibility policy for a response."""
        policy = self.resolve(config).is_cacheable or default_is_cacheable
        return bool(policy(response))

    async def get(self, config: RequestConfig) -> Optional[HttpResponse[Any]]:
        """Return the stored response for ``config``, or None."""
        key = self.generate_key(config)
        value = await self._store.get(key)
        logger.debug(f"CacheManager.get: {'hit' if value is not None else 'miss'} {key}")
        return _detach(value)

    async def set(self, config: RequestConfig, response: HttpResponse[Any]) -> None:
        """Store ``response`` under the key of ``config``."""
        effective = self.resolve(config)
        ttl = effective.ttl_seconds if effective.ttl_seconds is not None else DEFAULT_CACHE_TTL_SECONDS
        key = self.generate_key(config)
        await self._store.set(key, _detach(response), ttl)
        logger.debug(f"CacheManager.set: stored {key} for {ttl}s")

    async def delete(self, config: RequestConfig) -> None:
        """Remove the entry for ``config``."""
        await self._store.delete(self.generate_key(config))

    async def clear(self) -> None:
        """Remove every entry from the store."""
        await self._store.clear()

    def update_config(self, config: CacheConfig) -> None:
        """Layer ``config`` on top of the current settings."""
        self._config = merge_cache_config(self._config, config)

    def get_config(self) -> CacheConfig:
        """Current client-level cache settings."""
        return merge_cache_config(self._config, None)

    def set_store(self, store: CacheStore) -> None:
        """Swap the backing store. Existing entries are not migrated."""
        self._store = store

    def get_store(self) -> CacheStore:
        return self._store

    async def close(self) -> None:
        await self._store.close()
