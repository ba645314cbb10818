"""
Cache plugin.

Turns on the pipeline's cache stage for a client and attaches a
``client.cache`` helper namespace.
"""
import logging
from typing import TYPE_CHECKING, Optional

from ..cache.manager import merge_cache_config
from ..cache.types import CacheConfig, CacheStore
from ..config import ClientConfig, merge_request_config
from ..types import RequestConfig

if TYPE_CHECKING:
    from ..core.client import HttpClient

logger = logging.getLogger("fetch_facade.plugins.cache")


class CacheNamespace:
    """Helpers exposed as ``client.cache``."""

    def __init__(self, client: "HttpClient") -> None:
        self._client = client

    async def clear(self) -> None:
        await self._client.cache_manager.clear()

    async def delete(self, config: RequestConfig) -> None:
        """Drop the entry a request with ``config`` would hit."""
        await self._client.cache_manager.delete(self._resolve(config))

    async def get(self, config: RequestConfig):
        return await self._client.cache_manager.get(self._resolve(config))

    def update_config(self, config: CacheConfig) -> None:
        self._client.set_defaults(ClientConfig(cache=config))

    def get_config(self) -> CacheConfig:
        return self._client.get_defaults().cache

    def set_store(self, store: CacheStore) -> None:
        self._client.cache_manager.set_store(store)

    def _resolve(self, config: RequestConfig) -> RequestConfig:
        # Keys depend on the merged base_url and method
        return merge_request_config(self._client.get_defaults(), config)


class CachePlugin:
    """Enable response caching on a client."""

    name = "cache"

    def __init__(self, config: Optional[CacheConfig] = None, store: Optional[CacheStore] = None) -> None:
        self.config = merge_cache_config(CacheConfig(enabled=True), config)
        self.store = store

    def install(self, client: "HttpClient") -> None:
        client.set_defaults(ClientConfig(cache=self.config))
        if self.store is not None:
            client.cache_manager.set_store(self.store)
        client.cache = CacheNamespace(client)
        logger.debug(f"CachePlugin.install: ttl={self.config.ttl_seconds}s methods={self.config.methods}")


def create_cache_plugin(
    config: Optional[CacheConfig] = None,
    store: Optional[CacheStore] = None,
) -> CachePlugin:
    """
    Create the cache plugin.

    Example:
        client.use(create_cache_plugin(CacheConfig(ttl_seconds=60)))
        await client.get("/users/1")   # transport
        await client.get("/users/1")   # cache hit
        await client.cache.clear()
    """
    return CachePlugin(config, store)
