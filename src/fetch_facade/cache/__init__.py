"""
Response caching for fetch_facade.
"""
from .keys import generate_cache_key, hash_body
from .manager import (
    CacheManager,
    DEFAULT_CACHE_CONFIG,
    default_is_cacheable,
    merge_cache_config,
)
from .stores import (
    MemoryCacheStore,
    RedisCacheStore,
    RedisClientProtocol,
    create_memory_cache_store,
    create_redis_cache_store,
)
from .types import CacheConfig, CacheEntry, CacheStore, DEFAULT_CACHE_TTL_SECONDS

__all__ = [
    "CacheConfig",
    "CacheEntry",
    "CacheStore",
    "DEFAULT_CACHE_TTL_SECONDS",
    "CacheManager",
    "DEFAULT_CACHE_CONFIG",
    "default_is_cacheable",
    "merge_cache_config",
    "generate_cache_key",
    "hash_body",
    "MemoryCacheStore",
    "create_memory_cache_store",
    "RedisCacheStore",
    "RedisClientProtocol",
    "create_redis_cache_store",
]
