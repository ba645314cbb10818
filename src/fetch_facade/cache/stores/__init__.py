"""
Cache store implementations.
"""
from .memory import MemoryCacheStore, create_memory_cache_store
from .redis import RedisCacheStore, RedisClientProtocol, create_redis_cache_store

__all__ = [
    "MemoryCacheStore",
    "create_memory_cache_store",
    "RedisCacheStore",
    "RedisClientProtocol",
    "create_redis_cache_store",
]
