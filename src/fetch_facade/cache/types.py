"""
Types for request/response caching.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from ..types import HttpResponse, RequestConfig


DEFAULT_CACHE_TTL_SECONDS = 300.0


@dataclass
class CacheConfig:
    """Cache settings for a client or a single call.

    ``None`` fields inherit from the enclosing layer (defaults -> client ->
    call).
    """

    enabled: Optional[bool] = None
    """Whether responses are looked up and stored."""

    ttl_seconds: Optional[float] = None
    """Lifetime of a stored response. Default: 300."""

    methods: Optional[List[str]] = None
    """Cacheable request methods. Default: ['GET']."""

    key_generator: Optional[Callable[[RequestConfig], str]] = None
    """Custom cache key derivation."""

    is_cacheable: Optional[Callable[[HttpResponse[Any]], bool]] = None
    """Storage eligibility policy. Default: status in [200, 300)."""


@dataclass
class CacheEntry:
    """A stored response and its absolute expiry (Unix timestamp)."""

    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class CacheStore(ABC):
    """Storage backend capability used by ``CacheManager``.

    Implementations own expiry: an entry past its TTL must be reported as
    absent (and may be purged) on the next ``get``.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Get a stored value, or None when missing or expired."""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS) -> None:
        """Store a value for ``ttl_seconds``."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete a stored value. No-op when absent."""
        pass

    async def clear(self) -> None:
        """Remove every entry owned by this store."""
        raise NotImplementedError(f"{type(self).__name__} does not support clear()")

    async def close(self) -> None:
        """Release resources held by the store."""
        return None
