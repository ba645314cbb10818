"""
Configuration for fetch_facade.

Config layers are combined defaults -> client -> per-call. Every merge is
right-biased except ``headers``, ``cache`` and ``retry``, which are merged
field by field (a ``None`` field inherits).
"""
import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlparse

from .adapters.base import AdapterPort
from .cache.manager import DEFAULT_CACHE_CONFIG, merge_cache_config
from .cache.types import CacheConfig
from .retry.config import DEFAULT_RETRY_CONFIG, merge_retry_config
from .retry.types import BackoffStrategy, RetryConfig
from .types import RESPONSE_TYPES, RequestConfig, ResponseType

logger = logging.getLogger("fetch_facade.config")


@dataclass
class ClientConfig:
    """Client configuration."""

    base_url: Optional[str] = None
    timeout: Optional[float] = None
    headers: Optional[Dict[str, str]] = None
    response_type: Optional[ResponseType] = None
    with_credentials: Optional[bool] = None
    adapter: Union[str, AdapterPort, None] = None
    cache: Optional[CacheConfig] = None
    retry: Optional[RetryConfig] = None


# Default values
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_ADAPTER = "httpx"

DEFAULT_CLIENT_CONFIG = ClientConfig(
    base_url=None,
    timeout=DEFAULT_TIMEOUT_SECONDS,
    headers={"Content-Type": "application/json"},
    response_type="json",
    with_credentials=False,
    adapter=DEFAULT_ADAPTER,
    cache=DEFAULT_CACHE_CONFIG,
    retry=DEFAULT_RETRY_CONFIG,
)


def merge_headers(*layers: Optional[Mapping[str, Optional[str]]]) -> Dict[str, str]:
    """
    Merge header maps; the last write wins per key.

    Keys compare case-insensitively and keep the spelling of the latest
    layer. A ``None`` value removes the header.
    """
    merged: Dict[str, str] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            existing = next((k for k in merged if k.lower() == key.lower()), None)
            if existing is not None:
                del merged[existing]
            if value is not None:
                merged[key] = value
    return merged


def _pick(override: Any, base: Any) -> Any:
    return override if override is not None else base


def merge_client_config(
    base: Optional[ClientConfig] = None,
    override: Optional[ClientConfig] = None,
) -> ClientConfig:
    """Layer ``override`` on top of ``base`` (default: DEFAULT_CLIENT_CONFIG)."""
    base = base if base is not None else DEFAULT_CLIENT_CONFIG
    override = override if override is not None else ClientConfig()
    return ClientConfig(
        base_url=_pick(override.base_url, base.base_url),
        timeout=_pick(override.timeout, base.timeout),
        headers=merge_headers(base.headers, override.headers),
        response_type=_pick(override.response_type, base.response_type),
        with_credentials=_pick(override.with_credentials, base.with_credentials),
        adapter=_pick(override.adapter, base.adapter),
        cache=merge_cache_config(base.cache, override.cache),
        retry=merge_retry_config(base.retry, override.retry),
    )


def merge_request_config(defaults: ClientConfig, config: RequestConfig) -> RequestConfig:
    """
    Resolve one call's config against the client defaults.

    The result has the plain inheritable fields filled in (method, base_url,
    timeout, response_type, with_credentials and merged headers). ``cache``
    and ``retry`` stay per-call overrides: the cache and retry managers own
    the client-level settings and layer these on top.
    """
    return config.copy(
        method=(config.method or "GET").upper(),
        base_url=_pick(config.base_url, defaults.base_url),
        headers=merge_headers(defaults.headers, config.headers),
        timeout=_pick(config.timeout, defaults.timeout),
        response_type=_pick(config.response_type, defaults.response_type),
        with_credentials=_pick(config.with_credentials, defaults.with_credentials),
        metadata=dict(config.metadata),
    )


def validate_client_config(config: ClientConfig) -> None:
    """Validate client configuration. Raises ValueError on the first problem."""
    if config.base_url:
        parsed = urlparse(config.base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Invalid base_url: {config.base_url}")

    if config.timeout is not None and config.timeout < 0:
        raise ValueError(f"timeout must be >= 0, got {config.timeout}")

    if config.response_type is not None and config.response_type not in RESPONSE_TYPES:
        raise ValueError(
            f"Invalid response_type: {config.response_type}. Must be one of: {list(RESPONSE_TYPES)}"
        )

    if config.cache is not None and config.cache.ttl_seconds is not None and config.cache.ttl_seconds < 0:
        raise ValueError(f"cache.ttl_seconds must be >= 0, got {config.cache.ttl_seconds}")

    retry = config.retry
    if retry is None:
        return
    if retry.retries is not None and retry.retries < 0:
        raise ValueError(f"retry.retries must be >= 0, got {retry.retries}")
    if retry.jitter is not None and not 0 <= retry.jitter <= 1:
        raise ValueError(f"retry.jitter must be within [0, 1], got {retry.jitter}")
    if retry.retry_delay_seconds is not None and retry.retry_delay_seconds < 0:
        raise ValueError(f"retry.retry_delay_seconds must be >= 0, got {retry.retry_delay_seconds}")
    if retry.max_delay_seconds is not None and retry.max_delay_seconds < 0:
        raise ValueError(f"retry.max_delay_seconds must be >= 0, got {retry.max_delay_seconds}")
    if retry.strategy is not None:
        BackoffStrategy(retry.strategy)


def _section(data: Mapping[str, Any], name: str, cls: type) -> Any:
    value = data.get(name)
    if value is None:
        return None
    if isinstance(value, cls):
        return value
    if not isinstance(value, Mapping):
        raise ValueError(f"'{name}' must be a mapping, got {type(value).__name__}")

    known = {f.name for f in fields(cls)}
    unknown = set(value) - known
    if unknown:
        raise ValueError(f"Unknown {name} option(s): {sorted(unknown)}")
    return cls(**value)


def client_config_from_mapping(data: Mapping[str, Any]) -> ClientConfig:
    """
    Build a validated ``ClientConfig`` from plain data (e.g. a parsed YAML
    or JSON document).

    Example:
        config = client_config_from_mapping({
            "base_url": "https://api.example.com",
            "timeout": 5,
            "cache": {"enabled": True, "ttl_seconds": 60},
            "retry": {"retries": 3, "strategy": "linear"},
        })
    """
    known = {f.name for f in fields(ClientConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown client option(s): {sorted(unknown)}")

    retry = _section(data, "retry", RetryConfig)
    if retry is not None and retry.strategy is not None:
        try:
            retry.strategy = BackoffStrategy(retry.strategy)
        except ValueError:
            raise ValueError(f"Invalid retry.strategy: {retry.strategy}") from None

    config = ClientConfig(
        base_url=data.get("base_url"),
        timeout=float(data["timeout"]) if data.get("timeout") is not None else None,
        headers=dict(data["headers"]) if data.get("headers") else None,
        response_type=data.get("response_type"),
        with_credentials=data.get("with_credentials"),
        adapter=data.get("adapter"),
        cache=_section(data, "cache", CacheConfig),
        retry=retry,
    )
    validate_client_config(config)
    logger.debug(f"client_config_from_mapping: base_url={config.base_url}, adapter={config.adapter}")
    return config
