"""
Retry with backoff for fetch_facade.
"""
from .config import (
    DEFAULT_RETRY_CONFIG,
    async_sleep,
    compute_backoff,
    create_custom_retry_config,
    create_exponential_retry_config,
    create_fixed_retry_config,
    create_linear_retry_config,
    default_retry_condition,
    merge_retry_config,
    resolve_retry_config,
)
from .manager import RetryManager
from .types import BackoffStrategy, RetryConfig

__all__ = [
    "BackoffStrategy",
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "async_sleep",
    "compute_backoff",
    "default_retry_condition",
    "merge_retry_config",
    "resolve_retry_config",
    "create_fixed_retry_config",
    "create_linear_retry_config",
    "create_exponential_retry_config",
    "create_custom_retry_config",
    "RetryManager",
]
