"""
Configuration utilities for retry handling
"""
import asyncio
import random
from dataclasses import fields
from typing import Callable, Optional

from ..errors import HttpError
from .types import BackoffStrategy, RetryCondition, RetryConfig, RetryDelayCalculator


def default_retry_condition(error: HttpError) -> bool:
    """
    Retry network failures, timeouts and 5xx responses.

    Cancellation is handled before this predicate is consulted and is never
    retried.
    """
    if error.is_network_error or error.is_timeout_error:
        return True
    status = error.status
    return status is not None and 500 <= status < 600


# Default retry configuration
DEFAULT_RETRY_CONFIG = RetryConfig(
    retries=0,
    strategy=BackoffStrategy.EXPONENTIAL,
    retry_delay_seconds=1.0,
    max_delay_seconds=30.0,
    jitter=0.1,
    retry_condition=default_retry_condition,
    retry_delay_calculator=None,
    on_retry=None,
    on_retry_failed=None,
)


def merge_retry_config(
    base: Optional[RetryConfig] = None,
    override: Optional[RetryConfig] = None,
) -> RetryConfig:
    """
    Merge two retry configs field by field.

    Args:
        base: Lower-precedence config. Default: DEFAULT_RETRY_CONFIG
        override: Higher-precedence config; its ``None`` fields inherit

    Returns:
        A new, fully merged configuration
    """
    base = base if base is not None else DEFAULT_RETRY_CONFIG
    merged = {}
    for f in fields(RetryConfig):
        value = getattr(override, f.name) if override is not None else None
        merged[f.name] = value if value is not None else getattr(base, f.name)
    return RetryConfig(**merged)


def resolve_retry_config(config: Optional[RetryConfig] = None) -> RetryConfig:
    """Fill every unset field of ``config`` from the defaults."""
    return merge_retry_config(DEFAULT_RETRY_CONFIG, config)


def compute_backoff(
    retry_count: int,
    error: HttpError,
    config: RetryConfig,
    random_fn: Callable[[], float] = random.random,
) -> float:
    """
    Calculate the delay before retry number ``retry_count``.

    Strategies (``base`` is ``retry_delay_seconds``):
    - fixed: base
    - linear: base * n
    - exponential: base * 2^(n-1)
    - custom: retry_delay_calculator(n, error)

    The raw delay is clamped to ``max_delay_seconds``, then symmetric jitter
    is applied: delay + delay * jitter * U(-1, 1). The result is clamped to
    >= 0 and rounded to whole milliseconds.

    Args:
        retry_count: Retry number, starting at 1
        error: The error that triggered this retry
        config: Retry configuration (unset fields use defaults)
        random_fn: Source of U(0, 1) samples

    Returns:
        Delay in seconds
    """
    resolved = resolve_retry_config(config)
    base = resolved.retry_delay_seconds
    strategy = BackoffStrategy(resolved.strategy)

    if strategy == BackoffStrategy.FIXED:
        delay = base
    elif strategy == BackoffStrategy.LINEAR:
        delay = base * retry_count
    elif strategy == BackoffStrategy.CUSTOM and resolved.retry_delay_calculator is not None:
        delay = resolved.retry_delay_calculator(retry_count, error)
    elif strategy == BackoffStrategy.CUSTOM:
        delay = base
    else:  # EXPONENTIAL (default)
        delay = base * (2 ** (retry_count - 1))

    delay = min(delay, resolved.max_delay_seconds)

    jitter = resolved.jitter
    if jitter > 0:
        delay += delay * jitter * (random_fn() * 2 - 1)

    return round(max(0.0, delay), 3)


async def async_sleep(seconds: float) -> None:
    """Async sleep for the specified duration."""
    await asyncio.sleep(seconds)


def create_fixed_retry_config(retries: int = 3, delay_seconds: float = 1.0) -> RetryConfig:
    """Retry with the same delay between every attempt."""
    return RetryConfig(
        retries=retries,
        retry_delay_seconds=delay_seconds,
        strategy=BackoffStrategy.FIXED,
    )


def create_linear_retry_config(retries: int = 3, delay_seconds: float = 1.0) -> RetryConfig:
    """Retry with a delay that grows by ``delay_seconds`` each time."""
    return RetryConfig(
        retries=retries,
        retry_delay_seconds=delay_seconds,
        strategy=BackoffStrategy.LINEAR,
    )


def create_exponential_retry_config(
    retries: int = 3,
    initial_delay_seconds: float = 1.0,
    max_delay_seconds: float = 30.0,
) -> RetryConfig:
    """Retry with a doubling delay capped at ``max_delay_seconds``."""
    return RetryConfig(
        retries=retries,
        retry_delay_seconds=initial_delay_seconds,
        strategy=BackoffStrategy.EXPONENTIAL,
        max_delay_seconds=max_delay_seconds,
    )


def create_custom_retry_config(
    retries: int,
    delay_calculator: RetryDelayCalculator,
    retry_condition: Optional[RetryCondition] = None,
) -> RetryConfig:
    """Retry with a caller-supplied delay function (and optional predicate)."""
    return RetryConfig(
        retries=retries,
        strategy=BackoffStrategy.CUSTOM,
        retry_delay_calculator=delay_calculator,
        retry_condition=retry_condition,
    )
