"""
Retry manager implementation
"""
import logging
import random
from typing import Awaitable, Callable, Optional, TypeVar

from ..errors import HttpError
from .config import (
    async_sleep,
    compute_backoff,
    default_retry_condition,
    merge_retry_config,
)
from .types import RetryConfig

logger = logging.getLogger("fetch_facade.retry")

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]
RetryHook = Callable[[HttpError, int, float], None]


class RetryManager:
    """
    Retry Manager

    Wraps one logical request and re-runs it while the retry policy allows:
    - ``retries`` bounds the number of additional attempts
    - the retry condition is consulted for every failure
    - cancellation errors are never retried
    - the final error is re-raised unchanged once retries are exhausted
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: SleepFn = async_sleep,
        random_fn: Callable[[], float] = random.random,
    ) -> None:
        """
        Create a new RetryManager.

        Args:
            config: Client-level retry configuration
            sleep: Coroutine used to wait between attempts
            random_fn: Source of U(0, 1) samples for jitter
        """
        self._config = merge_retry_config(None, config)
        self._sleep = sleep
        self._random = random_fn

    @property
    def sleep(self) -> SleepFn:
        """Coroutine used to wait between attempts."""
        return self._sleep

    def resolve(self, override: Optional[RetryConfig] = None) -> RetryConfig:
        """Effective retry settings with ``override`` layered on top."""
        return merge_retry_config(self._config, override)

    def compute_backoff(self, retry_count: int, error: HttpError, config: Optional[RetryConfig] = None) -> float:
        return compute_backoff(retry_count, error, self.resolve(config), self._random)

    def should_retry(self, error: HttpError, retry_count: int, config: RetryConfig) -> bool:
        """Determine if another attempt should be made after ``error``."""
        if error.is_cancel_error:
            return False
        if retry_count >= (config.retries or 0):
            return False
        condition = config.retry_condition or default_retry_condition
        return bool(condition(error))

    async def execute_with_retry(
        self,
        attempt_fn: Callable[[], Awaitable[T]],
        config: Optional[RetryConfig] = None,
        on_retry: Optional[RetryHook] = None,
        sleep: Optional[SleepFn] = None,
    ) -> T:
        """
        Execute ``attempt_fn`` with retry logic.

        Args:
            attempt_fn: Async function performing one attempt
            config: Per-call retry overrides
            on_retry: Hook called with (error, retry number, delay) before
                each wait, after the config's own ``on_retry``
            sleep: Per-call replacement for the wait coroutine

        Returns:
            The first successful result

        Example:
            manager = RetryManager(RetryConfig(retries=3))
            response = await manager.execute_with_retry(lambda: adapter.request(config))
        """
        resolved = self.resolve(config)
        wait = sleep or self._sleep
        retry_count = 0

        while True:
            try:
                return await attempt_fn()
            except HttpError as error:
                if not self.should_retry(error, retry_count, resolved):
                    if retry_count > 0:
                        logger.warning(
                            f"RetryManager: giving up after {retry_count + 1} attempts: {error.message}"
                        )
                        if resolved.on_retry_failed is not None:
                            resolved.on_retry_failed(error, retry_count + 1)
                    raise

                retry_count += 1
                delay = compute_backoff(retry_count, error, resolved, self._random)
                logger.warning(
                    f"RetryManager: attempt {retry_count} failed ({error.code}), retrying in {delay}s"
                )

                if resolved.on_retry is not None:
                    resolved.on_retry(error, retry_count)
                if on_retry is not None:
                    on_retry(error, retry_count, delay)

                if delay > 0:
                    await wait(delay)

    def update_config(self, config: RetryConfig) -> None:
        """Layer ``config`` on top of the current settings."""
        self._config = merge_retry_config(self._config, config)

    def get_config(self) -> RetryConfig:
        """Current client-level retry settings."""
        return merge_retry_config(self._config, None)

