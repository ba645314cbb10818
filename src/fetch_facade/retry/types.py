"""
Type definitions for retry handling
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..errors import HttpError


class BackoffStrategy(str, Enum):
    """Backoff strategy type"""
    FIXED = "fixed"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    CUSTOM = "custom"


RetryCondition = Callable[[HttpError], bool]
RetryDelayCalculator = Callable[[int, HttpError], float]
RetryCallback = Callable[[HttpError, int], None]


@dataclass
class RetryConfig:
    """Retry configuration.

    ``None`` fields inherit from the enclosing layer (defaults -> client ->
    call), see ``merge_retry_config``.
    """

    retries: Optional[int] = None
    """Additional attempts after the first one. Default: 0"""

    strategy: Optional[BackoffStrategy] = None
    """Backoff strategy. Default: exponential"""

    retry_delay_seconds: Optional[float] = None
    """Base delay (seconds). Default: 1.0"""

    max_delay_seconds: Optional[float] = None
    """Maximum delay between retries (seconds). Default: 30.0"""

    jitter: Optional[float] = None
    """Symmetric jitter factor in [0, 1]. Default: 0.1"""

    retry_condition: Optional[RetryCondition] = None
    """Predicate deciding whether an error is worth another attempt"""

    retry_delay_calculator: Optional[RetryDelayCalculator] = None
    """Delay for retry ``n`` when strategy is custom"""

    on_retry: Optional[RetryCallback] = None
    """Called with (error, retry number) before each wait"""

    on_retry_failed: Optional[RetryCallback] = None
    """Called with (error, attempts made) when retries are exhausted"""
