"""
Retry Utilities for Resilient Operations.

This module provides retry logic with exponential backoff and jitter for
transient failures in calls to the generative service.

Architecture Context
--------------------
Retry sits in the Core layer and is used by the LLM clients:

    ┌─────────────────┐
    │  Text requests  │──┐
    ├─────────────────┤  ├──→  @llm_retry
    │  Image requests │──┘     (exponential backoff + jitter)
    └─────────────────┘

Only transient errors are retried: rate limits, timeouts and dropped
connections. Malformed responses are not retried here; they surface as
ProviderError and the caller decides whether to ask again.

Backoff Strategy
----------------
Delay increases exponentially: `base_delay * (exponential_base ^ attempt)`

    Attempt 1: 1.0s  (+ jitter)
    Attempt 2: 2.0s  (+ jitter)
    ... capped at max_delay

Jitter adds a random 0-25% on top of each delay.
"""

import random
import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Optional, Tuple, Type

from studyforge.core.logging import get_logger

logger = get_logger(__name__)


class TransientError(Exception):
    """Marker base class for errors that are worth retrying."""


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 3
    base_delay: float = 1.0  # seconds
    max_delay: float = 30.0  # seconds
    exponential_base: float = 2.0
    jitter: bool = True
    retryable_exceptions: Tuple[Type[BaseException], ...] = (
        TransientError,
        TimeoutError,
        ConnectionError,
    )


class RetryError(Exception):
    """Raised when all retry attempts are exhausted."""

    def __init__(self, message: str, last_exception: Exception, attempts: int) -> None:
        super().__init__(message)
        self.last_exception = last_exception
        self.attempts = attempts


def calculate_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    exponential_base: float,
    jitter: bool,
) -> float:
    """Calculate delay for next retry attempt."""
    delay = base_delay * (exponential_base**attempt)
    delay = min(delay, max_delay)

    if jitter:
        delay += delay * 0.25 * random.random()

    return delay


def _execute_with_retry(
    func: Callable[..., Any],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
    config: RetryConfig,
    on_retry: Optional[Callable[[Exception, int], None]],
) -> Any:
    """
    Execute function with retry logic.

    Raises:
        RetryError: If all attempts fail with a retryable exception
    """
    last_exception = None

    for attempt in range(config.max_attempts):
        try:
            return func(*args, **kwargs)
        except config.retryable_exceptions as e:
            last_exception = e
            if attempt >= config.max_attempts - 1:
                logger.error(
                    f"All {config.max_attempts} attempts failed",
                    error=str(e),
                    function=func.__name__,
                )
                break

            delay = calculate_delay(
                attempt,
                config.base_delay,
                config.max_delay,
                config.exponential_base,
                config.jitter,
            )
            logger.warning(
                f"Attempt {attempt + 1}/{config.max_attempts} failed, "
                f"retrying in {delay:.2f}s",
                error=str(e),
                function=func.__name__,
            )
            if on_retry:
                on_retry(e, attempt + 1)
            time.sleep(delay)

    raise RetryError(
        f"Failed after {config.max_attempts} attempts: {last_exception}",
        last_exception,
        config.max_attempts,
    )


def retry(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retryable_exceptions: Optional[Tuple[Type[BaseException], ...]] = None,
    on_retry: Optional[Callable[[Exception, int], None]] = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator for retrying functions with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts (including first try)
        base_delay: Initial delay between retries in seconds
        max_delay: Maximum delay between retries
        exponential_base: Base for exponential backoff
        jitter: Add random jitter to delays
        retryable_exceptions: Exception types to retry on
        on_retry: Callback(exception, attempt) called before each retry

    Example:
        @retry(max_attempts=3, retryable_exceptions=(ConnectionError,))
        def fetch_image(prompt: str) -> bytes:
            ...
    """
    config = RetryConfig(
        max_attempts=max(1, max_attempts),
        base_delay=base_delay,
        max_delay=max_delay,
        exponential_base=exponential_base,
        jitter=jitter,
    )
    if retryable_exceptions is not None:
        config.retryable_exceptions = retryable_exceptions

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return _execute_with_retry(func, args, kwargs, config, on_retry)

        wrapper.retry_config = config  # type: ignore[attr-defined]
        return wrapper

    return decorator


# For LLM API calls (rate limits, timeouts): 1s -> 2s between 3 attempts
llm_retry = retry(
    max_attempts=3,
    base_delay=1.0,
    max_delay=30.0,
    exponential_base=2.0,
    jitter=True,
)
