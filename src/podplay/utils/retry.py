"""Retry utilities.

Exponential backoff with jitter for transient network failures, and a
bounded per-frame poll for UI elements that render late.
"""

import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential_jitter,
)

from podplay.utils.errors import NetworkConnectionError, NetworkTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_attempts: int = 3,
        max_wait_seconds: float = 30,
        min_wait_seconds: float = 1,
        jitter: bool = True,
    ):
        """Initialize retry configuration.

        Args:
            max_attempts: Maximum number of attempts (including initial)
            max_wait_seconds: Maximum wait time between retries
            min_wait_seconds: Minimum wait time between retries
            jitter: Whether to add jitter to wait times
        """
        self.max_attempts = max_attempts
        self.max_wait_seconds = max_wait_seconds
        self.min_wait_seconds = min_wait_seconds
        self.jitter = jitter


DEFAULT_RETRY_CONFIG = RetryConfig(
    max_attempts=3,
    max_wait_seconds=30,
    min_wait_seconds=1,
    jitter=True,
)

# Fast configuration for testing (minimal delays)
TEST_RETRY_CONFIG = RetryConfig(
    max_attempts=3,
    max_wait_seconds=0.1,
    min_wait_seconds=0.01,
    jitter=False,
)


def log_retry_attempt(retry_state: RetryCallState) -> None:
    """Log retry attempts for debugging.

    Args:
        retry_state: Tenacity retry state
    """
    if retry_state.outcome and retry_state.outcome.failed:
        exception = retry_state.outcome.exception()
        logger.warning(
            f"Retry attempt {retry_state.attempt_number} failed: "
            f"{type(exception).__name__}: {exception}"
        )


def with_retry(
    config: RetryConfig | None = None,
    retry_on: tuple[type[Exception], ...] | None = None,
) -> Callable:
    """Decorator for adding retry logic with exponential backoff.

    Usage:
        @with_retry()
        def fetch():
            ...

        @with_retry(config=RetryConfig(max_attempts=5))
        def important_fetch():
            ...

    Args:
        config: Retry configuration (uses DEFAULT_RETRY_CONFIG if None)
        retry_on: Exception types to retry on (network errors if None)

    Returns:
        Decorated function with retry logic
    """
    config = config or DEFAULT_RETRY_CONFIG

    if retry_on is None:
        retry_on = (NetworkConnectionError, NetworkTimeoutError)

    def decorator(func: Callable) -> Callable:
        retry_decorator = retry(
            stop=stop_after_attempt(config.max_attempts),
            wait=wait_exponential_jitter(
                initial=config.min_wait_seconds,
                max=config.max_wait_seconds,
                jitter=config.max_wait_seconds if config.jitter else 0,
            ),
            retry=retry_if_exception_type(retry_on),
            before_sleep=log_retry_attempt,
            reraise=True,
        )

        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return retry_decorator(func)(*args, **kwargs)
            except retry_on as e:
                logger.error(
                    f"Function {func.__name__} failed after {config.max_attempts} attempts: "
                    f"{type(e).__name__}: {e}"
                )
                raise

        return wrapper

    return decorator


def with_network_retry(max_attempts: int = 3, config: RetryConfig | None = None) -> Callable:
    """Retry decorator for network calls (timeouts, connection errors).

    Args:
        max_attempts: Maximum number of attempts
        config: Custom retry configuration (built from DEFAULT_RETRY_CONFIG if None)

    Returns:
        Decorated function with network retry logic
    """
    if config is None:
        config = RetryConfig(
            max_attempts=max_attempts,
            max_wait_seconds=DEFAULT_RETRY_CONFIG.max_wait_seconds,
            min_wait_seconds=DEFAULT_RETRY_CONFIG.min_wait_seconds,
            jitter=DEFAULT_RETRY_CONFIG.jitter,
        )
    return with_retry(
        config=config,
        retry_on=(NetworkConnectionError, NetworkTimeoutError),
    )


async def poll_each_frame(
    probe: Callable[[], T | None],
    next_frame: Callable[[], Awaitable[None]],
    max_attempts: int = 20,
) -> T | None:
    """Call ``probe`` until it returns something, waiting a frame between tries.

    Gives up after ``max_attempts`` probes and returns None instead of raising.

    Args:
        probe: Returns the wanted object, or None when it isn't there yet
        next_frame: Awaitable that resolves after the next render
        max_attempts: Upper bound on probes

    Returns:
        The first non-None probe result, or None
    """
    if max_attempts <= 0:
        return None

    async def attempt() -> T | None:
        return probe()

    async def sleep_one_frame(_seconds: float) -> None:
        await next_frame()

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        retry=retry_if_result(lambda found: found is None),
        sleep=sleep_one_frame,
        retry_error_callback=lambda state: None,
    )
    return await retrying(attempt)
