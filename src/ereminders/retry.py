"""Retry utilities with exponential backoff for mail delivery."""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ereminders.config.models import RetryConfig
from ereminders.errors import TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")

JITTER = 0.1


def is_retryable_error(error: Exception) -> bool:
    """Check if an error should trigger a retry."""
    if isinstance(error, TransportError):
        return error.retryable
    return isinstance(error, TimeoutError | ConnectionError)


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """Calculate delay before next retry with exponential backoff and jitter.

    Args:
        attempt: Current attempt number (1-indexed).
        config: Retry configuration.

    Returns:
        Delay in seconds.
    """
    delay = config.base_delay * (2.0 ** (attempt - 1))
    delay = min(delay, config.max_delay)

    jitter_range = delay * JITTER
    delay += random.uniform(-jitter_range, jitter_range)  # noqa: S311

    return max(0, delay)


async def with_retry(
    func: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    on_retry: Callable[[int, Exception, float], None] | None = None,
) -> T:
    """Execute async function with exponential backoff retry.

    Args:
        func: Async function to execute (takes no arguments).
        config: Retry configuration.
        on_retry: Optional callback called before each retry with
                  (attempt, exception, delay).

    Returns:
        Result from successful function execution.

    Raises:
        Exception: The last exception if all retries fail.
    """
    if config is None:
        config = RetryConfig()

    for attempt in range(1, config.max_attempts + 1):
        try:
            return await func()
        except Exception as e:
            if not is_retryable_error(e):
                logger.debug(f"Non-retryable error on attempt {attempt}: {e}")
                raise

            if attempt >= config.max_attempts:
                logger.warning(f"Max retries ({config.max_attempts}) exceeded: {e}")
                raise

            delay = calculate_delay(attempt, config)
            logger.info(
                f"Attempt {attempt}/{config.max_attempts} failed: {e}. "
                f"Retrying in {delay:.2f}s..."
            )

            if on_retry:
                on_retry(attempt, e, delay)

            await asyncio.sleep(delay)

    raise RuntimeError("Unexpected retry loop exit")
