"""Generic retry utility with exponential backoff."""

import asyncio
from collections.abc import Awaitable, Callable
import logging
from typing import TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


async def async_retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    *,
    should_retry: Callable[[T], bool],
    max_retries: int = 2,
    base_delay: float = 0.5,
    max_delay: float = 60.0,
    description: str = "Operation",
) -> T:
    """
    Execute an async function with retry and exponential backoff.

    Unlike exception-based retry, the outcome of ``func`` is inspected with
    ``should_retry`` so that transports returning failure values (rather than
    raising) can be retried too. Exceptions raised by ``func`` propagate.

    Args:
        func: Async function to execute
        should_retry: Predicate deciding whether an outcome is transient
        max_retries: Number of retries after the first attempt
        base_delay: Base delay in seconds (doubled each retry)
        max_delay: Upper bound on a single delay
        description: Description for logging

    Returns:
        The first non-retryable outcome, or the last outcome once retries
        are exhausted
    """
    attempt = 0
    while True:
        result = await func()
        if attempt >= max_retries or not should_retry(result):
            return result

        delay = min(base_delay * (2**attempt), max_delay)
        attempt += 1
        logger.warning(
            f"  ↻ {description} failed (attempt {attempt}/{max_retries + 1}). "
            f"Retrying in {delay:.1f}s..."
        )
        await asyncio.sleep(delay)
