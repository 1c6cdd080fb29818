"""Backoff for hub requests that fail while the hub is unreachable or busy."""

import asyncio
import logging
from typing import Any, Callable, Iterator

from utils.errors import HubApiError

logger = logging.getLogger(__name__)

# Connection failures, HTTP errors and timeouts are worth another attempt.
# Anything else (a bad response shape, a bug) is raised straight away.
RETRYABLE_ERRORS: tuple[type[Exception], ...] = (HubApiError, TimeoutError)


class RetryExhausted(Exception):
    """The hub could not be reached within the allowed attempts."""

    def __init__(self, description: str, attempts: int, last_exception: Exception):
        self.description = description
        self.attempts = attempts
        self.last_exception = last_exception
        super().__init__(f"{description} failed after {attempts} attempts: {last_exception}")


def backoff_delays(
    initial_delay: float, max_delay: float, factor: float = 2.0
) -> Iterator[float]:
    """Yield initial_delay, then multiply by factor up to max_delay."""
    delay = initial_delay
    while True:
        yield delay
        delay = min(delay * factor, max_delay)


async def retry_async(
    func: Callable[..., Any],
    *args: Any,
    description: str = "hub request",
    max_attempts: int = 5,
    initial_delay: float = 2.0,
    max_delay: float = 60.0,
    factor: float = 2.0,
    retryable_exceptions: tuple[type[Exception], ...] = RETRYABLE_ERRORS,
    **kwargs: Any,
) -> Any:
    """Await func(*args, **kwargs), retrying retryable failures with backoff.

    Raises:
        RetryExhausted: If every attempt failed with a retryable error
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    delays = backoff_delays(initial_delay, max_delay, factor)
    for attempt in range(1, max_attempts + 1):
        try:
            return await func(*args, **kwargs)
        except retryable_exceptions as e:
            if attempt == max_attempts:
                raise RetryExhausted(description, attempt, e) from e
            delay = next(delays)
            logger.warning(
                f"{description} failed (attempt {attempt}/{max_attempts}): "
                f"{e or type(e).__name__}; retrying in {delay:.1f}s"
            )
            await asyncio.sleep(delay)
