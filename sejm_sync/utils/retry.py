"""
Retry logic with linear backoff for resilient API calls.

Handles transient failures (timeouts, connection errors, 5xx) with a
bounded number of attempts, and absorbs 429 responses with a fixed
cooldown that does not consume the attempt budget.

Responsibility: Provide retry utilities for network operations
"""

import asyncio
from typing import TypeVar, Callable, Optional, Awaitable
import logging

import httpx

logger = logging.getLogger(__name__)

T = TypeVar('T')


class RetryError(Exception):
    """Raised when all retry attempts (or rate-limit waits) are exhausted"""

    def __init__(self, message: str, last_exception: Optional[Exception] = None):
        super().__init__(message)
        self.last_exception = last_exception


def calculate_backoff(
    attempt: int,
    base_delay: float = 0.5,
    max_delay: float = 30.0,
) -> float:
    """
    Calculate backoff delay after a failed attempt.

    Formula: min(max_delay, base_delay * attempt)

    Args:
        attempt: Number of the attempt that just failed (1-indexed)
        base_delay: Base delay in seconds
        max_delay: Maximum delay cap in seconds

    Returns:
        Delay in seconds before the next attempt

    Example:
        >>> calculate_backoff(1)  # 0.5s
        >>> calculate_backoff(2)  # 1.0s
    """
    return min(base_delay * max(attempt, 1), max_delay)


def is_rate_limited(exception: Exception) -> bool:
    return (
        isinstance(exception, httpx.HTTPStatusError)
        and exception.response.status_code == 429
    )


def is_retryable_error(exception: Exception) -> bool:
    """
    Determine if an exception should trigger a retry.

    Retryable conditions:
        - Network timeouts
        - Connection and other transport errors
        - HTTP 5xx errors

    Other 4xx responses are not retried: repeating a client error
    cannot succeed. 429 is handled separately by retry_async.
    """
    if isinstance(exception, httpx.TransportError):
        return True

    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code >= 500

    return False


async def retry_async(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 30.0,
    rate_limit_cooldown: float = 5.0,
    max_rate_limit_waits: int = 10,
    on_retry: Optional[Callable[[], None]] = None,
    on_rate_limit: Optional[Callable[[], None]] = None,
    logger_instance: Optional[logging.Logger] = None
) -> T:
    """
    Retry an async function with linear backoff.

    Args:
        func: Async function to retry
        max_attempts: Maximum attempts (1 = no retries)
        base_delay: Base delay between retries in seconds
        max_delay: Maximum delay cap in seconds
        rate_limit_cooldown: Fixed sleep after a 429 response
        max_rate_limit_waits: 429 cooldowns allowed before giving up
        on_retry: Called before each retry, for metrics
        on_rate_limit: Called before each cooldown, for metrics
        logger_instance: Logger to use (defaults to module logger)

    Returns:
        Result of successful function call

    Raises:
        RetryError: If all attempts or rate-limit waits are exhausted
        Exception: Any non-retryable error, unchanged
    """
    log = logger_instance or logger
    attempt = 0
    rate_limit_waits = 0

    while True:
        try:
            result = await func()

            if attempt > 0:
                log.info(f"Succeeded after {attempt + 1} attempts")

            return result

        except Exception as e:
            if is_rate_limited(e):
                if rate_limit_waits >= max_rate_limit_waits:
                    raise RetryError(
                        f"Still rate limited after {rate_limit_waits} cooldowns",
                        last_exception=e
                    )
                rate_limit_waits += 1
                if on_rate_limit:
                    on_rate_limit()
                log.warning(
                    f"Rate limited (429), cooling down {rate_limit_cooldown:.1f}s "
                    f"({rate_limit_waits}/{max_rate_limit_waits})"
                )
                await asyncio.sleep(rate_limit_cooldown)
                continue

            if not is_retryable_error(e):
                raise

            attempt += 1
            if attempt >= max_attempts:
                log.error(
                    f"All {max_attempts} attempts exhausted. "
                    f"Last error: {e!r}"
                )
                raise RetryError(
                    f"Failed after {max_attempts} attempts",
                    last_exception=e
                )

            delay = calculate_backoff(
                attempt=attempt,
                base_delay=base_delay,
                max_delay=max_delay,
            )

            log.warning(
                f"Attempt {attempt}/{max_attempts} failed: {e!r}. "
                f"Retrying in {delay:.2f}s..."
            )
            if on_retry:
                on_retry()

            await asyncio.sleep(delay)
