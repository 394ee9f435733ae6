"""
Retry logic with exponential backoff for handling transient failures.

Used by the HTTP layer for the listing page, the HEAD probe and the
package download.
"""

import time
import functools
from typing import Callable, Iterator, Type, Tuple, Optional


class RetryError(Exception):
    """Raised when all retry attempts are exhausted."""

    def __init__(self, message: str, attempts: int = 0, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


def backoff_delays(base_delay: float, exponential_base: float, max_delay: float) -> Iterator[float]:
    """Yield base, base*factor, base*factor**2, ... capped at ``max_delay``."""
    delay = base_delay
    while True:
        yield min(delay, max_delay)
        delay *= exponential_base


def exponential_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable] = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Decorator for retrying functions with exponential backoff.

    The wrapped call runs at most ``max_retries + 1`` times. Exceptions
    outside ``exceptions`` propagate immediately.

    Args:
        max_retries: Retries after the first attempt (0 = single attempt)
        base_delay: Delay before the first retry, in seconds
        max_delay: Upper bound for any single delay
        exponential_base: Factor applied to the delay after each retry
        exceptions: Exception types that trigger a retry
        on_retry: Optional callback(attempt, exception, delay), called before sleeping
        sleep: Sleep function, replaceable in tests

    Example:
        @exponential_backoff(max_retries=2, base_delay=1.0)
        def fetch_listing(url):
            return requests.get(url)
    """
    attempts = max(max_retries, 0) + 1

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delays = backoff_delays(base_delay, exponential_base, max_delay)
            for attempt in range(1, attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == attempts:
                        raise RetryError(
                            f"Failed after {attempts} attempts: {e}",
                            attempts=attempts,
                            last_error=e,
                        ) from e
                    delay = next(delays)
                    if on_retry:
                        on_retry(attempt, e, delay)
                    sleep(delay)

        return wrapper
    return decorator


def should_retry_http_status(status_code: int) -> bool:
    """
    Check if HTTP status code indicates a retryable error.

    Args:
        status_code: HTTP status code

    Returns:
        True if should retry
    """
    retryable_codes = {
        408,  # Request Timeout
        429,  # Too Many Requests
        500,  # Internal Server Error
        502,  # Bad Gateway
        503,  # Service Unavailable
        504,  # Gateway Timeout
    }

    return status_code in retryable_codes
