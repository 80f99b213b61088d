"""Retry logic with exponential backoff for Gemini calls.

Transient failures (rate limiting, 5xx, network errors) are retried with
exponential backoff and jitter. Client errors are raised immediately.
"""

import asyncio
import functools
import logging
import random
from typing import Any, Awaitable, Callable, Optional, Set, TypeVar, cast

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

# HTTP status codes that should trigger retry
RETRYABLE_STATUS_CODES: Set[int] = {
    429,  # Rate limit
    500,  # Server error
    502,  # Bad gateway
    503,  # Service unavailable
    504,  # Gateway timeout
}

# HTTP status codes that should NOT trigger retry
NON_RETRYABLE_STATUS_CODES: Set[int] = {
    400,  # Bad request
    401,  # Unauthorized
    403,  # Forbidden
    404,  # Not found
    422,  # Unprocessable entity
}

NETWORK_ERROR_MARKERS = (
    "timeout",
    "timed out",
    "connection",
    "network",
)

# Retry configuration
MAX_RETRIES = 3
BASE_DELAY = 1.0  # seconds
MAX_JITTER = 1.0  # seconds


def retry_with_backoff(
    max_retries: int = MAX_RETRIES,
    base_delay: float = BASE_DELAY,
    max_jitter: float = MAX_JITTER,
) -> Callable[[F], F]:
    """Decorator that retries an async function with exponential backoff.

    Delay before attempt ``n + 1`` is ``base_delay * 2**n`` plus up to
    ``max_jitter`` seconds of random jitter.

    Args:
        max_retries: Maximum number of retry attempts
        base_delay: Base delay in seconds for exponential backoff
        max_jitter: Maximum random jitter in seconds

    Returns:
        Decorated coroutine function with retry logic
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if not should_retry_exception(e) or attempt >= max_retries:
                        if attempt >= max_retries and max_retries > 0:
                            logger.error(f"{func.__name__} failed after {max_retries} retries: {e}")
                        raise

                    delay = (base_delay * (2**attempt)) + (random.random() * max_jitter)
                    logger.warning(
                        f"{func.__name__} attempt {attempt + 1}/{max_retries} failed: {e}. "
                        f"Retrying in {delay:.2f}s..."
                    )
                    await asyncio.sleep(delay)
                    attempt += 1

        return cast(F, wrapper)

    return decorator


def should_retry_exception(exception: Exception) -> bool:
    """Determine if an exception should trigger a retry."""
    status_code = extract_status_code(exception)

    if status_code is not None:
        if status_code in NON_RETRYABLE_STATUS_CODES:
            return False
        if status_code in RETRYABLE_STATUS_CODES:
            return True

    exception_str = str(exception).lower()
    if any(marker in exception_str for marker in NETWORK_ERROR_MARKERS):
        return True

    return False


def extract_status_code(exception: Exception) -> Optional[int]:
    """Extract an HTTP status code from an exception, if it carries one."""
    # status_code attribute (httpx, our AIServiceError)
    status_code = getattr(exception, "status_code", None)
    if isinstance(status_code, int):
        return status_code

    # google-genai APIError exposes the HTTP status as ``code``
    code = getattr(exception, "code", None)
    if isinstance(code, int):
        return code

    response = getattr(exception, "response", None)
    if response is not None and isinstance(getattr(response, "status_code", None), int):
        return int(response.status_code)

    return None
