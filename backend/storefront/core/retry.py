"""
Retries for outbound provider calls.

Razorpay, Resend and Supabase Storage are reached over HTTPS through an
edge proxy; dropped connections, TLS handshake failures and 5xx/525
answers are usually gone on the next attempt. ``retry_with_backoff``
wraps those calls with capped exponential backoff plus jitter.
"""

import asyncio
import functools
import logging
import random
from typing import Any, Callable, Tuple, Type

import httpx

logger = logging.getLogger(__name__)

# Gateway/edge statuses worth a second attempt (525 = SSL handshake failed)
RETRYABLE_STATUS_CODES = frozenset({500, 502, 503, 504, 525})

JITTER_RATIO = 0.2


class RetryableStatusError(Exception):
    """
    Provider answered with a status in RETRYABLE_STATUS_CODES.

    Carries the response so the caller can still report the body once
    the retries are exhausted.
    """

    def __init__(self, response: httpx.Response):
        self.response = response
        self.status_code = response.status_code
        super().__init__(
            f"{response.request.method} {response.request.url} "
            f"answered {response.status_code}"
        )


def raise_for_retryable_status(response: httpx.Response) -> httpx.Response:
    """Raise RetryableStatusError for retryable statuses, return anything else untouched."""
    if response.status_code in RETRYABLE_STATUS_CODES:
        raise RetryableStatusError(response)
    return response


TRANSIENT_HTTP_ERRORS: Tuple[Type[Exception], ...] = (
    httpx.TransportError,
    RetryableStatusError,
)


def backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    exponential_base: float = 2.0,
    jitter: bool = True,
) -> float:
    """
    Seconds to wait after failed attempt number ``attempt`` (0-based).

    ``base_delay * exponential_base ** attempt`` capped at ``max_delay``,
    then moved up to JITTER_RATIO either way when ``jitter`` is set.
    """
    delay = min(base_delay * (exponential_base ** attempt), max_delay)
    if jitter:
        spread = delay * JITTER_RATIO
        delay = max(0.0, delay + random.uniform(-spread, spread))
    return delay


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    exceptions: Tuple[Type[Exception], ...] = (Exception,)
):
    """
    Retry an async callable on ``exceptions``.

    Args:
        max_retries: Retries after the first attempt (total = max_retries + 1)
        base_delay: Wait before the first retry, in seconds
        max_delay: Upper bound for any single wait
        exponential_base: Growth factor between waits
        jitter: Randomise each wait by up to 20%
        exceptions: Exception types that trigger a retry; others propagate at once

    Example:
        @retry_with_backoff(max_retries=2, base_delay=0.8, exceptions=TRANSIENT_HTTP_ERRORS)
        async def _post_order(self, payload):
            response = await client.post("/orders", json=payload)
            return raise_for_retryable_status(response)
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            attempts = max_retries + 1
            for attempt in range(attempts):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_retries:
                        logger.error(
                            f"{func.__name__} failed after {attempts} attempts: {e}",
                            exc_info=True
                        )
                        raise

                    delay = backoff_delay(attempt, base_delay, max_delay, exponential_base, jitter)
                    logger.warning(
                        f"{func.__name__} attempt {attempt + 1}/{attempts} "
                        f"failed with {type(e).__name__}: {e}. "
                        f"Retrying in {delay:.2f}s..."
                    )
                    await asyncio.sleep(delay)

        return wrapper
    return decorator
