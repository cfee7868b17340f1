"""
Retry backoff and retryable-error detection.
"""
import asyncio
import random
from typing import Optional

import httpx

DEFAULT_BASE_DELAY_MS = 1000
DEFAULT_MAX_DELAY_MS = 30000
JITTER_FACTOR = 0.25

# Error messages that indicate a transient network condition
_NETWORK_ERROR_PATTERNS = [
    "network",
    "connection",
    "socket",
    "refused",
    "reset",
    "econnreset",
    "econnrefused",
    "name resolution",
    "nodename nor servname",
    "temporary failure",
]


def calculate_backoff_with_jitter(
    attempt: int,
    base_ms: int = DEFAULT_BASE_DELAY_MS,
    max_ms: int = DEFAULT_MAX_DELAY_MS,
) -> int:
    """
    Calculate exponential backoff delay with jitter.

    delay = min(2^(attempt-1) * base, cap) + random(0, 0.25 * that)

    Args:
        attempt: The current attempt number (1-based)
        base_ms: Base delay in milliseconds
        max_ms: Maximum delay before jitter in milliseconds

    Returns:
        Delay in milliseconds, never above ``max_ms * 1.25``
    """
    exponent = max(attempt, 1) - 1
    capped = min((2 ** exponent) * base_ms, max_ms)
    jitter = random.random() * JITTER_FACTOR * capped
    return int(capped + jitter)


def is_timeout_error(error: BaseException) -> bool:
    """Check if an error is a per-attempt timeout."""
    return isinstance(error, (httpx.TimeoutException, asyncio.TimeoutError))


def is_retryable_error(error: Optional[BaseException]) -> bool:
    """
    Check if a transport error is a transient network failure.

    Timeouts are never retryable.

    Args:
        error: The error raised by the transport

    Returns:
        Whether the error should trigger a retry
    """
    if error is None or is_timeout_error(error):
        return False

    if isinstance(error, (httpx.TransportError, ConnectionError, OSError)):
        return True

    message = str(error).lower()
    if any(pattern in message for pattern in _NETWORK_ERROR_PATTERNS):
        return True

    # Check cause chain
    if error.__cause__ is not None:
        return is_retryable_error(error.__cause__)

    return False


async def async_sleep(seconds: float) -> None:
    """
    Sleep for a specified duration (async).

    Args:
        seconds: Duration in seconds
    """
    await asyncio.sleep(seconds)
