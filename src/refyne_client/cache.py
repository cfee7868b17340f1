"""
Cache key generation and cache entry construction.
"""
import time
from typing import Any, Optional

from .parser import parse_cache_control
from .types import CacheEntry

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def hash_string(value: str) -> str:
    """
    Fast, non-cryptographic hash of a string, base36 encoded.

    Only used to namespace cache keys per credential. Collisions lower the
    hit rate but cannot leak data: the server still authorizes every request
    that reaches the network.
    """
    h = 0
    for char in value:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 0x100000000
    return _to_base36(abs(h))


def generate_cache_key(
    method: str,
    url: str,
    identity_hash: Optional[str] = None,
) -> str:
    """Generate a cache key: ``METHOD:url[:identity_hash]``."""
    parts = [method.upper(), url]
    if identity_hash:
        parts.append(identity_hash)
    return ":".join(parts)


def create_cache_entry(
    value: Any,
    cache_control_header: Optional[str],
    now_ms: Optional[int] = None,
) -> Optional[CacheEntry]:
    """
    Create a cache entry from a response body.

    Args:
        value: The parsed response body
        cache_control_header: The Cache-Control header value
        now_ms: Current time in epoch milliseconds

    Returns:
        Cache entry, or None if the response must not be cached
        (no-store, or no max-age)
    """
    directives = parse_cache_control(cache_control_header)

    if directives.no_store:
        return None

    if directives.max_age is None:
        return None

    if now_ms is None:
        now_ms = int(time.time() * 1000)

    return CacheEntry(
        value=value,
        expires_at=now_ms + directives.max_age * 1000,
        directives=directives,
    )


def is_cacheable_response(method: str, status: int, cache_control_header: Optional[str]) -> bool:
    """Check whether a response may be stored: a 2xx GET with max-age and no no-store."""
    if method.upper() != "GET" or not 200 <= status < 300:
        return False
    directives = parse_cache_control(cache_control_header)
    return not directives.no_store and directives.max_age is not None
