"""
Header parsing utilities: Cache-Control and Retry-After.
"""
from typing import List, Mapping, Optional

from .types import CacheControlDirectives


def _parse_seconds(value: Optional[str]) -> Optional[int]:
    """Parse a non-negative integer number of seconds, or None."""
    if not value:
        return None
    try:
        seconds = int(value.strip())
    except ValueError:
        return None
    if seconds < 0:
        return None
    return seconds


def parse_cache_control(header: Optional[str]) -> CacheControlDirectives:
    """Parse Cache-Control header into directives.

    Unknown directives and malformed values are ignored, never raised.

    Example:
        parse_cache_control("private, max-age=3600, stale-while-revalidate=60")
        # CacheControlDirectives(max_age=3600, private=True, stale_while_revalidate=60)
    """
    directives = CacheControlDirectives()

    if not header:
        return directives

    parts = [p.strip().lower() for p in header.split(",")]

    for part in parts:
        if "=" in part:
            key, value = part.split("=", 1)
            key = key.strip()
            value = value.strip()
        else:
            key = part
            value = None

        if key == "no-store":
            directives.no_store = True
        elif key == "no-cache":
            directives.no_cache = True
        elif key == "private":
            directives.private = True
        elif key == "max-age":
            seconds = _parse_seconds(value)
            if seconds is not None:
                directives.max_age = seconds
        elif key == "stale-while-revalidate":
            seconds = _parse_seconds(value)
            if seconds is not None:
                directives.stale_while_revalidate = seconds

    return directives


def build_cache_control(directives: CacheControlDirectives) -> str:
    """Build Cache-Control header from directives."""
    parts: List[str] = []

    if directives.no_store:
        parts.append("no-store")
    if directives.no_cache:
        parts.append("no-cache")
    if directives.private:
        parts.append("private")
    if directives.max_age is not None:
        parts.append(f"max-age={directives.max_age}")
    if directives.stale_while_revalidate is not None:
        parts.append(f"stale-while-revalidate={directives.stale_while_revalidate}")

    return ", ".join(parts)


def parse_retry_after(value: Optional[str], default: int) -> int:
    """
    Parse a Retry-After header value as whole seconds.

    Args:
        value: Retry-After header value
        default: Seconds to use when the header is missing or invalid

    Returns:
        Wait time in seconds
    """
    seconds = _parse_seconds(value)
    return default if seconds is None else seconds


def get_header_value(headers: Mapping[str, str], key: str) -> Optional[str]:
    """Get header value case-insensitively."""
    lower_key = key.lower()
    for k, v in headers.items():
        if k.lower() == lower_key:
            return v
    return None
