"""
Types for the Refyne request pipeline.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Literal, Optional, Protocol


# HTTP methods
HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

Clock = Callable[[], int]
"""Returns the current time as epoch milliseconds."""

Sleep = Callable[[float], Awaitable[None]]
"""Async sleep taking seconds."""


@dataclass
class CacheControlDirectives:
    """Parsed Cache-Control directives."""

    max_age: Optional[int] = None
    """Maximum age in seconds. Absent means the response is not cached."""

    no_store: bool = False
    """Response must not be cached."""

    no_cache: bool = False
    """Response must be revalidated before use."""

    private: bool = False
    """Response is private (user-specific)."""

    stale_while_revalidate: Optional[int] = None
    """Seconds past expiry during which the entry may still be served."""


@dataclass(frozen=True)
class CacheEntry:
    """Cached response body with expiry metadata."""

    value: Any
    """The parsed response body."""

    expires_at: int
    """When the entry expires (epoch milliseconds)."""

    directives: CacheControlDirectives = field(default_factory=CacheControlDirectives)
    """Directives the entry was stored under."""


class CacheStore(ABC):
    """Cache store interface."""

    @abstractmethod
    async def get(self, key: str) -> Optional[CacheEntry]:
        """Get a cached entry, or None if missing or expired."""
        pass

    @abstractmethod
    async def set(self, key: str, entry: CacheEntry) -> None:
        """Store an entry."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete an entry. Never raises for a missing key."""
        pass


@dataclass
class TransportResponse:
    """Raw response returned by a transport."""

    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    reason: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    """Transport interface.

    Raises on transport-level failures (connection refused, DNS, reset,
    timeout). Never raises for an HTTP error status.
    """

    async def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[bytes],
        timeout: float,
    ) -> TransportResponse:
        ...

    async def close(self) -> None:
        ...


class Logger(Protocol):
    """Logger interface. A stdlib ``logging.Logger`` satisfies it."""

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        ...

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        ...

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        ...

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        ...


@dataclass
class ExecuteOptions:
    """Per-call options for ``RequestExecutor.execute``."""

    skip_cache: bool = False
    """Bypass the cache lookup for this call."""

    headers: Optional[Dict[str, str]] = None
    """Extra headers for this call."""
