"""
Configuration for refyne_client.
"""
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional
from urllib.parse import urlparse

from .backoff import async_sleep
from .stores.memory import MemoryCacheStore
from .transport import HttpxTransport
from .types import CacheStore, Clock, Logger, Sleep, Transport

DEFAULT_BASE_URL = "https://api.refyne.uk"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 3

_FALSE_VALUES = {"0", "false", "no", "off"}


def _mask_sensitive(value: Optional[str], visible_chars: int = 4) -> str:
    """Mask sensitive value for safe logging."""
    if value is None:
        return "<None>"
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def system_clock() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class ClientConfig:
    """Client configuration."""

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_retries: int = DEFAULT_MAX_RETRIES
    cache_enabled: bool = True
    cache: Optional[CacheStore] = None
    logger: Optional[Logger] = None
    transport: Optional[Transport] = None
    clock: Optional[Clock] = None
    sleep: Optional[Sleep] = None
    user_agent_suffix: Optional[str] = None
    max_retry_after_seconds: Optional[int] = None
    headers: Dict[str, str] = field(default_factory=dict)

    def __repr__(self) -> str:
        """Safe repr that masks the API key."""
        return (
            f"ClientConfig(api_key={_mask_sensitive(self.api_key)!r}, "
            f"base_url={self.base_url!r}, "
            f"timeout_seconds={self.timeout_seconds!r}, "
            f"max_retries={self.max_retries!r}, "
            f"cache_enabled={self.cache_enabled!r})"
        )


@dataclass(frozen=True)
class ResolvedConfig:
    """Client configuration with defaults applied."""

    api_key: str
    base_url: str
    timeout_seconds: float
    max_retries: int
    cache_enabled: bool
    cache: CacheStore
    logger: Logger
    transport: Transport
    clock: Clock
    sleep: Sleep
    user_agent_suffix: Optional[str]
    max_retry_after_seconds: Optional[int]
    headers: Dict[str, str]

    def __repr__(self) -> str:
        return (
            f"ResolvedConfig(api_key={_mask_sensitive(self.api_key)!r}, "
            f"base_url={self.base_url!r}, max_retries={self.max_retries!r})"
        )


def validate_config(config: ClientConfig) -> None:
    """Validate client configuration."""
    if not config.api_key:
        raise ValueError("api_key is required")

    parsed = urlparse(config.base_url or "")
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"Invalid base_url: {config.base_url!r}")

    if config.timeout_seconds is None or config.timeout_seconds <= 0:
        raise ValueError(f"timeout_seconds must be positive, got {config.timeout_seconds!r}")

    if config.max_retries is None or config.max_retries < 0:
        raise ValueError(f"max_retries must be >= 0, got {config.max_retries!r}")

    if config.max_retry_after_seconds is not None and config.max_retry_after_seconds < 0:
        raise ValueError(
            f"max_retry_after_seconds must be >= 0, got {config.max_retry_after_seconds!r}"
        )


def resolve_config(config: ClientConfig) -> ResolvedConfig:
    """Resolve client configuration with defaults."""
    validate_config(config)

    logger = config.logger if config.logger is not None else logging.getLogger("refyne_client")
    clock = config.clock or system_clock

    return ResolvedConfig(
        api_key=config.api_key,
        base_url=config.base_url.rstrip("/"),
        timeout_seconds=float(config.timeout_seconds),
        max_retries=int(config.max_retries),
        cache_enabled=config.cache_enabled,
        cache=config.cache if config.cache is not None else MemoryCacheStore(logger=logger, clock=clock),
        logger=logger,
        transport=config.transport if config.transport is not None else HttpxTransport(),
        clock=clock,
        sleep=config.sleep or async_sleep,
        user_agent_suffix=config.user_agent_suffix,
        max_retry_after_seconds=config.max_retry_after_seconds,
        headers=dict(config.headers),
    )


def config_from_env(
    prefix: str = "REFYNE_",
    environ: Optional[Mapping[str, str]] = None,
) -> ClientConfig:
    """
    Build a ClientConfig from environment variables.

    Reads ``<prefix>API_KEY``, ``<prefix>BASE_URL``, ``<prefix>TIMEOUT``,
    ``<prefix>MAX_RETRIES`` and ``<prefix>CACHE_ENABLED``.
    """
    env = os.environ if environ is None else environ

    def _get(name: str) -> Optional[str]:
        value = env.get(f"{prefix}{name}")
        return value.strip() if value else None

    timeout = _get("TIMEOUT")
    max_retries = _get("MAX_RETRIES")
    cache_enabled = _get("CACHE_ENABLED")

    try:
        return ClientConfig(
            api_key=_get("API_KEY") or "",
            base_url=_get("BASE_URL") or DEFAULT_BASE_URL,
            timeout_seconds=float(timeout) if timeout else DEFAULT_TIMEOUT_SECONDS,
            max_retries=int(max_retries) if max_retries else DEFAULT_MAX_RETRIES,
            cache_enabled=cache_enabled is None or cache_enabled.lower() not in _FALSE_VALUES,
        )
    except ValueError as e:
        raise ValueError(f"Invalid {prefix}* environment configuration: {e}") from e
