"""
In-memory cache store that honors Cache-Control expiry and stale-while-revalidate.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..types import CacheEntry, CacheStore, Clock, Logger

DEFAULT_MAX_ENTRIES = 100

_default_logger = logging.getLogger("refyne_client.stores.memory")


def _system_clock() -> int:
    return int(time.time() * 1000)


@dataclass
class MemoryCacheStats:
    """Memory cache statistics."""

    entries: int
    max_entries: int
    utilization_percent: float


class MemoryCacheStore(CacheStore):
    """
    Bounded in-memory cache store.

    Eviction is by insertion order: when full, the oldest-inserted entry is
    dropped. Reads do not reorder entries. Expired entries are removed lazily
    on ``get``.

    Example:
        store = MemoryCacheStore(max_entries=50)
        client = RefyneClient(ClientConfig(api_key=key, cache=store))
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        logger: Optional[Logger] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._cache: Dict[str, CacheEntry] = {}
        self._max_entries = max_entries
        self._logger = logger or _default_logger
        self._clock = clock or _system_clock
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[CacheEntry]:
        """Get a cached entry by key."""
        async with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            now = self._clock()

            if entry.expires_at <= now:
                window = entry.directives.stale_while_revalidate
                if window and now < entry.expires_at + window * 1000:
                    self._logger.debug(f"Serving stale cache entry: key={key}")
                    return entry

                del self._cache[key]
                self._logger.debug(f"Cache entry expired: key={key}")
                return None

            self._logger.debug(f"Cache hit: key={key}")
            return entry

    async def set(self, key: str, entry: CacheEntry) -> None:
        """Store an entry, evicting the oldest-inserted one when full."""
        if entry.directives.no_store:
            self._logger.debug(f"Not caching due to no-store: key={key}")
            return

        async with self._lock:
            # Re-setting a key counts as a fresh insertion
            self._cache.pop(key, None)

            if len(self._cache) >= self._max_entries:
                oldest_key = next(iter(self._cache))
                del self._cache[oldest_key]
                self._logger.debug(f"Evicted oldest cache entry: key={oldest_key}")

            self._cache[key] = entry
            self._logger.debug(f"Cache set: key={key}, expires_at={entry.expires_at}")

    async def delete(self, key: str) -> None:
        """Delete an entry."""
        async with self._lock:
            self._cache.pop(key, None)
        self._logger.debug(f"Cache delete: key={key}")

    async def clear(self) -> None:
        """Clear all entries."""
        async with self._lock:
            self._cache.clear()
        self._logger.debug("Cache cleared")

    async def keys(self) -> List[str]:
        """Get all keys in insertion order."""
        async with self._lock:
            return list(self._cache.keys())

    @property
    def size(self) -> int:
        """Current number of entries."""
        return len(self._cache)

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def get_stats(self) -> MemoryCacheStats:
        """Get cache statistics."""
        return MemoryCacheStats(
            entries=len(self._cache),
            max_entries=self._max_entries,
            utilization_percent=(len(self._cache) / self._max_entries) * 100,
        )


def create_memory_cache_store(
    max_entries: int = DEFAULT_MAX_ENTRIES,
    logger: Optional[Logger] = None,
    clock: Optional[Clock] = None,
) -> MemoryCacheStore:
    """Create a memory cache store."""
    return MemoryCacheStore(max_entries=max_entries, logger=logger, clock=clock)
