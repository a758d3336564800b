# src/storage/query_cache.py

"""In-memory TTL cache for remote product query results."""

import logging
import time
from dataclasses import dataclass

from src.config.settings import Settings
from src.models.filter_state import FilterConfiguration
from src.models.product import Product

logger = logging.getLogger("pricefind.cache")


@dataclass
class CacheEntry:
    """Cached results for one normalised filter configuration."""

    key: tuple[object, ...]
    results: list[Product]
    total: int
    timestamp: float


class QueryCache:
    """Cache remote query results keyed by ``FilterConfiguration.cache_key``.

    Two configurations that differ only in query casing or surrounding
    whitespace share an entry.  Entries older than the TTL are evicted
    on lookup.
    """

    def __init__(self, ttl: float | None = None) -> None:
        self._entries: dict[tuple[object, ...], CacheEntry] = {}
        self._ttl: float = (
            ttl if ttl is not None else Settings.QUERY_CACHE_TTL
        )

    def __len__(self) -> int:
        return len(self._entries)

    def get(
        self, filters: FilterConfiguration,
    ) -> tuple[list[Product], int] | None:
        """Return ``(products, total)`` on a fresh hit, else ``None``."""
        self._evict_expired(time.time())
        entry = self._entries.get(filters.cache_key())
        if entry is None:
            return None
        logger.debug("Cache hit for %s", entry.key)
        return list(entry.results), entry.total

    def store(
        self,
        filters: FilterConfiguration,
        results: list[Product],
        total: int,
    ) -> None:
        key = filters.cache_key()
        self._entries[key] = CacheEntry(
            key=key,
            results=list(results),
            total=total,
            timestamp=time.time(),
        )
        logger.debug("Cached %d results for %s", len(results), key)

    def clear(self) -> int:
        """Purge all cached entries.

        Returns the number of entries that were removed.
        """
        count = len(self._entries)
        self._entries.clear()
        logger.info("Cache manually purged (%d entries removed)", count)
        return count

    def _evict_expired(self, now: float) -> None:
        """Remove entries older than the TTL threshold."""
        expired = [
            k
            for k, e in self._entries.items()
            if now - e.timestamp >= self._ttl
        ]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug(
                "Evicted %d expired cache entries", len(expired)
            )
