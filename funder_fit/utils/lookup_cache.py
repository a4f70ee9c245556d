"""
In-memory TTL cache for upstream lookups.

Problem: one analysis hits ProPublica up to three times (organization, XML
index page, XML document), and the same organization is often analyzed
repeatedly with different preferences.

Solution: an explicit cache object injected into the ProPublica client, with
one TTL per key class. Filed XML never changes, so documents live longest;
search results go stale as new organizations are indexed.

The cache is an optimization only. Analysis output is identical whether it
is warm or cold, and scoring code never sees it.

Usage:
    cache = LookupCache.from_settings(Settings.from_env())
    client = ProPublicaClient(cache=cache)
"""

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from funder_fit.constants import (
    ORGANIZATION_CACHE_TTL_SECONDS,
    SEARCH_CACHE_TTL_SECONDS,
    XML_DOCUMENT_CACHE_TTL_SECONDS,
    XML_INDEX_CACHE_TTL_SECONDS,
)
from funder_fit.utils.logger import PipelineLogger


class CacheKeyClass(str, Enum):
    SEARCH = "search"
    ORGANIZATION = "organization"
    XML_INDEX = "xml_index"
    XML_DOCUMENT = "xml_document"


DEFAULT_TTLS: Dict[CacheKeyClass, float] = {
    CacheKeyClass.SEARCH: SEARCH_CACHE_TTL_SECONDS,
    CacheKeyClass.ORGANIZATION: ORGANIZATION_CACHE_TTL_SECONDS,
    CacheKeyClass.XML_INDEX: XML_INDEX_CACHE_TTL_SECONDS,
    CacheKeyClass.XML_DOCUMENT: XML_DOCUMENT_CACHE_TTL_SECONDS,
}


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class LookupCache:
    """
    Thread-safe TTL cache keyed by (key class, key).

    Expired entries are evicted lazily on read.
    """

    def __init__(
        self,
        ttls: Optional[Dict[CacheKeyClass, float]] = None,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[PipelineLogger] = None,
    ):
        """
        Args:
            ttls: Per-class TTL overrides in seconds (missing classes use defaults)
            clock: Monotonic time source (injectable for tests)
            logger: Logger for hit/miss accounting
        """
        self._ttls = {**DEFAULT_TTLS, **(ttls or {})}
        self._clock = clock
        self._logger = logger
        self._entries: Dict[tuple, CacheEntry] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @classmethod
    def from_settings(cls, settings, logger: Optional[PipelineLogger] = None) -> "LookupCache":
        """Build a cache with TTLs from a Settings instance."""
        return cls(
            ttls={
                CacheKeyClass.SEARCH: settings.search_ttl,
                CacheKeyClass.ORGANIZATION: settings.organization_ttl,
                CacheKeyClass.XML_INDEX: settings.xml_index_ttl,
                CacheKeyClass.XML_DOCUMENT: settings.xml_ttl,
            },
            logger=logger,
        )

    def ttl_for(self, key_class: CacheKeyClass) -> float:
        return self._ttls[key_class]

    def get(self, key_class: CacheKeyClass, key: str) -> Any:
        """
        Cached value for key.

        Raises:
            KeyError: If the key is absent or expired
        """
        with self._lock:
            entry = self._entries.get((key_class, key))
            now = self._clock()
            if entry is not None and entry.expires_at <= now:
                del self._entries[(key_class, key)]
                reason = "expired"
                entry = None
            else:
                reason = "absent"

            if entry is None:
                self.misses += 1
            else:
                self.hits += 1

        if self._logger:
            if entry is None:
                self._logger.log_cache_miss(key_class.value, key, reason=reason)
            else:
                self._logger.log_cache_hit(key_class.value, key)

        if entry is None:
            raise KeyError(f"{key_class.value}:{key}")
        return entry.value

    def get_or_none(self, key_class: CacheKeyClass, key: str) -> Optional[Any]:
        try:
            return self.get(key_class, key)
        except KeyError:
            return None

    def set(self, key_class: CacheKeyClass, key: str, value: Any) -> None:
        with self._lock:
            self._entries[(key_class, key)] = CacheEntry(value=value, expires_at=self._clock() + self._ttls[key_class])

    def invalidate(self, key_class: CacheKeyClass, key: str) -> bool:
        """Remove one entry; returns True if it was present."""
        with self._lock:
            return self._entries.pop((key_class, key), None) is not None

    def clear(self, key_class: Optional[CacheKeyClass] = None) -> None:
        """Remove all entries, or only those of one key class."""
        with self._lock:
            if key_class is None:
                self._entries.clear()
            else:
                for cache_key in [k for k in self._entries if k[0] == key_class]:
                    del self._entries[cache_key]

    def stats(self) -> dict:
        with self._lock:
            return {"entries": len(self._entries), "hits": self.hits, "misses": self.misses}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
