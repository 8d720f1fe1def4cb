"""
TTL-keyed response cache.

Maps a request fingerprint to a cached JSON value with expiry:
- Lazy eviction on read (stale entries behave as absent)
- Optional sweep of expired entries
- Bounded size: LRU eviction in memory, size-limited culling on disk
- Targeted invalidation by key or by request-line pattern
- In-memory or disk-backed (diskcache) storage

Safe for concurrent use: writes are serialized by a lock, and values are
copied on the way in and out so entries are never shared mutably.
"""

import copy
import hashlib
import json
import re
import threading
import time
from collections import OrderedDict
from pathlib import Path
from typing import Any, Callable, Optional, Union

import diskcache
import structlog

from carbon_enrichment.models.cache import (
    CacheBackend,
    CacheConfig,
    CacheEntry,
    CacheStats,
)
from carbon_enrichment.models.request import RequestDescriptor
from carbon_enrichment.observability.metrics import CACHE_OPERATIONS, CACHE_SIZE

logger = structlog.get_logger()


class CacheStore:
    """
    TTL cache store.

    Never raises: backend failures are logged and read as a miss.
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize cache store.

        Args:
            config: Cache configuration (in-memory defaults when omitted)
            clock: Source of the current time in epoch seconds
        """
        self.config = config or CacheConfig()
        self.clock = clock
        self.enabled = self.config.enabled
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

        self._backend: Union["OrderedDict[str, Any]", diskcache.Cache]
        if self.config.backend == CacheBackend.DISK:
            cache_dir = Path(self.config.cache_dir)
            cache_dir.mkdir(parents=True, exist_ok=True)
            self._backend = diskcache.Cache(
                str(cache_dir / "responses"),
                size_limit=self.config.max_disk_size_mb * 1024 * 1024,
            )
        else:
            self._backend = OrderedDict()

        logger.info(
            "cache_store_initialized",
            enabled=self.enabled,
            backend=self.config.backend.value,
            default_ttl_seconds=self.config.default_ttl_seconds,
            max_entries=self.config.max_entries,
        )

    def get(self, key: str) -> Optional[Any]:
        """
        Get a fresh cached value.

        Args:
            key: Cache key

        Returns:
            Cached value, or None if absent or expired
        """
        if not self.enabled:
            return None

        try:
            raw = self._backend.get(key)
            if raw is None:
                return self._miss(key)

            entry = CacheEntry.model_validate(raw)
            if not entry.is_fresh(self.clock()):
                with self._lock:
                    self._backend.pop(key, None)
                logger.debug("cache_entry_expired", cache_key=key[:8])
                return self._miss(key)

            with self._lock:
                self._hits += 1
                if isinstance(self._backend, OrderedDict) and key in self._backend:
                    self._backend.move_to_end(key)
            CACHE_OPERATIONS.labels(operation="get", result="hit").inc()
            logger.debug("cache_hit", cache_key=key[:8])
            return copy.deepcopy(entry.value)

        except Exception as e:
            logger.error("cache_get_error", cache_key=key[:8], error=str(e))
            return self._miss(key)

    def put(
        self,
        key: str,
        value: Any,
        ttl: Optional[float] = None,
        label: Optional[str] = None,
    ) -> None:
        """
        Store a value, overwriting any previous entry.

        In memory, the least recently used entries are evicted once
        ``max_entries`` is exceeded.

        Args:
            key: Cache key
            value: JSON-compatible value
            ttl: Time to live in seconds (config default when omitted)
            label: Request line the value answers, matched by invalidate_pattern
        """
        if not self.enabled:
            return

        entry = CacheEntry(
            key=key,
            value=copy.deepcopy(value),
            stored_at=self.clock(),
            ttl=ttl if ttl is not None else self.config.default_ttl_seconds,
            label=label,
        )

        try:
            with self._lock:
                self._backend[key] = entry.model_dump()
                if isinstance(self._backend, OrderedDict):
                    self._backend.move_to_end(key)
                    self._evict_lru(self._backend)
            CACHE_OPERATIONS.labels(operation="put", result="stored").inc()
            CACHE_SIZE.set(self.size())
            logger.debug("cache_put", cache_key=key[:8], ttl=entry.ttl)
        except Exception as e:
            logger.error("cache_put_error", cache_key=key[:8], error=str(e))

    def delete(self, key: str) -> bool:
        """
        Remove one entry.

        Args:
            key: Cache key

        Returns:
            True if an entry was removed
        """
        with self._lock:
            removed = self._backend.pop(key, None) is not None
        if removed:
            CACHE_OPERATIONS.labels(operation="delete", result="removed").inc()
            CACHE_SIZE.set(self.size())
            logger.debug("cache_deleted", cache_key=key[:8])
        return removed

    def invalidate_pattern(self, pattern: str) -> int:
        """
        Remove every entry whose request line matches a regex.

        Entries stored without a label are matched on their key.

        Args:
            pattern: Regular expression, searched anywhere in the label

        Returns:
            Number of entries removed
        """
        regex = re.compile(pattern)
        removed = 0

        with self._lock:
            for key in list(self._backend):
                raw = self._backend.get(key)
                if raw is None:
                    continue
                label = raw.get("label") if isinstance(raw, dict) else None
                if regex.search(label or key):
                    self._backend.pop(key, None)
                    removed += 1

        CACHE_SIZE.set(self.size())
        logger.info("cache_pattern_invalidated", pattern=pattern, removed=removed)
        return removed

    def clear(self) -> None:
        """Remove every entry and reset statistics."""
        with self._lock:
            self._backend.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0
        CACHE_SIZE.set(0)
        logger.info("cache_cleared")

    def size(self) -> int:
        return len(self._backend)

    def purge_expired(self) -> int:
        """
        Sweep expired entries.

        Returns:
            Number of entries removed
        """
        now = self.clock()
        removed = 0

        with self._lock:
            for key in list(self._backend):
                raw = self._backend.get(key)
                if raw is None:
                    continue
                try:
                    fresh = CacheEntry.model_validate(raw).is_fresh(now)
                except Exception:
                    fresh = False
                if not fresh:
                    self._backend.pop(key, None)
                    removed += 1

        CACHE_SIZE.set(self.size())
        if removed:
            logger.info("cache_expired_purged", removed=removed)
        return removed

    def get_stats(self) -> CacheStats:
        """
        Get cache statistics.

        Returns:
            CacheStats with current size and counters
        """
        return CacheStats(
            size=self.size(),
            hits=self._hits,
            misses=self._misses,
            evictions=self._evictions,
        )

    def close(self) -> None:
        if isinstance(self._backend, diskcache.Cache):
            self._backend.close()

    def _evict_lru(self, backend: "OrderedDict[str, Any]") -> None:
        # Caller holds the lock
        while len(backend) > self.config.max_entries:
            key, _ = backend.popitem(last=False)
            self._evictions += 1
            CACHE_OPERATIONS.labels(operation="evict", result="lru").inc()
            logger.debug("cache_evicted", cache_key=key[:8])

    def _miss(self, key: str) -> None:
        with self._lock:
            self._misses += 1
        CACHE_OPERATIONS.labels(operation="get", result="miss").inc()
        logger.debug("cache_miss", cache_key=key[:8])
        return None

    # ==================== Utility Methods ====================

    @staticmethod
    def hash_request(descriptor: RequestDescriptor) -> str:
        """
        Generate cache key for a request.

        Params are sorted by name so key order never changes the fingerprint.

        Args:
            descriptor: Request to fingerprint

        Returns:
            SHA256 hash as hex string
        """
        query = "&".join(
            f"{name}={json.dumps(value, sort_keys=True, default=str)}"
            for name, value in sorted(descriptor.params.items())
        )
        content = f"{descriptor.method.value} {descriptor.url}?{query}"
        return hashlib.sha256(content.encode()).hexdigest()
