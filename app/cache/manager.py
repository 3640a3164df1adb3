"""
Tiered cache: optional persistent store in front of a process-local map.
"""
import threading
import logging
from datetime import datetime
from typing import Dict, Optional, Callable, Any

from app.errors import CacheStoreError

from .core import CacheEntry, DataCategory, utcnow
from .coalescer import RequestCoalescer
from .store import StatsStore
from .ttl_policies import get_ttl_for_category

logger = logging.getLogger("cache.manager")


class TieredCache:
    """
    Two-tier TTL cache.

    - Primary: persistent StatsStore, optional and allowed to fail
    - Fallback: in-process dict, always available, lost on restart
    - Store errors are downgraded to misses and never reach the caller
    - Concurrent misses on one key are coalesced into a single fetch
    """

    def __init__(
        self,
        store: Optional[StatsStore] = None,
        ttl_overrides: Optional[Dict[DataCategory, int]] = None,
        clock: Callable[[], datetime] = utcnow,
        coalesce_timeout: float = 30.0,
    ):
        """
        Args:
            store: Persistent primary tier, or None to run local-only
            ttl_overrides: Per-category TTLs replacing the configured ones
            clock: Returns the current aware UTC datetime
            coalesce_timeout: Timeout for waiting on coalesced fetches
        """
        self._store = store
        self._ttl_overrides = ttl_overrides or {}
        self._clock = clock
        self._local: Dict[str, CacheEntry] = {}
        self._local_lock = threading.RLock()
        self._coalescer = RequestCoalescer(timeout=coalesce_timeout)

        self._stats_lock = threading.Lock()
        self._stats = {
            "hits": 0,
            "misses": 0,
            "store_errors": 0,
        }

    @property
    def has_store(self) -> bool:
        return self._store is not None

    def now(self) -> datetime:
        return self._clock()

    def ttl_for(self, category: DataCategory) -> int:
        return get_ttl_for_category(category, self._ttl_overrides)

    def get(
        self,
        cache_key: str,
        category: DataCategory = DataCategory.RANK_REGION_STATS,
    ) -> Optional[CacheEntry]:
        """
        Look up a fresh entry, primary tier first.

        Returns:
            The entry if one exists with age < TTL, else None
        """
        now = self.now()
        ttl = self.ttl_for(category)

        if self._store is not None:
            primary = self._read_primary(cache_key)
            if primary is not None and primary.is_fresh(ttl, now):
                self._write_local(cache_key, primary)
                return primary

        with self._local_lock:
            local = self._local.get(cache_key)

        if local is not None and local.is_fresh(ttl, now):
            return local

        if local is not None:
            logger.debug(f"CACHE STALE: {cache_key} [age={local.age_seconds(now):.1f}s]")
        return None

    def set(self, cache_key: str, entry: CacheEntry) -> None:
        """
        Store an entry locally, then best-effort in the primary tier.
        """
        self._write_local(cache_key, entry)

        if self._store is None:
            return
        try:
            self._store.upsert(cache_key, entry)
        except CacheStoreError as e:
            self._count("store_errors")
            logger.warning(f"Primary cache write failed, kept local copy: {cache_key} - {e}")

    def get_or_fetch(
        self,
        cache_key: str,
        fetch_fn: Callable[[], Any],
        category: DataCategory = DataCategory.RANK_REGION_STATS,
    ) -> Any:
        """
        Return the cached payload, or fetch, store and return a fresh one.

        Errors from fetch_fn propagate; nothing is cached in that case.
        """
        entry = self.get(cache_key, category)
        if entry is not None:
            self._count("hits")
            logger.debug(f"CACHE HIT: {cache_key}")
            return entry.payload

        self._count("misses")
        logger.info(f"CACHE MISS: {cache_key}")

        def fetch_and_store():
            payload = fetch_fn()
            self.set(cache_key, CacheEntry(payload=payload, stored_at=self.now(), category=category))
            return payload

        return self._coalescer.get_or_fetch(cache_key, fetch_and_store)

    def _read_primary(self, cache_key: str) -> Optional[CacheEntry]:
        try:
            return self._store.get(cache_key)
        except CacheStoreError as e:
            self._count("store_errors")
            logger.warning(f"Primary cache read failed, using local tier: {cache_key} - {e}")
            return None

    def _write_local(self, cache_key: str, entry: CacheEntry) -> None:
        # stored_at never goes backwards for a key
        with self._local_lock:
            current = self._local.get(cache_key)
            if entry.is_newer_than(current):
                self._local[cache_key] = entry

    def _count(self, name: str) -> None:
        with self._stats_lock:
            self._stats[name] += 1

    def clear(self) -> int:
        """
        Clear the local tier.

        Returns:
            Number of entries cleared
        """
        with self._local_lock:
            count = len(self._local)
            self._local.clear()
            logger.info(f"Cleared {count} local cache entries")
            return count

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._stats_lock:
            stats = dict(self._stats)
        with self._local_lock:
            entries = len(self._local)

        total = stats["hits"] + stats["misses"]
        hit_rate = (stats["hits"] / total * 100) if total > 0 else 0

        return {
            "entries": entries,
            "hits": stats["hits"],
            "misses": stats["misses"],
            "store_errors": stats["store_errors"],
            "hit_rate_percent": round(hit_rate, 1),
            "primary_store": self._store is not None,
            "in_flight": self._coalescer.active_requests,
        }
