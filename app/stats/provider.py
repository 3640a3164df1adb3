"""
Provider interface for champion stats.

Builds the cache, upstream client, fetcher and bulk collector once and
exposes the two operations the routing layer needs.
"""
import logging
from typing import Any, Dict, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.api_client import UpstreamClient
from app.cache import StatsStore, TieredCache
from app.utils.rate_limiter import FixedIntervalGate
from config.settings import Settings, settings as default_settings

from .bulk import BulkCollector
from .fetcher import StatsFetcher
from .models import CollectionJob, StatsPayload

logger = logging.getLogger("stats.provider")


class StatsProvider:
    """
    Main interface for the stats pipeline.

    Handles:
    - Single lookups (get_stats)
    - Bulk collection runs (run_bulk_collection)
    - Cache statistics
    """

    def __init__(
        self,
        config: Settings = default_settings,
        client: Optional[UpstreamClient] = None,
        cache: Optional[TieredCache] = None,
        gate: Optional[FixedIntervalGate] = None,
    ):
        self.config = config
        self.client = client or UpstreamClient(
            base_url=config.stats_api_base_url,
            versions_url=config.versions_url,
            api_key=config.riot_api_key,
            timeout=config.upstream_timeout_seconds,
        )
        self.cache = cache or TieredCache(store=self._build_store(config))
        self.fetcher = StatsFetcher(self.client, self.cache)
        self.collector = BulkCollector(
            self.fetcher,
            gate=gate or FixedIntervalGate(config.bulk_dispatch_delay_seconds),
            config=config,
        )

    @staticmethod
    def _build_store(config: Settings) -> Optional[StatsStore]:
        """Persistent tier is optional: only built when a URL is configured."""
        if not config.stats_store_url:
            logger.info("No stats store configured, using in-memory cache only")
            return None
        try:
            return StatsStore(config.stats_store_url, timeout=config.upstream_timeout_seconds)
        except (SQLAlchemyError, ImportError) as e:
            # Bad URL or missing DB driver: same as no store
            logger.error(f"Stats store unusable, using in-memory cache only: {e}")
            return None

    def get_stats(
        self,
        rank: str,
        region: str,
        role: Optional[str] = None,
        champion_id: Optional[str] = None,
        patch: Optional[str] = None,
    ) -> StatsPayload:
        return self.fetcher.fetch_stats(rank, region, role=role, champion_id=champion_id, patch=patch)

    def run_bulk_collection(
        self,
        patches: Optional[Iterable[str]] = None,
        ranks: Optional[Iterable[str]] = None,
        regions: Optional[Iterable[str]] = None,
    ) -> CollectionJob:
        return self.collector.run_bulk_collection(patches=patches, ranks=ranks, regions=regions)

    def get_cache_stats(self) -> Dict[str, Any]:
        return self.cache.get_stats()


# Global provider instance
_stats_provider: Optional[StatsProvider] = None


def get_stats_provider() -> StatsProvider:
    """Get or create the global stats provider."""
    global _stats_provider
    if _stats_provider is None:
        _stats_provider = StatsProvider()
    return _stats_provider
