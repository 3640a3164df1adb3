"""
Bulk collection over patches x ranks x regions.

Every combination becomes one independent fetch. Dispatch is paced by a
fixed-interval gate; fetches overlap freely once dispatched. Failures are
recorded per combination and never abort the batch.
"""
import itertools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional

from app.errors import ConfigurationError, ParseError, UpstreamError
from app.utils.normalizer import normalize_rank, normalize_region
from app.utils.rate_limiter import FixedIntervalGate
from config.settings import Settings, settings as default_settings

from .fetcher import StatsFetcher
from .models import RANKS, REGIONS, CollectionJob, TupleResult

logger = logging.getLogger("stats.bulk")


class BulkCollector:
    """
    Runs one bulk collection per call and reports a CollectionJob.

    The only error that fails a whole call is ConfigurationError, raised
    before anything is dispatched.
    """

    def __init__(
        self,
        fetcher: StatsFetcher,
        gate: Optional[FixedIntervalGate] = None,
        config: Settings = default_settings,
    ):
        self.fetcher = fetcher
        self.config = config
        self.gate = gate or FixedIntervalGate(config.bulk_dispatch_delay_seconds)

    def check_configuration(self) -> None:
        """
        Raises:
            ConfigurationError: upstream key or store URL missing
        """
        if not self.config.riot_api_key:
            raise ConfigurationError("Riot API key not configured")
        if not self.config.stats_store_url:
            raise ConfigurationError("Stats store configuration missing")

    def resolve_patches(self, patches: Optional[Iterable[str]] = None) -> List[str]:
        """
        Use the given patches, or the most recent published ones.

        Falls back to the configured patch if the version list is unavailable.
        """
        if patches:
            return list(patches)

        count = self.config.default_patch_count
        try:
            versions = self.fetcher.fetch_versions()
        except (UpstreamError, ParseError) as e:
            logger.error(f"Error fetching versions, using {self.config.fallback_patch}: {e}")
            return [self.config.fallback_patch]

        if not versions:
            return [self.config.fallback_patch]
        return versions[:count]

    def run_bulk_collection(
        self,
        patches: Optional[Iterable[str]] = None,
        ranks: Optional[Iterable[str]] = None,
        regions: Optional[Iterable[str]] = None,
    ) -> CollectionJob:
        """
        Collect stats for every patch x rank x region combination.

        Blocks until every dispatched fetch has settled.

        Args:
            patches: Versions to collect (default: latest N published)
            ranks: Ranks to collect (default: all ranks)
            regions: Regions to collect (default: all regions)

        Returns:
            Final CollectionJob snapshot, in_progress == 0

        Raises:
            ConfigurationError: required configuration missing
        """
        self.check_configuration()

        patch_list = self.resolve_patches(patches)
        # Only omitted ranks/regions get defaults; an explicit [] collects nothing
        rank_list = list(RANKS) if ranks is None else [normalize_rank(r) for r in ranks]
        region_list = list(REGIONS) if regions is None else [normalize_region(r) for r in regions]

        combinations = list(itertools.product(patch_list, rank_list, region_list))
        job = CollectionJob(total=len(combinations))
        logger.info(
            f"Bulk collection started: {len(patch_list)} patches x {len(rank_list)} ranks "
            f"x {len(region_list)} regions = {job.total} combinations"
        )

        if not combinations:
            return job.snapshot()

        workers = max(1, min(self.config.bulk_max_workers, len(combinations)))
        # A unit passes the gate only once a worker is free to start it, so
        # upstream calls keep the gate's spacing even when fetches are slow
        slots = threading.BoundedSemaphore(workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="bulk-collect") as executor:
            futures = []
            for patch, rank, region in combinations:
                slots.acquire()
                self.gate.wait()
                job.mark_dispatched()
                futures.append(executor.submit(self._collect_one, job, slots, patch, rank, region))

            # Units never raise, so this waits for everything regardless of outcome
            results = [future.result() for future in futures]

        final = job.snapshot()
        logger.info(
            f"Bulk collection finished: {final.completed}/{final.total} completed, "
            f"{final.failed} failed"
        )
        for result in results:
            if not result.ok:
                logger.debug(f"Failed combination: {result.label}")
        return final

    def _collect_one(
        self,
        job: CollectionJob,
        slots: threading.BoundedSemaphore,
        patch: str,
        rank: str,
        region: str,
    ) -> TupleResult:
        try:
            try:
                self.fetcher.fetch_stats(rank, region, patch=patch)
                result = TupleResult(patch=patch, rank=rank, region=region, ok=True)
            except Exception as e:
                logger.warning(f"Bulk unit failed: patch={patch}, rank={rank}, region={region} - {e}")
                result = TupleResult(patch=patch, rank=rank, region=region, ok=False, error=str(e))
            job.settle(result)
        finally:
            # Settle first so in_progress never exceeds the worker count
            slots.release()
        return result
