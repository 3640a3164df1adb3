"""
Champion Stats Service - Main FastAPI Application
Cached champion statistics plus bulk collection from the upstream provider
"""
import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query

from app.errors import ConfigurationError, ParseError, UpstreamError
from app.schemas import BulkCollectionRequest
from app.stats import StatsProvider, get_stats_provider

logger = logging.getLogger("main")

# Version tracking
APP_VERSION = "v0.3.0"
APP_NAME = "Champion Stats Service"

app = FastAPI(
    title=APP_NAME,
    description="Cached champion win/pick/ban statistics by rank and region",
    version=APP_VERSION
)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/version")
def version_info():
    """Version information endpoint."""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "full": f"{APP_NAME} {APP_VERSION}"
    }


@app.get("/cache/stats")
def cache_stats(provider: StatsProvider = Depends(get_stats_provider)):
    """Get cache statistics."""
    return provider.get_cache_stats()


@app.get("/api/champion-stats")
def champion_stats(
    rank: str = Query("PLATINUM", description="Rank, e.g. GOLD"),
    region: str = Query("na", description="Region, e.g. euw"),
    role: Optional[str] = Query(None, description="Lane: TOP, JUNGLE, MIDDLE, BOTTOM, UTILITY"),
    champion_id: Optional[str] = Query(None, alias="championId", description="Champion id, any casing"),
    patch: Optional[str] = Query(None, description="Game version, default latest"),
    provider: StatsProvider = Depends(get_stats_provider),
):
    """
    Champion stats for one rank/region, optionally narrowed to a role or champion.
    """
    try:
        return provider.get_stats(rank, region, role=role, champion_id=champion_id, patch=patch)
    except (UpstreamError, ParseError) as e:
        logger.error(f"Stats lookup failed: rank={rank}, region={region} - {e}")
        raise HTTPException(status_code=502, detail=str(e))


@app.post("/api/bulk-champion-stats")
def bulk_champion_stats(
    request: Optional[BulkCollectionRequest] = None,
    provider: StatsProvider = Depends(get_stats_provider),
):
    """
    Collect stats for every patch x rank x region combination.

    Blocks until all combinations have settled; per-combination failures are
    reported in status.errors.
    """
    request = request or BulkCollectionRequest()
    try:
        job = provider.run_bulk_collection(
            patches=request.patches,
            ranks=request.ranks,
            regions=request.regions,
        )
    except ConfigurationError as e:
        logger.error(f"Bulk collection refused: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "message": "Bulk collection completed",
        "status": job.to_dict(),
    }
