"""
Champion stats pipeline.

- Single-combination lookups through the tiered cache
- Bulk collection over patches x ranks x regions
- Tier derivation for aggregates upstream leaves unrated
"""

from .models import (
    ALL_ROLES,
    RANKS,
    REGIONS,
    CollectionJob,
    StatsPayload,
    TupleResult,
)
from .tiers import calculate_tier
from .fetcher import (
    StatsFetcher,
    parse_stats_payload,
    project_payload,
)
from .bulk import BulkCollector
from .provider import (
    StatsProvider,
    get_stats_provider,
)

__all__ = [
    # Models
    "ALL_ROLES",
    "RANKS",
    "REGIONS",
    "CollectionJob",
    "StatsPayload",
    "TupleResult",
    # Tiers
    "calculate_tier",
    # Fetcher
    "StatsFetcher",
    "parse_stats_payload",
    "project_payload",
    # Bulk
    "BulkCollector",
    # Provider
    "StatsProvider",
    "get_stats_provider",
]
