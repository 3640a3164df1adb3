"""
TTL configuration per data category.
"""
from typing import Dict, Optional

from config.settings import settings

from .core import DataCategory


# TTL Configuration by category (in seconds)
TTL_CONFIG: Dict[DataCategory, int] = {
    DataCategory.RANK_REGION_STATS: settings.stats_ttl_seconds,   # 6 hours
    DataCategory.META: settings.meta_ttl_seconds,                 # 24 hours
}


def get_ttl_for_category(
    category: DataCategory,
    overrides: Optional[Dict[DataCategory, int]] = None,
) -> int:
    """
    Get the TTL for a data category.

    Args:
        category: The data category
        overrides: Per-instance TTLs that take precedence over TTL_CONFIG

    Returns:
        TTL in seconds
    """
    if overrides and category in overrides:
        return overrides[category]
    return TTL_CONFIG.get(category, TTL_CONFIG[DataCategory.RANK_REGION_STATS])
