"""
Tiered caching with TTL staleness, persistent-store fallback and request coalescing.
"""
from .core import CacheEntry, DataCategory, utcnow
from .ttl_policies import TTL_CONFIG, get_ttl_for_category
from .coalescer import RequestCoalescer
from .store import StatsStore
from .manager import TieredCache

__all__ = [
    # Core types
    "CacheEntry",
    "DataCategory",
    "utcnow",
    # TTL policies
    "TTL_CONFIG",
    "get_ttl_for_category",
    # Coalescing
    "RequestCoalescer",
    # Tiers
    "StatsStore",
    "TieredCache",
]
