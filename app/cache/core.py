"""
Core cache data structures.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional
from enum import Enum


class DataCategory(Enum):
    """Categories of data with different TTLs."""
    RANK_REGION_STATS = "rank_region_stats"   # 6 hours
    META = "meta"                             # 24 hours (versions, derived data)


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class CacheEntry:
    """
    A cached payload plus the moment it was stored.

    Immutable once written; a refresh replaces the whole entry.
    """
    payload: Any
    stored_at: datetime
    category: DataCategory = DataCategory.RANK_REGION_STATS

    def age_seconds(self, now: Optional[datetime] = None) -> float:
        """Seconds since the entry was stored."""
        now = now or utcnow()
        return (now - as_utc(self.stored_at)).total_seconds()

    def is_fresh(self, ttl_seconds: int, now: Optional[datetime] = None) -> bool:
        """Check if the entry is still within its TTL."""
        return self.age_seconds(now) < ttl_seconds

    def is_newer_than(self, other: Optional["CacheEntry"]) -> bool:
        if other is None:
            return True
        return as_utc(self.stored_at) >= as_utc(other.stored_at)
