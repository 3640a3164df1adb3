"""
Data models for champion stats collection.
"""
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# championId -> role -> aggregate
StatsPayload = Dict[str, Dict[str, Dict[str, Any]]]

# Key used for aggregates upstream does not split by role
ALL_ROLES = "ALL"

RANKS = [
    "CHALLENGER",
    "GRANDMASTER",
    "MASTER",
    "DIAMOND",
    "EMERALD",
    "PLATINUM",
    "GOLD",
    "SILVER",
    "BRONZE",
    "IRON",
]

REGIONS = [
    "na",
    "euw",
    "eune",
    "kr",
    "br",
    "jp",
    "lan",
    "las",
    "oce",
    "tr",
    "ru",
]


@dataclass(frozen=True)
class TupleResult:
    """Settled outcome of one (patch, rank, region) unit of work."""
    patch: str
    rank: str
    region: str
    ok: bool
    error: Optional[str] = None

    @property
    def label(self) -> str:
        return f"patch={self.patch}, rank={self.rank}, region={self.region}"


@dataclass
class CollectionJob:
    """
    Progress of one bulk collection call.

    Lives only for the duration of the call. Transitions are lock-guarded
    because units settle on worker threads in any order.
    """
    total: int = 0
    completed: int = 0
    failed: int = 0
    in_progress: int = 0
    errors: List[str] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def mark_dispatched(self) -> None:
        with self._lock:
            self.in_progress += 1

    def settle(self, result: TupleResult) -> None:
        """Move one unit from in-progress to completed or failed."""
        with self._lock:
            self.in_progress -= 1
            if result.ok:
                self.completed += 1
            else:
                self.failed += 1
                self.errors.append(f"Failed to fetch stats for {result.label}: {result.error}")

    def snapshot(self) -> "CollectionJob":
        with self._lock:
            return CollectionJob(
                total=self.total,
                completed=self.completed,
                failed=self.failed,
                in_progress=self.in_progress,
                errors=list(self.errors),
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        with self._lock:
            return {
                "total": self.total,
                "completed": self.completed,
                "failed": self.failed,
                "inProgress": self.in_progress,
                "errors": list(self.errors),
            }
