"""
Coalescing of concurrent cache misses.

A bulk run and an HTTP lookup can miss on the same stats key at the same
moment. The first one to miss owns the upstream fetch; everyone else joins
it and gets the owner's payload or exception. Upstream sees one call.
"""
import threading
import time
import logging
from typing import Dict, Optional, Callable, Any, Tuple
from dataclasses import dataclass, field

from app.errors import UpstreamError

logger = logging.getLogger("cache.coalescer")


@dataclass
class PendingFetch:
    """One upstream fetch for a stats key, shared by everyone who missed on it."""
    done: threading.Event = field(default_factory=threading.Event)
    payload: Optional[Any] = None
    error: Optional[Exception] = None
    started_at: float = field(default_factory=time.monotonic)
    joined: int = 0

    def outcome(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.payload


class RequestCoalescer:
    """
    Keyed registry of pending fetches.

    A key is pending from the moment its owner claims it until the fetch
    settles; it is removed before joiners are woken up, so a miss after
    that point starts a fresh fetch.
    """

    def __init__(self, timeout: float = 30.0):
        self._pending: Dict[str, PendingFetch] = {}
        self._lock = threading.Lock()
        self._timeout = timeout

    def get_or_fetch(self, cache_key: str, fetch_fn: Callable[[], Any]) -> Any:
        """
        Run fetch_fn for cache_key, or wait for the fetch already running.

        Raises:
            UpstreamError: joined fetch did not settle within the timeout
            Exception: whatever fetch_fn raised, for the owner and every joiner
        """
        pending, owner = self._claim(cache_key)
        if owner:
            return self._run(cache_key, pending, fetch_fn)
        return self._join(cache_key, pending)

    def _claim(self, cache_key: str) -> Tuple[PendingFetch, bool]:
        with self._lock:
            pending = self._pending.get(cache_key)
            if pending is not None:
                pending.joined += 1
                logger.debug(f"Joining pending fetch for {cache_key} ({pending.joined} joined)")
                return pending, False
            pending = PendingFetch()
            self._pending[cache_key] = pending
            return pending, True

    def _run(self, cache_key: str, pending: PendingFetch, fetch_fn: Callable[[], Any]) -> Any:
        try:
            pending.payload = fetch_fn()
        except Exception as e:
            pending.error = e
        finally:
            with self._lock:
                self._pending.pop(cache_key, None)
            pending.done.set()
        return pending.outcome()

    def _join(self, cache_key: str, pending: PendingFetch) -> Any:
        if not pending.done.wait(timeout=self._timeout):
            waited = time.monotonic() - pending.started_at
            logger.error(f"Gave up on pending fetch for {cache_key} after {waited:.1f}s")
            raise UpstreamError(f"Fetch for {cache_key} timed out after {self._timeout}s")
        return pending.outcome()

    @property
    def active_requests(self) -> int:
        """Stats keys with a fetch currently pending."""
        with self._lock:
            return len(self._pending)
