"""Dispatch pacing for bulk upstream collection."""

import time
from threading import Lock
from typing import Callable, Optional

# Configuration
DEFAULT_INTERVAL_SECONDS = 1.0


class FixedIntervalGate:
    """
    Fixed-rate gate: successive wait() calls return at least
    `interval_seconds` apart.

    Not a token bucket and does not react to upstream 429s; it only bounds
    the outbound dispatch rate. Thread-safe implementation.
    """

    def __init__(
        self,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._last_dispatch: Optional[float] = None
        self._lock = Lock()

    def wait(self) -> float:
        """
        Block until the next dispatch slot is open.

        The first call never blocks.

        Returns:
            Clock reading at which the caller may dispatch
        """
        with self._lock:
            now = self._clock()
            if self._last_dispatch is not None:
                next_slot = self._last_dispatch + self.interval_seconds
                # Loop in case sleep() wakes up early
                while now < next_slot:
                    self._sleep(next_slot - now)
                    now = self._clock()
            self._last_dispatch = now
            return now

    def reset(self) -> None:
        """Forget the last dispatch so the next wait() passes immediately."""
        with self._lock:
            self._last_dispatch = None
