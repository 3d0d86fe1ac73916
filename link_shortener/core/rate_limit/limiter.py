"""In-process sliding-window rate limiter."""

import threading
import time
from collections import deque
from enum import Enum
from typing import Callable, Deque, Dict, Optional

from loguru import logger

UNKNOWN_IDENTITY = "unknown"


class Decision(str, Enum):
    """Outcome of an admission check."""
    ALLOW = "allow"
    REJECT = "reject"


class SlidingWindowRateLimiter:
    """Bound the number of requests per client inside a trailing window.

    Each client identity owns a deque of request timestamps in arrival
    order. On every check the identity's timestamps older than the window
    start are dropped, then the request is admitted only if fewer than
    ``limit`` timestamps remain. Rejected requests are not recorded.

    The whole prune/check/append sequence runs under one process-wide
    lock, so concurrent checks for the same identity can never admit more
    than ``limit`` requests per window.

    Args:
        limit: Maximum number of requests per window
        window: Window length in seconds
        clock: Source of ``now`` when callers do not pass it explicitly
    """

    def __init__(
        self,
        limit: int,
        window: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window <= 0:
            raise ValueError("window must be positive")
        self.limit = limit
        self.window = window
        self.clock = clock
        self._requests: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def admit(self, identity: str, now: Optional[float] = None) -> Decision:
        """Admit or reject one request from ``identity``."""
        identity = identity or UNKNOWN_IDENTITY

        with self._lock:
            if now is None:
                now = self.clock()
            window_start = now - self.window

            timestamps = self._requests.get(identity)
            if timestamps is None:
                timestamps = self._requests[identity] = deque()

            # Timestamps equal to window_start stay in the window
            while timestamps and timestamps[0] < window_start:
                timestamps.popleft()

            if len(timestamps) >= self.limit:
                return Decision.REJECT

            timestamps.append(now)
            return Decision.ALLOW

    def retry_after(self, identity: str, now: Optional[float] = None) -> float:
        """Seconds until ``identity`` may be admitted again (0 when it already may)."""
        identity = identity or UNKNOWN_IDENTITY

        with self._lock:
            if now is None:
                now = self.clock()
            window_start = now - self.window
            timestamps = [t for t in self._requests.get(identity, ()) if t >= window_start]
            if len(timestamps) < self.limit:
                return 0.0
            # The slot frees up once the oldest counted request drops out
            oldest = timestamps[len(timestamps) - self.limit]
            return max(0.0, oldest - window_start)

    def sweep(self, now: Optional[float] = None) -> int:
        """Forget identities with no requests left inside the window.

        Returns:
            int: Number of identities removed
        """
        with self._lock:
            if now is None:
                now = self.clock()
            window_start = now - self.window
            stale = [
                identity
                for identity, timestamps in self._requests.items()
                if not timestamps or timestamps[-1] < window_start
            ]
            for identity in stale:
                del self._requests[identity]
            remaining = len(self._requests)

        if stale:
            logger.debug("Rate limiter sweep", removed=len(stale), remaining=remaining)
        return len(stale)

    @property
    def tracked_identities(self) -> int:
        with self._lock:
            return len(self._requests)
