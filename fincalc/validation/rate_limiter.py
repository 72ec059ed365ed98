"""
Sliding-Window Rate Limiter

Each caller may make at most `max_requests` requests inside any window of
`window_seconds`. Timestamps are kept per caller and pruned lazily on every
check, so memory is bounded by callers x max_requests.

DESIGN DECISION: The limiter is owned by the engine instance, not the module.
Two engines never share a budget, and tests get a fresh limiter each time.
"""

import threading
import time
from collections import deque
from typing import Callable

from fincalc.models.metrics import RateLimitStats


class SlidingWindowRateLimiter:
    """Per-caller request budget over a sliding time window."""

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the limiter.

        Args:
            max_requests: Requests allowed per caller per window
            window_seconds: Window length in seconds
            clock: Monotonic time source, injectable for tests
        """
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._requests: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def _prune(self, timestamps: deque[float], now: float) -> None:
        cutoff = now - self.window_seconds
        while timestamps and timestamps[0] <= cutoff:
            timestamps.popleft()

    def check(self, caller_id: str) -> tuple[bool, float]:
        """
        Record a request for the caller if it fits in the budget.

        Returns:
            (allowed, retry_after_seconds). A refused request is not recorded.
        """
        with self._lock:
            now = self._clock()
            timestamps = self._requests.setdefault(caller_id, deque())
            self._prune(timestamps, now)

            if len(timestamps) >= self.max_requests:
                retry_after = timestamps[0] + self.window_seconds - now
                return False, max(retry_after, 0.0)

            timestamps.append(now)
            return True, 0.0

    def remaining(self, caller_id: str) -> int:
        """Requests the caller can still make in the current window."""
        with self._lock:
            timestamps = self._requests.get(caller_id)
            if not timestamps:
                return self.max_requests
            self._prune(timestamps, self._clock())
            return self.max_requests - len(timestamps)

    def cleanup(self) -> int:
        """
        Forget callers with no requests left inside the window.

        Returns the number of callers dropped.
        """
        with self._lock:
            now = self._clock()
            stale = []
            for caller_id, timestamps in self._requests.items():
                self._prune(timestamps, now)
                if not timestamps:
                    stale.append(caller_id)
            for caller_id in stale:
                del self._requests[caller_id]
            return len(stale)

    def stats(self) -> RateLimitStats:
        with self._lock:
            now = self._clock()
            for timestamps in self._requests.values():
                self._prune(timestamps, now)
            active = [len(ts) for ts in self._requests.values() if ts]

        total = sum(active)
        return RateLimitStats(
            tracked_callers=len(active),
            requests_in_window=total,
            average_requests_per_caller=total / len(active) if active else 0.0,
            max_requests=self.max_requests,
            window_seconds=self.window_seconds,
        )

    def reset(self) -> None:
        with self._lock:
            self._requests.clear()
