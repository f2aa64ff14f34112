"""In-memory sliding-window rate limiter for processor-facing actions."""

import time
from collections import defaultdict, deque
from threading import Lock


class RateLimiter:
    """Sliding-window limiter keyed by an arbitrary string (usually a user id).

    Each key keeps the monotonic timestamps of its accepted calls inside the
    window; a call is rejected once the window already holds ``max_requests``.
    """

    def __init__(self, max_requests: int, window_seconds: int = 60):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._hits: dict[str, deque[float]] = defaultdict(deque)
        self._lock = Lock()

    def _prune(self, hits: deque[float], now: float) -> None:
        cutoff = now - self.window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()

    def is_allowed(self, key: str) -> bool:
        """Record a call for ``key`` and return False if it exceeds the limit."""
        now = time.monotonic()
        with self._lock:
            hits = self._hits[key]
            self._prune(hits, now)
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)
            return True

    def retry_after(self, key: str) -> int:
        """Seconds until ``key`` may call again (0 when a call is allowed now)."""
        now = time.monotonic()
        with self._lock:
            hits = self._hits[key]
            self._prune(hits, now)
            if len(hits) < self.max_requests:
                return 0
            return max(1, int(hits[0] + self.window_seconds - now) + 1)

    def reset(self) -> None:
        """Clear all tracked state."""
        with self._lock:
            self._hits.clear()
