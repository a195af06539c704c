"""
Sliding window rate limiter.
"""

import collections
import time
from threading import Lock
from typing import Any, Callable, Deque, Dict

from shared.logging import get_logger
from .base import RateLimiter


class SlidingWindowLimiter(RateLimiter):
    """Allows at most `max_requests` completed requests per `window_seconds`."""

    def __init__(self, name: str, max_requests: int, window_seconds: float,
                 clock: Callable[[], float] = time.monotonic):
        if max_requests <= 0 or window_seconds <= 0:
            raise ValueError("Max requests and window must be positive.")

        super().__init__(name)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.logger = get_logger(f"bnet_reader.rate_limiter.{name}")
        self._timestamps: Deque[float] = collections.deque()
        self._lock = Lock()

    def _prune_timestamps(self, now: float) -> None:
        """Removes timestamps that slid out of the window."""
        while self._timestamps and self._timestamps[0] <= now - self.window_seconds:
            self._timestamps.popleft()

    def current_count(self) -> int:
        with self._lock:
            self._prune_timestamps(self.clock())
            return len(self._timestamps)

    def limit_reached(self) -> bool:
        return self.current_count() >= self.max_requests

    def notify(self, source: Any, response: Any) -> None:
        with self._lock:
            now = self.clock()
            self._prune_timestamps(now)
            self._timestamps.append(now)
            count = len(self._timestamps)

        if count == self.max_requests:
            self.logger.warning(
                "Rate limit reached",
                max_requests=self.max_requests,
                window_seconds=self.window_seconds
            )

    def wait_time(self) -> float:
        """Seconds until the oldest request in the window slides out (0 if not limited)."""
        with self._lock:
            now = self.clock()
            self._prune_timestamps(now)
            if len(self._timestamps) < self.max_requests:
                return 0.0
            return max(0.0, self._timestamps[0] + self.window_seconds - now)

    def get_state(self) -> Dict[str, Any]:
        count = self.current_count()
        return {
            "name": self.name,
            "limit_reached": count >= self.max_requests,
            "current_count": count,
            "limit": self.max_requests,
            "window_seconds": self.window_seconds,
            "reset_in_seconds": self.wait_time()
        }
