"""
Limiter that honours 429 responses.
"""

import time
from threading import Lock
from typing import Any, Callable, Dict

from shared.logging import get_logger
from .base import RateLimiter

TOO_MANY_REQUESTS = 429


class RetryAfterLimiter(RateLimiter):
    """Blocks requests after a 429 until the server's Retry-After delay has passed."""

    def __init__(self, name: str = "retry_after", default_delay_seconds: float = 1.0,
                 clock: Callable[[], float] = time.monotonic):
        super().__init__(name)
        self.default_delay_seconds = default_delay_seconds
        self.clock = clock
        self.logger = get_logger(f"bnet_reader.rate_limiter.{name}")
        self._blocked_until = 0.0
        self._lock = Lock()

    def _retry_after(self, response: Any) -> float:
        headers = getattr(response, "headers", None) or {}
        value = headers.get("Retry-After") or headers.get("retry-after")
        try:
            return max(0.0, float(value))
        except (TypeError, ValueError):
            return self.default_delay_seconds

    def limit_reached(self) -> bool:
        with self._lock:
            return self.clock() < self._blocked_until

    def notify(self, source: Any, response: Any) -> None:
        if getattr(response, "status_code", None) != TOO_MANY_REQUESTS:
            return

        delay = self._retry_after(response)
        with self._lock:
            self._blocked_until = max(self._blocked_until, self.clock() + delay)
        self.logger.warning("Server rate limit hit", retry_after=delay)

    def get_state(self) -> Dict[str, Any]:
        with self._lock:
            remaining = max(0.0, self._blocked_until - self.clock())
        return {
            "name": self.name,
            "limit_reached": remaining > 0,
            "reset_in_seconds": remaining
        }
