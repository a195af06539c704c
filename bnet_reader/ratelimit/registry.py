"""
Registry of rate limiters shared by readers.
"""

import threading
from typing import Any, Dict, Iterable, List, Optional

from shared.config import ReaderSettings
from shared.logging import get_logger
from .base import RateLimiter
from .retry_after import RetryAfterLimiter
from .sliding_window import SlidingWindowLimiter


class LimiterRegistry:
    """Set of independent limiters consulted before and updated after every call."""

    def __init__(self, limiters: Optional[Iterable[RateLimiter]] = None):
        self._limiters: Dict[str, RateLimiter] = {}
        self._lock = threading.Lock()
        self.logger = get_logger("bnet_reader.limiter_registry")
        for limiter in limiters or ():
            self.register(limiter)

    def register(self, limiter: RateLimiter) -> RateLimiter:
        """Add a limiter, replacing any limiter registered under the same name."""
        with self._lock:
            self._limiters[limiter.name] = limiter
        self.logger.info("Registered rate limiter", name=limiter.name)
        return limiter

    def unregister(self, name: str) -> Optional[RateLimiter]:
        with self._lock:
            return self._limiters.pop(name, None)

    def clear(self) -> None:
        with self._lock:
            self._limiters.clear()

    @property
    def limiters(self) -> List[RateLimiter]:
        with self._lock:
            return list(self._limiters.values())

    def reached(self) -> List[str]:
        """Names of the limiters currently at their limit."""
        return [limiter.name for limiter in self.limiters if limiter.limit_reached()]

    def admit(self) -> bool:
        """False if any registered limiter has reached its limit."""
        return not any(limiter.limit_reached() for limiter in self.limiters)

    def notify_all(self, source: Any, response: Any) -> None:
        """Forward a completed response to every registered limiter."""
        for limiter in self.limiters:
            limiter.notify(source, response)

    def get_state(self) -> Dict[str, Dict[str, Any]]:
        return {limiter.name: limiter.get_state() for limiter in self.limiters}

    def __len__(self) -> int:
        with self._lock:
            return len(self._limiters)


def create_default_limiters(settings: Optional[ReaderSettings] = None) -> List[RateLimiter]:
    """Limiters for Blizzard's published per-second and per-hour quotas."""
    settings = settings or ReaderSettings()
    return [
        SlidingWindowLimiter("per_second", settings.requests_per_second, 1.0),
        SlidingWindowLimiter("per_hour", settings.requests_per_hour, 3600.0),
        RetryAfterLimiter("retry_after"),
    ]


_limiter_registry: Optional[LimiterRegistry] = None
_registry_lock = threading.Lock()


def get_limiter_registry() -> LimiterRegistry:
    """Get the process-wide registry, created with the default limiters on first use."""
    global _limiter_registry
    with _registry_lock:
        if _limiter_registry is None:
            _limiter_registry = LimiterRegistry(create_default_limiters())
        return _limiter_registry
