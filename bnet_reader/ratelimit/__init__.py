"""
Rate limiting package for the reader.

Limiters implement a two-method protocol: `limit_reached` is checked before
a request is dispatched and `notify` is fed every completed response. The
registry blocks a call when any limiter reports its limit and notifies all
of them afterwards, so new policies plug in without touching the reader.
"""

from .base import RateLimiter
from .sliding_window import SlidingWindowLimiter
from .retry_after import RetryAfterLimiter
from .registry import LimiterRegistry, create_default_limiters, get_limiter_registry

__all__ = [
    "RateLimiter",
    "SlidingWindowLimiter",
    "RetryAfterLimiter",
    "LimiterRegistry",
    "create_default_limiters",
    "get_limiter_registry",
]
