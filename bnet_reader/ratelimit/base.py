"""
Rate limiter protocol.
"""

import abc
from typing import Any, Dict


class RateLimiter(abc.ABC):
    """Admission-control policy fed with every completed response.

    `limit_reached` is a pure read; limiters only change state in `notify`.
    """

    def __init__(self, name: str):
        self.name = name

    @abc.abstractmethod
    def limit_reached(self) -> bool:
        """True while further requests must be blocked."""

    @abc.abstractmethod
    def notify(self, source: Any, response: Any) -> None:
        """Record a completed request."""

    def get_state(self) -> Dict[str, Any]:
        return {"name": self.name, "limit_reached": self.limit_reached()}
