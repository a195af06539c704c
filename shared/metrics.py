"""
Shared metrics configuration for the Battle.net API reader.
"""

from typing import Dict, Any, Optional
import threading

from prometheus_client import Counter, Histogram, CollectorRegistry, REGISTRY


class MetricsCollector:
    """Centralized metrics collector for the reader."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else REGISTRY
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up reader metrics."""

        self._metrics["requests_total"] = Counter(
            "bnet_reader_requests_total",
            "Total API requests dispatched",
            ["region", "status_code"],
            registry=self.registry
        )

        self._metrics["request_duration_seconds"] = Histogram(
            "bnet_reader_request_duration_seconds",
            "API request duration in seconds",
            ["region"],
            registry=self.registry
        )

        self._metrics["token_refresh_total"] = Counter(
            "bnet_reader_token_refresh_total",
            "Total access token exchanges",
            ["status"],
            registry=self.registry
        )

        self._metrics["rate_limit_rejections_total"] = Counter(
            "bnet_reader_rate_limit_rejections_total",
            "Total requests blocked by rate limiters",
            registry=self.registry
        )

        self._metrics["errors_total"] = Counter(
            "bnet_reader_errors_total",
            "Total errors raised to callers",
            ["error_type"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def record_request(self, region: str, status_code: int, duration: float):
        """Record API request metrics."""
        self._metrics["requests_total"].labels(
            region=region,
            status_code=str(status_code)
        ).inc()

        self._metrics["request_duration_seconds"].labels(region=region).observe(duration)

    def record_token_refresh(self, status: str):
        """Record a token exchange outcome."""
        self._metrics["token_refresh_total"].labels(status=status).inc()

    def record_rate_limit_rejection(self):
        """Record a request blocked by admission control."""
        self._metrics["rate_limit_rejections_total"].inc()

    def record_error(self, error_type: str):
        """Record error metrics."""
        self._metrics["errors_total"].labels(error_type=error_type).inc()


_default_collector: Optional[MetricsCollector] = None
_default_lock = threading.Lock()


def get_metrics_collector(registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector.

    Without a registry the shared collector on the default Prometheus
    registry is returned; metric names can only be registered there once.
    """
    global _default_collector
    if registry is not None:
        return MetricsCollector(registry)

    with _default_lock:
        if _default_collector is None:
            _default_collector = MetricsCollector()
        return _default_collector
