import pytest
from prometheus_client import CollectorRegistry

from bnet_reader.domain.configuration import default_context
from bnet_reader.ratelimit import LimiterRegistry
from bnet_reader.reader import ApiReader
from shared.config import ReaderSettings
from shared.metrics import MetricsCollector
from shared.test_helpers import FakeClock, FakeWebClient, create_test_configuration


@pytest.fixture(autouse=True)
def clear_default_configuration():
    """Every test starts and ends without a process-wide default."""
    default_context.clear_default()
    yield
    default_context.clear_default()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def metrics_registry():
    return CollectorRegistry()


@pytest.fixture
def metrics(metrics_registry):
    return MetricsCollector(metrics_registry)


@pytest.fixture
def limiters():
    return LimiterRegistry()


@pytest.fixture
def settings():
    return ReaderSettings(_env_file=None)


@pytest.fixture
def configuration():
    return create_test_configuration()


@pytest.fixture
def web_client():
    return FakeWebClient()


@pytest.fixture
def make_reader(web_client, limiters, settings, metrics, clock):
    """Factory for readers wired to the fakes."""
    def _make_reader(configuration=None, client=None, **kwargs):
        options = dict(limiters=limiters, settings=settings, metrics=metrics, clock=clock)
        options.update(kwargs)
        return ApiReader(configuration, client or web_client, **options)
    return _make_reader
