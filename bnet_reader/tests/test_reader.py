"""
Unit tests for the ApiReader request pipeline.
"""

from dataclasses import dataclass
from typing import List

import pytest
from pydantic import BaseModel
from unittest.mock import AsyncMock

from bnet_reader.domain.configuration import ApiConfiguration, ConfigurationContext, default_context
from bnet_reader.domain.enums import Region, Locale
from bnet_reader.ratelimit import LimiterRegistry, RateLimiter
from bnet_reader.reader import ApiReader
from shared.errors import (
    BadResponseError,
    ConfigurationMissingError,
    RateLimitExceededError,
    ResponseParseError,
    TokenExchangeError,
    TransportError,
    UnsupportedResultTypeError,
)
from shared.test_helpers import FakeResponse, FakeWebClient, token_response


class Item(BaseModel):
    name: str


@dataclass
class ItemRecord:
    name: str


class PlainItem:
    name: str


class RecordingLimiter(RateLimiter):
    """Limiter recording notifications with a switchable limit flag."""

    def __init__(self, name: str = "recording", reached: bool = False):
        super().__init__(name)
        self.reached = reached
        self.notifications = []

    def limit_reached(self) -> bool:
        return self.reached

    def notify(self, source, response) -> None:
        self.notifications.append((source, response))


class TestApiReaderValidation:
    """Test cases for configuration and admission checks."""

    @pytest.mark.asyncio
    async def test_missing_configuration(self, make_reader, web_client, metrics_registry):
        """Test calls without any configuration fail before touching the network."""
        reader = make_reader()

        with pytest.raises(ConfigurationMissingError):
            await reader.get("/data/wow/item/19019")

        assert web_client.token_requests == []
        assert web_client.requested_urls == []
        assert metrics_registry.get_sample_value(
            "bnet_reader_errors_total", {"error_type": "CONFIGURATION_MISSING"}
        ) == 1.0

    @pytest.mark.asyncio
    async def test_default_configuration_is_used(self, make_reader, web_client, configuration):
        """Test the process-wide default is used without an instance configuration."""
        default_context.set_default(configuration.with_region(Region.EU, use_default_locale=True))
        web_client.responses.append(FakeResponse(200, {"name": "Test"}))
        reader = make_reader()

        await reader.get("/data/wow/item/19019")

        assert web_client.requested_urls[0].startswith("https://eu.api.blizzard.com/")
        assert "locale=en_GB" in web_client.requested_urls[0]

    @pytest.mark.asyncio
    async def test_context_default_is_used(self, make_reader, web_client, configuration):
        """Test a reader bound to its own context ignores the global default."""
        context = ConfigurationContext(configuration.with_region(Region.KR, use_default_locale=True))
        default_context.set_default(configuration.with_region(Region.EU))
        web_client.responses.append(FakeResponse(200, {}))
        reader = make_reader(context=context)

        await reader.get("/data/wow/token/index")

        assert web_client.requested_urls[0].startswith("https://kr.api.blizzard.com/")

    @pytest.mark.asyncio
    async def test_instance_configuration_reassignment(self, make_reader, web_client, configuration):
        """Test the instance configuration can be replaced between calls."""
        web_client.responses.extend([FakeResponse(200, {}), FakeResponse(200, {})])
        reader = make_reader(configuration)

        await reader.get("/a")
        reader.configuration = configuration.with_region(Region.TW, use_default_locale=True)
        await reader.get("/b")

        assert web_client.requested_urls[0].startswith("https://us.api.blizzard.com/a?")
        assert web_client.requested_urls[1].startswith("https://tw.api.blizzard.com/b?locale=zh_TW")

    @pytest.mark.asyncio
    async def test_rate_limit_blocks_request(self, make_reader, web_client, configuration, limiters, metrics_registry):
        """Test a limiter at its limit blocks the call before the main request."""
        limiters.register(RecordingLimiter("per_second", reached=True))
        reader = make_reader(configuration)

        with pytest.raises(RateLimitExceededError) as exc_info:
            await reader.get("/data/wow/item/19019")

        assert exc_info.value.details["limiters"] == ["per_second"]
        assert web_client.requested_urls == []
        assert metrics_registry.get_sample_value("bnet_reader_rate_limit_rejections_total") == 1.0

    @pytest.mark.asyncio
    async def test_configuration_checked_before_admission(self, make_reader, limiters):
        """Test a missing configuration is reported even when limiters block."""
        limiters.register(RecordingLimiter(reached=True))
        reader = make_reader()

        with pytest.raises(ConfigurationMissingError):
            await reader.get("/data/wow/item/19019")


class TestApiReaderTokens:
    """Test cases for token handling inside the pipeline."""

    @pytest.mark.asyncio
    async def test_first_call_exchanges_token(self, make_reader, web_client, configuration):
        """Test a reader without a token performs exactly one exchange before the call."""
        web_client.responses.append(FakeResponse(200, {}))
        reader = make_reader(configuration)

        await reader.get("/data/wow/item/19019")

        assert web_client.token_requests == [configuration]
        assert web_client.requested_urls[0].endswith("&access_token=tok")

    @pytest.mark.asyncio
    async def test_fresh_token_is_reused(self, make_reader, web_client, configuration, clock):
        """Test a token that has not expired is not exchanged again."""
        web_client.responses.extend([FakeResponse(200, {}), FakeResponse(200, {})])
        reader = make_reader(configuration)

        await reader.get("/a")
        clock.advance(3599)
        await reader.get("/b")

        assert len(web_client.token_requests) == 1

    @pytest.mark.asyncio
    async def test_expired_token_is_refreshed(self, make_reader, configuration, clock):
        """Test an expired token triggers exactly one new exchange."""
        web_client = FakeWebClient(
            responses=[FakeResponse(200, {}), FakeResponse(200, {})],
            token_responses=[token_response("first", 60), token_response("second", 60)]
        )
        reader = make_reader(configuration, client=web_client)

        await reader.get("/a")
        clock.advance(61)
        await reader.get("/b")

        assert len(web_client.token_requests) == 2
        assert web_client.requested_urls[1].endswith("&access_token=second")

    @pytest.mark.asyncio
    async def test_token_exchange_failure(self, make_reader, configuration, limiters):
        """Test a failed exchange aborts the call before the main request."""
        limiter = limiters.register(RecordingLimiter())
        web_client = FakeWebClient(token_responses=[FakeResponse(500, "server error")])
        reader = make_reader(configuration, client=web_client)

        with pytest.raises(TokenExchangeError):
            await reader.get("/data/wow/item/19019")

        assert web_client.requested_urls == []
        assert limiter.notifications == []

    @pytest.mark.asyncio
    async def test_send_token_request(self, make_reader, web_client, configuration):
        """Test forcing a token exchange returns the new token."""
        reader = make_reader(configuration)

        token = await reader.send_token_request()

        assert token == "tok"
        assert reader.token.value == "tok"

    @pytest.mark.asyncio
    async def test_send_token_request_requires_configuration(self, make_reader):
        """Test forcing a token exchange needs a configuration."""
        with pytest.raises(ConfigurationMissingError):
            await make_reader().send_token_request()

    @pytest.mark.asyncio
    async def test_tokens_are_per_reader(self, web_client, limiters, settings, metrics, clock, configuration):
        """Test readers do not share tokens."""
        web_client.responses.extend([FakeResponse(200, {}), FakeResponse(200, {})])
        first = ApiReader(configuration, web_client, limiters=limiters, settings=settings, metrics=metrics, clock=clock)
        second = ApiReader(configuration, web_client, limiters=limiters, settings=settings, metrics=metrics, clock=clock)

        await first.get("/a")
        await second.get("/b")

        assert len(web_client.token_requests) == 2


class TestApiReaderResponses:
    """Test cases for URL construction and response classification."""

    @pytest.mark.asyncio
    async def test_url_construction(self, make_reader, web_client):
        """Test the request URL for a US/en_US configuration."""
        web_client.token_responses.append(token_response("abc"))
        web_client.responses.append(FakeResponse(200, {}))
        reader = make_reader(ApiConfiguration(region=Region.US, locale=Locale.EN_US, api_key="key"))

        await reader.get("/data/wow/item/19019")

        assert web_client.requested_urls == [
            "https://us.api.blizzard.com/data/wow/item/19019?locale=en_US&access_token=abc"
        ]

    @pytest.mark.asyncio
    async def test_url_escapes_fragment_marker(self, make_reader, web_client, configuration):
        """Test '#' in the path is percent-encoded."""
        web_client.responses.append(FakeResponse(200, {}))
        reader = make_reader(configuration)

        await reader.get("/data/wow/item/19019#details")

        assert "/data/wow/item/19019%23details?locale=" in web_client.requested_urls[0]
        assert "#" not in web_client.requested_urls[0]

    @pytest.mark.asyncio
    async def test_success_deserializes_model(self, make_reader, web_client, configuration):
        """Test a successful body is returned as the requested model."""
        web_client.responses.append(FakeResponse(200, '{"name":"Test"}'))
        reader = make_reader(configuration)

        item = await reader.get("/data/wow/item/19019", Item)

        assert isinstance(item, Item)
        assert item.name == "Test"

    @pytest.mark.asyncio
    async def test_success_deserializes_other_shapes(self, make_reader, web_client, configuration):
        """Test dataclasses, containers and raw JSON are supported shapes."""
        web_client.responses.extend([
            FakeResponse(200, '{"name":"Test"}'),
            FakeResponse(200, '[{"name":"A"},{"name":"B"}]'),
            FakeResponse(200, '{"name":"Raw","id":1}'),
        ])
        reader = make_reader(configuration)

        record = await reader.get("/one", ItemRecord)
        items = await reader.get("/many", List[Item])
        raw = await reader.get("/raw")

        assert record == ItemRecord(name="Test")
        assert [item.name for item in items] == ["A", "B"]
        assert raw == {"name": "Raw", "id": 1}

    @pytest.mark.asyncio
    async def test_unparseable_body(self, make_reader, web_client, configuration):
        """Test a body that does not fit the requested shape raises ResponseParseError."""
        web_client.responses.append(FakeResponse(200, '{"id": 1}'))
        reader = make_reader(configuration)

        with pytest.raises(ResponseParseError) as exc_info:
            await reader.get("/data/wow/item/19019", Item)

        assert exc_info.value.details["result_type"] == "Item"

    @pytest.mark.asyncio
    async def test_unsupported_result_type(self, make_reader, web_client, configuration, limiters, metrics_registry):
        """Test a type that cannot be validated fails before any network call."""
        limiter = limiters.register(RecordingLimiter())
        reader = make_reader(configuration)

        with pytest.raises(UnsupportedResultTypeError) as exc_info:
            await reader.get("/data/wow/item/19019", PlainItem)

        assert exc_info.value.details["result_type"] == "PlainItem"
        assert web_client.token_requests == []
        assert web_client.requested_urls == []
        assert limiter.notifications == []
        assert metrics_registry.get_sample_value(
            "bnet_reader_errors_total", {"error_type": "UNSUPPORTED_RESULT_TYPE"}
        ) == 1.0

    @pytest.mark.asyncio
    async def test_bad_response(self, make_reader, web_client, configuration, limiters, metrics_registry):
        """Test an unsuccessful response raises BadResponseError after one notification."""
        limiter = limiters.register(RecordingLimiter())
        response = FakeResponse(404, {"code": 404, "detail": "Not Found"})
        web_client.responses.append(response)
        reader = make_reader(configuration)

        with pytest.raises(BadResponseError) as exc_info:
            await reader.get("/data/wow/item/0")

        assert exc_info.value.response is response
        assert exc_info.value.details["status_code"] == 404
        assert limiter.notifications == [(reader, response)]
        assert metrics_registry.get_sample_value(
            "bnet_reader_requests_total", {"region": "us", "status_code": "404"}
        ) == 1.0

    @pytest.mark.asyncio
    async def test_success_notifies_limiters_once(self, make_reader, web_client, configuration, limiters):
        """Test limiters are notified once per successful call."""
        limiter = limiters.register(RecordingLimiter())
        response = FakeResponse(200, {})
        web_client.responses.append(response)
        reader = make_reader(configuration)

        await reader.get("/data/wow/token/index")

        assert limiter.notifications == [(reader, response)]

    @pytest.mark.asyncio
    async def test_notification_precedes_classification(self, make_reader, web_client, configuration, limiters):
        """Test limiters see the response before the body is read."""
        order = []

        class OrderLimiter(RecordingLimiter):
            def notify(self, source, response):
                order.append("notify")

        limiters.register(OrderLimiter())
        response = FakeResponse(200, {})
        original_read = response.read_content

        async def read_content():
            order.append("read")
            return await original_read()

        response.read_content = read_content
        web_client.responses.append(response)
        reader = make_reader(configuration)

        await reader.get("/data/wow/token/index")

        assert order == ["notify", "read"]

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, make_reader, web_client, configuration, limiters):
        """Test transport failures of the main request propagate without notifications."""
        limiter = limiters.register(RecordingLimiter())
        web_client.make_request = AsyncMock(side_effect=TransportError("Battle.net API unavailable"))
        reader = make_reader(configuration)

        with pytest.raises(TransportError):
            await reader.get("/data/wow/token/index")

        assert limiter.notifications == []

    @pytest.mark.asyncio
    async def test_no_retry_on_failure(self, make_reader, web_client, configuration):
        """Test a failed call is not retried."""
        web_client.responses.extend([FakeResponse(503, "unavailable"), FakeResponse(200, {})])
        reader = make_reader(configuration)

        with pytest.raises(BadResponseError):
            await reader.get("/data/wow/token/index")

        assert len(web_client.requested_urls) == 1


class TestApiReaderLifecycle:
    """Test cases for web client ownership."""

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self, make_reader, web_client, configuration):
        """Test an injected web client stays open when the reader closes."""
        async with make_reader(configuration):
            pass

        assert web_client.closed is False

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self, limiters, settings, metrics, configuration):
        """Test the reader closes the web client it created."""
        reader = ApiReader(configuration, limiters=limiters, settings=settings, metrics=metrics)
        reader.web_client.aclose = AsyncMock()

        await reader.aclose()

        reader.web_client.aclose.assert_awaited_once()
