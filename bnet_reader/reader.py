"""
Request orchestration for the Battle.net API.

`ApiReader.get` runs every call through the same steps: check that the
result type can be validated from JSON, resolve the configuration, ask the
limiter registry for admission, refresh the access token when it expired,
build the request URL, call the web client, notify the limiters and finally
classify and deserialize the response. Any failing step aborts the call with
a typed error; nothing is retried.
"""

import time
from typing import Any, Callable, Optional, Type, TypeVar, overload

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError

from shared.config import ReaderSettings
from shared.errors import (
    ApiReaderException,
    BadResponseError,
    ConfigurationMissingError,
    RateLimitExceededError,
    ResponseParseError,
    UnsupportedResultTypeError,
)
from shared.logging import get_logger
from shared.metrics import MetricsCollector, get_metrics_collector
from .adapters.web_client import WebClient, HttpxWebClient
from .auth.token_manager import AccessToken, TokenManager
from .domain.configuration import (
    ApiConfiguration,
    ConfigurationContext,
    ConfigurationResolver,
    default_context,
)
from .domain.request import RequestDescriptor
from .ratelimit.registry import LimiterRegistry, get_limiter_registry

T = TypeVar("T")


class ApiReader:
    """Client for region-partitioned, OAuth protected Battle.net APIs."""

    def __init__(
        self,
        configuration: Optional[ApiConfiguration] = None,
        web_client: Optional[WebClient] = None,
        *,
        context: Optional[ConfigurationContext] = None,
        limiters: Optional[LimiterRegistry] = None,
        settings: Optional[ReaderSettings] = None,
        metrics: Optional[MetricsCollector] = None,
        clock: Callable[[], float] = time.time
    ):
        self.settings = settings or ReaderSettings()
        self.logger = get_logger("bnet_reader.reader")
        self.metrics = metrics or get_metrics_collector()
        self.limiters = limiters if limiters is not None else get_limiter_registry()

        self._resolver = ConfigurationResolver(configuration, context)
        self._owns_web_client = web_client is None
        self.web_client = web_client or HttpxWebClient(self.settings)
        self._token_manager = TokenManager(self.web_client, clock=clock, metrics=self.metrics)

    @property
    def configuration(self) -> Optional[ApiConfiguration]:
        """Instance-level configuration; shadows the context default when set."""
        return self._resolver.configuration

    @configuration.setter
    def configuration(self, configuration: Optional[ApiConfiguration]) -> None:
        self._resolver.configuration = configuration

    @property
    def token(self) -> Optional[AccessToken]:
        return self._token_manager.token

    @property
    def token_manager(self) -> TokenManager:
        return self._token_manager

    @staticmethod
    def set_default_configuration(configuration: ApiConfiguration,
                                  context: Optional[ConfigurationContext] = None) -> None:
        (context or default_context).set_default(configuration)

    @staticmethod
    def clear_default_configuration(context: Optional[ConfigurationContext] = None) -> None:
        (context or default_context).clear_default()

    @overload
    async def get(self, query: str) -> Any: ...

    @overload
    async def get(self, query: str, result_type: Type[T]) -> T: ...

    async def get(self, query: str, result_type: Any = Any) -> Any:
        """Fetch `query` (an API path such as `/data/wow/item/19019`) as `result_type`."""
        log = self.logger.bind(query=query)
        try:
            adapter = self._type_adapter(result_type)
            configuration = self._validate()

            if self._token_manager.is_expired():
                await self._token_manager.refresh(configuration)

            descriptor = RequestDescriptor(
                configuration=configuration,
                query=query,
                token=self._token_manager.token.value
            )
            url = descriptor.build_url(self.settings.api_host_template)

            region = configuration.region_string.lower()
            start_time = time.perf_counter()
            response = await self.web_client.make_request(url)
            self.limiters.notify_all(self, response)
            self.metrics.record_request(region, response.status_code, time.perf_counter() - start_time)

            if not response.is_successful():
                log.warning("Response is not successful", status_code=response.status_code, region=region)
                raise BadResponseError("Response is not successful", response)

            body = await response.read_content()
            return self._deserialize(body, adapter, result_type)

        except ApiReaderException as e:
            self.metrics.record_error(e.code)
            raise

    async def send_token_request(self) -> str:
        """Exchange credentials for a new token now and return its value."""
        token = await self._token_manager.refresh(self._validate_configuration())
        return token.value

    def _validate(self) -> ApiConfiguration:
        configuration = self._validate_configuration()

        if not self.limiters.admit():
            reached = self.limiters.reached()
            self.metrics.record_rate_limit_rejection()
            self.logger.warning("Request blocked by rate limiter", limiters=reached)
            raise RateLimitExceededError(
                "http request was blocked by RateLimiter",
                details={"limiters": reached}
            )

        return configuration

    def _validate_configuration(self) -> ApiConfiguration:
        configuration = self._resolver.resolve()
        if configuration is None:
            raise ConfigurationMissingError()
        return configuration

    @staticmethod
    def _type_adapter(result_type: Any) -> TypeAdapter:
        try:
            return TypeAdapter(result_type)
        except PydanticSchemaGenerationError as e:
            raise UnsupportedResultTypeError(
                f"Cannot deserialize responses into {_type_name(result_type)}",
                details={"result_type": _type_name(result_type)}
            ) from e

    @staticmethod
    def _deserialize(body: str, adapter: TypeAdapter, result_type: Any) -> Any:
        try:
            return adapter.validate_json(body)
        except ValidationError as e:
            raise ResponseParseError(
                details={
                    "result_type": _type_name(result_type),
                    "errors": e.errors(include_url=False, include_input=False)
                }
            ) from e

    async def aclose(self) -> None:
        """Close the web client if the reader created it."""
        if self._owns_web_client:
            await self.web_client.aclose()

    async def __aenter__(self) -> "ApiReader":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def _type_name(result_type: Any) -> str:
    return getattr(result_type, "__name__", repr(result_type))
