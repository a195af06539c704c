"""
HTTP transport for the reader.
"""

import abc
from typing import Any, Mapping, Optional

import httpx

from shared.config import ReaderSettings
from shared.errors import TransportError
from shared.logging import get_logger
from ..domain.configuration import ApiConfiguration


class ApiResponse(abc.ABC):
    """Response returned by a web client."""

    @property
    @abc.abstractmethod
    def status_code(self) -> int:
        ...

    @property
    @abc.abstractmethod
    def headers(self) -> Mapping[str, str]:
        ...

    @abc.abstractmethod
    def is_successful(self) -> bool:
        """True for 2xx responses."""

    @abc.abstractmethod
    async def read_content(self) -> str:
        """Raw response body."""


class WebClient(abc.ABC):
    """Transport capability used by the reader."""

    @abc.abstractmethod
    async def make_request(self, url: str) -> ApiResponse:
        """Issue a GET request for an absolute API URL."""

    @abc.abstractmethod
    async def request_access_token(self, configuration: ApiConfiguration) -> ApiResponse:
        """Exchange the configuration's client credentials for an access token."""

    async def aclose(self) -> None:
        """Release transport resources."""


class HttpxApiResponse(ApiResponse):
    """ApiResponse backed by an `httpx.Response`."""

    def __init__(self, response: httpx.Response):
        self.response = response

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def headers(self) -> Mapping[str, str]:
        return self.response.headers

    def is_successful(self) -> bool:
        return self.response.is_success

    async def read_content(self) -> str:
        await self.response.aread()
        return self.response.text

    def __repr__(self) -> str:
        return f"HttpxApiResponse(status_code={self.status_code})"


class HttpxWebClient(WebClient):
    """WebClient issuing requests with `httpx.AsyncClient`."""

    def __init__(self, settings: Optional[ReaderSettings] = None,
                 client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or ReaderSettings()
        self.logger = get_logger("bnet_reader.web_client")
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        """Get the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.http_timeout_seconds)
            )
        return self._client

    def token_url(self, configuration: ApiConfiguration) -> str:
        return self.settings.token_url_template.format(
            region=configuration.region_string.lower()
        )

    async def make_request(self, url: str) -> ApiResponse:
        return await self._send("GET", url)

    async def request_access_token(self, configuration: ApiConfiguration) -> ApiResponse:
        return await self._send(
            "POST",
            self.token_url(configuration),
            data={"grant_type": "client_credentials"},
            auth=(configuration.api_key or "", configuration.api_secret or "")
        )

    async def _send(self, method: str, url: str, **kwargs: Any) -> ApiResponse:
        client = self._get_client()
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            self.logger.error("Battle.net request timeout", method=method, host=httpx.URL(url).host)
            raise TransportError(
                "Battle.net request timed out",
                details={"error": str(e)},
                code="TRANSPORT_TIMEOUT"
            ) from e
        except httpx.RequestError as e:
            self.logger.error("Battle.net request error", method=method, host=httpx.URL(url).host, error=str(e))
            raise TransportError(
                "Battle.net API unavailable",
                details={"error": str(e)}
            ) from e

        return HttpxApiResponse(response)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpxWebClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
