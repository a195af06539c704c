"""
OAuth access token lifecycle for a reader.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

from pydantic import BaseModel, StrictInt, StrictStr, ValidationError

from shared.errors import TokenExchangeError, MalformedTokenResponseError, TransportError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..adapters.web_client import WebClient
from ..domain.configuration import ApiConfiguration


class TokenExchangeResponse(BaseModel):
    """Body of a successful client-credentials exchange."""
    access_token: StrictStr
    expires_in: StrictInt


@dataclass(frozen=True)
class AccessToken:
    """Access token value and its absolute expiry (clock seconds)."""
    value: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return not self.value or now > self.expires_at


class TokenManager:
    """Holds one access token and refreshes it on request."""

    def __init__(self, web_client: WebClient, clock: Callable[[], float] = time.time,
                 metrics: Optional[MetricsCollector] = None):
        self.web_client = web_client
        self.clock = clock
        self.metrics = metrics
        self.logger = get_logger("bnet_reader.token_manager")
        self._token: Optional[AccessToken] = None

    @property
    def token(self) -> Optional[AccessToken]:
        return self._token

    def is_expired(self) -> bool:
        """True if no token was obtained yet or the stored one is past its expiry."""
        if self._token is None:
            return True
        return self._token.is_expired(self.clock())

    async def refresh(self, configuration: ApiConfiguration) -> AccessToken:
        """Exchange the configuration's credentials for a new token and store it."""
        try:
            response = await self.web_client.request_access_token(configuration)
        except TransportError as e:
            self._record("error")
            raise TokenExchangeError(
                "Token exchange failed: transport error",
                details={"error": e.message}
            ) from e

        if not response.is_successful():
            self._record("failed")
            self.logger.warning(
                "Token exchange failed",
                status_code=response.status_code,
                region=configuration.region_string
            )
            raise TokenExchangeError("response code was not successful", response=response)

        body = await response.read_content()
        try:
            payload = TokenExchangeResponse.model_validate_json(body)
        except ValidationError as e:
            self._record("malformed")
            self.logger.error("Malformed token response", errors=e.error_count())
            raise MalformedTokenResponseError(
                response=response,
                details={"errors": e.errors(include_url=False, include_input=False)}
            ) from e

        # value and expiry are replaced together
        self._token = AccessToken(
            value=payload.access_token,
            expires_at=self.clock() + payload.expires_in
        )
        self._record("success")
        self.logger.info(
            "Access token refreshed",
            expires_in=payload.expires_in,
            region=configuration.region_string
        )
        return self._token

    def clear(self) -> None:
        """Forget the current token so the next call exchanges a new one."""
        self._token = None

    def _record(self, status: str) -> None:
        if self.metrics is not None:
            self.metrics.record_token_refresh(status)
