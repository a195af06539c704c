"""
Battle.net API reader.

Client-side access layer for the region-partitioned, OAuth protected
Battle.net REST APIs:

- reader: `ApiReader`, the request pipeline (configuration, admission,
  token refresh, URL construction, response classification).
- domain: regions, locales, `ApiConfiguration` and default resolution.
- auth: access token lifecycle.
- ratelimit: limiter protocol, policies and the shared registry.
- adapters: the web client transport and its httpx implementation.
"""

from shared.errors import (
    ApiReaderException,
    BadResponseError,
    ConfigurationMissingError,
    MalformedTokenResponseError,
    RateLimitExceededError,
    ResponseParseError,
    TokenExchangeError,
    TransportError,
    UnsupportedResultTypeError,
)
from .domain import ApiConfiguration, ConfigurationContext, Locale, Region, default_context
from .reader import ApiReader

__version__ = "1.0.0"

__all__ = [
    "ApiReader",
    "ApiConfiguration",
    "ConfigurationContext",
    "default_context",
    "Region",
    "Locale",
    "ApiReaderException",
    "BadResponseError",
    "ConfigurationMissingError",
    "MalformedTokenResponseError",
    "RateLimitExceededError",
    "ResponseParseError",
    "TokenExchangeError",
    "TransportError",
    "UnsupportedResultTypeError",
]
