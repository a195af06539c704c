"""
Shared error handling for the Battle.net API reader.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel
from opentelemetry import trace


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class ApiReaderException(Exception):
    """Base exception for the API reader."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationMissingError(ApiReaderException):
    """No instance or default configuration could be resolved."""

    def __init__(
        self,
        message: str = "ApiConfiguration is not set, either declare one as default configuration "
                       "or set an instance configuration",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__("CONFIGURATION_MISSING", message, details)


class RateLimitExceededError(ApiReaderException):
    """A rate limiter blocked the request before it was sent."""

    def __init__(self, message: str = "Request was blocked by a rate limiter", details: Optional[Dict[str, Any]] = None):
        super().__init__("RATE_LIMIT_EXCEEDED", message, details)


class TransportError(ApiReaderException):
    """The HTTP transport failed before a response was received."""

    def __init__(
        self,
        message: str = "Transport error",
        details: Optional[Dict[str, Any]] = None,
        code: str = "TRANSPORT_ERROR"
    ):
        super().__init__(code, message, details)


class TokenExchangeError(ApiReaderException):
    """The OAuth client-credentials exchange did not succeed."""

    def __init__(
        self,
        message: str = "Token exchange failed",
        response: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None,
        code: str = "TOKEN_EXCHANGE_ERROR"
    ):
        self.response = response
        details = dict(details or {})
        if response is not None:
            details.setdefault("status_code", getattr(response, "status_code", None))
        super().__init__(code, message, details)


class MalformedTokenResponseError(TokenExchangeError):
    """The token endpoint answered with an unexpected body."""

    def __init__(
        self,
        message: str = "Token response is malformed",
        response: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, response, details, code="TOKEN_RESPONSE_MALFORMED")


class BadResponseError(ApiReaderException):
    """The API answered with a non-successful status."""

    def __init__(self, message: str, response: Any, details: Optional[Dict[str, Any]] = None):
        self.response = response
        details = dict(details or {})
        details.setdefault("status_code", getattr(response, "status_code", None))
        super().__init__("BAD_RESPONSE", message, details)


class ResponseParseError(ApiReaderException):
    """A successful response body could not be deserialized."""

    def __init__(self, message: str = "Response body could not be parsed", details: Optional[Dict[str, Any]] = None):
        super().__init__("RESPONSE_PARSE_ERROR", message, details)


class UnsupportedResultTypeError(ApiReaderException):
    """The requested result type cannot be validated from JSON."""

    def __init__(self, message: str = "Result type is not supported", details: Optional[Dict[str, Any]] = None):
        super().__init__("UNSUPPORTED_RESULT_TYPE", message, details)
