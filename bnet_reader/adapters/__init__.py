"""
Adapters package for the reader.

Contains the transport capability the reader depends on (`WebClient`,
`ApiResponse`) and its httpx implementation. Tests substitute fakes that
implement the same two abstract bases.
"""

from .web_client import ApiResponse, WebClient, HttpxApiResponse, HttpxWebClient

__all__ = [
    "ApiResponse",
    "WebClient",
    "HttpxApiResponse",
    "HttpxWebClient",
]
