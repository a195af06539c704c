"""
Auth package for the reader.

Owns the OAuth client-credentials token: when it expires and how it is
refreshed through the web client.
"""

from .token_manager import AccessToken, TokenManager, TokenExchangeResponse

__all__ = ["AccessToken", "TokenManager", "TokenExchangeResponse"]
