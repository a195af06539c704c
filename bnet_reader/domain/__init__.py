"""
Domain package for the reader.

Holds the value types a call is made of: regions and locales, the API
configuration with its default-resolution rules, and request descriptors.
"""

from .enums import Region, Locale, DEFAULT_LOCALES
from .configuration import (
    ApiConfiguration,
    ConfigurationContext,
    ConfigurationResolver,
    default_context,
)
from .request import RequestDescriptor, escape_special_characters

__all__ = [
    "Region",
    "Locale",
    "DEFAULT_LOCALES",
    "ApiConfiguration",
    "ConfigurationContext",
    "ConfigurationResolver",
    "default_context",
    "RequestDescriptor",
    "escape_special_characters",
]
