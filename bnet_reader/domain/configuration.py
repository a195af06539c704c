"""
API configuration and its resolution.

An `ApiConfiguration` is an immutable value: the `with_*` builders return
new configurations. A reader resolves the configuration it runs with from
its own instance slot first and from a `ConfigurationContext` default
second, without merging fields between the two.
"""

import threading
from typing import Optional, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from shared.logging import get_logger
from .enums import Region, Locale

if TYPE_CHECKING:
    from shared.config import ReaderSettings


class ApiConfiguration(BaseModel):
    """Region, locale and client credentials used for API calls."""

    model_config = ConfigDict(frozen=True)

    region: Region = Region.US
    locale: Locale = Locale.EN_US
    api_key: Optional[str] = None
    api_secret: Optional[str] = None

    @classmethod
    def create_empty(cls) -> "ApiConfiguration":
        """Configuration with default region and locale and no credentials."""
        return cls()

    @classmethod
    def from_settings(cls, settings: "ReaderSettings") -> "ApiConfiguration":
        """Build a configuration from reader settings."""
        region = Region(settings.region)
        locale = Locale(settings.locale) if settings.locale else region.default_locale
        return cls(
            region=region,
            locale=locale,
            api_key=settings.api_key,
            api_secret=settings.api_secret
        )

    def with_api_key(self, api_key: Optional[str], api_secret: Optional[str] = None) -> "ApiConfiguration":
        changes = {"api_key": api_key}
        if api_secret is not None:
            changes["api_secret"] = api_secret
        return self.model_copy(update=changes)

    def with_region(self, region: Region, use_default_locale: bool = False) -> "ApiConfiguration":
        """Return a copy for `region`, optionally switching to its default locale."""
        region = Region(region)
        changes = {"region": region}
        if use_default_locale:
            changes["locale"] = region.default_locale
        return self.model_copy(update=changes)

    def with_locale(self, locale: Locale) -> "ApiConfiguration":
        return self.model_copy(update={"locale": Locale(locale)})

    def with_default_locale(self) -> "ApiConfiguration":
        """Return a copy using the default locale of the configured region."""
        return self.model_copy(update={"locale": self.region.default_locale})

    def declare_as_default(self, context: Optional["ConfigurationContext"] = None) -> "ApiConfiguration":
        """Register this configuration as the default of `context` (process-wide if omitted)."""
        (context or default_context).set_default(self)
        return self

    @property
    def region_string(self) -> str:
        return self.region.value

    @property
    def locale_string(self) -> str:
        return self.locale.value

    def __repr__(self) -> str:
        # Credentials stay out of reprs and logs
        return f"ApiConfiguration(region={self.region.value}, locale={self.locale.value}, api_key={'***' if self.api_key else None})"


class ConfigurationContext:
    """Holder of a default configuration shared by readers.

    The slot is a single value guarded by a lock; the last writer wins.
    """

    def __init__(self, default: Optional[ApiConfiguration] = None):
        self._default = default
        self._lock = threading.Lock()
        self.logger = get_logger("bnet_reader.configuration")

    def set_default(self, configuration: Optional[ApiConfiguration]) -> None:
        with self._lock:
            self._default = configuration
        self.logger.debug("Default configuration set", configuration=repr(configuration))

    def clear_default(self) -> None:
        with self._lock:
            self._default = None
        self.logger.debug("Default configuration cleared")

    def get_default(self) -> Optional[ApiConfiguration]:
        with self._lock:
            return self._default


# Process-wide context used when a reader is not given one
default_context = ConfigurationContext()


class ConfigurationResolver:
    """Resolve the effective configuration of a reader."""

    def __init__(self, configuration: Optional[ApiConfiguration] = None,
                 context: Optional[ConfigurationContext] = None):
        self.configuration = configuration
        self.context = context if context is not None else default_context

    def resolve(self) -> Optional[ApiConfiguration]:
        """Instance configuration if set, else the context default, else None."""
        if self.configuration is not None:
            return self.configuration
        return self.context.get_default()
