"""
Shared configuration management for the Battle.net API reader.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ReaderSettings(BaseSettings):
    """Reader settings read from BNET_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BNET_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Endpoints, {region} is replaced with the lower-cased region code
    api_host_template: str = Field(default="https://{region}.api.blizzard.com")
    token_url_template: str = Field(default="https://{region}.battle.net/oauth/token")
    http_timeout_seconds: float = Field(default=10.0, gt=0)

    # Default API configuration
    region: str = Field(default="US")
    locale: Optional[str] = Field(default=None)
    api_key: Optional[str] = Field(default=None)
    api_secret: Optional[str] = Field(default=None)

    # Rate limiting (Blizzard published quotas)
    requests_per_second: int = Field(default=100, gt=0)
    requests_per_hour: int = Field(default=36000, gt=0)


def get_settings(**overrides) -> ReaderSettings:
    """Get reader settings, explicit overrides win over the environment."""
    return ReaderSettings(**overrides)
