"""
Request descriptors and URL construction.
"""

from dataclasses import dataclass

from .configuration import ApiConfiguration

DEFAULT_API_HOST_TEMPLATE = "https://{region}.api.blizzard.com"

# Characters that would otherwise end the path (fragment marker)
_SPECIAL_CHARACTERS = {
    "#": "%23",
}


def escape_special_characters(query: str) -> str:
    """Percent-encode characters that would truncate the request path."""
    for character, replacement in _SPECIAL_CHARACTERS.items():
        query = query.replace(character, replacement)
    return query


@dataclass(frozen=True)
class RequestDescriptor:
    """A single API call: resolved configuration, query path and access token."""
    configuration: ApiConfiguration
    query: str
    token: str

    def build_url(self, host_template: str = DEFAULT_API_HOST_TEMPLATE) -> str:
        """Absolute request URL with `locale` and `access_token` query parameters."""
        host = host_template.format(region=self.configuration.region_string.lower())
        return (
            f"{host}{escape_special_characters(self.query)}"
            f"?locale={self.configuration.locale_string}"
            f"&access_token={self.token}"
        )
