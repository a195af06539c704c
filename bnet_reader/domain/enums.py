"""
Regions and locales of the Battle.net API.
"""

from enum import Enum
from typing import Dict


class Region(str, Enum):
    """API regions. Long names are aliases of the region codes."""
    US = "US"
    EU = "EU"
    KR = "KR"
    TW = "TW"
    SEA = "SEA"

    UNITED_STATES = "US"
    EUROPE = "EU"
    KOREA = "KR"
    TAIWAN = "TW"
    SOUTHEAST_ASIA = "SEA"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            key = value.strip().upper()
            for member in cls:
                if member.value == key:
                    return member
            member = cls.__members__.get(key.replace("-", "_").replace(" ", "_"))
            if member is not None:
                return member
        return None

    @property
    def default_locale(self) -> "Locale":
        """Locale used when a configuration asks for the region default."""
        return DEFAULT_LOCALES[self]


class Locale(str, Enum):
    """Locales accepted by the `locale` query parameter."""
    EN_US = "en_US"
    ES_MX = "es_MX"
    PT_BR = "pt_BR"
    EN_GB = "en_GB"
    ES_ES = "es_ES"
    FR_FR = "fr_FR"
    RU_RU = "ru_RU"
    DE_DE = "de_DE"
    PT_PT = "pt_PT"
    IT_IT = "it_IT"
    KO_KR = "ko_KR"
    ZH_TW = "zh_TW"
    ZH_CN = "zh_CN"

    AMERICAN_ENGLISH = "en_US"
    MEXICAN_SPANISH = "es_MX"
    BRAZILIAN_PORTUGUESE = "pt_BR"
    BRITISH_ENGLISH = "en_GB"
    SPANISH = "es_ES"
    FRENCH = "fr_FR"
    RUSSIAN = "ru_RU"
    GERMAN = "de_DE"
    PORTUGUESE = "pt_PT"
    ITALIAN = "it_IT"
    KOREAN = "ko_KR"
    TRADITIONAL_CHINESE = "zh_TW"
    SIMPLIFIED_CHINESE = "zh_CN"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            key = value.strip().replace("-", "_").lower()
            for member in cls:
                if member.value.lower() == key:
                    return member
            member = cls.__members__.get(key.upper())
            if member is not None:
                return member
        return None


DEFAULT_LOCALES: Dict[Region, Locale] = {
    Region.US: Locale.EN_US,
    Region.EU: Locale.EN_GB,
    Region.KR: Locale.KO_KR,
    Region.TW: Locale.ZH_TW,
    Region.SEA: Locale.EN_US,
}
