"""
Fetch a single Battle.net API resource from the command line.

    bnet-reader /data/wow/token/index --region eu --default-locale

Credentials and defaults come from BNET_* environment variables unless
given as options.
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from shared.config import ReaderSettings
from shared.errors import ApiReaderException
from shared.logging import configure_logging, set_request_id
from .domain.configuration import ApiConfiguration
from .domain.enums import Region, Locale
from .reader import ApiReader
from .adapters.web_client import HttpxWebClient


def build_configuration(args: argparse.Namespace, settings: ReaderSettings) -> ApiConfiguration:
    """Command line options layered over the settings configuration."""
    configuration = ApiConfiguration.from_settings(settings)
    if args.region:
        configuration = configuration.with_region(Region(args.region), use_default_locale=args.locale is None)
    if args.locale:
        configuration = configuration.with_locale(Locale(args.locale))
    if args.default_locale:
        configuration = configuration.with_default_locale()
    if args.key:
        configuration = configuration.with_api_key(args.key, args.secret)
    elif args.secret:
        configuration = configuration.with_api_key(configuration.api_key, args.secret)
    return configuration


async def fetch(query: str, configuration: ApiConfiguration, settings: ReaderSettings):
    """Fetch `query` and return the decoded JSON body."""
    async with HttpxWebClient(settings) as web_client:
        reader = ApiReader(configuration, web_client, settings=settings)
        return await reader.get(query)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="bnet-reader", description="Fetch a Battle.net API resource as JSON.")
    parser.add_argument("query", help="API path, e.g. /data/wow/item/19019")
    parser.add_argument("--region", default=None, help="API region (US, EU, KR, TW, SEA)")
    parser.add_argument("--locale", default=None, help="Result locale, e.g. en_GB")
    parser.add_argument("--default-locale", action="store_true", help="Use the region's default locale")
    parser.add_argument("--key", default=None, help="OAuth client id (BNET_API_KEY)")
    parser.add_argument("--secret", default=None, help="OAuth client secret (BNET_API_SECRET)")
    parser.add_argument("--log-level", default=None, help="Log level (BNET_LOG_LEVEL)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    settings = ReaderSettings()
    configure_logging("bnet_reader", args.log_level or settings.log_level)
    set_request_id()

    try:
        configuration = build_configuration(args, settings)
        result = asyncio.run(fetch(args.query, configuration, settings))
    except KeyboardInterrupt:
        return 130
    except ValueError as exc:
        print(f"[bnet-reader] invalid option: {exc}", file=sys.stderr)
        return 2
    except ApiReaderException as exc:
        print(f"[bnet-reader] {exc.code}: {exc.message}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
