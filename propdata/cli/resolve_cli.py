#!/usr/bin/env python3
"""
CLI for one-off property data lookups

Usage:
    python -m propdata.cli.resolve_cli "20387 Dale Drive" "Maple Ridge"
    python -m propdata.cli.resolve_cli "1234 Main St" Vancouver --limit 5 --log-json
    python -m propdata.cli.resolve_cli --list-cities
"""

import asyncio
import sys
import argparse
import json
from typing import List, Optional

from ..config.loader import get_available_cities
from ..config.settings import Settings, get_settings
from ..errors import ConfigurationError, InvalidInputError
from ..services.property_resolver import PropertyDataResolver
from ..utils.logging import configure_logging, get_logger


logger = get_logger(__name__)


class ResolveCLI:
    """Command-line interface for property lookups"""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def resolve(self, address: str, city: str) -> int:
        """Resolve one property and print the result as JSON"""
        async with PropertyDataResolver.from_settings(self.settings) as resolver:
            result = await resolver.resolve(address, city)

        print(json.dumps(result.to_dict(), indent=2, default=str))
        return 0

    def list_cities(self) -> int:
        """Print the cities with a configuration file"""
        for city_id in get_available_cities(self.settings.CITY_CONFIG_DIR):
            print(city_id)
        return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser"""
    parser = argparse.ArgumentParser(
        description="Resolve BC property assessment data and comparable sales",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s "20387 Dale Drive" "Maple Ridge"       Resolve one property
  %(prog)s "1234 Main St" Vancouver --limit 5     At most 5 comparables
  %(prog)s --list-cities                          Show configured cities
        """
    )

    parser.add_argument('address', nargs='?', help='Street address, e.g. "20387 Dale Drive"')
    parser.add_argument('city', nargs='?', help='City, e.g. "Maple Ridge"')

    parser.add_argument('--timeout', type=float, help='Per-source timeout in seconds')
    parser.add_argument('--limit', type=int, help='Maximum comparable sales')
    parser.add_argument('--log-level', help='Log level (DEBUG, INFO, WARNING, ...)')
    parser.add_argument('--log-json', action='store_true', help='Emit logs as JSON lines on stderr')
    parser.add_argument('--no-cache', action='store_true', help='Disable the lookup cache')
    parser.add_argument('--list-cities', action='store_true', help='List configured cities and exit')

    return parser


def build_settings(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    """
    Apply command-line overrides on top of environment settings

    Raises:
        InvalidInputError: an override is out of range
    """
    base = base or get_settings()
    overrides = {}
    if args.timeout is not None:
        if args.timeout <= 0:
            raise InvalidInputError("--timeout must be a positive number of seconds")
        overrides['ADAPTER_TIMEOUT_SECONDS'] = args.timeout
    if args.limit is not None:
        if args.limit < 0:
            raise InvalidInputError("--limit must not be negative")
        overrides['COMPARABLES_LIMIT'] = args.limit
    if args.log_level:
        overrides['LOG_LEVEL'] = args.log_level
    if args.log_json:
        overrides['LOG_JSON'] = True
    if args.no_cache:
        overrides['CACHE_ENABLED'] = False
    return base.model_copy(update=overrides)


async def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point, returns the process exit code"""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        settings = build_settings(args)
    except InvalidInputError as e:
        print(f"Error: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 2

    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    cli = ResolveCLI(settings)

    try:
        if args.list_cities:
            return cli.list_cities()

        if not args.address or not args.city:
            print("Error: address and city are required", file=sys.stderr)
            parser.print_usage(sys.stderr)
            return 2

        return await cli.resolve(args.address, args.city)

    except InvalidInputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        logger.error("cli_configuration_error", error=str(e))
        return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130


def run() -> None:
    """Console script entry point"""
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    run()
