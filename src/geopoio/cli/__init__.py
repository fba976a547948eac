"""Command-line interface for GeoPOIO."""

import sys
import logging
import argparse


def _add_common_arguments(parser):
    parser.add_argument(
        "--categories",
        nargs="+",
        help="Only search these categories (default: all configured)"
    )
    parser.add_argument(
        "--output",
        default="data/pois.csv",
        help="Output file, .csv or .json (default: data/pois.csv)"
    )
    parser.add_argument(
        "--config",
        help="Path to config.ini file (default: use built-in categories)"
    )
    parser.add_argument(
        "--cache-dir",
        help="Directory of the result cache (default: from config, data/cache)"
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Do not read or write the on-disk result cache"
    )


def main(argv=None):
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="geopoio",
        description="Find points of interest along routes and near locations"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for operational messages (default: WARNING)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Shortcut for --log-level INFO"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Route subcommand
    route_parser = subparsers.add_parser(
        "route",
        help="Find POIs along a GPX route"
    )
    route_parser.add_argument(
        "--gpx",
        required=True,
        help="Input GPX route file"
    )
    route_parser.add_argument(
        "--buffer",
        type=float,
        help="Maximum distance in meters from the route (default: config 'track', 100)"
    )
    _add_common_arguments(route_parser)

    # Near subcommand
    near_parser = subparsers.add_parser(
        "near",
        help="Find POIs around a location"
    )
    near_parser.add_argument("--lat", type=float, required=True, help="Latitude")
    near_parser.add_argument("--lon", type=float, required=True, help="Longitude")
    near_parser.add_argument(
        "--distance",
        type=float,
        help="Search radius in meters (default: config 'near_me', 2000)"
    )
    _add_common_arguments(near_parser)

    # Cache subcommand
    cache_parser = subparsers.add_parser(
        "cache",
        help="Manage the result cache"
    )
    cache_parser.add_argument(
        "action",
        choices=["clear", "purge"],
        help="clear: remove cached results; purge: remove only expired ones"
    )
    cache_parser.add_argument(
        "--all",
        action="store_true",
        help="Act on every GeoPOIO entry, not only POI results"
    )
    cache_parser.add_argument("--config", help="Path to config.ini file")
    cache_parser.add_argument("--cache-dir", help="Directory of the result cache")

    # Parse arguments
    args = parser.parse_args(argv)

    logging.basicConfig(
        level="INFO" if args.verbose else args.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Route to appropriate subcommand
    if args.command in ("route", "near"):
        from .search import run_search
        sys.exit(run_search(args))
    elif args.command == "cache":
        from .cache import run_cache
        sys.exit(run_cache(args))


if __name__ == "__main__":
    main()
