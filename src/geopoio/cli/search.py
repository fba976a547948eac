"""Route and near subcommand implementation."""

import asyncio
import sys
from pathlib import Path

from ..cache import CacheLayer, FileStore, MemoryStore
from ..core import Coordinate, calculate_route_length, load_gpx_route
from ..core.models import RetrievalOutcome
from ..exporters import save_to_csv, save_to_json
from ..retrieval import RetrievalCoordinator
from .common import cache_dir, load_config


def run_search(args):
    """
    Run a POI search along a GPX route or around a location.

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit code
    """
    print("=" * 60)
    print("GeoPOIO")
    print("=" * 60)

    config = load_config(args)

    if args.command == "route":
        route, buffer_m = _load_route(args, config)
    else:
        route = [Coordinate(args.lon, args.lat)]
        buffer_m = args.distance if args.distance is not None else config.get_distance("near_me")
        print(f"Location: {args.lat:.5f}, {args.lon:.5f}")
    print(f"Buffer: {buffer_m}m")

    categories = args.categories or config.get_category_list()
    unknown = [c for c in categories if c not in config.get_categories()]
    if unknown:
        print(f"⚠ Ignoring unknown categories: {', '.join(unknown)}")

    if args.no_cache or not config.cache_enabled:
        store = MemoryStore()
        print("Cache: disabled")
    elif set(categories) != set(config.get_category_list()):
        # Cache keys omit categories; only full-category results are persisted
        store = MemoryStore()
        print("Cache: skipped for a category subset")
    else:
        store = FileStore(cache_dir(args, config))
        print(f"Cache: {store.cache_dir}")

    coordinator = RetrievalCoordinator(
        config=config,
        cache=CacheLayer(store, default_ttl=config.cache_ttl_seconds),
    )

    print("\n" + "-" * 60)
    print("Querying OpenStreetMap via Overpass API...")

    try:
        result = asyncio.run(coordinator.retrieve(route, buffer_m, categories))
    except KeyboardInterrupt:
        print("\n\n⚠ Search interrupted by user")
        return 130
    finally:
        coordinator.client.close()

    if result.outcome == RetrievalOutcome.FAILED:
        print(f"\n❌ Error during retrieval: {result.error}")
        return 1

    if result.outcome == RetrievalOutcome.CACHED:
        print("✓ Using cached results")
    print(f"✓ {len(result.pois)} POIs within {buffer_m}m")
    _print_category_breakdown(result.pois, config)

    if not result.pois:
        print("\n⚠ Warning: No POIs found!")

    output = args.output
    if Path(output).suffix.lower() == ".json":
        save_to_json(result.pois, output)
    else:
        save_to_csv(result.pois, output, reference_route=route)

    print(f"\nResults saved to: {output}")
    return 0


def _load_route(args, config):
    print(f"GPX file: {args.gpx}")
    if not Path(args.gpx).exists():
        print(f"\n❌ Error: GPX file not found: {args.gpx}")
        sys.exit(1)

    try:
        route = load_gpx_route(args.gpx)
    except ValueError as e:
        print(f"\n❌ Error: {e}")
        sys.exit(1)

    print(f"✓ Loaded route with {len(route)} points ({calculate_route_length(route):.1f} km)")
    buffer_m = args.buffer if args.buffer is not None else config.get_distance("track")
    return route, buffer_m


def _print_category_breakdown(pois, config):
    """Print breakdown of POIs by category."""
    categories_count = {}
    for poi in pois:
        categories_count[poi.category] = categories_count.get(poi.category, 0) + 1

    for cat, count in sorted(categories_count.items()):
        print(f"  - {config.get_label(cat)}: {count}")
