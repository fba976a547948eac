"""Cache subcommand implementation."""

import asyncio

from ..cache import CacheLayer, FileStore
from ..retrieval import CACHE_NAMESPACE
from .common import cache_dir, load_config


def run_cache(args):
    """
    Run a cache maintenance action.

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit code
    """
    config = load_config(args)
    store = FileStore(cache_dir(args, config))
    cache = CacheLayer(store)

    namespace = None if args.all else CACHE_NAMESPACE
    scope = "all" if args.all else "POI"

    if args.action == "purge":
        removed = asyncio.run(cache.purge_expired(namespace))
        print(f"✓ Removed {removed} expired {scope} cache entries from {store.cache_dir}")
    else:
        removed = asyncio.run(cache.clear(namespace))
        print(f"✓ Removed {removed} {scope} cache entries from {store.cache_dir}")
    return 0
