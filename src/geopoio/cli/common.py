"""Helpers shared by CLI subcommands."""

import sys
from pathlib import Path

from ..core import Config
from ..core.exceptions import ConfigError


def load_config(args):
    """
    Load configuration from ``--config``, exiting with status 1 on errors.

    Args:
        args: Parsed command-line arguments

    Returns:
        Config instance
    """
    if not args.config:
        config = Config()  # Use defaults
        print(f"Using default config with {len(config.get_category_list())} categories")
        return config

    print(f"Config: {args.config}")
    if not Path(args.config).exists():
        print(f"\n❌ Error: Config file not found: {args.config}")
        sys.exit(1)
    try:
        config = Config(args.config)
    except ConfigError as e:
        print(f"\n❌ Error loading config: {e}")
        sys.exit(1)
    print(f"✓ Loaded config with {len(config.get_category_list())} categories")
    return config


def cache_dir(args, config):
    return args.cache_dir or config.cache_dir
