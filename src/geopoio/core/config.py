"""Configuration management for GeoPOIO."""

import configparser
from pathlib import Path
from typing import Dict, List, Optional

from .exceptions import ConfigError
from .models import POICategory


class Config:
    """Parse and manage GeoPOIO configuration."""

    # Sections that are settings rather than POI categories
    RESERVED_SECTIONS = ("distances", "overpass", "cache", "labels")

    # Default POI categories, in classification priority order.
    # Each category maps tag keys to the tag values that select it.
    DEFAULT_CATEGORIES = {
        POICategory.WATER.value: {
            "amenity": ["drinking_water"],
            "man_made": ["water_tap"],
        },
        POICategory.FOOD.value: {
            "amenity": ["restaurant", "cafe", "fast_food"],
        },
        POICategory.FUEL.value: {
            "amenity": ["fuel"],
        },
        POICategory.SHOP.value: {
            "shop": ["supermarket", "convenience", "general"],
        },
        POICategory.MEDICAL.value: {
            "amenity": ["hospital", "clinic"],
        },
    }

    DEFAULT_LABELS = {
        POICategory.WATER.value: "Drinking Water",
        POICategory.FOOD.value: "Restaurant",
        POICategory.FUEL.value: "Gas Station",
        POICategory.SHOP.value: "Supermarket",
        POICategory.MEDICAL.value: "Hospital",
    }

    # Default search distances (in meters)
    DEFAULT_DISTANCES = {
        "track": 100,
        "near_me": 2000,
    }

    DEFAULT_OVERPASS_URL = "https://overpass-api.de/api/interpreter"
    DEFAULT_SERVER_TIMEOUT = 25
    DEFAULT_REQUEST_TIMEOUT = 180

    DEFAULT_CACHE_DIR = "data/cache"
    DEFAULT_CACHE_TTL_HOURS = 24

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to config.ini file. If None, uses defaults.
        """
        self.categories = {
            name: {key: list(values) for key, values in tags.items()}
            for name, tags in self.DEFAULT_CATEGORIES.items()
        }
        self.labels = self.DEFAULT_LABELS.copy()
        self.distances = self.DEFAULT_DISTANCES.copy()
        self.overpass_url = self.DEFAULT_OVERPASS_URL
        self.server_timeout = self.DEFAULT_SERVER_TIMEOUT
        self.request_timeout = self.DEFAULT_REQUEST_TIMEOUT
        self.cache_dir = self.DEFAULT_CACHE_DIR
        self.cache_ttl_hours = self.DEFAULT_CACHE_TTL_HOURS
        self.cache_enabled = True

        if config_file:
            self._load_config(config_file)

    def _load_config(self, config_file: str):
        """Load configuration from INI file."""
        config_path = Path(config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")

        parser = configparser.ConfigParser()
        parser.read(config_path)

        # Parse POI categories; section order is the classification priority
        categories = {}
        for section in parser.sections():
            if section in self.RESERVED_SECTIONS:
                continue

            category_filters = {}
            for key in parser[section]:
                values = [v.strip() for v in parser[section][key].split(',') if v.strip()]
                category_filters[key] = values

            categories[section] = category_filters

        if categories:
            self.categories = categories

        if 'distances' in parser:
            for name, value in parser['distances'].items():
                self.distances[name] = self._number(value, f"distances.{name}")

        if 'overpass' in parser:
            section = parser['overpass']
            self.overpass_url = section.get('url', self.overpass_url)
            if 'server_timeout' in section:
                self.server_timeout = int(self._number(section['server_timeout'], "overpass.server_timeout"))
            if 'request_timeout' in section:
                self.request_timeout = self._number(section['request_timeout'], "overpass.request_timeout")

        if 'cache' in parser:
            section = parser['cache']
            self.cache_dir = section.get('dir', self.cache_dir)
            if 'ttl_hours' in section:
                self.cache_ttl_hours = self._number(section['ttl_hours'], "cache.ttl_hours")
            try:
                self.cache_enabled = section.getboolean('enabled', fallback=True)
            except ValueError as e:
                raise ConfigError(f"Invalid value for cache.enabled: {e}")

        if 'labels' in parser:
            for category, label in parser['labels'].items():
                self.labels[category] = label

    @staticmethod
    def _number(value: str, name: str) -> float:
        try:
            number = float(value)
        except ValueError:
            raise ConfigError(f"Invalid number for {name}: {value!r}")
        if number <= 0:
            raise ConfigError(f"{name} must be positive, got {value!r}")
        return int(number) if number.is_integer() else number

    def get_categories(self) -> Dict[str, Dict[str, List[str]]]:
        """Get all POI category definitions."""
        return self.categories

    def get_category_list(self) -> List[str]:
        """Get list of all category names, in priority order."""
        return list(self.categories.keys())

    def get_label(self, category: str) -> str:
        """Get display label for a category."""
        return self.labels.get(category, category.replace("_", " ").title())

    def get_distance(self, name: str, default: float = 1000) -> float:
        """Get a default search distance ('track' or 'near_me')."""
        return self.distances.get(name, default)

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_hours * 3600
