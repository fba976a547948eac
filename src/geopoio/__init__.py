"""GeoPOIO - Find points of interest along routes and near locations."""

__version__ = "0.1.0"

# Expose main classes for programmatic use
from .core import Config, Coordinate, POI, POICategory, RetrievalOutcome, RetrievalResult
from .cache import CacheLayer, FileStore, MemoryStore
from .overpass import OverpassClient, QueryBuilder, ResponseNormalizer
from .retrieval import RetrievalCoordinator

__all__ = [
    "__version__",
    "Config",
    "Coordinate",
    "POI",
    "POICategory",
    "RetrievalOutcome",
    "RetrievalResult",
    "CacheLayer",
    "FileStore",
    "MemoryStore",
    "OverpassClient",
    "QueryBuilder",
    "ResponseNormalizer",
    "RetrievalCoordinator",
]
