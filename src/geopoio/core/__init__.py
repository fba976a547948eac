"""Core models, geometry and configuration for GeoPOIO."""

from .config import Config
from .models import (
    BoundingBox,
    CacheEntry,
    CancellationToken,
    Coordinate,
    PendingRequest,
    POI,
    POICategory,
    RetrievalOutcome,
    RetrievalResult,
)
from .utils import (
    haversine_distance,
    load_gpx_route,
    calculate_route_length,
)
from . import geo

__all__ = [
    "Config",
    "BoundingBox",
    "CacheEntry",
    "CancellationToken",
    "Coordinate",
    "PendingRequest",
    "POI",
    "POICategory",
    "RetrievalOutcome",
    "RetrievalResult",
    "haversine_distance",
    "load_gpx_route",
    "calculate_route_length",
    "geo",
]
