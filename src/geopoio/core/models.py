"""Data models for POI retrieval."""

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, NamedTuple, Optional


class Coordinate(NamedTuple):
    """A (longitude, latitude) pair in degrees."""

    lon: float
    lat: float


class POICategory(str, Enum):
    """Built-in POI categories, in classification priority order."""

    WATER = "water"
    FOOD = "food"
    FUEL = "fuel"
    SHOP = "shop"
    MEDICAL = "medical"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class BoundingBox:
    """Rectangular lat/lon region used to scope an Overpass query."""

    north: float
    south: float
    east: float
    west: float

    def as_overpass(self) -> str:
        """Render as the Overpass ``(south,west,north,east)`` filter body."""
        return f"{self.south},{self.west},{self.north},{self.east}"


@dataclass(frozen=True)
class POI:
    """
    A classified, located amenity.

    Immutable once built; ``tags`` is exposed as a read-only mapping.
    """

    id: str
    coordinate: Coordinate
    category: str
    name: Optional[str] = None
    tags: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "coordinate", Coordinate(*self.coordinate))
        object.__setattr__(self, "tags", MappingProxyType(dict(self.tags)))

    @property
    def lat(self) -> float:
        return self.coordinate.lat

    @property
    def lon(self) -> float:
        return self.coordinate.lon

    @property
    def amenity(self) -> Optional[str]:
        """The amenity (or shop) value that made this element a POI."""
        return self.tags.get("amenity") or self.tags.get("shop")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "lat": self.lat,
            "lon": self.lon,
            "category": self.category,
            "name": self.name,
            "tags": dict(self.tags),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "POI":
        return cls(
            id=data["id"],
            coordinate=Coordinate(data["lon"], data["lat"]),
            category=data["category"],
            name=data.get("name"),
            tags=data.get("tags") or {},
        )


@dataclass
class CacheEntry:
    """A cached payload with its creation and expiry timestamps (seconds)."""

    payload: Any
    created_at: float
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "payload": self.payload,
            "createdAt": self.created_at,
            "expiresAt": self.expires_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CacheEntry":
        return cls(
            payload=data["payload"],
            created_at=float(data["createdAt"]),
            expires_at=float(data["expiresAt"]),
        )


class CancellationToken:
    """Thread-safe cancellation flag shared between a coordinator and its transport."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(eq=False)
class PendingRequest:
    """The single outstanding Overpass request of a coordinator."""

    token: CancellationToken = field(default_factory=CancellationToken)
    issued_at: float = field(default_factory=time.monotonic)
    task: Optional[Any] = None

    def cancel(self) -> None:
        """Signal the transport to stop and cancel the wrapping task."""
        self.token.cancel()
        if self.task is not None and not self.task.done():
            self.task.cancel()

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled


class RetrievalOutcome(str, Enum):
    """How a retrieval call ended."""

    OK = "ok"
    CACHED = "cached"
    EMPTY_ROUTE = "empty_route"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class RetrievalResult:
    """POIs returned by a retrieval call together with how the call ended."""

    outcome: RetrievalOutcome
    pois: List[POI] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome in (
            RetrievalOutcome.OK,
            RetrievalOutcome.CACHED,
            RetrievalOutcome.EMPTY_ROUTE,
        )
