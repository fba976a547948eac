"""
Planar geometry used to scope and filter POI searches.

Distances are planar Euclidean distances in degrees scaled by a fixed
meters-per-degree factor. This is only meant for short ranges (up to a few
tens of km) and is not accurate near the poles or over large spans.
"""

import math
from typing import Sequence

from shapely.geometry import MultiPoint

from .models import BoundingBox, Coordinate

METERS_PER_DEGREE = 111000

# Minimum box padding for single-point ("near me") searches, in degrees
MIN_POINT_BUFFER_DEGREES = 0.05

# Box padding for multi-point routes; exact filtering happens afterwards
ROUTE_BUFFER_DEGREES = 0.01


def distance(a: Coordinate, b: Coordinate) -> float:
    """
    Approximate distance between two coordinates.

    Args:
        a: First (lon, lat) coordinate
        b: Second (lon, lat) coordinate

    Returns:
        Distance in meters
    """
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return math.sqrt(dx * dx + dy * dy) * METERS_PER_DEGREE


def distance_to_segment(point: Coordinate, seg_start: Coordinate, seg_end: Coordinate) -> float:
    """
    Approximate distance from a point to a line segment.

    The point is projected onto the line through the segment and the
    projection parameter is clamped to [0, 1] so the nearest point stays on
    the segment. A degenerate segment falls back to point-to-point distance.

    Args:
        point: The (lon, lat) coordinate to measure from
        seg_start: Segment start
        seg_end: Segment end

    Returns:
        Distance in meters
    """
    a = point[0] - seg_start[0]
    b = point[1] - seg_start[1]
    c = seg_end[0] - seg_start[0]
    d = seg_end[1] - seg_start[1]

    len_sq = c * c + d * d
    if len_sq == 0:
        return distance(point, seg_start)

    param = max(0.0, min(1.0, (a * c + b * d) / len_sq))
    nearest = (seg_start[0] + param * c, seg_start[1] + param * d)
    return distance(point, nearest)


def min_distance_to_route(point: Coordinate, route: Sequence[Coordinate]) -> float:
    """
    Smallest distance from a point to any segment of a route.

    Returns ``math.inf`` for routes with fewer than two points; single-point
    routes must be measured with :func:`distance` instead.
    """
    best = math.inf
    for i in range(len(route) - 1):
        best = min(best, distance_to_segment(point, route[i], route[i + 1]))
    return best


def buffer_degrees(route: Sequence[Coordinate], buffer_distance_m: float) -> float:
    """
    Padding applied around a route's extent when building the query box.

    A single point gets a generous box so "near me" searches always have
    candidates; a route already constrains the search, so it gets a fixed
    small padding regardless of the buffer distance.
    """
    if len(route) == 1:
        return max(MIN_POINT_BUFFER_DEGREES, buffer_distance_m / METERS_PER_DEGREE)
    return ROUTE_BUFFER_DEGREES


def bounding_box(route: Sequence[Coordinate], buffer_distance_m: float) -> BoundingBox:
    """
    Calculate the query bounding box around a route.

    Args:
        route: Ordered (lon, lat) coordinates, at least one
        buffer_distance_m: Search buffer in meters

    Returns:
        BoundingBox expanded by :func:`buffer_degrees`

    Raises:
        ValueError: If the route is empty
    """
    if not route:
        raise ValueError("Cannot compute a bounding box for an empty route")

    min_lon, min_lat, max_lon, max_lat = MultiPoint([tuple(c) for c in route]).bounds
    pad = buffer_degrees(route, buffer_distance_m)

    return BoundingBox(
        north=max_lat + pad,
        south=min_lat - pad,
        east=max_lon + pad,
        west=min_lon - pad,
    )


def distance_from_route(point: Coordinate, route: Sequence[Coordinate]) -> float:
    """Distance used for filtering: direct for a single point, else to the nearest segment."""
    if len(route) == 1:
        return distance(point, route[0])
    return min_distance_to_route(point, route)


def within_buffer(point: Coordinate, route: Sequence[Coordinate], buffer_distance_m: float) -> bool:
    """Check whether a point lies within the buffer distance of a route (inclusive)."""
    if not route:
        return False
    return distance_from_route(point, route) <= buffer_distance_m
