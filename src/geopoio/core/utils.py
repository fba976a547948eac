"""Shared utility functions for route handling."""

import gpxpy
from math import radians, sin, cos, sqrt, atan2
from pathlib import Path

from .models import Coordinate


def haversine_distance(lat1, lon1, lat2, lon2):
    """
    Calculate distance between two points in meters using Haversine formula.

    Args:
        lat1, lon1: Coordinates of first point
        lat2, lon2: Coordinates of second point

    Returns:
        Distance in meters
    """
    R = 6371000  # Earth radius in meters

    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = sin(dlat/2)**2 + cos(lat1) * cos(lat2) * sin(dlon/2)**2
    c = 2 * atan2(sqrt(a), sqrt(1-a))

    return R * c


def load_gpx_route(gpx_file):
    """
    Load and parse GPX route file.

    Args:
        gpx_file: Path to GPX file

    Returns:
        List of Coordinate (longitude, latitude) tuples

    Raises:
        ValueError: If no points found in GPX file
    """
    gpx_file = Path(gpx_file)

    with open(gpx_file, encoding="utf-8") as f:
        gpx = gpxpy.parse(f)

    points = []

    # Try tracks first
    for track in gpx.tracks:
        for segment in track.segments:
            for point in segment.points:
                points.append(Coordinate(point.longitude, point.latitude))

    # Then planned routes
    if not points:
        for route in gpx.routes:
            for point in route.points:
                points.append(Coordinate(point.longitude, point.latitude))

    # Fall back to waypoints
    if not points:
        for waypoint in gpx.waypoints:
            points.append(Coordinate(waypoint.longitude, waypoint.latitude))

    if not points:
        raise ValueError(f"No points found in GPX file: {gpx_file}")

    return points


def calculate_route_length(points):
    """
    Calculate total route length in kilometers.

    Args:
        points: List of (lon, lat) coordinates

    Returns:
        Total length in kilometers
    """
    total = 0
    for i in range(len(points) - 1):
        total += haversine_distance(
            points[i][1], points[i][0],
            points[i+1][1], points[i+1][0]
        )
    return total / 1000  # Convert to km
