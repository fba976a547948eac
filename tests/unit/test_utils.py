"""Tests for GPX loading and route length."""

import pytest

from geopoio.core import calculate_route_length, haversine_distance, load_gpx_route

TRACK = """<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">
  <wpt lat="1.0" lon="2.0"></wpt>
  <trk><trkseg>
    <trkpt lat="52.0" lon="13.0"></trkpt>
    <trkpt lat="52.1" lon="13.1"></trkpt>
  </trkseg></trk>
</gpx>
"""

WAYPOINTS = """<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">
  <wpt lat="48.1" lon="11.5"></wpt>
</gpx>
"""

EMPTY = """<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1"></gpx>
"""


def write(tmp_path, body):
    path = tmp_path / "route.gpx"
    path.write_text(body, encoding="utf-8")
    return path


def test_track_points_are_lon_lat(tmp_path):
    route = load_gpx_route(write(tmp_path, TRACK))
    assert route == [(13.0, 52.0), (13.1, 52.1)]
    assert route[0].lon == 13.0


def test_waypoints_are_a_fallback(tmp_path):
    assert load_gpx_route(write(tmp_path, WAYPOINTS)) == [(11.5, 48.1)]


def test_empty_gpx_raises(tmp_path):
    with pytest.raises(ValueError):
        load_gpx_route(write(tmp_path, EMPTY))


def test_route_length():
    assert haversine_distance(0, 0, 0, 1) == pytest.approx(111195, rel=1e-3)
    assert calculate_route_length([(0, 0), (1, 0), (1, 1)]) == pytest.approx(2 * 111.195, rel=1e-3)
    assert calculate_route_length([(13.0, 52.0)]) == 0
