"""
Geometry utility functions

Geodesic primitives shared by the edge extractor, road scoring and the
classifier. Positions are (lon, lat) in degrees.
"""

import math
from typing import Sequence

from pyproj import Geod
from shapely.geometry import LineString, Point

from ..models import Position

EARTH_RADIUS_M = 6371008.8
EARTH_CIRCUMFERENCE_M = 40075016.686

_GEOD = Geod(ellps="WGS84")


def distance_meters(a: Position, b: Position) -> float:
    """Haversine distance between two positions in meters"""
    phi1 = math.radians(a[1])
    phi2 = math.radians(b[1])
    delta_phi = math.radians(b[1] - a[1])
    delta_lambda = math.radians(b[0] - a[0])

    h = math.sin(delta_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_M * c


def bearing_degrees(a: Position, b: Position) -> float:
    """Initial bearing from a to b in degrees (-180, 180]"""
    lon1 = math.radians(a[0])
    lon2 = math.radians(b[0])
    lat1 = math.radians(a[1])
    lat2 = math.radians(b[1])

    y = math.sin(lon2 - lon1) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(lon2 - lon1)
    result = math.degrees(math.atan2(y, x))

    return result if math.isfinite(result) else 0.0


def point_to_segment_distance_meters(point: Position, seg_start: Position, seg_end: Position) -> float:
    """
    Shortest distance from a point to a segment in meters

    The closest point is found in lon/lat space (clamped to the segment
    endpoints) and measured with the haversine distance. Zero-length
    segments fall back to the point-to-endpoint distance.
    """
    if seg_start[0] == seg_end[0] and seg_start[1] == seg_end[1]:
        return distance_meters(point, seg_start)

    segment = LineString([seg_start, seg_end])
    closest = segment.interpolate(segment.project(Point(point)))

    return distance_meters(point, (closest.x, closest.y))


def orientation_diff_deg(a: float, b: float) -> float:
    """
    Undirected angular difference between two bearings (0~90 degrees)

    Reversed directions count as parallel.
    """
    a_norm = a % 360.0
    b_norm = b % 360.0
    raw_diff = abs(a_norm - b_norm)
    wrapped = 360.0 - raw_diff if raw_diff > 180.0 else raw_diff
    return 180.0 - wrapped if wrapped > 90.0 else wrapped


def meters_per_pixel(latitude: float, zoom: float) -> float:
    """Web Mercator ground resolution at a latitude and zoom level"""
    return EARTH_CIRCUMFERENCE_M * math.cos(math.radians(latitude)) / math.pow(2, zoom + 8)


def midpoint(a: Position, b: Position) -> Position:
    """Arithmetic midpoint (adequate at parcel scale)"""
    return ((a[0] + b[0]) / 2, (a[1] + b[1]) / 2)


def polygon_area_m2(ring: Sequence[Position]) -> float:
    """Geodesic area of a ring in square meters"""
    distinct = {(p[0], p[1]) for p in ring}
    if len(distinct) < 3:
        return 0.0

    lons = [p[0] for p in ring]
    lats = [p[1] for p in ring]
    area, _ = _GEOD.polygon_area_perimeter(lons, lats)

    return abs(area)

