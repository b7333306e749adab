"""
Geometry primitives and edge extraction
"""

from .utils import (
    distance_meters,
    bearing_degrees,
    point_to_segment_distance_meters,
    orientation_diff_deg,
    meters_per_pixel,
    polygon_area_m2,
)
from .edges import extract_edges

__all__ = [
    "distance_meters",
    "bearing_degrees",
    "point_to_segment_distance_meters",
    "orientation_diff_deg",
    "meters_per_pixel",
    "polygon_area_m2",
    "extract_edges",
]
