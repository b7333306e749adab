"""Shared test fixtures and helpers."""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Tuple

import pytest

from parcel_edges.models import Parcel
from parcel_edges.roads.provider import GeoJSONLineProvider, RenderedFeature

ORIGIN = (-123.1000, 49.2600)
METERS_PER_DEG_LAT = 6371008.8 * math.pi / 180


def offset(dx: float, dy: float, origin: Tuple[float, float] = ORIGIN) -> Tuple[float, float]:
    """Position dx meters east and dy meters north of origin."""
    lon0, lat0 = origin
    return (
        lon0 + dx / (METERS_PER_DEG_LAT * math.cos(math.radians(lat0))),
        lat0 + dy / METERS_PER_DEG_LAT,
    )


def rectangle_ring(width: float = 15.0, depth: float = 35.0) -> List[Tuple[float, float]]:
    """Closed ring: edge 0 south, 1 east, 2 north, 3 west."""
    return [
        offset(0, 0),
        offset(width, 0),
        offset(width, depth),
        offset(0, depth),
        offset(0, 0),
    ]


def line_feature(
    name: str,
    points: List[Tuple[float, float]],
    road_class: str = "street",
    source_layer: str = "road",
) -> Dict[str, Any]:
    """GeoJSON line feature from local meter offsets."""
    return {
        "type": "Feature",
        "sourceLayer": source_layer,
        "geometry": {
            "type": "LineString",
            "coordinates": [list(offset(x, y)) for x, y in points],
        },
        "properties": {"name": name, "class": road_class},
    }


def horizontal_road(name: str, y: float, road_class: str = "street") -> Dict[str, Any]:
    return line_feature(name, [(-100.0, y), (115.0, y)], road_class)


def vertical_road(name: str, x: float, road_class: str = "street") -> Dict[str, Any]:
    return line_feature(name, [(x, -100.0), (x, 150.0)], road_class)


def make_parcel(
    address: str = "1234 Main St",
    street_name: str = "Main St",
    ring: Optional[List[Tuple[float, float]]] = None,
) -> Parcel:
    ring = ring if ring is not None else rectangle_ring()
    lon, lat = offset(7.5, 17.5)
    return Parcel(
        id="parcel-1",
        ring=ring,
        full_address=address,
        street_name=street_name,
        lon=lon,
        lat=lat,
    )


def make_provider(*features: Dict[str, Any], zoom: float = 18.0) -> GeoJSONLineProvider:
    return GeoJSONLineProvider(list(features), zoom=zoom)


class StaticProvider:
    """Provider fake returning the same features for every window."""

    def __init__(self, features: List[RenderedFeature], zoom: float = 18.0):
        self.features = features
        self.zoom = zoom
        self.windows = []

    def project_to_screen(self, position):
        return (position[0] * 1e5, -position[1] * 1e5)

    def query_lines_near(self, window):
        self.windows.append(window)
        return list(self.features)

    def current_zoom(self):
        return self.zoom


@pytest.fixture()
def parcel() -> Parcel:
    return make_parcel()


@pytest.fixture()
def main_street() -> Dict[str, Any]:
    # 10m south of edge 0, parallel
    return horizontal_road("Main Street", -10.0)


@pytest.fixture()
def rear_lane() -> Dict[str, Any]:
    # 12m north of edge 2, parallel
    return horizontal_road("Rear Lane", 47.0, road_class="service")
