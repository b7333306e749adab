"""
Line-geometry provider interface

The classifier never talks to a renderer directly. It receives an object
that can project positions to pixel space, report the zoom level and
return the line features rendered inside a pixel window.
"""

import json
import math
from pathlib import Path
from typing import List, Dict, Any, Optional, Protocol, Tuple, Union

from dataclasses import dataclass, field
from loguru import logger
from shapely.geometry import LineString, MultiLineString, MultiPoint, box
from shapely.strtree import STRtree

from ..models import Position

Pixel = Tuple[float, float]
PixelWindow = Tuple[Pixel, Pixel]  # ((min_x, min_y), (max_x, max_y))

MAX_MERCATOR_LAT = 85.0511287798


@dataclass
class RenderedFeature:
    """A raw feature as returned by a map provider"""
    geometry: Optional[Dict[str, Any]]
    properties: Dict[str, Any] = field(default_factory=dict)
    source_layer: str = ""


class LineProvider(Protocol):
    """Capability the classifier needs from the map layer"""

    def project_to_screen(self, position: Position) -> Pixel:
        ...

    def query_lines_near(self, window: PixelWindow) -> List[RenderedFeature]:
        ...

    def current_zoom(self) -> float:
        ...


def project_web_mercator(position: Position, zoom: float, tile_size: int = 256) -> Pixel:
    """Project (lon, lat) to global Web Mercator pixel coordinates"""
    world_size = tile_size * math.pow(2, zoom)
    lon, lat = position
    lat = max(-MAX_MERCATOR_LAT, min(MAX_MERCATOR_LAT, lat))
    lat_rad = math.radians(lat)

    x = (lon + 180.0) / 360.0 * world_size
    y = (1.0 - math.log(math.tan(lat_rad) + 1.0 / math.cos(lat_rad)) / math.pi) / 2.0 * world_size
    return (x, y)


def _flatten_positions(coordinates: Any) -> List[Position]:
    """Collect every [lon, lat] pair from nested GeoJSON coordinates"""
    if not isinstance(coordinates, (list, tuple)):
        return []
    if len(coordinates) >= 2 and all(isinstance(v, (int, float)) for v in coordinates[:2]):
        lon, lat = float(coordinates[0]), float(coordinates[1])
        if math.isfinite(lon) and math.isfinite(lat):
            return [(lon, lat)]
        return []

    positions = []
    for item in coordinates:
        positions.extend(_flatten_positions(item))
    return positions


class GeoJSONLineProvider:
    """
    In-memory provider over GeoJSON features

    Features are projected once at the provider's zoom level and indexed
    with an STRtree, so window queries behave like a renderer's
    rendered-feature query.
    """

    def __init__(
        self,
        features: List[Dict[str, Any]],
        zoom: float = 18.0,
        tile_size: int = 256
    ):
        self.zoom = zoom
        self.tile_size = tile_size
        self._features: List[RenderedFeature] = []
        geometries = []

        for raw in features:
            if not isinstance(raw, dict):
                continue
            geometry = raw.get("geometry")
            pixel_geometry = self._pixel_geometry(geometry)
            if pixel_geometry is None:
                continue
            properties = raw.get("properties") or {}
            if not isinstance(properties, dict):
                logger.debug(f"Ignoring non-mapping properties on provider feature: {type(properties).__name__}")
                properties = {}
            self._features.append(RenderedFeature(
                geometry=geometry,
                properties=dict(properties),
                source_layer=str(raw.get("sourceLayer") or raw.get("source_layer") or ""),
            ))
            geometries.append(pixel_geometry)

        self._tree = STRtree(geometries) if geometries else None
        logger.debug(f"Indexed {len(self._features)} provider features at zoom {zoom}")

    @classmethod
    def from_feature_collection(cls, collection: Dict[str, Any], zoom: float = 18.0) -> "GeoJSONLineProvider":
        if not isinstance(collection, dict):
            raise ValueError(f"Expected a GeoJSON FeatureCollection object, got {type(collection).__name__}")
        features = collection.get("features")
        return cls(features if isinstance(features, list) else [], zoom=zoom)

    @classmethod
    def from_file(cls, path: Union[str, Path], zoom: float = 18.0) -> "GeoJSONLineProvider":
        with open(path, "r", encoding="utf-8") as f:
            collection = json.load(f)
        return cls.from_feature_collection(collection, zoom=zoom)

    def project_to_screen(self, position: Position) -> Pixel:
        return project_web_mercator(position, self.zoom, self.tile_size)

    def current_zoom(self) -> float:
        return self.zoom

    def query_lines_near(self, window: PixelWindow) -> List[RenderedFeature]:
        if self._tree is None:
            return []
        (min_x, min_y), (max_x, max_y) = window
        hits = self._tree.query(box(min_x, min_y, max_x, max_y), predicate="intersects")
        return [self._features[i] for i in sorted(int(h) for h in hits)]

    def _pixel_geometry(self, geometry: Any):
        if not isinstance(geometry, dict):
            return None
        geometry_type = geometry.get("type")
        coordinates = geometry.get("coordinates")

        if geometry_type == "LineString":
            line = [self.project_to_screen(p) for p in _flatten_positions(coordinates)]
            return LineString(line) if len(line) >= 2 else None

        if geometry_type == "MultiLineString" and isinstance(coordinates, list):
            lines = []
            for part in coordinates:
                line = [self.project_to_screen(p) for p in _flatten_positions(part)]
                if len(line) >= 2:
                    lines.append(line)
            return MultiLineString(lines) if lines else None

        points = [self.project_to_screen(p) for p in _flatten_positions(coordinates)]
        if not points:
            return None
        return MultiPoint(points).envelope
