"""
Viewport spatial index

Buckets parcels into a uniform lon/lat grid so only parcels near the
current viewport are offered for rendering
"""

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np
from loguru import logger

from ..config import get_config
from ..models import Parcel, Position

CellKey = Tuple[int, int]


@dataclass(frozen=True)
class Bounds:
    """Geographic bounding box in degrees"""
    west: float
    south: float
    east: float
    north: float

    @property
    def center(self) -> Position:
        return ((self.west + self.east) / 2, (self.south + self.north) / 2)

    def padded(self, ratio: float) -> "Bounds":
        lon_span = max(0.0, self.east - self.west)
        lat_span = max(0.0, self.north - self.south)
        return Bounds(
            west=self.west - lon_span * ratio,
            south=self.south - lat_span * ratio,
            east=self.east + lon_span * ratio,
            north=self.north + lat_span * ratio,
        )

    def contains(self, lon: float, lat: float) -> bool:
        return self.west <= lon <= self.east and self.south <= lat <= self.north


@dataclass(frozen=True)
class ParcelViewportIndex:
    """
    Immutable grid of parcels keyed by cell coordinates

    Rebuild with build_viewport_index whenever the parcel set changes.
    """
    cell_size_deg: float
    cells: Mapping[CellKey, Tuple[Parcel, ...]]

    @property
    def parcel_count(self) -> int:
        return sum(len(bucket) for bucket in self.cells.values())


def cell_index(value: float, cell_size_deg: float) -> int:
    return math.floor(value / cell_size_deg)


def build_viewport_index(
    parcels: Iterable[Parcel],
    cell_size_deg: Optional[float] = None
) -> ParcelViewportIndex:
    """Bucket parcels by their reference point, skipping non-finite points"""
    cell_size_deg = cell_size_deg or get_config().viewport.cell_size_deg

    buckets: Dict[CellKey, List[Parcel]] = {}
    skipped = 0
    for parcel in parcels:
        if not math.isfinite(parcel.lon) or not math.isfinite(parcel.lat):
            skipped += 1
            continue
        key = (cell_index(parcel.lon, cell_size_deg), cell_index(parcel.lat, cell_size_deg))
        buckets.setdefault(key, []).append(parcel)

    if skipped:
        logger.debug(f"Viewport index skipped {skipped} parcels with non-finite reference points")

    cells = MappingProxyType({key: tuple(bucket) for key, bucket in buckets.items()})
    return ParcelViewportIndex(cell_size_deg=cell_size_deg, cells=cells)


def query_parcels_in_bounds(
    index: ParcelViewportIndex,
    bounds: Bounds,
    padding_ratio: Optional[float] = None,
    max_features: Optional[int] = None,
    center: Optional[Position] = None
) -> List[Parcel]:
    """
    Parcels whose reference point lies inside the padded bounds

    When more than max_features match, keeps the ones nearest to center
    (or the padded bounds' center), nearest first.
    """
    if padding_ratio is None:
        padding_ratio = get_config().viewport.padding_ratio
    padded = bounds.padded(padding_ratio)
    size = index.cell_size_deg

    selected = []
    for x in range(cell_index(padded.west, size), cell_index(padded.east, size) + 1):
        for y in range(cell_index(padded.south, size), cell_index(padded.north, size) + 1):
            for parcel in index.cells.get((x, y), ()):
                if padded.contains(parcel.lon, parcel.lat):
                    selected.append(parcel)

    if max_features is None or len(selected) <= max_features:
        return selected

    ref_lon, ref_lat = center if center is not None else padded.center
    points = np.array([(p.lon, p.lat) for p in selected], dtype=float)
    distance_sq = (points[:, 0] - ref_lon) ** 2 + (points[:, 1] - ref_lat) ** 2
    order = np.argsort(distance_sq, kind="stable")[:max(0, max_features)]

    logger.debug(f"Viewport query capped {len(selected)} parcels to {max_features}")
    return [selected[i] for i in order]


def max_parcels_for_zoom(zoom: float) -> int:
    """Render cap that grows as the map zooms in"""
    if zoom < 11:
        return 2800
    if zoom < 12:
        return 5000
    if zoom < 13:
        return 8000
    if zoom < 14:
        return 12000
    return 22000


def render_parcels(
    index: ParcelViewportIndex,
    bounds: Bounds,
    zoom: float,
    center: Optional[Position] = None
) -> List[Parcel]:
    """Parcels to render for a viewport, capped by zoom level"""
    return query_parcels_in_bounds(
        index,
        bounds,
        padding_ratio=get_config().viewport.render_padding_ratio,
        max_features=max_parcels_for_zoom(zoom),
        center=center,
    )
