"""
Road candidate lookup

Queries the provider around an edge, keeps road-like line features and
classifies each one as a street or a lane
"""

import math
import re
from typing import List, Dict, Any, Optional, Tuple

from loguru import logger

from .provider import LineProvider, PixelWindow, RenderedFeature
from ..config import get_config
from ..geometry.utils import meters_per_pixel
from ..models import Edge, Position, RoadCandidate, RoadKind
from ..street_names import normalize_street_name

NAME_KEYS = ["name", "name_en", "streetname", "ref"]
CLASS_KEYS = ["class", "type", "road_class", "kind"]

ROAD_LIKE = re.compile(
    r"(road|street|motorway|residential|service|highway|primary|secondary|tertiary"
    r"|trunk|avenue|boulevard|lane|alley)"
)
BIKE_OR_PEDESTRIAN = re.compile(
    r"(cycleway|bike[\s_-]?lane|bikeway|greenway|shared[\s_-]?use|multi[\s_-]?use"
    r"|footway|sidewalk|pedestrian|crossing|steps|\bpath\b)"
)
EXPLICIT_LANE_NAME = re.compile(r"\b(lane|alley|alleyway)\b")
EXPLICIT_STREET_NAME = re.compile(
    r"\b(street|avenue|road|drive|boulevard|highway|parkway|way|place|court"
    r"|crescent|trail|terrace|connector)\b"
)
LANE_LIKE_CLASS = re.compile(r"(lane|alley|driveway|access)")
SERVICE_CLASS = re.compile(r"\bservice\b")

LINE_TYPES = ("LineString", "MultiLineString")


def read_string_property(properties: Dict[str, Any], keys: List[str]) -> str:
    """First non-blank string value among keys"""
    for key in keys:
        value = properties.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _to_position(value: Any) -> Optional[Position]:
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        return None
    try:
        lon = float(value[0])
        lat = float(value[1])
    except (TypeError, ValueError):
        return None
    if not math.isfinite(lon) or not math.isfinite(lat):
        return None
    return (lon, lat)


def _normalize_line(raw_line: Any) -> Tuple[Position, ...]:
    if not isinstance(raw_line, (list, tuple)):
        return ()
    positions = (_to_position(c) for c in raw_line)
    return tuple(p for p in positions if p is not None)


def extract_lines(geometry: Optional[Dict[str, Any]]) -> Tuple[Tuple[Position, ...], ...]:
    """Usable polylines (>= 2 valid points) from a line geometry"""
    if not isinstance(geometry, dict):
        return ()

    geometry_type = geometry.get("type")
    coordinates = geometry.get("coordinates")

    if geometry_type == "LineString":
        line = _normalize_line(coordinates)
        return (line,) if len(line) >= 2 else ()

    if geometry_type == "MultiLineString":
        if not isinstance(coordinates, (list, tuple)):
            return ()
        lines = (_normalize_line(part) for part in coordinates)
        return tuple(line for line in lines if len(line) >= 2)

    return ()


def is_bike_or_pedestrian_way(name: str, class_name: str, source_layer: str) -> bool:
    joined = f"{name} {class_name} {source_layer}".lower()
    return BIKE_OR_PEDESTRIAN.search(joined) is not None


def suffix_road_kind(name: str) -> Optional[RoadKind]:
    """Kind implied by the street-type suffix of a name, if any"""
    normalized = normalize_street_name(name)
    if not normalized:
        return None
    if normalized.endswith(" lane"):
        return RoadKind.LANE
    if normalized.endswith(" street"):
        return RoadKind.STREET
    return None


def classify_road_kind(name: str, class_name: str, source_layer: str) -> RoadKind:
    """
    Decide whether a road feature is a street or a lane

    The name suffix wins. Otherwise lane-ish names or classes make a lane,
    and "service" roads are lanes unless the name carries a street type.
    """
    suffix_kind = suffix_road_kind(name)
    if suffix_kind is not None:
        return suffix_kind

    normalized_name = normalize_street_name(name)
    class_joined = f"{class_name} {source_layer}".lower()

    explicit_lane_name = EXPLICIT_LANE_NAME.search(normalized_name) is not None
    explicit_street_name = EXPLICIT_STREET_NAME.search(normalized_name) is not None
    lane_like_class = LANE_LIKE_CLASS.search(class_joined) is not None
    service_class = SERVICE_CLASS.search(class_joined) is not None

    if explicit_lane_name or lane_like_class or (service_class and not explicit_street_name):
        return RoadKind.LANE
    return RoadKind.STREET


def to_road_candidate(feature: RenderedFeature) -> Optional[RoadCandidate]:
    """Parse a provider feature, returning None for anything not road-like"""
    geometry = feature.geometry
    if not isinstance(geometry, dict) or geometry.get("type") not in LINE_TYPES:
        return None

    properties = feature.properties or {}
    name = read_string_property(properties, NAME_KEYS)
    class_name = read_string_property(properties, CLASS_KEYS)
    source_layer = feature.source_layer or ""

    joined = f"{name} {class_name} {source_layer}".lower()
    if not ROAD_LIKE.search(joined):
        return None
    if is_bike_or_pedestrian_way(name, class_name, source_layer):
        return None

    lines = extract_lines(geometry)
    if not lines:
        return None

    return RoadCandidate(
        name=name,
        kind=classify_road_kind(name, class_name, source_layer),
        class_name=class_name,
        source_layer=source_layer,
        lines=lines,
    )


def unique_candidates(candidates: List[RoadCandidate]) -> List[RoadCandidate]:
    """Drop repeats of the same logical road from adjacent tiles or layers"""
    seen = set()
    output = []
    for candidate in candidates:
        key = candidate.dedup_key()
        if key in seen:
            continue
        seen.add(key)
        output.append(candidate)
    return output


class RoadCandidateFinder:
    """Finds road and lane candidates near parcel edges"""

    def __init__(self, provider: LineProvider):
        self.provider = provider
        self.config = get_config()

    def query_padding_px(self, edge: Edge) -> int:
        """Pixel padding equivalent to the edge query buffer, clamped"""
        query = self.config.query
        mpp = meters_per_pixel(edge.midpoint[1], self.provider.current_zoom())
        if not math.isfinite(mpp) or mpp <= 0:
            return query.min_padding_px

        target = math.ceil(query.edge_buffer_m / mpp)
        return max(query.min_padding_px, min(query.max_padding_px, target))

    def query_window(self, edge: Edge) -> PixelWindow:
        start_x, start_y = self.provider.project_to_screen(edge.start)
        end_x, end_y = self.provider.project_to_screen(edge.end)
        padding = self.query_padding_px(edge)

        return (
            (min(start_x, end_x) - padding, min(start_y, end_y) - padding),
            (max(start_x, end_x) + padding, max(start_y, end_y) + padding),
        )

    def find(self, edge: Edge) -> List[RoadCandidate]:
        """Road candidates near an edge, deduplicated, in provider order"""
        features = self.provider.query_lines_near(self.query_window(edge))

        candidates = []
        for feature in features:
            candidate = to_road_candidate(feature)
            if candidate is not None:
                candidates.append(candidate)

        unique = unique_candidates(candidates)
        logger.debug(
            f"Edge {edge.index}: {len(features)} features, "
            f"{len(candidates)} road-like, {len(unique)} unique"
        )
        return unique
