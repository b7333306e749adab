"""
Parcel analysis data models

Data classes for parcels, classified edges, road candidates and the
emitted analysis result
"""

from typing import List, Dict, Any, Optional, Tuple
from dataclasses import dataclass, field
from enum import Enum


Position = Tuple[float, float]  # (lon, lat)


class EdgeType(Enum):
    """Parcel edge roles"""
    FRONTAGE = "Frontage"
    FLANKAGE = "Flankage"
    REAR_LANE = "Rear Lane"
    REAR = "Rear"
    SIDE = "Side"


class RoadKind(Enum):
    """Kind of road a candidate represents"""
    STREET = "street"
    LANE = "lane"


class LotType(Enum):
    """Lot types in assignment priority order"""
    CORNER = "Corner Lot"
    DOUBLE_FRONTING = "Double Fronting"
    STANDARD_WITH_LANE = "Standard with Lane"
    STANDARD_WITHOUT_LANE = "Standard without Lane"


class Confidence(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class Parcel:
    """A land parcel with a single closed ring and address attributes"""
    id: str
    ring: List[Position]  # Closed ring, first == last
    full_address: str
    street_name: str
    lon: float  # Reference point
    lat: float
    site_id: str = ""
    tax_coord: str = ""
    civic_number: str = ""


@dataclass(frozen=True)
class Edge:
    """
    A boundary edge of a parcel ring

    Edges are immutable; classification passes return annotated copies.
    """
    index: int
    start: Position
    end: Position
    midpoint: Position
    length_m: float
    edge_type: EdgeType = EdgeType.SIDE
    road_name: str = ""
    road_class: str = ""
    road_kind: Optional[RoadKind] = None
    road_distance_m: Optional[float] = None
    orientation_diff_deg: Optional[float] = None
    is_road_adjacent: bool = False
    debug: str = "No road candidate found."

    @property
    def label(self) -> str:
        return f"{self.index + 1} {self.edge_type.value}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "start": list(self.start),
            "end": list(self.end),
            "midpoint": list(self.midpoint),
            "length_m": self.length_m,
            "type": self.edge_type.value,
            "road_name": self.road_name,
            "road_class": self.road_class,
            "road_kind": self.road_kind.value if self.road_kind else None,
            "road_distance_m": self.road_distance_m,
            "orientation_diff_deg": self.orientation_diff_deg,
            "is_road_adjacent": self.is_road_adjacent,
            "debug": self.debug,
        }


@dataclass(frozen=True)
class RoadCandidate:
    """A named road or lane line feature found near an edge"""
    name: str
    kind: RoadKind
    class_name: str
    source_layer: str
    lines: Tuple[Tuple[Position, ...], ...]

    def dedup_key(self) -> Tuple[str, str, str, str, int]:
        return (
            self.name.lower(),
            self.class_name.lower(),
            self.kind.value,
            self.source_layer.lower(),
            len(self.lines),
        )


@dataclass(frozen=True)
class EvaluatedRoadCandidate:
    """A road candidate measured against one edge"""
    candidate: RoadCandidate
    distance_m: float
    orientation_diff_deg: float
    score: float
    is_adjacent: bool

    @property
    def name(self) -> str:
        return self.candidate.name

    @property
    def kind(self) -> RoadKind:
        return self.candidate.kind

    @property
    def class_name(self) -> str:
        return self.candidate.class_name


@dataclass
class ParcelAnalysis:
    """Result of classifying one parcel"""
    area_m2: float
    primary_street: str
    lot_type: LotType
    reason: str
    confidence: Confidence
    edges: List[Edge] = field(default_factory=list)

    def edges_of_type(self, edge_type: EdgeType) -> List[Edge]:
        return [edge for edge in self.edges if edge.edge_type == edge_type]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "area_m2": self.area_m2,
            "primary_street": self.primary_street,
            "lot_type": self.lot_type.value,
            "reason": self.reason,
            "confidence": self.confidence.value,
            "edges": [edge.to_dict() for edge in self.edges],
        }
