"""
Parcel edge classification

Assigns frontage, flankage, rear, rear lane and side roles to parcel
boundary edges from nearby street and lane centerlines, infers the lot
type, and indexes parcels for viewport queries.
"""

from .models import (
    Confidence,
    Edge,
    EdgeType,
    LotType,
    Parcel,
    ParcelAnalysis,
    RoadKind,
)
from .classification import ParcelEdgeClassifier, analyze_parcel
from .roads import GeoJSONLineProvider, LineProvider, RenderedFeature
from .viewport import Bounds, build_viewport_index, query_parcels_in_bounds

__all__ = [
    "Confidence",
    "Edge",
    "EdgeType",
    "LotType",
    "Parcel",
    "ParcelAnalysis",
    "RoadKind",
    "ParcelEdgeClassifier",
    "analyze_parcel",
    "GeoJSONLineProvider",
    "LineProvider",
    "RenderedFeature",
    "Bounds",
    "build_viewport_index",
    "query_parcels_in_bounds",
]
