"""
Edge classification and lot type inference
"""

from .classifier import ParcelEdgeClassifier, analyze_parcel
from .lot_type import ClassificationOutcome, determine_lot_type, resolve_lot_type
from .matching import CandidateMatcher, RelaxMode

__all__ = [
    "ParcelEdgeClassifier",
    "analyze_parcel",
    "ClassificationOutcome",
    "determine_lot_type",
    "resolve_lot_type",
    "CandidateMatcher",
    "RelaxMode",
]
