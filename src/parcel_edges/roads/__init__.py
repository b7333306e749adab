"""
Road lookup: provider interface, candidate parsing and scoring
"""

from .provider import LineProvider, RenderedFeature, GeoJSONLineProvider
from .candidates import RoadCandidateFinder
from .scoring import evaluate_candidate, rank_candidates

__all__ = [
    "LineProvider",
    "RenderedFeature",
    "GeoJSONLineProvider",
    "RoadCandidateFinder",
    "evaluate_candidate",
    "rank_candidates",
]
