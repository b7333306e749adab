"""
Candidate selection helpers

Each helper walks a ranked candidate list (best first) and returns the
first candidate that satisfies a strict or, when allowed, relaxed test.
"""

from enum import Enum
from typing import List, Optional

from ..config import ClassifierThresholds, get_config
from ..models import EvaluatedRoadCandidate, RoadKind
from ..street_names import normalize_street_name


class RelaxMode(Enum):
    """Which relaxed street limits apply"""
    FRONTAGE = "frontage"
    FLANKAGE = "flankage"


class CandidateMatcher:
    """Applies strict and relaxed adjacency tests to ranked candidates"""

    def __init__(self, thresholds: Optional[ClassifierThresholds] = None):
        self.thresholds = thresholds or get_config().thresholds

    def is_relaxed_street(self, candidate: EvaluatedRoadCandidate, mode: RelaxMode) -> bool:
        if candidate.kind != RoadKind.STREET:
            return False

        t = self.thresholds
        if mode == RelaxMode.FRONTAGE:
            return (
                candidate.distance_m <= t.relaxed_frontage_distance_m
                and candidate.orientation_diff_deg <= t.relaxed_frontage_orientation_deg
            )
        return (
            candidate.distance_m <= t.relaxed_flankage_distance_m
            and candidate.orientation_diff_deg <= t.relaxed_flankage_orientation_deg
        )

    def is_relaxed_lane(self, candidate: EvaluatedRoadCandidate) -> bool:
        if candidate.kind != RoadKind.LANE:
            return False
        return (
            candidate.distance_m <= self.thresholds.relaxed_lane_distance_m
            and candidate.orientation_diff_deg <= self.thresholds.relaxed_lane_orientation_deg
        )

    def first_adjacent_street(
        self,
        candidates: List[EvaluatedRoadCandidate],
        allow_relaxed: bool = False,
        mode: RelaxMode = RelaxMode.FRONTAGE
    ) -> Optional[EvaluatedRoadCandidate]:
        for candidate in candidates:
            if candidate.kind != RoadKind.STREET:
                continue
            if candidate.is_adjacent:
                return candidate
            if allow_relaxed and self.is_relaxed_street(candidate, mode):
                return candidate
        return None

    def first_adjacent_lane(
        self,
        candidates: List[EvaluatedRoadCandidate],
        allow_relaxed: bool = False
    ) -> Optional[EvaluatedRoadCandidate]:
        for candidate in candidates:
            if candidate.kind != RoadKind.LANE:
                continue
            if candidate.is_adjacent:
                return candidate
            if allow_relaxed and self.is_relaxed_lane(candidate):
                return candidate
        return None

    def first_adjacent_street_by_name(
        self,
        candidates: List[EvaluatedRoadCandidate],
        normalized_street: str,
        allow_relaxed: bool = False,
        mode: RelaxMode = RelaxMode.FRONTAGE
    ) -> Optional[EvaluatedRoadCandidate]:
        if not normalized_street:
            return None
        for candidate in candidates:
            if candidate.kind != RoadKind.STREET:
                continue
            if normalize_street_name(candidate.name) != normalized_street:
                continue
            if candidate.is_adjacent:
                return candidate
            if allow_relaxed and self.is_relaxed_street(candidate, mode):
                return candidate
        return None

    def first_different_street(
        self,
        candidates: List[EvaluatedRoadCandidate],
        normalized_base_street: str,
        allow_relaxed: bool = False
    ) -> Optional[EvaluatedRoadCandidate]:
        """First named street other than the base street (flankage test)"""
        for candidate in candidates:
            if candidate.kind != RoadKind.STREET:
                continue
            normalized = normalize_street_name(candidate.name)
            if not normalized:
                continue
            if normalized_base_street and normalized == normalized_base_street:
                continue
            if candidate.is_adjacent:
                return candidate
            if allow_relaxed and self.is_relaxed_street(candidate, RelaxMode.FLANKAGE):
                return candidate
        return None
