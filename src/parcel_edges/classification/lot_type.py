"""
Lot type resolution

Turns a classified edge set into a lot type, a justification and a
confidence level
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..models import Confidence, Edge, LotType, RoadKind

CORNER_REASON = "Has frontage and at least one flankage edge on a different street."
DOUBLE_FRONTING_REASON = "Frontage and opposite edge both face different streets (not lanes)."
WITH_LANE_REASON = "Frontage present and opposite edge is adjacent to a lane/alley."
WITHOUT_LANE_REASON = "Frontage present and opposite side is not adjacent to a lane."

RELAXED_FLANKAGE_NOTE = "Secondary street detected using relaxed flankage fallback."
IGNORED_FLANKAGE_NOTE = "Weak flankage evidence was ignored because a rear lane was detected."
RELAXED_LANE_NOTE = "Lane detected using relaxed rear-lane fallback."


@dataclass
class ClassificationOutcome:
    """Everything the classifier passes decided about one parcel"""
    edges: List[Edge] = field(default_factory=list)
    frontage_index: int = -1
    opposite_index: int = -1
    frontage_matched_by_primary_street: bool = False
    has_candidate_street_edges: bool = False
    is_double_fronting: bool = False
    flankage_count: int = 0
    used_relaxed_flankage: bool = False
    used_relaxed_lane: bool = False

    @property
    def opposite_edge(self) -> Optional[Edge]:
        if 0 <= self.opposite_index < len(self.edges):
            return self.edges[self.opposite_index]
        return None

    @property
    def lane_detected_on_opposite(self) -> bool:
        opposite = self.opposite_edge
        return opposite is not None and opposite.is_road_adjacent and opposite.road_kind == RoadKind.LANE

    @property
    def has_reliable_flankage(self) -> bool:
        """Relaxed-only flankage is distrusted when a rear lane was found"""
        return self.flankage_count > 0 and not (
            self.used_relaxed_flankage and self.lane_detected_on_opposite
        )


def determine_lot_type(
    has_flankage: bool,
    is_double_fronting: bool,
    opposite_edge: Optional[Edge]
) -> Tuple[LotType, str]:
    """Priority order: Corner > Double Fronting > Standard with Lane > Standard without Lane"""
    if has_flankage:
        return LotType.CORNER, CORNER_REASON
    if is_double_fronting:
        return LotType.DOUBLE_FRONTING, DOUBLE_FRONTING_REASON
    if opposite_edge is not None and opposite_edge.is_road_adjacent and opposite_edge.road_kind == RoadKind.LANE:
        return LotType.STANDARD_WITH_LANE, WITH_LANE_REASON
    return LotType.STANDARD_WITHOUT_LANE, WITHOUT_LANE_REASON


def resolve_lot_type(outcome: ClassificationOutcome) -> Tuple[LotType, str, Confidence]:
    """Lot type, justification text and confidence for a classification"""
    lot_type, reason = determine_lot_type(
        outcome.has_reliable_flankage,
        outcome.is_double_fronting,
        outcome.opposite_edge,
    )

    if lot_type == LotType.CORNER and outcome.used_relaxed_flankage:
        reason = f"{reason} {RELAXED_FLANKAGE_NOTE}"
    if lot_type == LotType.STANDARD_WITH_LANE and outcome.used_relaxed_flankage and outcome.flankage_count > 0:
        reason = f"{reason} {IGNORED_FLANKAGE_NOTE}"
    if lot_type == LotType.STANDARD_WITH_LANE and outcome.used_relaxed_lane:
        reason = f"{reason} {RELAXED_LANE_NOTE}"

    confidence = Confidence.HIGH
    if not outcome.frontage_matched_by_primary_street:
        confidence = Confidence.MEDIUM if outcome.has_candidate_street_edges else Confidence.LOW
    if lot_type == LotType.DOUBLE_FRONTING and not outcome.frontage_matched_by_primary_street:
        confidence = Confidence.MEDIUM
    if outcome.used_relaxed_flankage or outcome.used_relaxed_lane:
        confidence = Confidence.LOW if confidence == Confidence.LOW else Confidence.MEDIUM

    return lot_type, reason, confidence
