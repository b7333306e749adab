"""
Road candidate scoring

Measures each candidate against an edge by proximity and alignment
"""

import math
from typing import List, Optional

from ..config import ClassifierThresholds, get_config
from ..geometry.utils import bearing_degrees, orientation_diff_deg, point_to_segment_distance_meters
from ..models import Edge, EvaluatedRoadCandidate, RoadCandidate, RoadKind


def evaluate_candidate(
    edge: Edge,
    candidate: RoadCandidate,
    thresholds: Optional[ClassifierThresholds] = None
) -> Optional[EvaluatedRoadCandidate]:
    """
    Score a candidate against an edge

    Every segment of every candidate line is measured from the edge
    midpoint; the segment with the lowest distance + weighted orientation
    score represents the candidate. Returns None when the candidate has no
    segments.
    """
    thresholds = thresholds or get_config().thresholds
    weight = thresholds.orientation_weight
    edge_bearing = bearing_degrees(edge.start, edge.end)

    best_distance = math.inf
    best_orientation = math.inf
    found_segment = False

    for line in candidate.lines:
        for seg_start, seg_end in zip(line, line[1:]):
            distance = point_to_segment_distance_meters(edge.midpoint, seg_start, seg_end)
            orientation = orientation_diff_deg(edge_bearing, bearing_degrees(seg_start, seg_end))
            score = distance + orientation * weight

            if score < best_distance + best_orientation * weight:
                best_distance = distance
                best_orientation = orientation
            found_segment = True

    if not found_segment:
        return None

    if candidate.kind == RoadKind.LANE:
        distance_limit = thresholds.lane_distance_m
        orientation_limit = thresholds.lane_orientation_deg
    else:
        distance_limit = thresholds.street_distance_m
        orientation_limit = thresholds.street_orientation_deg

    return EvaluatedRoadCandidate(
        candidate=candidate,
        distance_m=best_distance,
        orientation_diff_deg=best_orientation,
        score=best_distance + best_orientation * weight,
        is_adjacent=best_distance <= distance_limit and best_orientation <= orientation_limit,
    )


def rank_candidates(
    edge: Edge,
    candidates: List[RoadCandidate],
    thresholds: Optional[ClassifierThresholds] = None
) -> List[EvaluatedRoadCandidate]:
    """Evaluated candidates sorted by score, then raw distance"""
    evaluated = []
    for candidate in candidates:
        match = evaluate_candidate(edge, candidate, thresholds)
        if match is not None:
            evaluated.append(match)

    evaluated.sort(key=lambda m: (m.score, m.distance_m))
    return evaluated
