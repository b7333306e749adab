"""
Parcel edge classifier

Classifies parcel edges into frontage, flankage, rear, rear lane and side
using nearby street and lane geometry, then resolves the lot type
"""

from dataclasses import replace
from typing import List, Dict, Optional, Tuple

from loguru import logger

from .lot_type import ClassificationOutcome, resolve_lot_type
from .matching import CandidateMatcher, RelaxMode
from ..config import ClassifierThresholds, get_config
from ..geometry.edges import extract_edges
from ..geometry.utils import (
    bearing_degrees,
    distance_meters,
    orientation_diff_deg,
    point_to_segment_distance_meters,
    polygon_area_m2,
)
from ..models import (
    Edge,
    EdgeType,
    EvaluatedRoadCandidate,
    Parcel,
    ParcelAnalysis,
    RoadKind,
)
from ..roads.candidates import RoadCandidateFinder
from ..roads.provider import LineProvider
from ..roads.scoring import rank_candidates
from ..street_names import extract_primary_street, normalize_street_name

Rankings = Dict[int, List[EvaluatedRoadCandidate]]


def apply_match(edge: Edge, match: EvaluatedRoadCandidate) -> Edge:
    """Copy of an edge annotated with a road match"""
    name = match.name or "unnamed"
    if match.is_adjacent:
        debug = (
            f'Adjacent to {match.kind.value} "{name}" at {match.distance_m:.1f}m, '
            f"orientation diff {match.orientation_diff_deg:.1f}deg."
        )
    else:
        debug = f'Nearest road "{name}" at {match.distance_m:.1f}m (not adjacent threshold).'

    return replace(
        edge,
        road_name=match.name,
        road_class=match.class_name,
        road_distance_m=match.distance_m,
        orientation_diff_deg=match.orientation_diff_deg,
        is_road_adjacent=match.is_adjacent,
        road_kind=match.kind if match.is_adjacent else None,
        debug=debug,
    )


def stamp_edge(edge: Edge, edge_type: EdgeType, match: EvaluatedRoadCandidate, kind: RoadKind) -> Edge:
    """Assign a role from a match, forcing the edge to count as adjacent"""
    matched = apply_match(edge, match)
    return replace(matched, edge_type=edge_type, is_road_adjacent=True, road_kind=kind)


def _replace_at(edges: List[Edge], index: int, edge: Edge) -> List[Edge]:
    return [edge if e.index == index else e for e in edges]


class ParcelEdgeClassifier:
    """Classifies parcel edges against nearby road candidates"""

    def __init__(self, thresholds: Optional[ClassifierThresholds] = None):
        self.thresholds = thresholds or get_config().thresholds
        self.matcher = CandidateMatcher(self.thresholds)

    def analyze(
        self,
        parcel: Parcel,
        provider: Optional[LineProvider] = None,
        debug: bool = False
    ) -> ParcelAnalysis:
        """
        Classify a parcel's edges and derive its lot type

        Algorithm:
        1. Extract edges from the parcel ring
        2. With a provider, rank road candidates per edge and stamp each edge
           with its best match (default pass)
        3. Select the frontage edge (primary street name strict, relaxed,
           any street strict, relaxed, then longest edge)
        4. Find the edge opposite the frontage
        5. Mark the opposite edge as a second frontage when it faces a
           different street (double fronting)
        6. Mark flankage edges facing a different street (strict pass,
           relaxed pass only if strict finds nothing)
        7. Mark the opposite edge rear lane or rear
        8. Resolve lot type, reason and confidence

        Args:
            parcel: Parcel to classify (not modified)
            provider: Line-geometry provider; without one every edge stays
                unmatched and the frontage falls back to the longest edge
            debug: Log the per-edge trace at INFO level

        Returns:
            ParcelAnalysis owned by the caller
        """
        edges = extract_edges(parcel.ring)
        if not edges:
            logger.warning(f"Parcel {parcel.id}: ring has too few points for classification")

        primary_street = extract_primary_street(parcel.full_address, parcel.street_name)
        normalized_primary = normalize_street_name(primary_street)

        rankings: Rankings = {}
        if provider is not None:
            rankings = self.rank_edges(edges, provider)
            edges = self.default_pass(edges, rankings)

        outcome = self.classify_edges(edges, rankings, normalized_primary)
        lot_type, reason, confidence = resolve_lot_type(outcome)

        analysis = ParcelAnalysis(
            area_m2=polygon_area_m2(parcel.ring),
            primary_street=primary_street,
            lot_type=lot_type,
            reason=reason,
            confidence=confidence,
            edges=outcome.edges,
        )

        log = logger.info if debug else logger.debug
        log(f"=== PARCEL {parcel.id} ({parcel.full_address}) ===")
        for edge in analysis.edges:
            log(f"  {edge.label}: {edge.debug}")
        log(f"  Lot type: {lot_type.value} ({confidence.value}) - {reason}")

        return analysis

    def rank_edges(self, edges: List[Edge], provider: LineProvider) -> Rankings:
        """Ranked road candidates for every edge"""
        finder = RoadCandidateFinder(provider)
        return {
            edge.index: rank_candidates(edge, finder.find(edge), self.thresholds)
            for edge in edges
        }

    def default_pass(self, edges: List[Edge], rankings: Rankings) -> List[Edge]:
        """Stamp each edge with its best adjacent street, adjacent candidate or nearest road"""
        result = []
        for edge in edges:
            matches = rankings.get(edge.index, [])
            default_match = (
                self.matcher.first_adjacent_street(matches)
                or next((m for m in matches if m.is_adjacent), None)
                or (matches[0] if matches else None)
            )
            if default_match is None:
                result.append(replace(edge, debug="No road candidate found near edge centerline."))
            else:
                result.append(apply_match(edge, default_match))
        return result

    def classify_edges(
        self,
        edges: List[Edge],
        rankings: Rankings,
        normalized_primary: str
    ) -> ClassificationOutcome:
        """Run the frontage, opposite, double fronting, flankage and rear passes"""
        outcome = ClassificationOutcome(edges=list(edges))

        frontage, matched_by_primary, has_street_edges = self.select_frontage(
            edges, rankings, normalized_primary
        )
        outcome.frontage_matched_by_primary_street = matched_by_primary
        outcome.has_candidate_street_edges = has_street_edges
        if frontage is None:
            return outcome

        outcome.frontage_index = frontage.index
        outcome.edges = self.stamp_frontage(outcome.edges, frontage, rankings, normalized_primary)
        frontage = outcome.edges[frontage.index]

        outcome.opposite_index = self.find_opposite_edge_index(outcome.edges, frontage.index)
        frontage_street = normalize_street_name(frontage.road_name) or normalized_primary

        outcome.edges, outcome.is_double_fronting = self.double_fronting_pass(
            outcome.edges, rankings, outcome.opposite_index, frontage_street
        )

        outcome.edges, outcome.flankage_count, outcome.used_relaxed_flankage = self.flankage_pass(
            outcome.edges, rankings, frontage.index, outcome.opposite_index, frontage_street
        )

        if outcome.opposite_index >= 0 and not outcome.is_double_fronting:
            outcome.edges, outcome.used_relaxed_lane = self.rear_pass(
                outcome.edges, rankings, outcome.opposite_index
            )

        return outcome

    def select_frontage(
        self,
        edges: List[Edge],
        rankings: Rankings,
        normalized_primary: str
    ) -> Tuple[Optional[Edge], bool, bool]:
        """
        Pick the frontage edge

        Returns:
            Tuple of (frontage_edge, matched_by_primary_street,
            has_candidate_street_edges)
        """
        strict_street_edges = [
            e for e in edges if self.matcher.first_adjacent_street(rankings.get(e.index, [])) is not None
        ]
        relaxed_street_edges = [
            e for e in edges
            if self.matcher.first_adjacent_street(rankings.get(e.index, []), allow_relaxed=True) is not None
        ]
        street_edges = strict_street_edges or relaxed_street_edges

        frontage = None
        matched_by_primary = False
        if normalized_primary:
            frontage = self.select_nearest_edge(edges, rankings, normalized_primary, allow_relaxed=False)
            if frontage is None:
                frontage = self.select_nearest_edge(edges, rankings, normalized_primary, allow_relaxed=True)
            matched_by_primary = frontage is not None

        if frontage is None:
            frontage = self.select_nearest_edge(street_edges, rankings, allow_relaxed=False)
        if frontage is None:
            frontage = self.select_nearest_edge(street_edges, rankings, allow_relaxed=True)
        if frontage is None and edges:
            frontage = max(edges, key=lambda e: e.length_m)
            logger.debug(f"No street-adjacent edge; using longest edge {frontage.index} as frontage")

        return frontage, matched_by_primary, len(street_edges) > 0

    def select_nearest_edge(
        self,
        edges: List[Edge],
        rankings: Rankings,
        normalized_street: str = "",
        allow_relaxed: bool = False
    ) -> Optional[Edge]:
        """
        Edge with the best street candidate

        Candidates are compared by distance (beyond a tie band), then edge
        length (beyond a tie band), then orientation difference.
        """
        distance_tie = self.thresholds.selection_distance_tie_m
        length_tie = self.thresholds.selection_length_tie_m
        best_edge = None
        best_candidate = None

        for edge in edges:
            matches = rankings.get(edge.index, [])
            if normalized_street:
                candidate = self.matcher.first_adjacent_street_by_name(
                    matches, normalized_street, allow_relaxed, RelaxMode.FRONTAGE
                )
            else:
                candidate = self.matcher.first_adjacent_street(matches, allow_relaxed, RelaxMode.FRONTAGE)
            if candidate is None:
                continue

            if best_edge is None:
                best_edge, best_candidate = edge, candidate
                continue

            distance_delta = candidate.distance_m - best_candidate.distance_m
            if distance_delta < -distance_tie:
                best_edge, best_candidate = edge, candidate
                continue
            if distance_delta > distance_tie:
                continue

            length_delta = edge.length_m - best_edge.length_m
            if length_delta > length_tie:
                best_edge, best_candidate = edge, candidate
                continue
            if length_delta < -length_tie:
                continue

            if candidate.orientation_diff_deg < best_candidate.orientation_diff_deg:
                best_edge, best_candidate = edge, candidate

        return best_edge

    def stamp_frontage(
        self,
        edges: List[Edge],
        frontage: Edge,
        rankings: Rankings,
        normalized_primary: str
    ) -> List[Edge]:
        """Mark the frontage and re-match it against its best street"""
        matches = rankings.get(frontage.index, [])
        street_match = (
            self.matcher.first_adjacent_street_by_name(matches, normalized_primary, True, RelaxMode.FRONTAGE)
            or self.matcher.first_adjacent_street(matches, True, RelaxMode.FRONTAGE)
        )
        if street_match is not None:
            stamped = stamp_edge(frontage, EdgeType.FRONTAGE, street_match, RoadKind.STREET)
        else:
            stamped = replace(frontage, edge_type=EdgeType.FRONTAGE)
        return _replace_at(edges, frontage.index, stamped)

    def find_opposite_edge_index(self, edges: List[Edge], frontage_index: int) -> int:
        """
        Index of the edge facing away from the frontage

        Prefers the most distant, roughly parallel edge: the score is the
        perpendicular distance to the frontage line plus a fraction of the
        midpoint distance. Falls back to the farthest midpoint.
        """
        if not 0 <= frontage_index < len(edges):
            return -1

        frontage = edges[frontage_index]
        frontage_bearing = bearing_degrees(frontage.start, frontage.end)
        weight = self.thresholds.opposite_midpoint_weight

        candidates = []
        for edge in edges:
            if edge.index == frontage_index:
                continue
            orientation = orientation_diff_deg(frontage_bearing, bearing_degrees(edge.start, edge.end))
            perpendicular = point_to_segment_distance_meters(edge.midpoint, frontage.start, frontage.end)
            midpoint_distance = distance_meters(frontage.midpoint, edge.midpoint)
            candidates.append(
                (edge.index, orientation, perpendicular, midpoint_distance, perpendicular + midpoint_distance * weight)
            )

        for limit in (self.thresholds.opposite_strict_orientation_deg, self.thresholds.opposite_relaxed_orientation_deg):
            oriented = [c for c in candidates if c[1] <= limit]
            if oriented:
                oriented.sort(key=lambda c: (-c[4], -c[2], -c[3]))
                return oriented[0][0]

        best_index = -1
        farthest = -1.0
        for index, _, _, midpoint_distance, _ in candidates:
            if midpoint_distance > farthest:
                farthest = midpoint_distance
                best_index = index
        return best_index

    def double_fronting_pass(
        self,
        edges: List[Edge],
        rankings: Rankings,
        opposite_index: int,
        frontage_street: str
    ) -> Tuple[List[Edge], bool]:
        """Second frontage when the opposite edge faces a different street"""
        if opposite_index < 0:
            return edges, False

        candidate = self.matcher.first_adjacent_street(rankings.get(opposite_index, []), True, RelaxMode.FRONTAGE)
        if candidate is None:
            return edges, False

        opposite_street = normalize_street_name(candidate.name)
        if not opposite_street or not frontage_street or opposite_street == frontage_street:
            return edges, False

        logger.debug(f"Double fronting: opposite edge {opposite_index} faces '{candidate.name}'")
        stamped = stamp_edge(edges[opposite_index], EdgeType.FRONTAGE, candidate, RoadKind.STREET)
        return _replace_at(edges, opposite_index, stamped), True

    def flankage_pass(
        self,
        edges: List[Edge],
        rankings: Rankings,
        frontage_index: int,
        opposite_index: int,
        frontage_street: str
    ) -> Tuple[List[Edge], int, bool]:
        """
        Mark edges facing a street other than the frontage street

        Returns:
            Tuple of (edges, flankage_count, used_relaxed_fallback)
        """
        def apply(allow_relaxed: bool) -> Tuple[List[Edge], int]:
            result = []
            count = 0
            for edge in edges:
                if edge.index in (frontage_index, opposite_index):
                    result.append(edge)
                    continue
                candidate = self.matcher.first_different_street(
                    rankings.get(edge.index, []), frontage_street, allow_relaxed
                )
                if candidate is None:
                    result.append(edge)
                    continue
                result.append(stamp_edge(edge, EdgeType.FLANKAGE, candidate, RoadKind.STREET))
                count += 1
            return result, count

        flanked, count = apply(False)
        if count > 0:
            return flanked, count, False

        flanked, count = apply(True)
        if count > 0:
            logger.debug(f"Flankage found only with relaxed thresholds ({count} edges)")
            return flanked, count, True
        return edges, 0, False

    def rear_pass(
        self,
        edges: List[Edge],
        rankings: Rankings,
        opposite_index: int
    ) -> Tuple[List[Edge], bool]:
        """
        Mark the opposite edge rear lane or rear

        Returns:
            Tuple of (edges, used_relaxed_lane)
        """
        opposite = edges[opposite_index]
        lane = self.matcher.first_adjacent_lane(rankings.get(opposite_index, []), allow_relaxed=True)
        if lane is None:
            return _replace_at(edges, opposite_index, replace(opposite, edge_type=EdgeType.REAR)), False

        stamped = stamp_edge(opposite, EdgeType.REAR_LANE, lane, RoadKind.LANE)
        used_relaxed = not lane.is_adjacent
        if used_relaxed:
            stamped = replace(stamped, debug=f"{stamped.debug} (relaxed lane fallback)")
        return _replace_at(edges, opposite_index, stamped), used_relaxed


def analyze_parcel(
    parcel: Parcel,
    provider: Optional[LineProvider] = None,
    debug: bool = False
) -> ParcelAnalysis:
    """Classify a parcel with the default thresholds"""
    return ParcelEdgeClassifier().analyze(parcel, provider, debug=debug)
