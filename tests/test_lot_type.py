"""Tests for lot type priority and confidence rules."""

from __future__ import annotations

from dataclasses import replace

import pytest

from parcel_edges.classification.lot_type import (
    ClassificationOutcome,
    determine_lot_type,
    resolve_lot_type,
)
from parcel_edges.geometry.edges import extract_edges
from parcel_edges.models import Confidence, EdgeType, LotType, RoadKind

from conftest import rectangle_ring


@pytest.fixture()
def lane_edges():
    edges = extract_edges(rectangle_ring())
    edges[0] = replace(edges[0], edge_type=EdgeType.FRONTAGE, is_road_adjacent=True, road_kind=RoadKind.STREET)
    edges[2] = replace(edges[2], edge_type=EdgeType.REAR_LANE, is_road_adjacent=True, road_kind=RoadKind.LANE)
    return edges


class TestDetermineLotType:

    def test_flankage_always_means_corner(self, lane_edges) -> None:
        for double_fronting in (False, True):
            lot_type, _ = determine_lot_type(True, double_fronting, lane_edges[2])
            assert lot_type == LotType.CORNER

    def test_double_fronting_beats_lane(self, lane_edges) -> None:
        lot_type, _ = determine_lot_type(False, True, lane_edges[2])
        assert lot_type == LotType.DOUBLE_FRONTING

    def test_lane_on_opposite(self, lane_edges) -> None:
        lot_type, _ = determine_lot_type(False, False, lane_edges[2])
        assert lot_type == LotType.STANDARD_WITH_LANE

    def test_no_opposite_edge(self) -> None:
        lot_type, _ = determine_lot_type(False, False, None)
        assert lot_type == LotType.STANDARD_WITHOUT_LANE


class TestResolveLotType:

    def test_strict_flankage_with_lane_is_corner(self, lane_edges) -> None:
        outcome = ClassificationOutcome(
            edges=lane_edges,
            frontage_index=0,
            opposite_index=2,
            frontage_matched_by_primary_street=True,
            has_candidate_street_edges=True,
            flankage_count=1,
        )
        assert resolve_lot_type(outcome)[0] == LotType.CORNER
        assert resolve_lot_type(outcome)[2] == Confidence.HIGH

    def test_relaxed_flankage_with_lane_is_distrusted(self, lane_edges) -> None:
        outcome = ClassificationOutcome(
            edges=lane_edges,
            frontage_index=0,
            opposite_index=2,
            frontage_matched_by_primary_street=True,
            has_candidate_street_edges=True,
            flankage_count=2,
            used_relaxed_flankage=True,
        )
        assert not outcome.has_reliable_flankage
        lot_type, _, confidence = resolve_lot_type(outcome)
        assert lot_type == LotType.STANDARD_WITH_LANE
        assert confidence == Confidence.MEDIUM

    def test_double_fronting_without_name_match_is_medium(self, lane_edges) -> None:
        outcome = ClassificationOutcome(
            edges=lane_edges,
            frontage_index=0,
            opposite_index=2,
            is_double_fronting=True,
        )
        lot_type, _, confidence = resolve_lot_type(outcome)
        assert lot_type == LotType.DOUBLE_FRONTING
        assert confidence == Confidence.MEDIUM

    def test_relaxed_fallback_does_not_raise_low_confidence(self, lane_edges) -> None:
        outcome = ClassificationOutcome(
            edges=lane_edges,
            frontage_index=0,
            opposite_index=2,
            used_relaxed_lane=True,
        )
        assert resolve_lot_type(outcome)[2] == Confidence.LOW

    def test_empty_outcome(self) -> None:
        lot_type, reason, confidence = resolve_lot_type(ClassificationOutcome())
        assert lot_type == LotType.STANDARD_WITHOUT_LANE
        assert reason == "Frontage present and opposite side is not adjacent to a lane."
        assert confidence == Confidence.LOW
