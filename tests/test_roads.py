"""Tests for road candidate parsing, lookup and scoring."""

from __future__ import annotations

import pytest

from parcel_edges.geometry.edges import extract_edges
from parcel_edges.models import RoadCandidate, RoadKind
from parcel_edges.roads.candidates import (
    RoadCandidateFinder,
    classify_road_kind,
    to_road_candidate,
    unique_candidates,
)
from parcel_edges.roads.provider import GeoJSONLineProvider, RenderedFeature
from parcel_edges.roads.scoring import evaluate_candidate, rank_candidates

from conftest import StaticProvider, horizontal_road, offset, rectangle_ring


def feature(name="Main Street", road_class="street", layer="road", geometry=None) -> RenderedFeature:
    if geometry is None:
        geometry = {"type": "LineString", "coordinates": [[0.0, 0.0], [0.001, 0.0]]}
    return RenderedFeature(geometry=geometry, properties={"name": name, "class": road_class}, source_layer=layer)


class TestToRoadCandidate:

    def test_parses_named_street(self) -> None:
        candidate = to_road_candidate(feature())

        assert candidate is not None
        assert candidate.name == "Main Street"
        assert candidate.kind == RoadKind.STREET
        assert candidate.class_name == "street"
        assert candidate.source_layer == "road"
        assert candidate.lines == (((0.0, 0.0), (0.001, 0.0)),)

    def test_rejects_non_line_geometry(self) -> None:
        polygon = {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 0]]]}
        assert to_road_candidate(feature(geometry=polygon)) is None
        assert to_road_candidate(RenderedFeature(geometry=None, properties={"name": "Main Street"})) is None
        assert to_road_candidate(RenderedFeature(geometry={"coordinates": []}, properties={"name": "Main Street"})) is None

    def test_rejects_features_that_are_not_road_like(self) -> None:
        assert to_road_candidate(feature(name="Riley Park", road_class="park", layer="landuse")) is None

    @pytest.mark.parametrize(
        "name, road_class, layer",
        [
            ("Main Street", "cycleway", "road"),
            ("Seaside Greenway", "street", "road"),
            ("", "footway", "road"),
            ("", "path", "road"),
            ("Main Street", "street", "road-crossing"),
            ("", "pedestrian", "road"),
        ],
    )
    def test_rejects_bike_and_pedestrian_ways(self, name: str, road_class: str, layer: str) -> None:
        assert to_road_candidate(feature(name=name, road_class=road_class, layer=layer)) is None

    def test_drops_invalid_coordinates(self) -> None:
        geometry = {
            "type": "MultiLineString",
            "coordinates": [
                [[0.0, 0.0], ["bad", 1.0], [0.001, 0.0]],
                [[0.0, 0.0]],
                "not a line",
            ],
        }
        candidate = to_road_candidate(feature(geometry=geometry))

        assert candidate is not None
        assert candidate.lines == (((0.0, 0.0), (0.001, 0.0)),)

    def test_feature_without_usable_lines_is_dropped(self) -> None:
        geometry = {"type": "LineString", "coordinates": [[0.0, 0.0]]}
        assert to_road_candidate(feature(geometry=geometry)) is None

    def test_reads_fallback_property_keys(self) -> None:
        f = RenderedFeature(
            geometry={"type": "LineString", "coordinates": [[0, 0], [1, 0]]},
            properties={"name": "  ", "ref": "Hwy 99", "road_class": "trunk"},
        )
        candidate = to_road_candidate(f)

        assert candidate is not None
        assert candidate.name == "Hwy 99"
        assert candidate.class_name == "trunk"


class TestClassifyRoadKind:

    @pytest.mark.parametrize(
        "name, road_class, expected",
        [
            ("Rear Lane", "street", RoadKind.LANE),
            ("Oak St", "service", RoadKind.STREET),
            ("W 4th Ave", "street", RoadKind.STREET),
            ("", "service", RoadKind.LANE),
            ("Hastings Connector", "service", RoadKind.STREET),
            ("Smith Alley", "street", RoadKind.LANE),
            ("", "street", RoadKind.STREET),
            ("Kingsway", "primary", RoadKind.STREET),
            ("", "driveway", RoadKind.LANE),
            ("Granville Ln", "primary", RoadKind.LANE),
        ],
    )
    def test_kind(self, name: str, road_class: str, expected: RoadKind) -> None:
        assert classify_road_kind(name, road_class, "road") == expected


class TestUniqueCandidates:

    def test_collapses_tile_duplicates(self) -> None:
        a = to_road_candidate(feature())
        b = to_road_candidate(feature(name="MAIN STREET"))
        c = to_road_candidate(feature(layer="bridge"))

        unique = unique_candidates([a, b, c])

        assert unique == [a, c]


class TestRoadCandidateFinder:

    def test_query_padding_matches_buffer_distance(self) -> None:
        edge = extract_edges(rectangle_ring())[0]
        assert RoadCandidateFinder(StaticProvider([], zoom=18)).query_padding_px(edge) == 134

    def test_query_padding_is_clamped(self) -> None:
        edge = extract_edges(rectangle_ring())[0]
        assert RoadCandidateFinder(StaticProvider([], zoom=22)).query_padding_px(edge) == 220
        assert RoadCandidateFinder(StaticProvider([], zoom=10)).query_padding_px(edge) == 38

    def test_query_window_pads_edge_bounding_box(self) -> None:
        provider = StaticProvider([feature()], zoom=18)
        edge = extract_edges(rectangle_ring())[1]

        RoadCandidateFinder(provider).find(edge)

        (min_x, min_y), (max_x, max_y) = provider.windows[0]
        start = provider.project_to_screen(edge.start)
        end = provider.project_to_screen(edge.end)
        assert min_x == pytest.approx(min(start[0], end[0]) - 134)
        assert max_y == pytest.approx(max(start[1], end[1]) + 134)

    def test_find_filters_and_deduplicates(self) -> None:
        provider = StaticProvider([
            feature(),
            feature(),
            feature(name="", road_class="cycleway"),
            feature(name="Rear Lane", road_class="service"),
        ])
        edge = extract_edges(rectangle_ring())[0]

        found = RoadCandidateFinder(provider).find(edge)

        assert [(c.name, c.kind) for c in found] == [
            ("Main Street", RoadKind.STREET),
            ("Rear Lane", RoadKind.LANE),
        ]

    def test_geojson_provider_returns_only_nearby_lines(self) -> None:
        provider = GeoJSONLineProvider(
            [horizontal_road("Main Street", -10.0), horizontal_road("Far Street", 400.0)],
            zoom=18,
        )
        edge = extract_edges(rectangle_ring())[0]

        found = RoadCandidateFinder(provider).find(edge)

        assert [c.name for c in found] == ["Main Street"]


def candidate(name, kind, *lines) -> RoadCandidate:
    return RoadCandidate(
        name=name,
        kind=kind,
        class_name="street",
        source_layer="road",
        lines=tuple(tuple(offset(x, y) for x, y in line) for line in lines),
    )


class TestScoring:

    @pytest.fixture()
    def edge(self):
        return extract_edges(rectangle_ring())[0]

    def test_parallel_street_within_threshold_is_adjacent(self, edge) -> None:
        match = evaluate_candidate(edge, candidate("Main Street", RoadKind.STREET, [(-50, -10), (50, -10)]))

        assert match.distance_m == pytest.approx(10.0, abs=0.05)
        assert match.orientation_diff_deg == pytest.approx(0.0, abs=0.01)
        assert match.score == pytest.approx(match.distance_m + 0.45 * match.orientation_diff_deg)
        assert match.is_adjacent

    def test_thresholds_depend_on_kind(self, edge) -> None:
        line = [(-50, -25), (50, -25)]
        assert not evaluate_candidate(edge, candidate("Main Street", RoadKind.STREET, line)).is_adjacent
        assert evaluate_candidate(edge, candidate("Rear Lane", RoadKind.LANE, line)).is_adjacent

    def test_perpendicular_street_is_not_adjacent(self, edge) -> None:
        match = evaluate_candidate(edge, candidate("Cross Street", RoadKind.STREET, [(7.5, -5), (7.5, -100)]))

        assert match.orientation_diff_deg == pytest.approx(90.0, abs=0.01)
        assert not match.is_adjacent

    def test_best_segment_minimises_combined_score(self, edge) -> None:
        # A close perpendicular stub loses to a slightly farther parallel run
        match = evaluate_candidate(
            edge,
            candidate("Main Street", RoadKind.STREET, [(7.5, -3), (7.5, -15), (60, -15)]),
        )

        assert match.orientation_diff_deg == pytest.approx(0.0, abs=0.01)
        assert match.distance_m == pytest.approx(15.0, abs=0.05)

    def test_candidate_without_segments_yields_nothing(self, edge) -> None:
        assert evaluate_candidate(edge, candidate("Main Street", RoadKind.STREET)) is None

    def test_rank_sorts_by_score(self, edge) -> None:
        ranked = rank_candidates(edge, [
            candidate("Far Street", RoadKind.STREET, [(-50, -18), (50, -18)]),
            candidate("Empty Street", RoadKind.STREET),
            candidate("Near Street", RoadKind.STREET, [(-50, -6), (50, -6)]),
        ])

        assert [m.name for m in ranked] == ["Near Street", "Far Street"]


class TestGeoJSONLineProvider:

    def test_feature_with_non_mapping_properties_is_kept_unnamed(self) -> None:
        bad = horizontal_road("Ignored", -10.0)
        bad["properties"] = ["oops"]
        provider = GeoJSONLineProvider([bad, horizontal_road("Main Street", -10.0)], zoom=18)

        features = provider.query_lines_near(((-1e9, -1e9), (1e9, 1e9)))

        assert [f.properties for f in features] == [{}, {"name": "Main Street", "class": "street"}]

    def test_skips_features_without_line_geometry(self) -> None:
        provider = GeoJSONLineProvider(
            ["not a feature", {"type": "Feature", "geometry": None}, horizontal_road("Main Street", -10.0)],
            zoom=18,
        )
        edge = extract_edges(rectangle_ring())[0]

        assert [c.name for c in RoadCandidateFinder(provider).find(edge)] == ["Main Street"]

    def test_rejects_non_object_collection(self) -> None:
        with pytest.raises(ValueError, match="FeatureCollection"):
            GeoJSONLineProvider.from_feature_collection([])

    def test_collection_without_features_is_empty(self) -> None:
        provider = GeoJSONLineProvider.from_feature_collection({"type": "FeatureCollection", "features": "x"})
        assert provider.query_lines_near(((-1e9, -1e9), (1e9, 1e9))) == []
