"""Polyline interpolation and corridor projection."""

from __future__ import annotations

import pytest

from corridor_sim.overlay.geometry import CorridorGeometry, Polyline
from corridor_sim.schedule.loader import load_scenario


def test_point_at_is_length_weighted():
    # 3 units east then 1 unit north: halfway is at x=2 on the first leg
    line = Polyline([(0.0, 0.0), (3.0, 0.0), (3.0, 1.0)])
    assert line.length == pytest.approx(4.0)
    assert line.point_at(0.5) == pytest.approx((2.0, 0.0))
    assert line.point_at(0.875) == pytest.approx((3.0, 0.5))


def test_point_at_clamps():
    line = Polyline([(0.0, 0.0), (1.0, 1.0)])
    assert line.point_at(-1) == (0.0, 0.0)
    assert line.point_at(2) == (1.0, 1.0)


def test_degenerate_polyline():
    line = Polyline([(5.0, 5.0), (5.0, 5.0)])
    assert line.point_at(0.7) == (5.0, 5.0)
    with pytest.raises(ValueError):
        Polyline([(0.0, 0.0)])


def test_project_uses_track_line_and_falls_back():
    geo = CorridorGeometry({0: [(0.0, 0.0), (10.0, 0.0)], 2: [(0.0, 2.0), (10.0, 2.0)]}, 100.0)
    assert geo.project(2, 50.0) == pytest.approx((5.0, 2.0))
    assert geo.project(1, 50.0) == pytest.approx((5.0, 0.0))
    assert geo.tracks == [0, 2]


def test_feature_collection_has_one_based_tracks():
    scenario = load_scenario()
    geo = CorridorGeometry(scenario.tracks, scenario.route_length)
    fc = geo.to_feature_collection()
    assert fc["type"] == "FeatureCollection"
    assert [f["properties"]["track"] for f in fc["features"]] == [1, 2, 3]
    assert all(f["geometry"]["type"] == "LineString" for f in fc["features"])


def test_scenario_endpoints_map_to_line_ends():
    scenario = load_scenario()
    geo = CorridorGeometry(scenario.tracks, scenario.route_length)
    assert geo.project(0, 0) == pytest.approx(tuple(scenario.tracks[0][0]))
    assert geo.project(0, 65) == pytest.approx(tuple(scenario.tracks[0][-1]))


def test_invalid_construction():
    with pytest.raises(ValueError):
        CorridorGeometry({}, 10.0)
    with pytest.raises(ValueError):
        CorridorGeometry({0: [(0.0, 0.0), (1.0, 0.0)]}, 0)
