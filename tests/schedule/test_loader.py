"""Scenario loading from JSON."""

from __future__ import annotations

import json

import pytest

from corridor_sim.schedule.loader import ScenarioError, load_scenario, parse_scenario
from corridor_sim.schedule.models import SegmentKind


def _doc(**overrides) -> dict:
    doc = {
        "route_length_km": 10,
        "horizon_min": 30,
        "start_label": "08:00",
        "trains": [
            {
                "id": "T1",
                "name": "Test One",
                "track": 1,
                "segments": [
                    {"start": 0, "end": 5, "at": 0},
                    {"start": 5, "end": 15, "from": 0, "to": 10},
                    {"start": 15, "end": 20, "at": 10, "hold": True},
                ],
            }
        ],
    }
    doc.update(overrides)
    return doc


def test_default_scenario_loads():
    scenario = load_scenario()
    assert scenario.route_length == 65
    assert scenario.horizon == 150
    assert scenario.start_label == "12:00"
    assert [t.train_id for t in scenario.trains] == [
        "MEMU_LOCAL", "RAJDHANI", "JANSHATABDI", "UTKAL_EXP",
    ]
    assert [s.name for s in scenario.stations] == ["BSP", "Akaltara", "Champa"]
    assert set(scenario.tracks) == {0, 1, 2}


def test_segments_are_converted():
    scenario = parse_scenario(_doc())
    segs = scenario.segments["T1"]
    assert [s.kind for s in segs] == [SegmentKind.HELD, SegmentKind.LINEAR, SegmentKind.HELD]
    assert segs[1].start_progress == 0 and segs[1].end_progress == 10
    assert segs[2].awaiting_overtake
    assert not segs[0].awaiting_overtake
    assert scenario.train("T1").track_index == 1


def test_segment_without_rule_rejected():
    doc = _doc()
    doc["trains"][0]["segments"].append({"start": 20, "end": 25})
    with pytest.raises(ScenarioError):
        parse_scenario(doc)


def test_segment_with_both_rules_rejected():
    doc = _doc()
    doc["trains"][0]["segments"][0] = {"start": 0, "end": 5, "at": 0, "from": 0, "to": 1}
    with pytest.raises(ScenarioError):
        parse_scenario(doc)


def test_hold_on_linear_segment_rejected():
    doc = _doc()
    doc["trains"][0]["segments"][1]["hold"] = True
    with pytest.raises(ScenarioError):
        parse_scenario(doc)


def test_negative_track_rejected():
    doc = _doc()
    doc["trains"][0]["track"] = -1
    with pytest.raises(ScenarioError):
        parse_scenario(doc)


@pytest.mark.parametrize(
    "line",
    [
        [[200.0, 22.0], [201.0, 22.0]],
        [[82.1, 95.0], [82.2, 22.0]],
        [[82.1, 22.0]],
    ],
)
def test_invalid_track_line_rejected(line):
    with pytest.raises(ScenarioError, match="track 2"):
        parse_scenario(_doc(tracks={"0": [[82.1, 22.0], [82.2, 22.0]], "2": line}))


def test_valid_track_lines_kept():
    scenario = parse_scenario(_doc(tracks={"1": [[82.1, 22.0], [82.2, 22.1]]}))
    assert scenario.tracks == {1: [(82.1, 22.0), (82.2, 22.1)]}


def test_duplicate_train_ids_rejected():
    doc = _doc()
    doc["trains"].append(dict(doc["trains"][0]))
    with pytest.raises(ScenarioError, match="duplicate"):
        parse_scenario(doc)


def test_missing_file(tmp_path):
    with pytest.raises(ScenarioError, match="cannot read"):
        load_scenario(tmp_path / "nope.json")


def test_invalid_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ScenarioError, match="not valid JSON"):
        load_scenario(path)


def test_load_from_file(tmp_path):
    path = tmp_path / "s.json"
    path.write_text(json.dumps(_doc()), encoding="utf-8")
    scenario = load_scenario(path)
    assert scenario.horizon == 30
