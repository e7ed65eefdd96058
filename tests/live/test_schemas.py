"""LiveBatch / LiveTrainReport validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from corridor_sim.live.schemas import LiveBatch, LiveTrainReport


def _report(**overrides) -> dict:
    data = {
        "train_no": "12951",
        "train_name": "Rajdhani",
        "current_lat": 22.05,
        "current_lon": 82.3,
        "priority": "High",
        "status": "Running",
    }
    data.update(overrides)
    return data


def test_report_to_state():
    state = LiveTrainReport.model_validate(_report()).to_state()
    assert state.train_id == "12951"
    assert state.label == "12951 Rajdhani"
    assert state.coordinates == (82.3, 22.05)
    assert state.category == "High"
    assert not state.held


def test_numeric_train_no_is_coerced():
    assert LiveTrainReport.model_validate(_report(train_no=12951)).train_no == "12951"


@pytest.mark.parametrize("status", ["Held", "held", " HELD "])
def test_held_status_case_insensitive(status):
    assert LiveTrainReport.model_validate(_report(status=status)).to_state().held


def test_missing_position_gives_no_coordinates():
    state = LiveTrainReport.model_validate(_report(current_lat=None)).to_state()
    assert state.coordinates is None


def test_missing_priority_defaults_category():
    assert LiveTrainReport.model_validate(_report(priority=None)).to_state().category == "unknown"


def test_report_without_id_has_no_state():
    assert LiveTrainReport.model_validate(_report(train_no=None)).to_state() is None


def test_unknown_fields_ignored():
    report = LiveTrainReport.model_validate(_report(speed_kmph=110, zone="SECR"))
    assert report.train_no == "12951"


def test_batch_drops_malformed_reports_individually():
    batch = LiveBatch.model_validate(
        {
            "sequence": 3,
            "trains": [
                _report(),
                _report(train_no="18477", current_lat="north"),
                "garbage",
                _report(train_no="12070"),
            ],
        }
    )
    assert [r.train_no for r in batch.trains] == ["12951", "12070"]
    assert batch.to_snapshot().sequence == 3


def test_batch_snapshot_drops_anonymous_reports():
    batch = LiveBatch.model_validate({"trains": [_report(), _report(train_no=None)]})
    snap = batch.to_snapshot()
    assert [s.train_id for s in snap.trains] == ["12951"]
    assert snap.sequence is None


def test_batch_trains_must_be_a_list():
    with pytest.raises(ValidationError):
        LiveBatch.model_validate({"trains": {"12951": _report()}})


def test_empty_batch():
    assert LiveBatch.model_validate({}).to_snapshot().trains == ()


def test_priority_carried_to_state():
    assert LiveTrainReport.model_validate(_report(priority="Low")).to_state().priority == "Low"
    assert LiveTrainReport.model_validate(_report(priority=None)).to_state().priority is None
