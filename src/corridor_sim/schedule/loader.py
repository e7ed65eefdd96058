"""Scenario loading — JSON table of trains and their segment sequences.

Scenario file layout::

    {
      "route_length_km": 65,
      "horizon_min": 150,
      "start_label": "12:00",
      "stations": [{"name": "BSP", "km": 0}, ...],
      "trains": [
        {"id": "MEMU_LOCAL", "name": "MEMU Local", "category": "emerald", "track": 0,
         "segments": [
           {"start": 0, "end": 10, "at": 0},
           {"start": 10, "end": 50, "from": 0, "to": 40},
           {"start": 50, "end": 60, "at": 40, "hold": true}
         ]}
      ],
      "tracks": {"0": [[82.15, 22.08], [82.42, 22.02]]}
    }

A segment with ``at`` is held; one with ``from``/``to`` is linear.
``"hold": true`` marks a held segment where the train waits to be overtaken.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from corridor_sim.overlay.models import valid_coordinates
from corridor_sim.schedule.models import Scenario, Segment, Station, TrainSpec

DEFAULT_SCENARIO_PATH = Path(__file__).resolve().parent.parent / "data" / "bsp_akaltara.json"


class ScenarioError(ValueError):
    """The scenario file is missing, unreadable or structurally invalid."""


# ---------------------------------------------------------------------------
# File schema
# ---------------------------------------------------------------------------


class SegmentConfig(BaseModel):
    start: float
    end: float
    at: float | None = None
    from_: float | None = Field(default=None, alias="from")
    to: float | None = None
    hold: bool = False

    @model_validator(mode="after")
    def _check_rule(self) -> SegmentConfig:
        if self.at is None and (self.from_ is None or self.to is None):
            raise ValueError("segment needs either 'at' or both 'from' and 'to'")
        if self.at is not None and (self.from_ is not None or self.to is not None):
            raise ValueError("segment cannot be both held ('at') and linear ('from'/'to')")
        if self.hold and self.at is None:
            raise ValueError("'hold' only applies to held segments")
        return self

    def to_segment(self) -> Segment:
        if self.at is not None:
            return Segment.held(self.start, self.end, self.at, awaiting_overtake=self.hold)
        return Segment.linear(self.start, self.end, self.from_, self.to)


class TrainConfig(BaseModel):
    id: str
    name: str
    category: str = "default"
    track: int = Field(default=0, ge=0)
    segments: list[SegmentConfig]


class StationConfig(BaseModel):
    name: str
    km: float


class ScenarioFile(BaseModel):
    route_length_km: float = Field(gt=0)
    horizon_min: float = Field(gt=0)
    start_label: str = "00:00"
    stations: list[StationConfig] = []
    trains: list[TrainConfig]
    tracks: dict[int, list[tuple[float, float]]] = {}

    @field_validator("tracks")
    @classmethod
    def _check_tracks(cls, value: dict[int, list[tuple[float, float]]]):
        for idx, coords in value.items():
            if idx < 0:
                raise ValueError(f"track index {idx} must be >= 0")
            if len(coords) < 2:
                raise ValueError(f"track {idx} needs at least two points")
            for point in coords:
                if not valid_coordinates(point):
                    raise ValueError(f"track {idx} has invalid coordinates {point}")
        return value

    def to_scenario(self) -> Scenario:
        ids = [t.id for t in self.trains]
        if len(ids) != len(set(ids)):
            raise ScenarioError("duplicate train ids in scenario")
        return Scenario(
            route_length=self.route_length_km,
            horizon=self.horizon_min,
            start_label=self.start_label,
            stations=[Station(s.name, s.km) for s in self.stations],
            trains=[
                TrainSpec(train_id=t.id, name=t.name, category=t.category, track_index=t.track)
                for t in self.trains
            ],
            segments={t.id: [s.to_segment() for s in t.segments] for t in self.trains},
            tracks={k: list(v) for k, v in self.tracks.items()},
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_scenario(data: dict) -> Scenario:
    """Build a :class:`Scenario` from an already-decoded JSON document.

    Raises:
        ScenarioError: If the document does not match the scenario schema.
    """
    try:
        return ScenarioFile.model_validate(data).to_scenario()
    except ValidationError as exc:
        raise ScenarioError(f"invalid scenario: {exc}") from exc


def load_scenario(path: str | Path | None = None) -> Scenario:
    """Load a scenario JSON file (the bundled BSP–Akaltara scenario by default)."""
    path = Path(path) if path is not None else DEFAULT_SCENARIO_PATH
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ScenarioError(f"cannot read scenario {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ScenarioError(f"scenario {path} is not valid JSON: {exc}") from exc
    return parse_scenario(data)
