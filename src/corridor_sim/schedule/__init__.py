"""Scripted train schedules: segments, position model and track assignment."""

from corridor_sim.schedule.loader import ScenarioError, load_scenario, parse_scenario
from corridor_sim.schedule.models import Scenario, Segment, SegmentKind, Station, TrainSpec
from corridor_sim.schedule.position import PositionModel, ScheduleError, UnknownTrainError
from corridor_sim.schedule.tracks import TrackAssignment

__all__ = [
    "PositionModel",
    "Scenario",
    "ScenarioError",
    "ScheduleError",
    "Segment",
    "SegmentKind",
    "Station",
    "TrackAssignment",
    "TrainSpec",
    "UnknownTrainError",
    "load_scenario",
    "parse_scenario",
]
