"""Schedule data models — trains, timed segments and scenarios."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class SegmentKind(str, enum.Enum):
    """How progress evolves inside a :class:`Segment`."""

    HELD = "held"
    LINEAR = "linear"


@dataclass(frozen=True)
class Segment:
    """A half-open time interval ``[start, end)`` with a progress rule.

    Times are virtual minutes; progress is kilometres along the route.
    A held segment has ``start_progress == end_progress``.  ``awaiting_overtake``
    marks a hold where the train waits for another one to pass; those trains
    are shown in the held (blinking) state.
    """

    start: float
    end: float
    start_progress: float
    end_progress: float
    kind: SegmentKind = SegmentKind.LINEAR
    awaiting_overtake: bool = False

    @classmethod
    def held(
        cls, start: float, end: float, progress: float, awaiting_overtake: bool = False
    ) -> Segment:
        return cls(start, end, progress, progress, SegmentKind.HELD, awaiting_overtake)

    @classmethod
    def linear(
        cls, start: float, end: float, start_progress: float, end_progress: float
    ) -> Segment:
        return cls(start, end, start_progress, end_progress, SegmentKind.LINEAR)

    @property
    def duration(self) -> float:
        return self.end - self.start

    @property
    def rate(self) -> float:
        """Progress change per virtual minute (0.0 for held segments)."""
        if self.kind is SegmentKind.HELD:
            return 0.0
        return (self.end_progress - self.start_progress) / (self.end - self.start)

    def contains(self, t: float) -> bool:
        return self.start <= t < self.end


@dataclass(frozen=True)
class TrainSpec:
    """Static description of one train in a scenario.

    ``track_index`` is used for lane separation when rendering only; it has
    no effect on the position model.
    """

    train_id: str
    name: str
    category: str = "default"
    track_index: int = 0


@dataclass(frozen=True)
class Station:
    name: str
    km: float


@dataclass
class Scenario:
    """A complete scripted scenario loaded from configuration."""

    route_length: float
    horizon: float
    trains: list[TrainSpec]
    segments: dict[str, list[Segment]]
    stations: list[Station] = field(default_factory=list)
    start_label: str = "00:00"
    tracks: dict[int, list[tuple[float, float]]] = field(default_factory=dict)
    """Track polylines keyed by 0-based track index, as ``(lon, lat)`` pairs."""

    def train(self, train_id: str) -> TrainSpec:
        for train in self.trains:
            if train.train_id == train_id:
                return train
        raise KeyError(train_id)
