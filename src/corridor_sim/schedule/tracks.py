"""TrackAssignment — which lane each train is drawn on."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from corridor_sim.schedule.models import TrainSpec


class TrackAssignment:
    """Static mapping of train id → track index (0-based).

    Used for rendering lane separation only; the position model never looks
    at it.
    """

    def __init__(self, mapping: Mapping[str, int]) -> None:
        for train_id, idx in mapping.items():
            if isinstance(idx, bool) or not isinstance(idx, int) or idx < 0:
                raise ValueError(f"track index for {train_id!r} must be a non-negative int")
        self._mapping = dict(mapping)

    @classmethod
    def from_trains(cls, trains: Iterable[TrainSpec]) -> TrackAssignment:
        return cls({t.train_id: t.track_index for t in trains})

    def track_of(self, train_id: str) -> int:
        return self._mapping[train_id]

    def trains_on(self, track: int) -> list[str]:
        """Return the train ids assigned to *track*, in assignment order."""
        return [tid for tid, idx in self._mapping.items() if idx == track]

    def tracks(self) -> list[int]:
        return sorted(set(self._mapping.values()))

    @staticmethod
    def label(track: int) -> str:
        """Human label, e.g. ``Track 1`` for index 0."""
        return f"Track {track + 1}"

    def __contains__(self, train_id: object) -> bool:
        return train_id in self._mapping

    def __len__(self) -> int:
        return len(self._mapping)
