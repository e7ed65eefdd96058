"""Overlay data structures — train snapshots and rendered features."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

HELD_STATUS = "Held"
RUNNING_STATUS = "Running"


@dataclass(frozen=True)
class TrainState:
    """One train as seen in a single snapshot (simulated or live).

    Simulated trains carry ``progress`` and are projected onto the track
    geometry; live trains carry ``coordinates`` directly.
    """

    train_id: str
    label: str
    category: str = "default"
    track_index: int = 0
    progress: float | None = None
    coordinates: tuple[float, float] | None = None
    """``(lon, lat)``."""

    held: bool = False
    priority: str | None = None
    """Live feed priority, passed through for priority-coloured layers."""


@dataclass(frozen=True)
class Snapshot:
    """The full set of trains for one reconciliation pass.

    ``sequence`` orders live batches; a snapshot older than the last applied
    one is dropped.  ``None`` means "always apply".
    """

    trains: tuple[TrainState, ...]
    sequence: int | None = None


@dataclass(frozen=True)
class RenderedFeature:
    """A train projected onto surface coordinates, ready for the feature store."""

    feature_id: str
    coordinates: tuple[float, float]
    label: str
    category: str
    held: bool
    track_index: int = 0
    progress: float | None = None
    priority: str | None = None

    def __post_init__(self) -> None:
        if not valid_coordinates(self.coordinates):
            raise ValueError(f"invalid coordinates for {self.feature_id}: {self.coordinates}")

    def to_geojson(self) -> dict:
        """Return a GeoJSON ``Feature`` dict (Point geometry)."""
        properties = {
            "id": self.feature_id,
            "train_label": self.label,
            "category": self.category,
            "status": HELD_STATUS if self.held else RUNNING_STATUS,
            "track": self.track_index + 1,
        }
        if self.progress is not None:
            properties["progress_km"] = round(self.progress, 3)
        if self.priority is not None:
            properties["priority"] = self.priority
        return {
            "type": "Feature",
            "id": self.feature_id,
            "geometry": {"type": "Point", "coordinates": list(self.coordinates)},
            "properties": properties,
        }


@dataclass
class ReconcileResult:
    """Outcome of one :meth:`OverlaySynchronizer.reconcile` pass."""

    added: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    """Train ids excluded for lacking valid coordinates."""

    applied: bool = False
    stale: bool = False
    error: str | None = None

    @property
    def feature_count(self) -> int:
        return len(self.added) + len(self.updated)


def valid_coordinates(coords: object) -> bool:
    """True for a finite ``(lon, lat)`` pair inside the WGS84 ranges."""
    if not isinstance(coords, (tuple, list)) or len(coords) != 2:
        return False
    lon, lat = coords
    if isinstance(lon, bool) or isinstance(lat, bool):
        return False
    if not isinstance(lon, (int, float)) or not isinstance(lat, (int, float)):
        return False
    if not (math.isfinite(lon) and math.isfinite(lat)):
        return False
    return -180.0 <= lon <= 180.0 and -90.0 <= lat <= 90.0
