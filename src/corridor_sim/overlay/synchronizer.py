"""OverlaySynchronizer — diff-based reconciliation of trains onto a render surface.

Every pass rebuilds the full feature set from a :class:`Snapshot` and replaces
the surface's collection, so replaying a snapshot is idempotent.  The held
blink runs on its own :class:`PeriodicTask` and never restarts when data
refreshes arrive.
"""

from __future__ import annotations

import logging
import math
import threading

from corridor_sim.overlay.geometry import CorridorGeometry
from corridor_sim.overlay.models import (
    HELD_STATUS,
    ReconcileResult,
    RenderedFeature,
    Snapshot,
    TrainState,
    valid_coordinates,
)
from corridor_sim.overlay.surface import RenderSurface, SurfaceError
from corridor_sim.simulation.ticker import PeriodicTask

_logger = logging.getLogger(__name__)

DEFAULT_SOURCE_ID = "trains-source"
DEFAULT_LAYER_ID = "trains-layer"
OPACITY_PROPERTY = "circle-opacity"


class BlinkPhase:
    """Visible/dim phase of held trains, toggled once per *cadence_s* of elapsed time.

    Starts visible, so after ``2 * cadence_s`` the phase has gone
    on → off → on.
    """

    def __init__(self, cadence_s: float = 0.5) -> None:
        if cadence_s <= 0:
            raise ValueError("cadence_s must be > 0")
        self.cadence = cadence_s
        self.visible = True
        self.toggles = 0
        self._pending = 0.0

    def advance(self, elapsed_s: float) -> int:
        """Accumulate *elapsed_s* and return the number of toggles it caused."""
        self._pending += elapsed_s
        count = math.floor(self._pending / self.cadence + 1e-9)
        self._pending = max(0.0, self._pending - count * self.cadence)
        for _ in range(count):
            self.toggle()
        return count

    def toggle(self) -> bool:
        self.visible = not self.visible
        self.toggles += 1
        return self.visible


def opacity_expression(visible: bool, dim_opacity: float = 0.2) -> list:
    """Paint expression dimming ``Held`` features when *visible* is False."""
    return [
        "case",
        ["==", ["get", "status"], HELD_STATUS],
        1 if visible else dim_opacity,
        1,
    ]


class OverlaySynchronizer:
    """Sole writer of one feature source (and its layer's opacity) on a surface.

    Parameters
    ----------
    surface:
        A :class:`~corridor_sim.overlay.surface.RenderSurface`.
    geometry:
        Used to project simulated trains (``progress``) onto track lines.
        Trains carrying coordinates are placed directly.
    source_id, layer_id:
        Names of the feature collection and the circle layer drawing it.
    blink_interval_s:
        Held blink cadence.
    """

    def __init__(
        self,
        surface: RenderSurface,
        geometry: CorridorGeometry | None = None,
        source_id: str = DEFAULT_SOURCE_ID,
        layer_id: str = DEFAULT_LAYER_ID,
        blink_interval_s: float = 0.5,
        dim_opacity: float = 0.2,
    ) -> None:
        self._surface = surface
        self._geometry = geometry
        self.source_id = source_id
        self.layer_id = layer_id
        self._dim_opacity = dim_opacity
        self.blink = BlinkPhase(blink_interval_s)
        self._blink_task: PeriodicTask | None = None
        self._last_sequence: int | None = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    @property
    def last_sequence(self) -> int | None:
        return self._last_sequence

    def build_features(self, snapshot: Snapshot) -> tuple[dict[str, RenderedFeature], list[str]]:
        """Project every train to a feature; return ``(features_by_id, skipped_ids)``."""
        features: dict[str, RenderedFeature] = {}
        skipped: list[str] = []
        for state in snapshot.trains:
            coords = self._locate(state)
            if coords is None:
                skipped.append(state.train_id)
                features.pop(state.train_id, None)
                continue
            features[state.train_id] = RenderedFeature(
                feature_id=state.train_id,
                coordinates=coords,
                label=state.label,
                category=state.category,
                held=state.held,
                track_index=state.track_index,
                progress=state.progress,
                priority=state.priority,
            )
        return features, skipped

    def reconcile(self, snapshot: Snapshot) -> ReconcileResult:
        """Bring the surface's collection in line with *snapshot*.

        Stale snapshots are dropped; surface failures are reported in the
        result and leave the last applied sequence untouched so the next pass
        retries.
        """
        result = ReconcileResult()
        with self._lock:
            seq = snapshot.sequence
            if seq is not None and self._last_sequence is not None and seq < self._last_sequence:
                _logger.warning(
                    "Dropping stale snapshot %s (last applied %s) for %s",
                    seq, self._last_sequence, self.source_id,
                )
                result.stale = True
                return result

            features, result.skipped = self.build_features(snapshot)

            if not self._surface.is_alive():
                result.error = "surface unavailable"
                _logger.warning("Skipping reconcile of %s: surface unavailable", self.source_id)
                return result
            try:
                previous = self._surface.get_collection(self.source_id)
                prev_ids = {f.get("id") for f in previous.get("features", [])}
                self._surface.set_collection(
                    self.source_id,
                    {
                        "type": "FeatureCollection",
                        "features": [f.to_geojson() for f in features.values()],
                    },
                )
            except SurfaceError as exc:
                result.error = str(exc)
                _logger.warning("Reconcile of %s failed: %s", self.source_id, exc)
                return result

            for fid in features:
                (result.updated if fid in prev_ids else result.added).append(fid)
            result.removed = sorted(
                fid for fid in prev_ids if fid is not None and fid not in features
            )
            result.applied = True
            if seq is not None:
                self._last_sequence = seq
        return result

    # ------------------------------------------------------------------
    # Held blink
    # ------------------------------------------------------------------

    def on_blink_tick(self, elapsed_s: float) -> None:
        """Advance the blink phase and repaint the layer if it toggled."""
        with self._lock:
            if self.blink.advance(elapsed_s):
                self._apply_opacity()

    def start_blink(self) -> None:
        """Start the owned blink task (no-op if running)."""
        with self._lock:
            self._apply_opacity()
        if self._blink_task is None:
            self._blink_task = PeriodicTask(
                self.blink.cadence, self.on_blink_tick, name=f"Blink[{self.layer_id}]"
            )
        self._blink_task.start()

    def stop_blink(self) -> None:
        if self._blink_task is not None:
            self._blink_task.stop()

    @property
    def blinking(self) -> bool:
        return self._blink_task is not None and self._blink_task.running

    def close(self) -> None:
        """Release the blink task; the surface itself is not touched."""
        self.stop_blink()
        self._blink_task = None

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _locate(self, state: TrainState) -> tuple[float, float] | None:
        if state.coordinates is not None:
            return tuple(state.coordinates) if valid_coordinates(state.coordinates) else None
        if state.progress is None or self._geometry is None:
            return None
        if not math.isfinite(state.progress):
            return None
        coords = self._geometry.project(state.track_index, state.progress)
        return coords if valid_coordinates(coords) else None

    def _apply_opacity(self) -> None:
        if not self._surface.is_alive():
            return
        try:
            self._surface.set_style_property(
                self.layer_id,
                OPACITY_PROPERTY,
                opacity_expression(self.blink.visible, self._dim_opacity),
            )
        except SurfaceError as exc:
            _logger.warning("Blink update on %s failed: %s", self.layer_id, exc)
