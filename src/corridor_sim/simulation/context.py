"""SimulationContext — explicitly owned clock + model + overlay for one scenario."""

from __future__ import annotations

import itertools
import logging
import threading

from corridor_sim.overlay.geometry import CorridorGeometry
from corridor_sim.overlay.models import ReconcileResult, Snapshot, TrainState
from corridor_sim.overlay.surface import RenderSurface
from corridor_sim.overlay.synchronizer import OverlaySynchronizer
from corridor_sim.schedule.models import Scenario
from corridor_sim.schedule.position import PositionModel, UnknownTrainError
from corridor_sim.schedule.tracks import TrackAssignment
from corridor_sim.simulation.clock import SimulationClock, format_clock
from corridor_sim.simulation.ticker import PeriodicTask

_logger = logging.getLogger(__name__)

SIM_SOURCE_ID = "sim-trains-source"
SIM_LAYER_ID = "sim-trains-layer"


class SimulationContext:
    """Create → tick/reconcile loop → teardown for one scripted scenario.

    Parameters
    ----------
    scenario:
        Loaded :class:`~corridor_sim.schedule.models.Scenario`.
    surface:
        Surface the simulated trains are drawn on.
    speed_factor:
        Virtual minutes per real second.
    tick_interval_s:
        Real seconds between simulation ticks.
    blink_interval_s:
        Held blink cadence.
    strict:
        Passed to :class:`PositionModel`; when False, trains with invalid
        schedules are refused instead of failing the whole scenario.
    """

    def __init__(
        self,
        scenario: Scenario,
        surface: RenderSurface,
        speed_factor: float = 5.0,
        tick_interval_s: float = 0.2,
        blink_interval_s: float = 0.5,
        strict: bool = True,
    ) -> None:
        self.scenario = scenario
        self.model = PositionModel(scenario.segments, scenario.route_length, strict=strict)
        self.tracks = TrackAssignment.from_trains(scenario.trains)
        self.clock = SimulationClock(scenario.horizon, speed_factor)
        self.geometry = (
            CorridorGeometry(scenario.tracks, scenario.route_length) if scenario.tracks else None
        )
        self.synchronizer = OverlaySynchronizer(
            surface,
            self.geometry,
            source_id=SIM_SOURCE_ID,
            layer_id=SIM_LAYER_ID,
            blink_interval_s=blink_interval_s,
        )
        self._tick_task = PeriodicTask(tick_interval_s, self.tick, name="SimulationTick")
        self._sequence = itertools.count(1)
        self._lock = threading.Lock()
        self.last_result: ReconcileResult | None = None

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def snapshot(self, t: float | None = None) -> Snapshot:
        """Evaluate every train at *t* (default: the clock's current time).

        A failure for one train is logged and that train left out; the others
        are still evaluated.
        """
        t = self.clock.now if t is None else t
        states: list[TrainState] = []
        for train in self.scenario.trains:
            if train.train_id in self.model.rejected:
                continue
            try:
                progress = self.model.evaluate(train.train_id, t)
                held = self.model.is_held(train.train_id, t)
            except (UnknownTrainError, ValueError, ArithmeticError) as exc:
                _logger.warning("Skipping train %s at t=%s: %s", train.train_id, t, exc)
                continue
            states.append(
                TrainState(
                    train_id=train.train_id,
                    label=train.name,
                    category=train.category,
                    track_index=train.track_index,
                    progress=progress,
                    held=held,
                )
            )
        return Snapshot(trains=tuple(states), sequence=next(self._sequence))

    def tick(self, delta_real_seconds: float) -> ReconcileResult:
        """Advance the clock and reconcile the overlay with the new positions."""
        with self._lock:
            self.clock.advance(delta_real_seconds)
            return self._reconcile()

    def refresh(self) -> ReconcileResult:
        """Reconcile at the current time without advancing."""
        with self._lock:
            return self._reconcile()

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------

    @property
    def playing(self) -> bool:
        return self._tick_task.running

    def play(self) -> None:
        self._tick_task.start()

    def pause(self) -> None:
        self._tick_task.stop()

    def reset(self) -> ReconcileResult:
        self.clock.reset()
        return self.refresh()

    def seek(self, t: float) -> ReconcileResult:
        self.clock.seek(t)
        return self.refresh()

    def set_speed(self, factor: float) -> None:
        self.clock.set_speed_factor(factor)

    def clock_label(self, t: float | None = None) -> str:
        t = self.clock.now if t is None else t
        return format_clock(self.scenario.start_label, t)

    def state(self) -> dict:
        """Plain-dict view of the current simulation (for the API and CLI)."""
        t = self.clock.now
        snap = self.snapshot(t)
        return {
            "time": t,
            "clock": self.clock_label(t),
            "horizon": self.clock.horizon,
            "speed": self.clock.speed_factor,
            "playing": self.playing,
            "trains": [
                {
                    "id": s.train_id,
                    "name": s.label,
                    "category": s.category,
                    "track": s.track_index,
                    "progress_km": s.progress,
                    "held": s.held,
                }
                for s in snap.trains
            ],
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Draw the initial state, then start the tick and blink tasks."""
        self.refresh()
        self.synchronizer.start_blink()
        self.play()
        _logger.info(
            "Simulation started: %d trains, horizon %s, speed %sx",
            len(self.model.train_ids), self.clock.horizon, self.clock.speed_factor,
        )

    def stop(self) -> None:
        """Stop all periodic tasks; no callbacks fire after this returns."""
        self.pause()
        self.synchronizer.close()
        _logger.info("Simulation stopped at t=%.2f", self.clock.now)

    def __enter__(self) -> SimulationContext:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _reconcile(self) -> ReconcileResult:
        result = self.synchronizer.reconcile(self.snapshot())
        self.last_result = result
        return result
