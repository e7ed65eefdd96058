"""FastAPI application — simulation control, live ingest, section geometry, viewport."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException

from corridor_sim import __version__
from corridor_sim.config import Settings
from corridor_sim.live.schemas import LiveBatch
from corridor_sim.overlay.models import ReconcileResult
from corridor_sim.overlay.surface import InMemorySurface, SurfaceError
from corridor_sim.overlay.synchronizer import OverlaySynchronizer
from corridor_sim.schedule.loader import load_scenario
from corridor_sim.simulation.context import SIM_SOURCE_ID, SimulationContext
from corridor_sim.viewport.controller import (
    RecordingCamera,
    Transition,
    UnknownContextError,
    ViewportController,
)
from corridor_sim.web.schemas import (
    ControlRequest,
    HealthResponse,
    ReconcileResponse,
    SimStateResponse,
    TransitionResponse,
    ViewStateResponse,
)

_logger = logging.getLogger(__name__)

SECTION_ID = "bsp-akaltara"
LIVE_SOURCE_ID = "trains-source"


def _reconcile_response(result: ReconcileResult) -> ReconcileResponse:
    return ReconcileResponse(
        applied=result.applied,
        stale=result.stale,
        added=result.added,
        updated=result.updated,
        removed=result.removed,
        skipped=result.skipped,
        error=result.error,
    )


def _transition_response(t: Transition) -> TransitionResponse:
    return TransitionResponse(
        from_context=t.source.value,
        to_context=t.target.value,
        center=t.center,
        zoom=t.zoom,
        noop=t.noop,
        redirected=t.redirected,
    )


def create_app(settings: Settings | None = None, autostart: bool = True) -> FastAPI:
    """Build the application and its simulation context.

    Parameters
    ----------
    settings:
        Defaults to :meth:`Settings.from_env`.
    autostart:
        When True the lifespan starts the tick and blink tasks; tests pass
        False and drive the simulation through the control endpoint.
    """
    settings = settings or Settings.from_env()
    scenario = load_scenario(settings.scenario_path)
    surface = InMemorySurface()
    sim = SimulationContext(
        scenario,
        surface,
        speed_factor=settings.speed,
        tick_interval_s=settings.tick_s,
        blink_interval_s=settings.blink_s,
    )
    live = OverlaySynchronizer(
        surface,
        source_id=LIVE_SOURCE_ID,
        layer_id="trains-layer",
        blink_interval_s=settings.blink_s,
    )
    viewport = ViewportController(RecordingCamera())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _logger.info("Serving scenario %s", settings.scenario_path)
        sim.refresh()
        if autostart:
            sim.start()
            live.start_blink()
        try:
            yield
        finally:
            sim.stop()
            live.close()
            surface.destroy()

    app = FastAPI(title="Corridor Simulation", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.surface = surface
    app.state.sim = sim
    app.state.live = live
    app.state.viewport = viewport

    # -----------------------------------------------------------------------
    # Endpoints
    # -----------------------------------------------------------------------

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    @app.get("/api/map/section/{section_id}")
    def section(section_id: str) -> dict:
        """Track line geometry for the corridor section."""
        if section_id != SECTION_ID or sim.geometry is None:
            raise HTTPException(status_code=404, detail="Section not found")
        return sim.geometry.to_feature_collection()

    @app.get("/api/sim/state", response_model=SimStateResponse)
    def sim_state() -> SimStateResponse:
        return SimStateResponse(**sim.state())

    @app.get("/api/sim/features")
    def sim_features() -> dict:
        return _collection(SIM_SOURCE_ID)

    @app.post("/api/sim/control", response_model=SimStateResponse)
    def sim_control(req: ControlRequest) -> SimStateResponse:
        """Play / pause / reset / change speed / seek."""
        try:
            if req.action == "play":
                sim.play()
            elif req.action == "pause":
                sim.pause()
            elif req.action == "reset":
                sim.reset()
            elif req.value is None:
                raise ValueError(f"action {req.action!r} needs a value")
            elif req.action == "speed":
                sim.set_speed(req.value)
            else:
                sim.seek(req.value)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return SimStateResponse(**sim.state())

    @app.get("/api/live/features")
    def live_features() -> dict:
        return _collection(LIVE_SOURCE_ID)

    @app.post("/api/live/batch", response_model=ReconcileResponse)
    def live_batch(batch: LiveBatch) -> ReconcileResponse:
        """Reconcile one batch of live position reports."""
        result = live.reconcile(batch.to_snapshot())
        if result.error:
            raise HTTPException(status_code=503, detail=result.error)
        return _reconcile_response(result)

    @app.post("/api/view/complete", response_model=ViewStateResponse)
    def view_complete() -> ViewStateResponse:
        """Called by the map client on camera ``moveend``; ends the in-flight transition."""
        viewport.complete()
        return ViewStateResponse(active=viewport.active.value, in_flight=False)

    @app.post("/api/view/{context}", response_model=TransitionResponse)
    def focus(context: str) -> TransitionResponse:
        try:
            return _transition_response(viewport.focus(context))
        except UnknownContextError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.post("/api/view/database/{database}", response_model=TransitionResponse)
    def focus_database(database: str) -> TransitionResponse:
        try:
            return _transition_response(viewport.focus_for_database(database))
        except UnknownContextError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    def _collection(source_id: str) -> dict:
        try:
            return surface.get_collection(source_id)
        except SurfaceError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc

    return app
