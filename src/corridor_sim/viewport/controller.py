"""ViewportController — fly the camera between a closed set of view contexts."""

from __future__ import annotations

import enum
import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Protocol

_logger = logging.getLogger(__name__)


class ViewContext(str, enum.Enum):
    WIDE = "india"
    REGIONAL = "chhattisgarh"
    DETAIL = "bsp_akaltara"


@dataclass(frozen=True)
class ContextView:
    center: tuple[float, float]
    """``(lon, lat)``."""

    zoom: float


DEFAULT_CATALOG: Mapping[ViewContext, ContextView] = MappingProxyType(
    {
        ViewContext.WIDE: ContextView(center=(77.0, 23.0), zoom=4),
        ViewContext.REGIONAL: ContextView(center=(82.0, 21.5), zoom=6),
        ViewContext.DETAIL: ContextView(center=(82.075, 22.07), zoom=12),
    }
)

DATABASE_CONTEXTS: Mapping[str, ViewContext] = MappingProxyType(
    {"india_db": ViewContext.WIDE, "cg_db": ViewContext.REGIONAL}
)


class UnknownContextError(ValueError):
    """Raised for a context name outside the catalog."""


class Camera(Protocol):
    def fly_to(self, center: tuple[float, float], zoom: float) -> None: ...


class RecordingCamera:
    """Camera that records ``fly_to`` calls; used by the web API and tests."""

    def __init__(self) -> None:
        self.flights: list[tuple[tuple[float, float], float]] = []

    def fly_to(self, center: tuple[float, float], zoom: float) -> None:
        self.flights.append((center, zoom))


@dataclass(frozen=True)
class Transition:
    """Result of a :meth:`ViewportController.focus` request."""

    source: ViewContext
    target: ViewContext
    center: tuple[float, float]
    zoom: float
    noop: bool = False
    redirected: bool = False
    """True when the request replaced a transition that was still in flight."""


class ViewportController:
    """Keeps exactly one active :class:`ViewContext` and issues camera transitions.

    Parameters
    ----------
    camera:
        Object with ``fly_to(center, zoom)``.
    catalog:
        Context → centre/zoom; copied and frozen at construction.
    initial:
        Context active at start-up (the camera is assumed to be there already).
    """

    def __init__(
        self,
        camera: Camera,
        catalog: Mapping[ViewContext, ContextView] = DEFAULT_CATALOG,
        initial: ViewContext = ViewContext.WIDE,
    ) -> None:
        missing = [c.value for c in ViewContext if c not in catalog]
        if missing:
            raise ValueError(f"catalog is missing contexts: {', '.join(missing)}")
        self._camera = camera
        self._catalog = MappingProxyType(dict(catalog))
        self._active = initial
        self._in_flight: Transition | None = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def active(self) -> ViewContext:
        return self._active

    @property
    def in_flight(self) -> Transition | None:
        return self._in_flight

    @property
    def catalog(self) -> Mapping[ViewContext, ContextView]:
        return self._catalog

    @staticmethod
    def resolve(context: ViewContext | str) -> ViewContext:
        """Accept an enum member, its value or its name (case-insensitive)."""
        if isinstance(context, ViewContext):
            return context
        key = str(context).strip().lower()
        for member in ViewContext:
            if key in (member.value, member.name.lower()):
                return member
        raise UnknownContextError(f"unknown view context: {context!r}")

    def focus(self, context: ViewContext | str) -> Transition:
        """Fly to *context*.  Re-focusing the active context is a no-op."""
        target = self.resolve(context)
        view = self._catalog[target]
        with self._lock:
            source = self._active
            if target is source:
                return Transition(source, target, view.center, view.zoom, noop=True)
            transition = Transition(
                source, target, view.center, view.zoom,
                redirected=self._in_flight is not None,
            )
            self._active = target
            self._in_flight = transition
            self._camera.fly_to(view.center, view.zoom)
        _logger.info(
            "Viewport %s -> %s%s", source.value, target.value,
            " (redirected)" if transition.redirected else "",
        )
        return transition

    def focus_for_database(self, database: str) -> Transition:
        """Follow the dashboard's database switch (``india_db`` / ``cg_db``)."""
        try:
            context = DATABASE_CONTEXTS[database]
        except KeyError:
            raise UnknownContextError(f"unknown database: {database!r}") from None
        return self.focus(context)

    def complete(self) -> None:
        """Mark the in-flight transition as finished (camera ``moveend``)."""
        with self._lock:
            self._in_flight = None
