"""Rendering surface abstraction and an in-memory implementation.

The synchronizer only needs three operations from a map/schematic surface:
replace a named feature collection, read it back, and set a paint property
on a layer.  :class:`InMemorySurface` keeps them in dicts; the web API serves
its contents to map clients.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Protocol


class SurfaceError(RuntimeError):
    """The rendering surface rejected or failed an operation."""


class SurfaceUnavailableError(SurfaceError):
    """The surface has been destroyed or is not ready."""


class RenderSurface(Protocol):
    def is_alive(self) -> bool: ...

    def set_collection(self, source_id: str, collection: dict) -> None: ...

    def get_collection(self, source_id: str) -> dict: ...

    def set_style_property(self, layer_id: str, name: str, value: Any) -> None: ...


def empty_collection() -> dict:
    return {"type": "FeatureCollection", "features": []}


class InMemorySurface:
    """Thread-safe feature store with named sources and layer paint properties."""

    def __init__(self) -> None:
        self._sources: dict[str, dict] = {}
        self._paint: dict[str, dict[str, Any]] = {}
        self._alive = True
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # RenderSurface protocol
    # ------------------------------------------------------------------

    def is_alive(self) -> bool:
        return self._alive

    def set_collection(self, source_id: str, collection: dict) -> None:
        with self._lock:
            self._check_alive()
            self._sources[source_id] = copy.deepcopy(collection)

    def get_collection(self, source_id: str) -> dict:
        with self._lock:
            self._check_alive()
            return copy.deepcopy(self._sources.get(source_id, empty_collection()))

    def set_style_property(self, layer_id: str, name: str, value: Any) -> None:
        with self._lock:
            self._check_alive()
            self._paint.setdefault(layer_id, {})[name] = copy.deepcopy(value)

    # ------------------------------------------------------------------
    # Extras
    # ------------------------------------------------------------------

    def get_style_property(self, layer_id: str, name: str) -> Any:
        with self._lock:
            self._check_alive()
            return copy.deepcopy(self._paint.get(layer_id, {}).get(name))

    def destroy(self) -> None:
        """Tear the surface down; later calls raise :class:`SurfaceUnavailableError`."""
        with self._lock:
            self._alive = False
            self._sources.clear()
            self._paint.clear()

    def _check_alive(self) -> None:
        if not self._alive:
            raise SurfaceUnavailableError("surface has been destroyed")
