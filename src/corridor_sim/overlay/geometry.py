"""Corridor geometry — project route progress onto track polylines."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence

Coord = tuple[float, float]


class Polyline:
    """An ordered list of ``(lon, lat)`` vertices with length-weighted interpolation.

    Lengths are planar (degrees); good enough for the short corridor
    sections this is used for.
    """

    def __init__(self, coords: Sequence[Coord]) -> None:
        if len(coords) < 2:
            raise ValueError("a polyline needs at least two points")
        self.coords: list[Coord] = [(float(x), float(y)) for x, y in coords]
        self._cumulative = [0.0]
        for (x0, y0), (x1, y1) in zip(self.coords, self.coords[1:]):
            self._cumulative.append(self._cumulative[-1] + math.hypot(x1 - x0, y1 - y0))

    @property
    def length(self) -> float:
        return self._cumulative[-1]

    def point_at(self, fraction: float) -> Coord:
        """Return the point *fraction* ∈ [0, 1] of the way along the line (clamped)."""
        fraction = max(0.0, min(1.0, fraction))
        if self.length == 0.0:
            return self.coords[0]
        target = fraction * self.length
        for i in range(1, len(self.coords)):
            if self._cumulative[i] >= target:
                seg_len = self._cumulative[i] - self._cumulative[i - 1]
                (x0, y0), (x1, y1) = self.coords[i - 1], self.coords[i]
                if seg_len == 0.0:
                    return (x1, y1)
                u = (target - self._cumulative[i - 1]) / seg_len
                return (x0 + u * (x1 - x0), y0 + u * (y1 - y0))
        return self.coords[-1]


class CorridorGeometry:
    """Track polylines for one corridor section.

    Args:
        lines: Mapping of 0-based track index → vertex list.
        route_length: Progress value that maps to the end of each line.
    """

    def __init__(self, lines: Mapping[int, Sequence[Coord]], route_length: float) -> None:
        if not lines:
            raise ValueError("at least one track line is required")
        if route_length <= 0:
            raise ValueError("route_length must be > 0")
        self.route_length = route_length
        self._lines = {idx: Polyline(coords) for idx, coords in sorted(lines.items())}

    @property
    def tracks(self) -> list[int]:
        return list(self._lines)

    def line(self, track_index: int) -> Polyline:
        """Return the line for *track_index*, falling back to the lowest track."""
        return self._lines.get(track_index) or next(iter(self._lines.values()))

    def project(self, track_index: int, progress: float) -> Coord:
        return self.line(track_index).point_at(progress / self.route_length)

    def to_feature_collection(self) -> dict:
        """Return the section as a GeoJSON ``FeatureCollection`` of LineStrings."""
        features = [
            {
                "type": "Feature",
                "geometry": {
                    "type": "LineString",
                    "coordinates": [list(c) for c in line.coords],
                },
                "properties": {"track": idx + 1},
            }
            for idx, line in self._lines.items()
        ]
        return {"type": "FeatureCollection", "features": features}
