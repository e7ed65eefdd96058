"""Text track board — schematic rendering of train positions per track."""

from __future__ import annotations

from collections.abc import Sequence

from corridor_sim.overlay.models import TrainState
from corridor_sim.schedule.models import Station
from corridor_sim.schedule.tracks import TrackAssignment

_RAIL = "─"
_STATION = "┼"


class TrackBoardRenderer:
    """Draws one row per track with train markers at their progress fraction.

    Pure data transformation, safe to call from any thread.

    Parameters
    ----------
    route_length:
        Progress value at the right-hand end of the board.
    stations:
        Drawn as ticks on every rail and named in the header.
    width:
        Number of character cells per rail.
    """

    def __init__(
        self,
        route_length: float,
        stations: Sequence[Station] = (),
        width: int = 60,
    ) -> None:
        if width < 10:
            raise ValueError("width must be >= 10")
        self.route_length = route_length
        self.stations = list(stations)
        self.width = width

    def column(self, progress: float) -> int:
        """Cell index for *progress*, clamped to the board."""
        frac = max(0.0, min(1.0, progress / self.route_length))
        return round(frac * (self.width - 1))

    def header(self) -> str:
        cells = [" "] * self.width
        for st in self.stations:
            label = f"{st.name} ({st.km:g} km)"
            col = self.column(st.km)
            start = max(0, min(col, self.width - len(label)))
            for i, ch in enumerate(label):
                if start + i < self.width:
                    cells[start + i] = ch
        return "".join(cells).rstrip()

    def rail(self, trains: Sequence[TrainState]) -> str:
        cells = [_RAIL] * self.width
        for st in self.stations:
            cells[self.column(st.km)] = _STATION
        for state in trains:
            if state.progress is None:
                continue
            marker = state.train_id[:1].upper() or "?"
            cells[self.column(state.progress)] = marker.lower() if state.held else marker
        return "".join(cells)

    def render(
        self, trains: Sequence[TrainState], tracks: TrackAssignment, clock_label: str = ""
    ) -> str:
        """Return the full board: header, one rail per track, then a legend line.

        Held trains are drawn in lower case.
        """
        lines = []
        if clock_label:
            lines.append(f"Sim time {clock_label}")
        lines.append(" " * 9 + self.header())
        by_track: dict[int, list[TrainState]] = {idx: [] for idx in tracks.tracks()}
        for state in trains:
            by_track.setdefault(state.track_index, []).append(state)
        for idx in sorted(by_track):
            lines.append(f"{tracks.label(idx):<8} {self.rail(by_track[idx])}")
        legend = ", ".join(
            f"{s.train_id[:1].upper()}={s.label}{' [held]' if s.held else ''}" for s in trains
        )
        if legend:
            lines.append(legend)
        return "\n".join(lines)
