"""SimulationClock — looping virtual time driven by an external tick source."""

from __future__ import annotations

import math
import threading


class SimulationClock:
    """Virtual time register that loops over ``[0, horizon]``.

    The clock has no paused state: pausing means the driver stops calling
    :meth:`advance`.

    Parameters
    ----------
    horizon:
        Scenario length in virtual units (minutes for the bundled scenario).
        When an advance would exceed it, time wraps to 0.
    speed_factor:
        Virtual units per real second.
    """

    def __init__(self, horizon: float, speed_factor: float = 1.0) -> None:
        if not math.isfinite(horizon) or horizon <= 0:
            raise ValueError("horizon must be a positive finite number")
        _check_speed(speed_factor)
        self._horizon = horizon
        self._speed = speed_factor
        self._now = 0.0
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def horizon(self) -> float:
        return self._horizon

    @property
    def now(self) -> float:
        with self._lock:
            return self._now

    @property
    def speed_factor(self) -> float:
        with self._lock:
            return self._speed

    def advance(self, delta_real_seconds: float) -> float:
        """Advance by ``delta_real_seconds * speed_factor`` and return the new time.

        A result greater than the horizon restarts the scenario at 0.
        """
        if not math.isfinite(delta_real_seconds) or delta_real_seconds < 0:
            raise ValueError("delta_real_seconds must be a non-negative finite number")
        with self._lock:
            nxt = self._now + delta_real_seconds * self._speed
            self._now = 0.0 if nxt > self._horizon else nxt
            return self._now

    def reset(self) -> float:
        with self._lock:
            self._now = 0.0
            return self._now

    def seek(self, t: float) -> float:
        """Jump to virtual time *t* (scrubbing backward or forward)."""
        if not math.isfinite(t) or not 0.0 <= t <= self._horizon:
            raise ValueError(f"t must be within [0, {self._horizon}]")
        with self._lock:
            self._now = float(t)
            return self._now

    def set_speed_factor(self, factor: float) -> None:
        """Change the speed multiplier; non-positive values are rejected."""
        _check_speed(factor)
        with self._lock:
            self._speed = float(factor)


def _check_speed(factor: float) -> None:
    if not math.isfinite(factor) or factor <= 0:
        raise ValueError(f"speed factor must be > 0, got {factor!r}")


def format_clock(start_label: str, minutes: float) -> str:
    """Return the wall-clock label *minutes* after *start_label* (``HH:MM``).

    >>> format_clock("12:00", 75)
    '13:15'
    """
    hours, _, mins = start_label.partition(":")
    total = int(hours) * 60 + int(mins or 0) + minutes
    h = int(total // 60) % 24
    m = int(total % 60)
    return f"{h}:{m:02d}"
