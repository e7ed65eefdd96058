"""Piecewise time → progress model for scripted trains.

Each train owns an ordered, contiguous list of :class:`Segment` objects.
Before the first segment the train sits at the first segment's start
progress; after the last it sits at the last segment's end progress.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence

from corridor_sim.schedule.models import Segment, SegmentKind

_logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 1e-9


class ScheduleError(ValueError):
    """A train's segment sequence is malformed (gap, overlap, discontinuity...)."""

    def __init__(self, train_id: str, message: str) -> None:
        super().__init__(f"{train_id}: {message}")
        self.train_id = train_id


class UnknownTrainError(KeyError):
    """Raised when evaluating a train that has no (valid) schedule."""


def validate_segments(
    train_id: str,
    segments: Sequence[Segment],
    route_length: float,
    epsilon: float = DEFAULT_EPSILON,
) -> None:
    """Check a single train's segments; raise :class:`ScheduleError` on the first problem."""
    if not segments:
        raise ScheduleError(train_id, "no segments defined")

    for i, seg in enumerate(segments):
        values = (seg.start, seg.end, seg.start_progress, seg.end_progress)
        if not all(math.isfinite(v) for v in values):
            raise ScheduleError(train_id, f"segment {i} has non-finite values")
        if seg.end <= seg.start:
            raise ScheduleError(
                train_id, f"segment {i} ends at {seg.end} before it starts at {seg.start}"
            )
        if seg.kind is SegmentKind.HELD and seg.start_progress != seg.end_progress:
            raise ScheduleError(train_id, f"held segment {i} changes progress")
        for p in (seg.start_progress, seg.end_progress):
            if p < -epsilon or p > route_length + epsilon:
                raise ScheduleError(
                    train_id, f"segment {i} progress {p} outside [0, {route_length}]"
                )

    for i, (prev, nxt) in enumerate(zip(segments, segments[1:]), start=1):
        if abs(nxt.start - prev.end) > epsilon:
            kind = "gap" if nxt.start > prev.end else "overlap"
            raise ScheduleError(
                train_id, f"{kind} between segment {i - 1} (ends {prev.end}) "
                f"and segment {i} (starts {nxt.start})"
            )
        if abs(nxt.start_progress - prev.end_progress) > epsilon:
            raise ScheduleError(
                train_id,
                f"progress jumps from {prev.end_progress} to {nxt.start_progress} "
                f"at t={nxt.start}",
            )


class PositionModel:
    """Evaluate train progress as a pure function of ``(train_id, t)``.

    Args:
        table: Mapping of train id → ordered segment sequence.
        route_length: Route length; every progress value lies in ``[0, route_length]``.
        strict: When True (default) the first invalid schedule raises
            :class:`ScheduleError`.  When False invalid trains are refused,
            logged and listed in :attr:`rejected`; the others are served.
        epsilon: Tolerance for contiguity and continuity checks.
    """

    def __init__(
        self,
        table: Mapping[str, Sequence[Segment]],
        route_length: float,
        strict: bool = True,
        epsilon: float = DEFAULT_EPSILON,
    ) -> None:
        if route_length <= 0:
            raise ValueError("route_length must be > 0")
        self.route_length = route_length
        self.epsilon = epsilon
        self._segments: dict[str, tuple[Segment, ...]] = {}
        self.rejected: dict[str, ScheduleError] = {}

        for train_id, segments in table.items():
            ordered = tuple(segments)
            try:
                validate_segments(train_id, ordered, route_length, epsilon)
            except ScheduleError as exc:
                if strict:
                    raise
                _logger.error("Refusing schedule for train %s: %s", train_id, exc)
                self.rejected[train_id] = exc
                continue
            self._segments[train_id] = ordered

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def train_ids(self) -> list[str]:
        return list(self._segments)

    def segments(self, train_id: str) -> tuple[Segment, ...]:
        try:
            return self._segments[train_id]
        except KeyError:
            raise UnknownTrainError(train_id) from None

    def evaluate(self, train_id: str, t: float) -> float:
        """Return the train's progress at virtual time *t*.

        Raises:
            UnknownTrainError: If *train_id* has no schedule.
            ValueError: If *t* is NaN.
        """
        if math.isnan(t):
            raise ValueError("t must not be NaN")
        segments = self.segments(train_id)

        if t < segments[0].start:
            progress = segments[0].start_progress
        else:
            seg = self._find(segments, t)
            progress = segments[-1].end_progress if seg is None else self._apply(seg, t)
        # validation tolerates epsilon overshoot; never report it
        return max(0.0, min(self.route_length, progress))

    def segment_at(self, train_id: str, t: float) -> Segment | None:
        """Return the segment containing *t*, or None outside the schedule."""
        return self._find(self.segments(train_id), t)

    def is_held(self, train_id: str, t: float) -> bool:
        """True while the train waits in a hold marked ``awaiting_overtake``."""
        seg = self.segment_at(train_id, t)
        return seg is not None and seg.awaiting_overtake

    def crossings(self, train_a: str, train_b: str) -> list[float]:
        """Return the times at which the order of two trains along the route flips.

        Both curves are piecewise linear, so the difference is evaluated at the
        union of their breakpoints and roots are interpolated between them.
        When the trains run level for a while, the time they met is reported.
        """
        points = sorted(
            {s.start for s in self.segments(train_a)}
            | {s.end for s in self.segments(train_a)}
            | {s.start for s in self.segments(train_b)}
            | {s.end for s in self.segments(train_b)}
        )
        result: list[float] = []
        last_sign = 0
        prev_t = prev_d = None
        level_since: float | None = None

        for t in points:
            d = self.evaluate(train_a, t) - self.evaluate(train_b, t)
            sign = 0 if abs(d) <= self.epsilon else (1 if d > 0 else -1)
            if sign == 0:
                if level_since is None:
                    level_since = t
            else:
                if last_sign and sign != last_sign:
                    if level_since is not None:
                        result.append(level_since)
                    else:
                        result.append(prev_t + (t - prev_t) * prev_d / (prev_d - d))
                level_since = None
                last_sign = sign
            prev_t, prev_d = t, d

        return result

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _find(segments: Sequence[Segment], t: float) -> Segment | None:
        for seg in segments:
            if seg.contains(t):
                return seg
        return None

    @staticmethod
    def _apply(seg: Segment, t: float) -> float:
        if seg.kind is SegmentKind.HELD:
            return seg.start_progress
        progress = seg.start_progress + (t - seg.start) * seg.rate
        lo = min(seg.start_progress, seg.end_progress)
        hi = max(seg.start_progress, seg.end_progress)
        return max(lo, min(hi, progress))
