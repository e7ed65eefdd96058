"""Pydantic schemas for externally supplied live position batches."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from corridor_sim.overlay.models import HELD_STATUS, Snapshot, TrainState

_logger = logging.getLogger(__name__)


class LiveTrainReport(BaseModel):
    """One train's live position report.  Every field may be missing."""

    model_config = ConfigDict(extra="ignore")

    train_no: str | None = None
    train_name: str | None = None
    current_lat: float | None = None
    current_lon: float | None = None
    priority: str | None = None
    status: str | None = None
    track: int | None = None

    @field_validator("train_no", mode="before")
    @classmethod
    def _coerce_train_no(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def held(self) -> bool:
        return (self.status or "").strip().lower() == HELD_STATUS.lower()

    @property
    def label(self) -> str:
        return " ".join(p for p in (self.train_no, self.train_name) if p)

    def to_state(self) -> TrainState | None:
        """Return a :class:`TrainState`, or None when the report has no identity."""
        if not self.train_no:
            return None
        coords = None
        if self.current_lat is not None and self.current_lon is not None:
            coords = (self.current_lon, self.current_lat)
        return TrainState(
            train_id=self.train_no,
            label=self.label,
            category=self.priority or "unknown",
            track_index=self.track if self.track is not None and self.track >= 0 else 0,
            coordinates=coords,
            held=self.held,
            priority=self.priority,
        )


class LiveBatch(BaseModel):
    """A batch of live reports.  Malformed reports are dropped individually."""

    sequence: int | None = None
    trains: list[LiveTrainReport] = []

    @field_validator("trains", mode="before")
    @classmethod
    def _drop_malformed(cls, value):
        if not isinstance(value, list):
            raise ValueError("trains must be a list")
        kept: list[LiveTrainReport] = []
        for i, item in enumerate(value):
            try:
                kept.append(LiveTrainReport.model_validate(item))
            except ValidationError as exc:
                _logger.warning("Dropping malformed live report #%d: %s", i, exc.errors()[0]["msg"])
        return kept

    def to_snapshot(self) -> Snapshot:
        states = []
        for report in self.trains:
            state = report.to_state()
            if state is None:
                _logger.warning("Dropping live report without train_no")
                continue
            states.append(state)
        return Snapshot(trains=tuple(states), sequence=self.sequence)
