"""LiveFeed — poll a live position source and push batches to the overlay."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from corridor_sim.live.schemas import LiveBatch
from corridor_sim.overlay.models import ReconcileResult
from corridor_sim.overlay.synchronizer import OverlaySynchronizer
from corridor_sim.simulation.ticker import PeriodicTask

_logger = logging.getLogger(__name__)


class LiveSource(Protocol):
    def fetch(self) -> dict | None: ...


class JsonFileSource:
    """Reads a live batch from a JSON file on every fetch.

    Returns None while the file is missing, so a feed can start before the
    producer has written anything.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def fetch(self) -> dict | None:
        if not self.path.exists():
            return None
        return json.loads(self.path.read_text(encoding="utf-8"))


class LiveFeed:
    """Polls *source* every *interval_s* seconds and reconciles each batch.

    Parameters
    ----------
    source:
        Object with ``fetch() -> dict | None``.
    synchronizer:
        The :class:`OverlaySynchronizer` owning the live feature source.
    interval_s:
        Polling period in seconds.
    """

    def __init__(
        self,
        source: LiveSource,
        synchronizer: OverlaySynchronizer,
        interval_s: float = 5.0,
    ) -> None:
        self._source = source
        self._sync = synchronizer
        self._task = PeriodicTask(interval_s, self._poll, name="LiveFeed")
        self.applied = 0
        self.rejected = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        self._task.start()

    def stop(self) -> None:
        self._task.stop()

    @property
    def running(self) -> bool:
        return self._task.running

    def ingest(self, raw: dict) -> ReconcileResult | None:
        """Validate one raw batch and reconcile it; None if the batch is malformed."""
        try:
            batch = LiveBatch.model_validate(raw)
        except ValidationError as exc:
            self.rejected += 1
            _logger.warning("Rejected live batch: %s", exc)
            return None
        result = self._sync.reconcile(batch.to_snapshot())
        if result.applied:
            self.applied += 1
        return result

    def poll_once(self) -> ReconcileResult | None:
        """Fetch from the source and ingest; source errors are logged, not raised."""
        try:
            raw = self._source.fetch()
        except Exception as exc:
            _logger.warning("Live source fetch failed: %s", exc)
            return None
        if raw is None:
            return None
        return self.ingest(raw)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _poll(self, _elapsed: float) -> None:
        self.poll_once()
