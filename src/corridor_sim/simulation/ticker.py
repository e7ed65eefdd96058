"""PeriodicTask — an owned recurring trigger with explicit start/stop."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

_logger = logging.getLogger(__name__)


class PeriodicTask:
    """Call *callback(elapsed_s)* every *interval_s* seconds on a daemon thread.

    ``elapsed_s`` is the real time measured since the previous call (or since
    :meth:`start` for the first one).  After :meth:`stop` returns no further
    callbacks fire.  Exceptions raised by the callback are logged and the task
    keeps running.

    Parameters
    ----------
    interval_s:
        Tick period in seconds.
    callback:
        Called with the elapsed real seconds.
    name:
        Thread name, for debugging.
    """

    def __init__(
        self,
        interval_s: float,
        callback: Callable[[float], object],
        name: str = "PeriodicTask",
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        self._interval = interval_s
        self._callback = callback
        self._name = name
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        """Start ticking; a no-op if already running."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True, name=self._name)
        self._thread.start()

    def stop(self) -> None:
        """Stop ticking and join the thread."""
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=2.0)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _run(self) -> None:
        last = time.monotonic()
        while not self._stop_event.wait(self._interval):
            now = time.monotonic()
            elapsed, last = now - last, now
            if self._stop_event.is_set():
                break
            try:
                self._callback(elapsed)
            except Exception:
                _logger.exception("%s callback failed", self._name)
