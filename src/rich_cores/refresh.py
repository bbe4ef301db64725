"""Periodic background refresh.

AutoRefresher runs one daemon thread that calls ``tick`` every ``interval``
seconds until stopped. The thread handle and its stop event are guarded by
a single lock; starting while running first signals the old thread to stop,
so at most one ticker keeps ticking per refresher.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class AutoRefresher:
    """Cancellable ticker thread.

    Args:
        tick: Called on the ticker thread once per interval. It must marshal
            any UI effects onto the UI thread itself.
        name: Thread name prefix, for debugging.
    """

    def __init__(self, tick: Callable[[], None], name: str = "auto-refresh"):
        self._tick = tick
        self._name = name
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._interval: float | None = None

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._thread is not None

    @property
    def interval(self) -> float | None:
        """Seconds between ticks, or None when stopped."""
        return self._interval

    @property
    def thread(self) -> threading.Thread | None:
        return self._thread

    def start(self, interval: float) -> bool:
        """Start ticking every ``interval`` seconds.

        Returns True if a running ticker was replaced.
        """
        if interval <= 0:
            raise ValueError(f"Refresh interval must be positive, got {interval!r}")

        with self._lock:
            replaced = self._stop_locked()
            stop_event = self._stop_event
            thread = threading.Thread(
                target=self._run,
                args=(interval, stop_event),
                name=f"{self._name}-{interval:g}s",
                daemon=True,
            )
            self._thread = thread
            self._interval = interval
            thread.start()

        logger.debug("Auto-refresh started: %s every %gs", self._name, interval)
        return replaced

    def stop(self) -> bool:
        """Stop ticking. Safe to call when not running (returns False).

        Returns without waiting for the thread: a tick already running
        finishes on its own, and no further tick starts.
        """
        with self._lock:
            stopped = self._stop_locked()
        if stopped:
            logger.debug("Auto-refresh stopped: %s", self._name)
        return stopped

    def _stop_locked(self) -> bool:
        if self._thread is None:
            return False

        self._stop_event.set()
        # Fresh event so the next start never sees an already-set signal.
        self._stop_event = threading.Event()
        self._thread = None
        self._interval = None
        return True

    def _run(self, interval: float, stop_event: threading.Event) -> None:
        while not stop_event.wait(interval):
            try:
                self._tick()
            except Exception:
                logger.exception("Auto-refresh tick failed: %s", self._name)
