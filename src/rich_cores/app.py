"""Application: the host handle every view and dialog attaches to.

The application owns the single UI thread. Key presses (read on a helper
thread with readchar) and updates from background work are both funneled
through one thread-safe queue and executed on the UI thread, followed by a
redraw of the Rich Live display. Background code must never touch views
directly; it calls ``queue_update`` / ``queue_update_draw`` instead.
"""

from __future__ import annotations

import functools
import logging
import queue
import threading
from collections.abc import Callable
from typing import Any

import readchar
from rich.align import Align
from rich.console import Console
from rich.live import Live
from rich.text import Text

from .config import load_config
from .input import InputDispatcher
from .keys import normalize_key
from .pages import Pages
from .themes import Theme, get_theme

logger = logging.getLogger(__name__)


class Application:
    """Event loop, input dispatcher and page container for one dashboard.

    Args:
        console: Rich Console to render to (auto-created if not provided).
        config: Configuration mapping (loaded from disk if not provided).
        theme: Theme override (defaults to the configured theme).
    """

    POLL_INTERVAL = 0.1

    def __init__(
        self,
        console: Console | None = None,
        config: dict[str, Any] | None = None,
        theme: Theme | None = None,
    ):
        self.console = console or Console(highlight=False)
        self.config = config if config is not None else load_config()
        self.theme = theme or get_theme(self.config.get("theme"))
        self.input = InputDispatcher()
        self.pages = Pages()
        self._root: Any = None
        self._queue: queue.Queue[tuple[Callable[[], None], bool]] = queue.Queue()
        self._ui_thread = threading.get_ident()
        self._running = False
        self._dirty = True
        self._live: Live | None = None

    # -- UI thread marshaling --

    def in_ui_thread(self) -> bool:
        """True when called from the thread that owns the UI."""
        return threading.get_ident() == self._ui_thread

    def queue_update(self, fn: Callable[[], None]) -> None:
        """Schedule ``fn`` to run on the UI thread. Safe from any thread."""
        self._queue.put((fn, False))

    def queue_update_draw(self, fn: Callable[[], None]) -> None:
        """Schedule ``fn`` on the UI thread and redraw afterwards."""
        self._queue.put((fn, True))

    def call_on_ui(self, fn: Callable[[], None]) -> None:
        """Run ``fn`` now if on the UI thread, otherwise queue it with a redraw."""
        if self.in_ui_thread():
            fn()
            self.draw()
        else:
            self.queue_update_draw(fn)

    def process_pending(self, max_items: int = 100) -> int:
        """Run queued updates on the calling (UI) thread.

        Returns the number of updates executed.
        """
        count = 0
        while count < max_items:
            try:
                fn, redraw = self._queue.get_nowait()
            except queue.Empty:
                break
            fn()
            if redraw:
                self._dirty = True
            count += 1
        return count

    def has_pending(self) -> bool:
        return not self._queue.empty()

    # -- input --

    def handle_key(self, raw: str) -> str | None:
        """Dispatch one raw key through the input stack.

        Returns None when consumed, otherwise the normalized key that no
        frame claimed.
        """
        key = normalize_key(raw)
        remaining = self.input.dispatch(key)
        self._dirty = True
        if remaining is not None:
            logger.debug("Unhandled key: %r", remaining)
        return remaining

    def _read_keys(self) -> None:
        while self._running:
            try:
                raw = readchar.readkey()
            except KeyboardInterrupt:
                self.queue_update(self.stop)
                return
            self.queue_update(functools.partial(self.handle_key, raw))

    # -- rendering --

    def set_root(self, renderable: Any) -> None:
        """Set the main content (anything Rich can render, e.g. a CoreView)."""
        self._root = renderable
        self._dirty = True

    @property
    def root(self) -> Any:
        return self._root

    def draw(self) -> None:
        """Mark the display dirty; the loop redraws after the current update."""
        self._dirty = True

    @property
    def needs_draw(self) -> bool:
        return self._dirty

    def render(self) -> Any:
        """Return the renderable for the current frame.

        The front page (an open dialog) takes the screen when present.
        """
        front = self.pages.front()
        if front is not None:
            _name, body = front
            return Align.center(body, vertical="middle")
        if self._root is None:
            return Text("")
        return self._root

    # -- lifecycle --

    @property
    def is_running(self) -> bool:
        return self._running

    def stop(self) -> None:
        """Ask the event loop to exit after the current update."""
        self._running = False

    def run(self) -> None:
        """Take over the terminal and process input until ``stop()``."""
        self._ui_thread = threading.get_ident()
        self._running = True
        reader = threading.Thread(target=self._read_keys, name="rich-cores-keys", daemon=True)

        with Live(
            self.render(),
            console=self.console,
            screen=True,
            auto_refresh=False,
            redirect_stdout=False,
            redirect_stderr=False,
        ) as live:
            self._live = live
            reader.start()
            try:
                while self._running:
                    try:
                        fn, redraw = self._queue.get(timeout=self.POLL_INTERVAL)
                    except queue.Empty:
                        pass
                    else:
                        fn()
                        if redraw:
                            self._dirty = True
                        self.process_pending()

                    if self._dirty:
                        self._dirty = False
                        live.update(self.render(), refresh=True)
            finally:
                self._live = None
                self._running = False
