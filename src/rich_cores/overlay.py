"""Overlay lifecycle: one modal page plus the input frame that owns it.

Opening an overlay adds its page and pushes an input frame on top of the
application's dispatcher. That frame handles ESC (cancel) and hands every
other key to the overlay's own key handler, then to the frames beneath.
Every way out (ESC, a confirm button, a cancel button, a programmatic
close) goes through ``close()``, which removes the page and the frame
together and is safe to call more than once.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .input import HandlerFrame
from .keys import is_escape

if TYPE_CHECKING:
    from .app import Application

logger = logging.getLogger(__name__)


class Overlay:
    """A modal page with a scoped ESC/cancel handler.

    Args:
        app: Application whose pages and input stack the overlay uses.
        page_id: Page name; must not be empty. Several open overlays may
            share one, since pages are keyed by the overlay itself.
        body: Any Rich renderable shown while open.
        on_cancel: Called once after the overlay is closed by cancel/ESC.
        on_key: Handler for non-ESC keys; returns None to consume the key
            or a key to pass it to the frames beneath.
        cancellable: When False, ESC is swallowed instead of cancelling.
    """

    def __init__(
        self,
        app: "Application",
        page_id: str,
        body: Any,
        on_cancel: Callable[[], None] | None = None,
        on_key: Callable[[str], str | None] | None = None,
        cancellable: bool = True,
    ):
        if not page_id:
            raise ValueError("Overlay page id must not be empty")
        self.app = app
        self.page_id = page_id
        self.body = body
        self.on_cancel = on_cancel
        self.on_key = on_key
        self.cancellable = cancellable
        self._frame: HandlerFrame | None = None

    @property
    def is_open(self) -> bool:
        return self._frame is not None

    @property
    def frame(self) -> HandlerFrame | None:
        return self._frame

    def open(self) -> None:
        """Show the page and take input priority. No-op if already open."""
        if self._frame is not None:
            return
        self.app.pages.add_page(self.page_id, self.body, key=self)
        self._frame = self.app.input.push(f"overlay:{self.page_id}", self._handle_key)
        self.app.draw()
        logger.debug("Overlay opened: %s", self.page_id)

    def close(self) -> bool:
        """Remove the page and release the input frame.

        Returns False if the overlay was not open, so callers can tell the
        first close from repeated ones.
        """
        if self._frame is None:
            return False
        frame = self._frame
        self._frame = None
        self.app.pages.remove_page(self)
        self.app.input.remove(frame)
        self.app.draw()
        logger.debug("Overlay closed: %s", self.page_id)
        return True

    def cancel(self) -> bool:
        """Close and run ``on_cancel``; False if already closed."""
        if not self.close():
            return False
        if self.on_cancel is not None:
            self.on_cancel()
        return True

    def _handle_key(self, key: str) -> str | None:
        if is_escape(key):
            if self.cancellable:
                self.cancel()
            return None
        if self.on_key is not None:
            return self.on_key(key)
        return key
