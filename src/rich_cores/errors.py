"""Error reporting for dashboard hosts.

ErrorHandler writes a level-tagged line to a log function (typically
``CoreView.log``) and to ``logging``, and escalates ERROR and FATAL to an
error dialog. Non-fatal dialogs dismiss themselves after a delay.
"""

from __future__ import annotations

import enum
import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from .dialogs import ErrorDialog, show_error_dialog
from .logpanel import ERROR, INFO, WARNING

if TYPE_CHECKING:
    from .app import Application

logger = logging.getLogger(__name__)


class ErrorLevel(enum.IntEnum):
    INFO = 0
    WARNING = 1
    ERROR = 2
    FATAL = 3

    @property
    def tag(self) -> str:
        return "WARN" if self is ErrorLevel.WARNING else self.name


_PANEL_LEVELS = {
    ErrorLevel.INFO: INFO,
    ErrorLevel.WARNING: WARNING,
    ErrorLevel.ERROR: ERROR,
    ErrorLevel.FATAL: ERROR,
}

_LOGGING_LEVELS = {
    ErrorLevel.INFO: logging.INFO,
    ErrorLevel.WARNING: logging.WARNING,
    ErrorLevel.ERROR: logging.ERROR,
    ErrorLevel.FATAL: logging.CRITICAL,
}


class ErrorHandler:
    """Route errors to the log panel and, when serious, an error dialog.

    Args:
        app: Application used to show dialogs and marshal the dismiss timer.
        log_func: Called as ``log_func(message, level=...)``; may be None.
        dismiss_seconds: Auto-dismiss delay for non-fatal error dialogs
            (defaults to the ``error_dismiss_seconds`` config value).
    """

    def __init__(
        self,
        app: "Application",
        log_func: Callable[..., None] | None = None,
        dismiss_seconds: float | None = None,
    ):
        self.app = app
        self.log_func = log_func
        if dismiss_seconds is None:
            dismiss_seconds = app.config.get("error_dismiss_seconds", 5)
        self.dismiss_seconds = dismiss_seconds
        self.dialog: ErrorDialog | None = None

    def handle_error(self, err: BaseException | str | None, level: ErrorLevel, title: str = "") -> None:
        if err is None:
            return
        message = str(err)

        if self.log_func is not None:
            self.log_func(f"{level.tag} {message}", level=_PANEL_LEVELS[level])
        logger.log(_LOGGING_LEVELS[level], "[%s] %s", level.tag, message)

        if level >= ErrorLevel.ERROR:
            self._show_dialog(title or "Error", message, fatal=level >= ErrorLevel.FATAL)

    def handle_error_with_callback(
        self,
        err: BaseException | str | None,
        level: ErrorLevel,
        title: str = "",
        callback: Callable[[], None] | None = None,
    ) -> None:
        """Handle ``err``, then run ``callback`` unless the error was fatal."""
        if err is None:
            if callback is not None:
                callback()
            return

        self.handle_error(err, level, title)
        if level < ErrorLevel.FATAL and callback is not None:
            callback()

    def _show_dialog(self, title: str, message: str, fatal: bool) -> None:
        def show() -> None:
            if self.dialog is not None:
                self.dialog.dismiss()
            dialog = show_error_dialog(self.app, title, message)
            self.dialog = dialog
            if not fatal and self.dismiss_seconds > 0:
                timer = threading.Timer(
                    self.dismiss_seconds,
                    self.app.queue_update_draw,
                    args=(dialog.dismiss,),
                )
                timer.daemon = True
                timer.start()

        self.app.call_on_ui(show)
