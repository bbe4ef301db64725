"""Log panel: the user-visible message list in the dashboard header."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from rich.text import Text

from .themes import DEFAULT_THEME, Theme

if TYPE_CHECKING:
    from .core import CoreView

INFO = "info"
WARNING = "warning"
ERROR = "error"

_LEVEL_TAGS = {INFO: "INFO", WARNING: "WARN", ERROR: "ERROR"}


@dataclass(frozen=True)
class LogEntry:
    timestamp: datetime
    level: str
    message: str

    @property
    def tag(self) -> str:
        return _LEVEL_TAGS.get(self.level, self.level.upper())


class LogPanel:
    """Bounded list of timestamped, level-tagged messages (oldest dropped)."""

    def __init__(self, max_lines: int = 200) -> None:
        self._entries: deque[LogEntry] = deque(maxlen=max(1, max_lines))

    def append(self, message: str, level: str = INFO) -> LogEntry:
        if level not in _LEVEL_TAGS:
            raise ValueError(f"Unknown log level: {level!r}")
        entry = LogEntry(timestamp=datetime.now(), level=level, message=message)
        self._entries.append(entry)
        return entry

    def clear(self) -> None:
        self._entries.clear()

    @property
    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    def count(self, level: str | None = None) -> int:
        if level is None:
            return len(self._entries)
        return sum(1 for entry in self._entries if entry.level == level)

    def __len__(self) -> int:
        return len(self._entries)

    def render(self, limit: int | None = None, theme: Theme = DEFAULT_THEME) -> Text:
        """Render the newest ``limit`` entries (all when None)."""
        entries = list(self._entries)
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []

        level_styles = {
            INFO: theme.info_level_style,
            WARNING: theme.warning_level_style,
            ERROR: theme.error_level_style,
        }
        lines = []
        for entry in entries:
            line = Text()
            line.append(entry.timestamp.strftime("%H:%M:%S"), style=theme.timestamp_style)
            line.append(" ")
            line.append(entry.tag, style=level_styles[entry.level])
            line.append(" ")
            line.append(entry.message)
            lines.append(line)
        return Text("\n").join(lines)


class LogPanelHandler(logging.Handler):
    """logging.Handler that writes records into a view's log panel.

    Records emitted off the UI thread are marshaled through the view's
    application queue.
    """

    def __init__(self, view: "CoreView", level: int = logging.INFO):
        super().__init__(level)
        self.view = view

    @staticmethod
    def panel_level(levelno: int) -> str:
        if levelno >= logging.ERROR:
            return ERROR
        if levelno >= logging.WARNING:
            return WARNING
        return INFO

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
        except Exception:
            self.handleError(record)
            return
        level = self.panel_level(record.levelno)
        self.view.app.call_on_ui(lambda: self.view.log(message, level=level))
