"""Modal dialogs built on Overlay.

Each dialog is a Rich renderable registered as an overlay page. Dialogs are
modal: while one is open it consumes every key, including keys it has no
use for, so nothing reaches the view or the quit handler hidden behind it.
Plain Overlay objects without a key handler pass such keys down instead.
All of them report their outcome through a single
``callback(result, cancelled)``, invoked exactly once through the overlay
close path (ESC reports ``(None, True)``).
"""

from __future__ import annotations

import enum
import logging
import os
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from .keys import (
    BACKSPACE,
    DOWN,
    ENTER,
    LEFT,
    RIGHT,
    TAB,
    UP,
    is_backspace,
    is_down,
    is_enter,
    is_printable,
    is_up,
)
from .overlay import Overlay

if TYPE_CHECKING:
    from .app import Application

logger = logging.getLogger(__name__)

DialogCallback = Callable[[Any, bool], None]


class ButtonBar:
    """A row of buttons with one focused."""

    def __init__(self, labels: Sequence[str], focus: int = 0):
        self.labels = list(labels)
        self.focus = focus

    @property
    def focused(self) -> str:
        return self.labels[self.focus]

    def move(self, delta: int) -> None:
        self.focus = (self.focus + delta) % len(self.labels)

    def handle_key(self, key: str) -> bool:
        """Move focus on Left/Right/Tab; True if the key was used."""
        if key in (LEFT, "h"):
            self.move(-1)
        elif key in (RIGHT, "l", TAB):
            self.move(1)
        else:
            return False
        return True

    def render(self, theme, active: bool = True) -> Text:
        text = Text(justify="center")
        for i, label in enumerate(self.labels):
            if i:
                text.append("  ")
            focused = active and i == self.focus
            style = theme.button_focus_style if focused else theme.button_style
            text.append(f" {label} ", style=style)
        return text


class Dialog:
    """Base class: an overlay page that renders itself and completes once.

    Subclasses implement ``render_body`` and ``handle_key``.
    """

    page_id = "dialog-modal"
    width = 60

    def __init__(
        self,
        app: "Application",
        title: str,
        callback: DialogCallback | None = None,
        cancellable: bool = True,
    ):
        self.app = app
        self.theme = app.theme
        self.title = title
        self.callback = callback
        self.overlay = Overlay(
            app,
            self.page_id,
            self,
            on_cancel=self._on_cancel,
            on_key=self._on_key,
            cancellable=cancellable,
        )

    @property
    def is_open(self) -> bool:
        return self.overlay.is_open

    def show(self) -> "Dialog":
        self.overlay.open()
        return self

    def finish(self, result: Any, cancelled: bool = False) -> None:
        """Close the dialog and report the outcome (first call only)."""
        if self.overlay.close() and self.callback is not None:
            self.callback(result, cancelled)

    def cancel(self) -> None:
        self.overlay.cancel()

    def _on_cancel(self) -> None:
        if self.callback is not None:
            self.callback(None, True)

    def _on_key(self, key: str) -> None:
        self.handle_key(key)
        self.app.draw()
        return None

    def handle_key(self, key: str) -> None:
        pass

    def border_style(self) -> str:
        return self.theme.dialog_border_style

    def render_body(self) -> RenderableType:
        return Text("")

    def __rich__(self) -> Panel:
        return Panel(
            self.render_body(),
            title=Text(f" {self.title} ", style=self.theme.dialog_title_style),
            border_style=self.border_style(),
            width=self.width,
            padding=(1, 2),
        )


class ConfirmationDialog(Dialog):
    """Yes/No question. Result is True for Yes, False for No."""

    page_id = "confirmation-modal"

    def __init__(self, app, title, message, callback=None):
        super().__init__(app, title, callback)
        self.message = message
        self.buttons = ButtonBar(["Yes", "No"])

    def handle_key(self, key: str) -> None:
        if self.buttons.handle_key(key):
            return
        if key in ("y", "Y"):
            self.finish(True)
        elif key in ("n", "N"):
            self.finish(False)
        elif is_enter(key):
            self.finish(self.buttons.focused == "Yes")

    def render_body(self) -> RenderableType:
        return Group(Text(self.message, justify="center"), Text(""), self.buttons.render(self.theme))


class MessageDialog(Dialog):
    """A message with a single OK button."""

    page_id = "info-modal"

    def __init__(self, app, title, message, callback=None):
        super().__init__(app, title, callback)
        self.message = message
        self.buttons = ButtonBar(["OK"])

    def handle_key(self, key: str) -> None:
        if is_enter(key) or key == " ":
            self.finish(None)

    def dismiss(self) -> None:
        """Close as if OK was pressed."""
        self.finish(None)

    def render_body(self) -> RenderableType:
        return Group(Text(self.message, justify="center"), Text(""), self.buttons.render(self.theme))


class ErrorDialog(MessageDialog):
    page_id = "error-modal"

    def border_style(self) -> str:
        return self.theme.error_border_style


class InfoDialog(MessageDialog):
    page_id = "info-modal"


class InputDialog(Dialog):
    """Single-line text input with OK/Cancel.

    Tab cycles focus between the field and the buttons. OK with empty text
    reports ``(None, True)`` unless ``allow_empty`` is set.
    """

    page_id = "input-modal"
    width = 50
    MAX_LENGTH = 256

    def __init__(self, app, title, label, default="", callback=None, allow_empty=False):
        super().__init__(app, title, callback)
        self.label = label
        self.text = default
        self.allow_empty = allow_empty
        self.buttons = ButtonBar(["OK", "Cancel"])
        self.field_focused = True

    def submit(self) -> None:
        if not self.text and not self.allow_empty:
            self.finish(None, cancelled=True)
        else:
            self.finish(self.text)

    def handle_key(self, key: str) -> None:
        if key == TAB:
            if self.field_focused:
                self.field_focused = False
                self.buttons.focus = 0
            elif self.buttons.focus == len(self.buttons.labels) - 1:
                self.field_focused = True
            else:
                self.buttons.move(1)
        elif is_enter(key):
            if self.field_focused or self.buttons.focused == "OK":
                self.submit()
            else:
                self.finish(None, cancelled=True)
        elif self.field_focused:
            if is_backspace(key):
                self.text = self.text[:-1]
            elif is_printable(key) and len(self.text) < self.MAX_LENGTH:
                self.text += key
        elif key in (LEFT, RIGHT):
            self.buttons.handle_key(key)

    def render_body(self) -> RenderableType:
        field = Text()
        field.append(f"{self.label}: ", style=self.theme.info_key_style)
        field.append(self.text)
        if self.field_focused:
            field.append("▏", style=self.theme.dim_style)
        return Group(field, Text(""), self.buttons.render(self.theme, active=not self.field_focused))


class ListDialog(Dialog):
    """Pick one of ``[name, description]`` items.

    Result is ``(index, name)``. Digits 0-9 pick the matching item directly.
    """

    page_id = "list-selector-modal"
    width = 50

    def __init__(self, app, title, items, callback=None):
        super().__init__(app, title, callback)
        self.items = [(item[0], item[1] if len(item) > 1 else "") for item in items]
        self.cursor = 0

    def choose(self, index: int) -> None:
        if 0 <= index < len(self.items):
            self.finish((index, self.items[index][0]))

    def handle_key(self, key: str) -> None:
        if not self.items:
            return
        if is_up(key):
            self.cursor = (self.cursor - 1) % len(self.items)
        elif is_down(key):
            self.cursor = (self.cursor + 1) % len(self.items)
        elif is_enter(key):
            self.choose(self.cursor)
        elif key.isdigit():
            self.choose(int(key))

    def render_body(self) -> RenderableType:
        lines = []
        for i, (name, description) in enumerate(self.items):
            selected = i == self.cursor
            line = Text(style=self.theme.selected_style if selected else "")
            shortcut = f"({i}) " if i < 10 else "    "
            line.append(shortcut, style=self.theme.key_style if not selected else "")
            line.append(name)
            lines.append(line)
            if description:
                lines.append(Text(f"     {description}", style=self.theme.dim_style))
        lines.append(Text(""))
        lines.append(Text("Enter: Select  •  Esc: Cancel", style=self.theme.title_style, justify="center"))
        return Group(*lines)


def fuzzy_match(text: str, pattern: str) -> bool:
    """Substring match, else all pattern characters in order."""
    if not pattern:
        return True
    if pattern in text:
        return True
    pos = 0
    for ch in text:
        if pos < len(pattern) and ch == pattern[pos]:
            pos += 1
    return pos == len(pattern)


@dataclass(frozen=True)
class FuzzySearchItem:
    name: str
    description: str = ""
    data: Any = None


class FuzzySearchDialog(Dialog):
    """Pick one item by typing part of its name or description.

    The list narrows on every keystroke. Result is ``(index, item)`` where
    ``index`` points into the original ``items``. Enter with nothing
    matching reports ``(None, True)``.
    """

    page_id = "fuzzy-search-modal"
    width = 70
    MAX_VISIBLE = 14

    def __init__(self, app, title, items, callback=None):
        super().__init__(app, title, callback)
        self.items = [
            item if isinstance(item, FuzzySearchItem) else FuzzySearchItem(*item) for item in items
        ]
        self.query = ""
        self.cursor = 0
        self.window_offset = 0
        self.matches = list(range(len(self.items)))

    def set_query(self, query: str) -> None:
        self.query = query
        needle = query.strip().lower()
        self.matches = [
            i
            for i, item in enumerate(self.items)
            if fuzzy_match(item.name.lower(), needle) or fuzzy_match(item.description.lower(), needle)
        ]
        self.cursor = 0
        self.window_offset = 0

    def selected_index(self) -> int | None:
        if 0 <= self.cursor < len(self.matches):
            return self.matches[self.cursor]
        return None

    def select(self) -> None:
        index = self.selected_index()
        if index is None:
            self.finish(None, cancelled=True)
        else:
            self.finish((index, self.items[index]))

    def handle_key(self, key: str) -> None:
        if key == UP:
            self.cursor = max(0, self.cursor - 1)
        elif key in (DOWN, TAB):
            self.cursor = min(max(0, len(self.matches) - 1), self.cursor + 1)
        elif is_enter(key):
            self.select()
        elif is_backspace(key):
            if self.query:
                self.set_query(self.query[:-1])
        elif is_printable(key):
            self.set_query(self.query + key)

    def _update_window(self) -> None:
        if self.cursor < self.window_offset:
            self.window_offset = self.cursor
        elif self.cursor >= self.window_offset + self.MAX_VISIBLE:
            self.window_offset = self.cursor - self.MAX_VISIBLE + 1

    def render_body(self) -> RenderableType:
        theme = self.theme
        search = Text()
        search.append("Search: ", style=theme.info_key_style)
        if self.query:
            search.append(self.query)
        else:
            search.append("Type to search...", style=theme.dim_style)

        self._update_window()
        end = min(len(self.matches), self.window_offset + self.MAX_VISIBLE)
        rows: list[RenderableType] = []
        for pos in range(self.window_offset, end):
            item = self.items[self.matches[pos]]
            line = Text(style=theme.selected_style if pos == self.cursor else "")
            line.append(item.name)
            if item.description:
                line.append(f"  {item.description}", style=theme.dim_style)
            rows.append(line)
        if not rows:
            rows.append(Text("(no matches)", style=theme.dim_style))

        return Group(
            search,
            Rule(style=theme.dim_style),
            *rows,
            Text(""),
            Text("↑↓ Navigate  Enter Select  Esc Cancel", style=theme.dim_style, justify="center"),
        )


class DirBrowserAction(enum.Enum):
    ADD = "add"
    SCAN = "scan"


@dataclass(frozen=True)
class DirBrowserResult:
    path: Path
    action: DirBrowserAction


@dataclass(frozen=True)
class DirEntry:
    name: str
    path: Path
    is_parent: bool = False
    is_marked: bool = False


def _looks_like_path(text: str) -> bool:
    return text.startswith("/") or text.startswith("~")


class DirectoryDialog(Dialog):
    """Browse directories and pick one.

    Enter opens the selected directory, Backspace on an empty filter goes to
    the parent, typing fuzzy-filters the listing, and typing an absolute or
    ``~`` path then Enter jumps there (or to its nearest existing parent).
    Ctrl+A returns the selection with ``DirBrowserAction.ADD``; Ctrl+S
    returns the current directory with ``DirBrowserAction.SCAN``.

    Args:
        is_target: Optional predicate marking directories of interest. Enter
            on the marked current directory adds it.
    """

    page_id = "dir-browser-modal"
    width = 80
    MAX_VISIBLE = 12

    def __init__(self, app, start_path, callback=None, is_target: Callable[[Path], bool] | None = None, title="Select Directory"):
        super().__init__(app, title, callback)
        self.is_target = is_target
        self.current = Path(start_path).expanduser().resolve()
        self.entries: list[DirEntry] = []
        self.filter = ""
        self.cursor = 0
        self.window_offset = 0
        self.error = ""
        self.navigate(self.current)

    # -- state --

    def _marked(self, path: Path) -> bool:
        return bool(self.is_target and self.is_target(path))

    def load(self, path: Path) -> bool:
        try:
            children = sorted(
                child for child in path.iterdir() if child.is_dir() and not child.name.startswith(".")
            )
        except OSError as e:
            logger.debug("Cannot list %s: %s", path, e)
            self.error = f"Cannot open {path}: {e.strerror or e}"
            return False

        entries = []
        if path.parent != path:
            entries.append(DirEntry("..", path.parent, is_parent=True))
        if self._marked(path):
            entries.append(DirEntry(path.name, path, is_marked=True))
        entries.extend(DirEntry(child.name, child, is_marked=self._marked(child)) for child in children)

        self.current = path
        self.entries = entries
        self.error = ""
        return True

    def navigate(self, path: Path) -> None:
        if self.load(path):
            self.filter = ""
            self.cursor = 0
            self.window_offset = 0

    def visible_entries(self) -> list[DirEntry]:
        if _looks_like_path(self.filter):
            return list(self.entries)
        query = self.filter.strip().lower()
        return [e for e in self.entries if e.is_parent or fuzzy_match(e.name.lower(), query)]

    def selected_entry(self) -> DirEntry | None:
        entries = self.visible_entries()
        if 0 <= self.cursor < len(entries):
            return entries[self.cursor]
        return None

    # -- actions --

    def go_up(self) -> None:
        if self.current.parent != self.current:
            self.navigate(self.current.parent)

    def jump_to_typed_path(self) -> None:
        target = Path(os.path.expanduser(self.filter))
        while True:
            if target.is_dir():
                self.navigate(target.resolve())
                return
            if target.parent == target:
                return
            target = target.parent

    def enter_selected(self) -> None:
        if _looks_like_path(self.filter):
            self.jump_to_typed_path()
            return
        entry = self.selected_entry()
        if entry is None:
            return
        if entry.is_marked and entry.path == self.current:
            self.finish(DirBrowserResult(entry.path, DirBrowserAction.ADD))
            return
        self.navigate(entry.path)

    def add_selected(self) -> None:
        entry = self.selected_entry()
        path = entry.path if entry is not None and not entry.is_parent else self.current
        self.finish(DirBrowserResult(path, DirBrowserAction.ADD))

    def scan_current(self) -> None:
        self.finish(DirBrowserResult(self.current, DirBrowserAction.SCAN))

    def handle_key(self, key: str) -> None:
        count = len(self.visible_entries())
        if key == "CTRL_A":
            self.add_selected()
        elif key == "CTRL_S":
            self.scan_current()
        elif key == ENTER:
            self.enter_selected()
        elif key == UP:
            self.cursor = max(0, self.cursor - 1)
        elif key == DOWN:
            self.cursor = min(max(0, count - 1), self.cursor + 1)
        elif key == BACKSPACE:
            if self.filter:
                self.filter = self.filter[:-1]
                self.cursor = 0
            else:
                self.go_up()
        elif is_printable(key):
            self.filter += key
            self.cursor = 0

    # -- rendering --

    def _update_window(self, count: int) -> None:
        if count <= self.MAX_VISIBLE:
            self.window_offset = 0
        elif self.cursor < self.window_offset:
            self.window_offset = self.cursor
        elif self.cursor >= self.window_offset + self.MAX_VISIBLE:
            self.window_offset = self.cursor - self.MAX_VISIBLE + 1

    def render_body(self) -> RenderableType:
        theme = self.theme
        marked_here = self._marked(self.current)

        path_line = Text()
        path_line.append("> ", style="green" if marked_here else "yellow")
        display = str(self.current)
        if len(display) > 60:
            display = "..." + display[-57:]
        path_line.append(display)

        filter_line = Text()
        filter_line.append("/ ", style=theme.info_key_style)
        if self.filter:
            filter_line.append(self.filter)
        else:
            filter_line.append("Filter or type a path...", style=theme.dim_style)

        entries = self.visible_entries()
        self._update_window(len(entries))
        end = min(len(entries), self.window_offset + self.MAX_VISIBLE)
        rows = []
        for i in range(self.window_offset, end):
            entry = entries[i]
            line = Text(style=theme.selected_style if i == self.cursor else "")
            if entry.is_parent:
                line.append("..", style="yellow")
            elif entry.is_marked and entry.path == self.current:
                line.append(f">>> Add {entry.name}", style="bold green")
            elif entry.is_marked:
                line.append(entry.name, style="green")
                line.append(" *", style=theme.info_key_style)
            else:
                line.append(entry.name)
            rows.append(line)
        if not rows:
            rows.append(Text("(no matching directories)", style=theme.dim_style))

        parts: list[RenderableType] = [path_line]
        if self.error:
            parts.append(Text(self.error, style=theme.error_level_style))
        parts.extend([filter_line, Rule(style=theme.dim_style), *rows, Text("")])
        parts.append(
            Text(
                "Enter Open  ^A Add  ^S Scan  Bksp Up  Esc Close",
                style=theme.dim_style,
                justify="center",
            )
        )
        return Group(*parts)


class ProgressDialog(Dialog):
    """Progress bar with a status line.

    ``update_progress`` may be called from any thread. With ``auto_close``
    the dialog closes itself shortly after reaching ``maximum`` and reports
    ``(maximum, False)``; the optional Cancel button reports ``(None, True)``.
    """

    page_id = "progress-modal"
    AUTO_CLOSE_DELAY = 0.5
    BAR_WIDTH = 40

    def __init__(self, app, title, maximum=100, callback=None, cancellable=False, auto_close=True):
        if maximum <= 0:
            raise ValueError(f"Progress maximum must be positive, got {maximum!r}")
        super().__init__(app, title, callback, cancellable=cancellable)
        self.maximum = maximum
        self.cancellable = cancellable
        self.auto_close = auto_close
        self.progress = 0
        self.status = ""
        self.done = False
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None

    @property
    def percent(self) -> int:
        return int(self.progress * 100 / self.maximum)

    def update_progress(self, progress: int, status: str = "") -> None:
        with self._lock:
            if self.done:
                return
            self.progress = max(0, min(progress, self.maximum))
            self.status = status
            completed = self.progress >= self.maximum and self.auto_close
            if completed:
                self.done = True

        self.app.call_on_ui(self.app.draw)
        if completed:
            self._timer = threading.Timer(
                self.AUTO_CLOSE_DELAY,
                self.app.queue_update_draw,
                args=(self.complete,),
            )
            self._timer.daemon = True
            self._timer.start()

    def complete(self) -> None:
        """Close and report the final progress value."""
        self.finish(self.progress)

    def close(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self.complete()

    def handle_key(self, key: str) -> None:
        if self.cancellable and is_enter(key):
            if self._timer is not None:
                self._timer.cancel()
            self.cancel()

    def render_body(self) -> RenderableType:
        filled = int(self.BAR_WIDTH * self.progress / self.maximum)
        bar = Text()
        bar.append(self.theme.bar_fill_icon * filled, style=self.theme.progress_style)
        bar.append(self.theme.bar_empty_icon * (self.BAR_WIDTH - filled), style=self.theme.dim_style)
        bar.append(f" {self.percent}%")

        parts: list[RenderableType] = [bar, Text(self.status, justify="center")]
        if self.cancellable:
            parts.extend([Text(""), ButtonBar(["Cancel"]).render(self.theme)])
        return Group(*parts)


def show_confirmation_dialog(app, title: str, message: str, callback: DialogCallback | None = None) -> ConfirmationDialog:
    dialog = ConfirmationDialog(app, title, message, callback)
    dialog.show()
    return dialog


def show_error_dialog(app, title: str, message: str, callback: DialogCallback | None = None) -> ErrorDialog:
    dialog = ErrorDialog(app, title, message, callback)
    dialog.show()
    return dialog


def show_info_dialog(app, title: str, message: str, callback: DialogCallback | None = None) -> InfoDialog:
    dialog = InfoDialog(app, title, message, callback)
    dialog.show()
    return dialog


def show_input_dialog(
    app,
    title: str,
    label: str,
    default: str = "",
    callback: DialogCallback | None = None,
    allow_empty: bool = False,
) -> InputDialog:
    dialog = InputDialog(app, title, label, default, callback, allow_empty=allow_empty)
    dialog.show()
    return dialog


def show_list_dialog(
    app,
    title: str,
    items: Sequence[Sequence[str]],
    callback: DialogCallback | None = None,
) -> ListDialog:
    dialog = ListDialog(app, title, items, callback)
    dialog.show()
    return dialog


def show_fuzzy_search_dialog(
    app,
    title: str,
    items: Sequence[FuzzySearchItem | Sequence[str]],
    callback: DialogCallback | None = None,
) -> FuzzySearchDialog:
    dialog = FuzzySearchDialog(app, title, items, callback)
    dialog.show()
    return dialog


def show_directory_dialog(
    app,
    start_path: str | Path,
    callback: DialogCallback | None = None,
    is_target: Callable[[Path], bool] | None = None,
) -> DirectoryDialog:
    dialog = DirectoryDialog(app, start_path, callback, is_target=is_target)
    dialog.show()
    return dialog


def show_progress_dialog(
    app,
    title: str,
    maximum: int = 100,
    callback: DialogCallback | None = None,
    cancellable: bool = False,
    auto_close: bool = True,
) -> ProgressDialog:
    dialog = ProgressDialog(app, title, maximum, callback, cancellable=cancellable, auto_close=auto_close)
    dialog.show()
    return dialog
