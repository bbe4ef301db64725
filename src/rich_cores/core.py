"""CoreView: the interactive table-view controller.

A CoreView owns one table (headers, rows, selection), its key bindings, a
navigation stack with breadcrumbs, a log panel and a background
auto-refresh timer. It renders as a dashboard: info, help and log panels
across the top, breadcrumbs, then the table.

All state is mutated on the application's UI thread. The only background
work is the auto-refresh ticker, which hands its results back through
``Application.call_on_ui``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from rich import box
from rich.console import Console, ConsoleOptions, Group, RenderableType, RenderResult
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from .dialogs import show_input_dialog
from .input import HandlerFrame
from .keybindings import (
    FILTER_KEY,
    KeyBindingTable,
    expanded_help,
    format_help_columns,
    sorted_bindings,
)
from .keyhandler import ACTION_ROW_SELECTED, standard_key_handler
from .keys import END, HOME, PGDN, PGUP, is_down, is_enter, is_up
from .logpanel import ERROR, INFO, WARNING, LogPanel
from .metadata import PluginMetadata, metadata_info
from .navigation import NavigationStack
from .refresh import AutoRefresher
from .selection import NO_SELECTION, Selection, selection_payload
from .table import TableStore, normalize_row

if TYPE_CHECKING:
    from .app import Application

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[], Sequence[Sequence[str]]]
RowSelectedCallback = Callable[[int], None]
LazyLoader = Callable[[int, int], Sequence[Sequence[str]]]
ActionCallback = Callable[[str, dict[str, Any]], Any]

# Rows taken by panels, breadcrumbs and table chrome around the visible rows.
_CHROME_LINES = 8
_MIN_VISIBLE_ROWS = 3
_LOG_LINES_SHOWN = 6
DEFAULT_LAZY_PAGE_SIZE = 500


class CoreView:
    """Table-view controller embedded in an Application.

    Args:
        app: The host application (UI thread, input stack, pages).
        title: Title shown above the table and in the info panel.
    """

    def __init__(self, app: "Application", title: str):
        self.app = app
        self.title = title
        self.config = app.config
        self.theme = app.theme

        self.store = TableStore()
        self.selection = Selection()
        self.key_bindings = KeyBindingTable()
        self.navigation = NavigationStack()
        self.logs = LogPanel(self.config.get("log_max_lines", 200))

        self._table_title = title
        self._info: Text = Text(f"{title}\nStatus: Active")
        self._info_title = "Info"
        self._help_expanded = False
        self._page_size = 10

        self._refresh_callback: RefreshCallback | None = None
        self._row_selected_callback: RowSelectedCallback | None = None
        self._action_callback: ActionCallback | None = None

        self._lazy_loader: LazyLoader | None = None
        self._lazy_page_size = DEFAULT_LAZY_PAGE_SIZE
        self._lazy_offset = 0
        self._lazy_has_more = False
        self._lazy_loading = False
        self._lazy_lock = threading.Lock()

        self._refresher = AutoRefresher(self._auto_refresh_tick, name=f"refresh:{title}")
        self._frame: HandlerFrame | None = None

        self.log("Plugin initialized")

    # -- callbacks --

    def set_refresh_callback(self, callback: RefreshCallback | None) -> None:
        """Set the fetch function used by refresh_data (raises on failure)."""
        self._refresh_callback = callback

    def set_row_selected_callback(self, callback: RowSelectedCallback | None) -> None:
        self._row_selected_callback = callback

    def set_action_callback(self, callback: ActionCallback | None) -> None:
        """Set the host's action handler.

        The handler receives ``(action, payload)``; a truthy return value
        claims the event.
        """
        self._action_callback = callback

    def fire_action(self, action: str, payload: dict[str, Any]) -> bool:
        """Send an action to the host; True if the host claimed it."""
        if self._action_callback is None:
            return False
        return bool(self._action_callback(action, payload))

    # -- table data --

    def _selected_signature(self) -> str:
        row = self.store.row(self.selection.current(len(self.store)))
        if row is None:
            return ""
        return self.store.signature(row)

    def _restore_selection(self, signature: str) -> None:
        self.selection.index = self.store.find_signature(signature)

    def set_table_headers(self, headers: Sequence[str]) -> None:
        """Replace the columns. Rows and the selected index are kept."""
        self.store.set_headers(headers)
        self.app.draw()

    def set_table_data(self, rows: Sequence[Sequence[str]]) -> None:
        """Replace all rows, re-selecting the previously selected row by identity."""
        signature = self._selected_signature()
        self.store.set_rows(rows)
        self._restore_selection(signature)
        self.app.draw()

    def set_table(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        """Replace headers and rows together."""
        signature = self._selected_signature()
        self.store.set_headers(headers)
        self.store.set_rows(rows)
        self._restore_selection(signature)
        self.app.draw()

    def append_table_data(self, rows: Sequence[Sequence[str]]) -> None:
        signature = self._selected_signature()
        self.store.append_rows(rows)
        self._restore_selection(signature)
        self.app.draw()

    def update_row(self, index: int, row: Sequence[str]) -> None:
        """Replace one row in place. Out-of-range indexes are ignored."""
        if self.store.update_row(index, row):
            self.app.draw()

    def set_selection_key(self, column: str | None) -> None:
        """Use ``column`` as row identity instead of the first three cells."""
        self.store.selection_key = column or None

    def get_table_headers(self) -> list[str]:
        return list(self.store.headers)

    def get_table_data(self) -> list[list[str]]:
        """Visible rows (after any filter)."""
        return [list(row) for row in self.store.rows]

    def set_table_title(self, title: str) -> None:
        self._table_title = title
        self.app.draw()

    # -- selection --

    def get_selected_row(self) -> int:
        """Selected row index, or NO_SELECTION."""
        return self.selection.current(len(self.store))

    def get_selected_row_data(self) -> list[str] | None:
        row = self.store.row(self.get_selected_row())
        return list(row) if row is not None else None

    def select_row(self, index: int) -> None:
        """Select a row and notify the host.

        Calls the row-selected callback with the index, then fires a
        "rowSelected" action with the row's cells (and a header -> cell
        mapping when headers are set). Out-of-range indexes are ignored.
        """
        count = len(self.store)
        if not self.selection.set(index, count):
            return
        row = self.store.row(index)
        self.app.draw()

        if self._row_selected_callback is not None:
            self._row_selected_callback(index)
        self.fire_action(ACTION_ROW_SELECTED, selection_payload(index, row, self.store.headers))

    def clear_selection(self) -> None:
        self.selection.clear()
        self.app.draw()

    # -- key bindings and help --

    def add_key_binding(self, key: str, description: str) -> None:
        self.key_bindings.add(key, description)
        self.app.draw()

    def register_standard_keys(self) -> None:
        self.key_bindings.register_standard()
        self.app.draw()

    def clear_key_bindings(self) -> None:
        """Remove custom bindings; R, ?, ESC and / stay."""
        self.key_bindings.clear_custom()
        self.app.draw()

    @property
    def help_expanded(self) -> bool:
        return self._help_expanded

    def toggle_help_expanded(self) -> None:
        self._help_expanded = not self._help_expanded
        self.app.draw()

    # -- navigation --

    def push_view(self, name: str) -> None:
        self.navigation.push(name)
        self.app.draw()

    def pop_view(self) -> str:
        """Leave the active view; returns its name, or "" at the root."""
        popped = self.navigation.pop()
        if popped:
            self.app.draw()
        return popped

    def clear_views(self) -> None:
        """Back to the root view (an empty stack stays empty)."""
        self.navigation.clear()
        self.app.draw()

    def set_view_stack(self, views: Sequence[str]) -> None:
        self.navigation.set(views)
        self.app.draw()

    def copy_navigation_stack_from(self, other: "CoreView") -> None:
        self.navigation.copy_from(other.navigation)
        self.app.draw()

    def get_current_view(self) -> str:
        return self.navigation.current

    def get_view_stack(self) -> list[str]:
        return self.navigation.as_list()

    # -- refresh --

    def start_auto_refresh(self, interval: float | None = None) -> None:
        """Refresh every ``interval`` seconds (default: config refresh_seconds).

        A running timer is stopped first.
        """
        if interval is None:
            interval = self.config.get("refresh_seconds", 10)
        self._refresher.start(interval)
        self.app.call_on_ui(lambda: self.log(f"Auto-refresh enabled ({interval:g}s)"))

    def stop_auto_refresh(self) -> None:
        """Stop the timer. Does nothing (and logs nothing) when not running."""
        if self._refresher.stop():
            self.app.call_on_ui(lambda: self.log("Auto-refresh disabled"))

    @property
    def auto_refresh_active(self) -> bool:
        return self._refresher.is_running

    def _auto_refresh_tick(self) -> None:
        self.refresh_data()

    def refresh_data(self) -> None:
        """Fetch rows through the refresh callback and load them.

        The fetch runs in the calling thread. A failing fetch is logged at
        error level and the table is left as it was.
        """
        callback = self._refresh_callback
        if callback is None:
            return

        self.app.call_on_ui(lambda: self.log("Refreshing data..."))
        try:
            rows = callback()
        except Exception as e:
            logger.error("Refresh failed for %s: %s", self.title, e)
            message = f"Error refreshing data: {e}"
            self.app.call_on_ui(lambda: self.log(message, level=ERROR))
            return

        def apply() -> None:
            self.set_table_data(rows)
            self.log("Data refreshed successfully")

        self.app.call_on_ui(apply)

    # -- lazy loading --

    def set_lazy_loader(self, loader: LazyLoader | None, page_size: int = DEFAULT_LAZY_PAGE_SIZE) -> None:
        """Load rows a page at a time with ``loader(offset, limit)``.

        Each ``load_more`` (bound to PgDn) appends the next page. A short or
        empty page marks the end of the data. Non-positive page sizes fall
        back to the default.
        """
        with self._lazy_lock:
            self._lazy_loader = loader
            self._lazy_page_size = page_size if page_size > 0 else DEFAULT_LAZY_PAGE_SIZE
            self._lazy_offset = 0
            self._lazy_has_more = loader is not None
            self._lazy_loading = False
        if loader is not None:
            self.add_key_binding(PGDN, "Load more")
        else:
            self.key_bindings.remove(PGDN)
            self.app.draw()

    @property
    def has_lazy_loader(self) -> bool:
        return self._lazy_loader is not None

    @property
    def has_more_rows(self) -> bool:
        return self._lazy_has_more

    def load_more(self) -> None:
        """Fetch and append the next page.

        Ignored while a previous page is still loading. The fetch runs in
        the calling thread, like ``refresh_data``.
        """
        with self._lazy_lock:
            loader = self._lazy_loader
            if loader is None or self._lazy_loading:
                return
            if not self._lazy_has_more:
                exhausted = True
            else:
                exhausted = False
                self._lazy_loading = True
                offset = self._lazy_offset
                limit = self._lazy_page_size

        if exhausted:
            self.app.call_on_ui(lambda: self.log("No more rows to load", level=WARNING))
            return

        try:
            rows = [list(row) for row in loader(offset, limit)]
        except Exception as e:
            logger.error("Loading more rows failed for %s: %s", self.title, e)
            with self._lazy_lock:
                self._lazy_loading = False
            message = f"Error loading more: {e}"
            self.app.call_on_ui(lambda: self.log(message, level=ERROR))
            return

        with self._lazy_lock:
            self._lazy_loading = False
            self._lazy_offset += len(rows)
            if len(rows) < limit:
                self._lazy_has_more = False

        if not rows:
            self.app.call_on_ui(lambda: self.log("No more rows to load", level=WARNING))
            return

        def apply() -> None:
            self.append_table_data(rows)
            self.log(f"Loaded {len(rows)} more rows")

        self.app.call_on_ui(apply)

    # -- filter --

    def enable_filter(self) -> None:
        """Bind '/' to the filter dialog."""
        self.add_key_binding(FILTER_KEY, "Filter")

    @property
    def filter_query(self) -> str:
        return self.store.filter_query

    @property
    def is_filtered(self) -> bool:
        return bool(self.store.filter_query)

    def set_filter_query(self, query: str) -> None:
        """Show only rows with a cell containing ``query`` (case-insensitive)."""
        signature = self._selected_signature()
        total = len(self.store.raw_rows)
        self.store.set_filter(query)
        self._restore_selection(signature)

        if self.store.filter_query:
            self.log(f"Filter '{self.store.filter_query}': {len(self.store)}/{total} rows")
        else:
            self.log("Filter cleared")
        self.app.draw()

    def clear_filter(self) -> None:
        self.set_filter_query("")

    def open_filter_dialog(self) -> None:
        def on_done(text: str | None, cancelled: bool) -> None:
            if not cancelled:
                self.set_filter_query(text or "")

        show_input_dialog(
            self.app,
            "Filter Rows",
            "Query",
            default=self.store.filter_query,
            callback=on_done,
            allow_empty=True,
        )

    # -- info and log panels --

    def log(self, message: str, level: str = INFO) -> None:
        self.logs.append(message, level)
        self.app.draw()

    def clear_logs(self) -> None:
        self.logs.clear()
        self.app.draw()

    def set_info_text(self, text: str) -> None:
        self._info = Text(text)
        self.app.draw()

    def set_info_title(self, title: str) -> None:
        self._info_title = title
        self.app.draw()

    def set_info_map(self, info: Mapping[str, str]) -> None:
        """Show key/value pairs sorted by key with aligned values.

        Pairs with an empty key or value are skipped.
        """
        pairs = [(key, str(info[key])) for key in sorted(info) if key and info[key]]
        width = max((len(key) for key, _ in pairs), default=0)
        lines = []
        for key, value in pairs:
            line = Text()
            line.append(f"{key}:" + " " * (width + 1 - len(key)), style=self.theme.info_key_style)
            line.append(value, style=self.theme.info_value_style)
            lines.append(line)
        self._info = Text("\n").join(lines)
        self.app.draw()

    def set_info_metadata(self, meta: PluginMetadata | None, plugin_name: str = "") -> None:
        self.set_info_map(metadata_info(meta, plugin_name or self.title))

    # -- input --

    def handle_key(self, key: str) -> str | None:
        """Run a key through this view's dispatch chain, then table navigation."""
        return standard_key_handler(self, key, self._table_key_handler)

    def _table_key_handler(self, key: str) -> str | None:
        count = len(self.store)
        if is_up(key):
            self.selection.move(-1, count)
        elif is_down(key):
            self.selection.move(1, count)
        elif key == PGUP:
            self.selection.move(-self._page_size, count)
        elif key == PGDN:
            self.selection.move(self._page_size, count)
        elif key in (HOME, "g"):
            self.selection.first(count)
        elif key in (END, "G"):
            self.selection.last(count)
        elif is_enter(key):
            index = self.selection.current(count)
            if index != NO_SELECTION:
                self.select_row(index)
        else:
            return key
        self.app.draw()
        return None

    def register_handlers(self) -> None:
        """Install this view's key handler on the application input stack."""
        if self._frame is not None and self.app.input.contains(self._frame):
            return
        self._frame = self.app.input.push(f"view:{self.title}", self.handle_key)

    def unregister_handlers(self) -> None:
        if self._frame is not None:
            self.app.input.remove(self._frame)
            self._frame = None

    def destroy(self) -> None:
        """Stop auto-refresh and release input handling."""
        self.stop_auto_refresh()
        self.unregister_handlers()

    # -- rendering --

    def _render_header(self) -> Table:
        theme = self.theme
        if self._help_expanded:
            help_body = expanded_help(self.key_bindings, self.get_current_view(), theme)
        else:
            help_body = format_help_columns(
                sorted_bindings(self.key_bindings),
                self.config.get("help_rows_per_column", 4),
                theme,
            )

        header = Table.grid(expand=True, padding=(0, 1))
        header.add_column(ratio=1)
        header.add_column(ratio=2)
        header.add_column(ratio=2)
        header.add_row(
            Panel(self._info, title=self._info_title, border_style=theme.border_style, box=box.ROUNDED),
            Panel(help_body, title="Help", border_style=theme.border_style, box=box.ROUNDED),
            Panel(
                self.logs.render(_LOG_LINES_SHOWN, theme),
                title="Log",
                border_style=theme.border_style,
                box=box.ROUNDED,
            ),
        )
        return header

    def _render_table_title(self) -> Text:
        title = Text(self._table_title, style=self.theme.title_style)
        if self.store.filter_query:
            title.append(f" (filter: {self.store.filter_query})", style=self.theme.dim_style)
        return title

    def _render_table(self, max_visible: int) -> RenderableType:
        theme = self.theme
        rows = self.store.rows
        count = len(rows)
        width = len(self.store.headers) or max((len(row) for row in rows), default=0)

        table = Table(
            box=box.SIMPLE_HEAD,
            expand=True,
            show_edge=False,
            header_style=theme.header_style,
            show_header=bool(self.store.headers),
        )
        for header in self.store.headers or [""] * width:
            table.add_column(header, no_wrap=True, overflow="ellipsis")

        self.selection.update_window(max_visible, count)
        start = self.selection.window_offset
        end = min(count, start + max_visible)
        selected = self.selection.current(count)
        for i in range(start, end):
            style = theme.selected_style if i == selected else theme.row_style
            table.add_row(*normalize_row(rows[i], width), style=style)

        parts: list[RenderableType] = []
        if start > 0:
            parts.append(Text(f"  {theme.scroll_up_icon} {start} more above", style=theme.dim_style))
        parts.append(table)
        if count > end:
            parts.append(Text(f"  {theme.scroll_down_icon} {count - end} more below", style=theme.dim_style))
        return Group(*parts)

    def render(self, height: int | None = None) -> RenderableType:
        """Render the whole dashboard for a screen ``height`` lines tall."""
        theme = self.theme
        max_rows = self.config.get("max_visible_rows", 200)
        if height is not None:
            header_lines = self.config.get("help_rows_per_column", 4) + 2
            max_rows = min(max_rows, max(_MIN_VISIBLE_ROWS, height - header_lines - _CHROME_LINES))
        self._page_size = max(1, max_rows - 1)

        breadcrumbs = self.navigation.render(self.config.get("breadcrumb_separator", ">"), theme)
        return Group(
            self._render_header(),
            Rule(style=theme.border_style),
            breadcrumbs,
            Panel(
                self._render_table(max_rows),
                title=self._render_table_title(),
                border_style=theme.border_style,
                box=box.ROUNDED,
            ),
        )

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        yield self.render(options.height or options.max_height)
