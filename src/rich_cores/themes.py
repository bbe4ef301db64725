"""Configurable themes for rich_cores components.

The Theme dataclass holds every visual token the dashboard uses. All colors
are Rich style strings (e.g. "bold black on cyan", "grey50").
"""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Theme:
    """Visual theme for the dashboard and its dialogs.

    Attributes:
        name: Palette identifier.
        title_style: Table and panel titles.
        header_style: Table column headers.
        selected_style: Highlight for the selected table row.
        row_style: Default style for unselected rows.
        border_style: Panel borders and the header separator.
        key_style: Key names in the help panel.
        info_key_style: Keys in the info panel.
        info_value_style: Values in the info panel.
        breadcrumb_style: Ancestor views in the breadcrumb trail.
        breadcrumb_active_style: The active (last) view.
        breadcrumb_separator_style: Glyph between breadcrumbs.
        timestamp_style: Log panel timestamps.
        info_level_style: INFO tag in the log panel.
        warning_level_style: WARN tag in the log panel.
        error_level_style: ERROR tag in the log panel.
        dim_style: Secondary text (scroll markers, hints).
        dialog_border_style: Default dialog border.
        dialog_title_style: Dialog titles.
        error_border_style: Error dialog border.
        button_style: Unfocused dialog buttons.
        button_focus_style: Focused dialog button.
        progress_style: Filled part of a progress bar.

        scroll_up_icon: Marker for rows hidden above.
        scroll_down_icon: Marker for rows hidden below.
        bar_fill_icon: Filled progress bar cell.
        bar_empty_icon: Empty progress bar cell.
    """

    name: str = "default"

    title_style: str = "bold yellow"
    header_style: str = "bold white"
    selected_style: str = "bold black on cyan"
    row_style: str = ""
    border_style: str = "cyan"
    key_style: str = "bold magenta"
    info_key_style: str = "bold cyan"
    info_value_style: str = "bold white"
    breadcrumb_style: str = "black on cyan"
    breadcrumb_active_style: str = "black on dark_orange"
    breadcrumb_separator_style: str = "yellow"
    timestamp_style: str = "grey50"
    info_level_style: str = "bold blue"
    warning_level_style: str = "bold yellow"
    error_level_style: str = "bold red"
    dim_style: str = "dim"
    dialog_border_style: str = "cyan"
    dialog_title_style: str = "bold dark_orange"
    error_border_style: str = "red"
    button_style: str = "white"
    button_focus_style: str = "bold black on cyan"
    progress_style: str = "green"

    scroll_up_icon: str = "↑"
    scroll_down_icon: str = "↓"
    bar_fill_icon: str = "█"
    bar_empty_icon: str = "░"


DEFAULT_THEME = Theme()

THEMES: dict[str, Theme] = {
    "default": DEFAULT_THEME,
    "ocean": Theme(
        name="ocean",
        title_style="bold bright_cyan",
        selected_style="bold white on blue",
        border_style="blue",
        key_style="bold bright_cyan",
        info_key_style="bold blue",
        breadcrumb_style="white on blue",
        breadcrumb_active_style="black on bright_cyan",
        breadcrumb_separator_style="bright_cyan",
        dialog_border_style="blue",
        dialog_title_style="bold bright_cyan",
        button_focus_style="bold white on blue",
    ),
    "mono": Theme(
        name="mono",
        title_style="bold",
        header_style="bold underline",
        selected_style="reverse",
        border_style="white",
        key_style="bold",
        info_key_style="bold",
        info_value_style="",
        breadcrumb_style="dim",
        breadcrumb_active_style="reverse",
        breadcrumb_separator_style="",
        info_level_style="bold",
        warning_level_style="bold",
        error_level_style="bold reverse",
        dialog_border_style="white",
        dialog_title_style="bold",
        error_border_style="white",
        button_focus_style="reverse",
        progress_style="bold",
    ),
}


def _normalize_theme_key(value: str) -> str:
    return value.strip().lower().replace("_", "-")


def get_theme(name: str | None = None) -> Theme:
    """Return the named theme.

    Without a name, RICH_CORES_THEME is used. Unknown names fall back to
    the default theme.
    """
    if not name:
        name = os.environ.get("RICH_CORES_THEME")
    if not name:
        return DEFAULT_THEME
    return THEMES.get(_normalize_theme_key(name), DEFAULT_THEME)
