"""Key binding table and help panel rendering.

Bindings map a key symbol to a human-readable description. They carry no
callbacks: pressing a bound key is reported to the host view as a
"keypress" action and the host decides what to do.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from rich.text import Text

from .themes import DEFAULT_THEME, Theme

REFRESH_KEY = "R"
HELP_KEY = "?"
BACK_KEY = "ESC"
FILTER_KEY = "/"

STANDARD_BINDINGS: dict[str, str] = {
    REFRESH_KEY: "Refresh",
    HELP_KEY: "Help",
    BACK_KEY: "Back",
}

# Keys kept by KeyBindingTable.clear_custom().
STANDARD_KEYS = (REFRESH_KEY, HELP_KEY, BACK_KEY, FILTER_KEY)


@dataclass(frozen=True)
class Binding:
    key: str
    description: str


class KeyBindingTable:
    """Unique key -> description mapping; the last registration wins."""

    def __init__(self, seed_standard: bool = True) -> None:
        self._bindings: dict[str, str] = {}
        if seed_standard:
            self.register_standard()

    def register_standard(self) -> None:
        self._bindings.update(STANDARD_BINDINGS)

    def add(self, key: str, description: str) -> None:
        self._bindings[key] = description

    def remove(self, key: str) -> bool:
        return self._bindings.pop(key, None) is not None

    def clear_custom(self) -> None:
        """Drop every binding except the standard keys."""
        self._bindings = {
            key: desc for key, desc in self._bindings.items() if key in STANDARD_KEYS
        }

    def get(self, key: str) -> str | None:
        return self._bindings.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._bindings

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def items(self) -> list[tuple[str, str]]:
        return list(self._bindings.items())

    def as_dict(self) -> dict[str, str]:
        return dict(self._bindings)


def _capitalize(description: str) -> str:
    if not description:
        return ""
    return description[:1].upper() + description[1:].lower()


def _is_special(key: str) -> bool:
    return len(key) > 1 or any(ch in key for ch in "^_")


def sorted_bindings(table: KeyBindingTable) -> list[Binding]:
    """Single printable keys first, then named keys; alphabetical within each."""
    bindings = [Binding(key, _capitalize(desc)) for key, desc in table.items()]
    bindings.sort(key=lambda b: (_is_special(b.key), b.key))
    return bindings


def format_help_columns(
    bindings: list[Binding],
    rows_per_column: int = 4,
    theme: Theme = DEFAULT_THEME,
) -> Text:
    """Lay bindings out in columns of ``rows_per_column`` lines."""
    if not bindings:
        return Text("")

    rows_per_column = max(1, rows_per_column)
    longest = max(len(b.description) for b in bindings)
    lines = [Text() for _ in range(min(rows_per_column, len(bindings)))]

    for i, binding in enumerate(bindings):
        line = lines[i % rows_per_column]
        line.append(f"<{binding.key}>", style=theme.key_style)
        line.append(f"  {binding.description}")
        line.append(" " * (longest - len(binding.description) + 1))

    for line in lines:
        line.rstrip()
    return Text("\n").join(lines)


def expanded_help(
    table: KeyBindingTable,
    current_view: str = "",
    theme: Theme = DEFAULT_THEME,
) -> Text:
    """Detailed keybinding reference shown after pressing '?'."""
    text = Text()
    text.append("Keybinding Reference:\n\n", style=theme.title_style)

    text.append("Standard Navigation:\n", style=theme.title_style)
    for key, description in (
        ("ESC", "Navigate back to previous view"),
        ("R", "Refresh current data"),
        ("?", "Toggle between basic and detailed help"),
    ):
        text.append(f"  {key:<6}", style=theme.info_key_style)
        text.append(f" - {description}\n")
    if FILTER_KEY in table:
        text.append(f"  {FILTER_KEY:<6}", style=theme.info_key_style)
        text.append(" - Filter rows\n")

    text.append("\nCustom Actions:\n", style=theme.title_style)
    for key, description in table.items():
        if key in STANDARD_KEYS:
            continue
        text.append(f"  {key:<6}", style=theme.info_key_style)
        text.append(f" - {description}\n")

    text.append("\nNavigation Tips:\n", style=theme.title_style)
    text.append("  - Use arrow keys or j/k to navigate the table\n")
    text.append("  - Press Enter to select an item\n")
    text.append("  - Use ESC to go back through navigation history\n\n")

    text.append("Current View: ", style=theme.title_style)
    text.append(current_view)
    return text
