"""Navigation stack and breadcrumb rendering."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from rich.text import Text

from .themes import DEFAULT_THEME, Theme


class NavigationStack:
    """Ordered view names; index 0 is the root and the last one is active.

    ``pop`` never removes the root. ``clear`` truncates to the root, and an
    empty stack stays empty.
    """

    def __init__(self, views: Sequence[str] | None = None) -> None:
        self._views: list[str] = list(views or [])

    def push(self, view: str) -> None:
        self._views.append(view)

    def pop(self) -> str:
        """Remove and return the active view; "" at depth <= 1."""
        if len(self._views) <= 1:
            return ""
        return self._views.pop()

    def clear(self) -> None:
        del self._views[1:]

    def set(self, views: Sequence[str]) -> None:
        self._views = list(views)

    def copy_from(self, other: "NavigationStack") -> None:
        self._views = list(other._views)

    @property
    def current(self) -> str:
        return self._views[-1] if self._views else ""

    @property
    def previous(self) -> str:
        """The view a pop would return to ("" at depth <= 1)."""
        return self._views[-2] if len(self._views) > 1 else ""

    @property
    def root(self) -> str:
        return self._views[0] if self._views else ""

    @property
    def depth(self) -> int:
        return len(self._views)

    def as_list(self) -> list[str]:
        return list(self._views)

    def __iter__(self) -> Iterator[str]:
        return iter(self._views)

    def __len__(self) -> int:
        return len(self._views)

    def render(self, separator: str = ">", theme: Theme = DEFAULT_THEME) -> Text:
        """Breadcrumb trail; the active view is styled apart from its ancestors."""
        text = Text()
        last = len(self._views) - 1
        for i, view in enumerate(self._views):
            if i > 0:
                text.append(f" {separator} ", style=theme.breadcrumb_separator_style)
            style = theme.breadcrumb_active_style if i == last else theme.breadcrumb_style
            text.append(view, style=style)
        return text
