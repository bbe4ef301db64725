"""Named page container for overlay bodies."""

from __future__ import annotations

from collections.abc import Hashable
from typing import Any


class Pages:
    """Ordered pages; the most recently added one is in front.

    Pages hold any Rich renderable under a display name. Each page is stored
    under a key, which defaults to its name; adding under an existing key
    replaces that page and moves it to the front. Owners that may show
    several pages with the same name (nested dialogs of one kind) pass
    their own key so add and remove stay paired.
    """

    def __init__(self) -> None:
        self._pages: dict[Hashable, tuple[str, Any]] = {}

    def add_page(self, name: str, renderable: Any, key: Hashable | None = None) -> Hashable:
        """Add a page in front and return the key it is stored under."""
        if not name:
            raise ValueError("Page name must not be empty")
        if key is None:
            key = name
        self._pages.pop(key, None)
        self._pages[key] = (name, renderable)
        return key

    def remove_page(self, key: Hashable) -> bool:
        """Remove a page by key; returns False if it was not present."""
        return self._pages.pop(key, None) is not None

    def has_page(self, name: str) -> bool:
        """True if any page with this name is shown."""
        return any(page_name == name for page_name, _ in self._pages.values())

    def get_page(self, name: str) -> Any | None:
        """The front-most page with this name, or None."""
        for page_name, renderable in reversed(list(self._pages.values())):
            if page_name == name:
                return renderable
        return None

    def front(self) -> tuple[str, Any] | None:
        """Return (name, renderable) of the front page, or None."""
        if not self._pages:
            return None
        return next(reversed(self._pages.values()))

    def names(self) -> list[str]:
        """Page names, back to front."""
        return [name for name, _ in self._pages.values()]

    def __len__(self) -> int:
        return len(self._pages)
