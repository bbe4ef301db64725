"""The key dispatch chain installed for every CoreView.

For each key the chain tries, in order:

1. ESC with more than one view on the navigation stack: pop the view and
   report "back" and "navigate_back" actions. ESC at the root falls
   through so an enclosing handler (e.g. quitting the app) can own it.
2. PgDn on a view with a lazy loader: load the next page of rows.
3. Built-in keys (R, ?, /) while bound: the host may claim the key via the
   "keypress" action; otherwise the default behavior runs.
4. Any other bound key: report a "keypress" action and consume the key.
5. Everything else goes to ``fallthrough`` unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from .keybindings import BACK_KEY, FILTER_KEY, HELP_KEY, REFRESH_KEY
from .keys import PGDN, is_escape

if TYPE_CHECKING:
    from .core import CoreView

logger = logging.getLogger(__name__)

ACTION_KEYPRESS = "keypress"
ACTION_BACK = "back"
ACTION_NAVIGATE_BACK = "navigate_back"
ACTION_ROW_SELECTED = "rowSelected"


def _pop_and_report(view: "CoreView") -> None:
    previous = view.get_current_view()
    view.pop_view()
    current = view.get_current_view()
    view.fire_action(ACTION_BACK, {"from": previous, "to": current})
    view.fire_action(ACTION_NAVIGATE_BACK, {"current_view": current})


def _builtin_default(view: "CoreView", key: str) -> None:
    if key == REFRESH_KEY:
        view.refresh_data()
    elif key == HELP_KEY:
        view.toggle_help_expanded()
    elif key == FILTER_KEY:
        view.open_filter_dialog()


def standard_key_handler(
    view: "CoreView",
    key: str,
    fallthrough: Callable[[str], str | None] | None = None,
) -> str | None:
    """Run one key through a view's dispatch chain.

    Args:
        view: The view whose bindings and navigation stack apply.
        key: Normalized key symbol.
        fallthrough: Handler for keys this chain does not recognize.

    Returns:
        None if the key was consumed, otherwise whatever ``fallthrough``
        returned (or the key itself when there is no fallthrough).
    """
    if is_escape(key):
        if view.navigation.depth > 1:
            _pop_and_report(view)
            return None
    elif key == PGDN and view.has_lazy_loader:
        view.load_more()
        return None
    elif key in view.key_bindings and key != BACK_KEY:
        claimed = view.fire_action(ACTION_KEYPRESS, {"key": key})
        if key in (REFRESH_KEY, HELP_KEY, FILTER_KEY) and not claimed:
            _builtin_default(view, key)
        logger.debug("Key %r handled by %s (claimed=%s)", key, view.title, claimed)
        return None

    if fallthrough is None:
        return key
    return fallthrough(key)
