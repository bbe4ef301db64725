"""Keyboard input helpers for rich_cores.

Raw keys come from ``readchar.readkey()`` as strings (single characters or
escape sequences). Everything above this module works with normalized key
symbols: the printable character itself, or an upper-case name such as
``"ESC"``, ``"ENTER"`` or ``"CTRL_A"``.
"""

from __future__ import annotations

import readchar

ESC = "ESC"
ENTER = "ENTER"
TAB = "TAB"
BACKSPACE = "BACKSPACE"
DELETE = "DELETE"
UP = "UP"
DOWN = "DOWN"
LEFT = "LEFT"
RIGHT = "RIGHT"
PGUP = "PGUP"
PGDN = "PGDN"
HOME = "HOME"
END = "END"
SPACE = " "

_NAMED_KEYS: dict[str, str] = {
    readchar.key.ESC: ESC,
    "\x1b\x1b": ESC,
    readchar.key.ENTER: ENTER,
    "\r": ENTER,
    "\n": ENTER,
    readchar.key.TAB: TAB,
    readchar.key.BACKSPACE: BACKSPACE,
    "\x7f": BACKSPACE,
    "\b": BACKSPACE,
    readchar.key.DELETE: DELETE,
    readchar.key.UP: UP,
    readchar.key.DOWN: DOWN,
    readchar.key.LEFT: LEFT,
    readchar.key.RIGHT: RIGHT,
    readchar.key.PAGE_UP: PGUP,
    readchar.key.PAGE_DOWN: PGDN,
    readchar.key.HOME: HOME,
    readchar.key.END: END,
}

# Alternate sequences some terminals send for the same keys.
_NAMED_KEYS.update(
    {
        "\x1bOA": UP,
        "\x1bOB": DOWN,
        "\x1bOC": RIGHT,
        "\x1bOD": LEFT,
        "\x1bOH": HOME,
        "\x1bOF": END,
        "\x1b[1~": HOME,
        "\x1b[4~": END,
    }
)


def normalize_key(raw: str) -> str:
    """Map a raw ``readchar`` key to its symbol.

    Printable characters are returned unchanged. Control characters
    ``\\x01``-``\\x1a`` that are not already named (Tab, Enter, Backspace)
    become ``"CTRL_A"`` ... ``"CTRL_Z"``. Unknown escape sequences are
    returned as-is so handlers can still forward them.
    """
    if raw in _NAMED_KEYS:
        return _NAMED_KEYS[raw]
    if len(raw) == 1 and 1 <= ord(raw) <= 26:
        return f"CTRL_{chr(ord('A') + ord(raw) - 1)}"
    return raw


def is_named(key: str) -> bool:
    """Check if key is a named (non-printable) key symbol."""
    return len(key) > 1


def is_printable(key: str) -> bool:
    """Check if key is a single printable character."""
    return len(key) == 1 and key.isprintable()


def is_escape(key: str) -> bool:
    """Check if key is Escape."""
    return key == ESC


def is_enter(key: str) -> bool:
    """Check if key is Enter/Return."""
    return key == ENTER


def is_up(key: str) -> bool:
    """Check if key is up arrow or vim 'k'."""
    return key in (UP, "k")


def is_down(key: str) -> bool:
    """Check if key is down arrow or vim 'j'."""
    return key in (DOWN, "j")


def is_backspace(key: str) -> bool:
    """Check if key is backspace."""
    return key == BACKSPACE


def is_select(key: str) -> bool:
    """Check if key is a selection key (Enter or Space)."""
    return key in (ENTER, SPACE)
