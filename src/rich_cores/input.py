"""Input dispatch: an explicit stack of key handler frames.

Each installed handler is a HandlerFrame. Keys enter at the top frame; a
handler either consumes the key (returns None) or returns it (possibly
rewritten) to fall through to the next frame beneath it. A frame's
fallthrough target is always the nearest frame below it that is still
installed, so frames may be removed in any order without leaving a stale
restore target behind.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

KeyHandler = Callable[[str], "str | None"]

_frame_ids = itertools.count(1)


@dataclass(eq=False)
class HandlerFrame:
    """One installed input handler.

    Attributes:
        name: Label for debugging (e.g. "overlay:confirmation-modal").
        handler: Callable taking a key symbol; returns None when consumed.
        frame_id: Unique, monotonically increasing id.
    """

    name: str
    handler: KeyHandler
    frame_id: int = field(default_factory=lambda: next(_frame_ids))

    def __repr__(self) -> str:
        return f"HandlerFrame({self.name!r}, id={self.frame_id})"


class InputDispatcher:
    """Owns the handler frame stack for one application."""

    def __init__(self) -> None:
        self._frames: list[HandlerFrame] = []

    def push(self, name: str, handler: KeyHandler) -> HandlerFrame:
        """Install a handler on top of the stack and return its frame."""
        frame = HandlerFrame(name=name, handler=handler)
        self._frames.append(frame)
        logger.debug("Input frame pushed: %r (depth %d)", frame, len(self._frames))
        return frame

    def remove(self, frame: HandlerFrame) -> bool:
        """Uninstall a frame wherever it sits in the stack.

        Returns False if the frame was not installed.
        """
        try:
            self._frames.remove(frame)
        except ValueError:
            return False
        logger.debug("Input frame removed: %r (depth %d)", frame, len(self._frames))
        return True

    def contains(self, frame: HandlerFrame) -> bool:
        return frame in self._frames

    @property
    def current(self) -> HandlerFrame | None:
        """The frame that receives keys first, or None when empty."""
        return self._frames[-1] if self._frames else None

    @property
    def frames(self) -> list[HandlerFrame]:
        """Installed frames, bottom first."""
        return list(self._frames)

    def __len__(self) -> int:
        return len(self._frames)

    def dispatch(self, key: str) -> str | None:
        """Feed a key through the stack from the top.

        Returns None if some frame consumed it, otherwise the key that fell
        off the bottom of the stack.
        """
        # Snapshot: handlers may push or remove frames while running.
        for frame in reversed(list(self._frames)):
            if frame not in self._frames:
                continue
            key = frame.handler(key)
            if key is None:
                return None
        return key
