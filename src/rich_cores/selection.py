"""Selection tracking for the table view."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

NO_SELECTION = -1


class Selection:
    """Tracks the selected row index and a scroll window around it.

    The index is always re-validated against the current row count before
    use; an index outside the table reads as NO_SELECTION.
    """

    def __init__(self) -> None:
        self.index = NO_SELECTION
        self.window_offset = 0

    def valid(self, row_count: int) -> bool:
        return 0 <= self.index < row_count

    def current(self, row_count: int) -> int:
        """The index if still in bounds, otherwise NO_SELECTION."""
        return self.index if self.valid(row_count) else NO_SELECTION

    def set(self, index: int, row_count: int) -> bool:
        """Select ``index``; False (and unchanged) if out of bounds."""
        if 0 <= index < row_count:
            self.index = index
            return True
        return False

    def clear(self) -> None:
        self.index = NO_SELECTION

    def move(self, delta: int, row_count: int) -> int:
        """Move the cursor by ``delta`` rows, clamped to the table.

        With nothing selected, moving down starts at the first row and
        moving up starts at the last one.
        """
        if row_count <= 0:
            self.index = NO_SELECTION
            return self.index

        if not self.valid(row_count):
            self.index = 0 if delta >= 0 else row_count - 1
            return self.index

        self.index = max(0, min(row_count - 1, self.index + delta))
        return self.index

    def first(self, row_count: int) -> int:
        self.index = 0 if row_count > 0 else NO_SELECTION
        return self.index

    def last(self, row_count: int) -> int:
        self.index = row_count - 1 if row_count > 0 else NO_SELECTION
        return self.index

    def update_window(self, max_visible: int, row_count: int) -> None:
        """Update the window offset to keep the cursor visible."""
        if row_count <= max_visible:
            self.window_offset = 0
            return

        self.window_offset = min(self.window_offset, row_count - max_visible)
        if not self.valid(row_count):
            return

        if self.index < self.window_offset:
            self.window_offset = self.index
        elif self.index >= self.window_offset + max_visible:
            self.window_offset = self.index - max_visible + 1


def selection_payload(
    index: int,
    row: Sequence[str],
    headers: Sequence[str],
) -> dict[str, Any]:
    """Build the "rowSelected" action payload.

    ``namedData`` is present only when headers are; cells beyond the header
    count are not named.
    """
    payload: dict[str, Any] = {
        "rowIndex": index,
        "rowData": list(row),
    }
    if headers:
        payload["namedData"] = {
            header: row[i] for i, header in enumerate(headers) if i < len(row)
        }
    return payload
