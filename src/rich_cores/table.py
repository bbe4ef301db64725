"""Table store and row identity.

Rows are lists of string cells. A row's identity (its signature) lets the
controller find the same logical row again after a full data reload, even
when the row moved: either the value of a designated selection-key column,
or the first three cells joined with a separator.
"""

from __future__ import annotations

from collections.abc import Sequence

ROW_SIGNATURE_SEPARATOR = "|"
SIGNATURE_COLUMNS = 3

Row = list[str]


def row_signature(
    row: Sequence[str],
    headers: Sequence[str],
    selection_key: str | None = None,
) -> str:
    """Compute the identity of a row.

    If ``selection_key`` names a header that the row has a cell for, the
    identity is that cell. Otherwise it is up to the first three cells, each
    followed by the separator (``["2", "b", "down"]`` -> ``"2|b|down|"``).
    Pure: depends only on the arguments, never on the row's position.
    """
    if selection_key:
        for i, header in enumerate(headers):
            if header == selection_key and i < len(row):
                return row[i]

    return "".join(f"{cell}{ROW_SIGNATURE_SEPARATOR}" for cell in row[:SIGNATURE_COLUMNS])


def normalize_row(row: Sequence[str], width: int) -> Row:
    """Fit a row to ``width`` cells: extra cells dropped, missing ones blank."""
    cells = [str(cell) for cell in row[:width]]
    if len(cells) < width:
        cells.extend([""] * (width - len(cells)))
    return cells


def row_matches(row: Sequence[str], query: str) -> bool:
    """Case-insensitive substring match against any cell."""
    needle = query.lower()
    return any(needle in str(cell).lower() for cell in row)


class TableStore:
    """Headers plus raw and visible (filtered) rows.

    Attributes:
        headers: Column names, defining column count and order.
        selection_key: Optional header used for row identity.
        filter_query: Active filter ("" when unfiltered).
    """

    def __init__(self) -> None:
        self.headers: list[str] = []
        self.selection_key: str | None = None
        self.filter_query = ""
        self._raw_rows: list[Row] = []
        self._rows: list[Row] = []
        self._raw_index: list[int] = []

    # -- identity --

    def signature(self, row: Sequence[str]) -> str:
        return row_signature(row, self.headers, self.selection_key)

    def find_signature(self, signature: str) -> int:
        """Index of the first visible row with this identity, or -1."""
        if not signature:
            return -1
        for i, row in enumerate(self._rows):
            if self.signature(row) == signature:
                return i
        return -1

    # -- data --

    @property
    def rows(self) -> list[Row]:
        """Visible rows (after filtering)."""
        return self._rows

    @property
    def raw_rows(self) -> list[Row]:
        """All loaded rows, ignoring the filter."""
        return self._raw_rows

    def __len__(self) -> int:
        return len(self._rows)

    def row(self, index: int) -> Row | None:
        if 0 <= index < len(self._rows):
            return self._rows[index]
        return None

    def set_headers(self, headers: Sequence[str]) -> None:
        self.headers = list(headers)

    def set_rows(self, rows: Sequence[Sequence[str]]) -> None:
        self._raw_rows = [list(row) for row in rows]
        self._apply_filter()

    def append_rows(self, rows: Sequence[Sequence[str]]) -> None:
        self._raw_rows.extend(list(row) for row in rows)
        self._apply_filter()

    def update_row(self, index: int, row: Sequence[str]) -> bool:
        """Replace one visible row in place; False if out of bounds."""
        if index < 0 or index >= len(self._rows):
            return False
        new_row = list(row)
        self._rows[index] = new_row
        self._raw_rows[self._raw_index[index]] = new_row
        return True

    # -- filtering --

    def set_filter(self, query: str) -> None:
        self.filter_query = query.strip()
        self._apply_filter()

    def _apply_filter(self) -> None:
        if not self.filter_query:
            self._rows = list(self._raw_rows)
            self._raw_index = list(range(len(self._raw_rows)))
            return

        self._rows = []
        self._raw_index = []
        for i, row in enumerate(self._raw_rows):
            if row_matches(row, self.filter_query):
                self._rows.append(row)
                self._raw_index.append(i)

    def named_row(self, index: int) -> dict[str, str]:
        """Map header name -> cell for a visible row (headers without a cell omitted)."""
        row = self.row(index)
        if row is None:
            return {}
        return {header: row[i] for i, header in enumerate(self.headers) if i < len(row)}
