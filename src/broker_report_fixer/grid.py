"""Read-only grid view over a worksheet.

The scanner only needs three things per cell (raw value, formatted text and
merged-region size) plus the used range, so both the openpyxl worksheet and
plain in-memory matrices are adapted to the same small interface.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Protocol

from openpyxl.worksheet.worksheet import Worksheet

DATE_TEXT_FMT = "%d.%m.%Y"
DATETIME_TEXT_FMT = "%d.%m.%Y %H:%M:%S"
TIME_TEXT_FMT = "%H:%M:%S"

MergeRect = tuple[int, int, int, int]


@dataclass(frozen=True)
class CellView:
    raw_value: Any = None
    text: str = ""
    merge_size: int = 1


EMPTY_CELL = CellView()


class Grid(Protocol):
    def cell(self, row: int, col: int) -> CellView: ...

    def used_range(self) -> tuple[int, int]: ...


def format_cell_text(value: Any) -> str:
    """Return the display text for a raw cell value."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.strftime(DATE_TEXT_FMT)
        return value.strftime(DATETIME_TEXT_FMT)
    if isinstance(value, date):
        return value.strftime(DATE_TEXT_FMT)
    if isinstance(value, time):
        return value.strftime(TIME_TEXT_FMT)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _merge_sizes(rects: Iterable[MergeRect]) -> dict[tuple[int, int], int]:
    sizes: dict[tuple[int, int], int] = {}
    for min_row, min_col, max_row, max_col in rects:
        size = (max_row - min_row + 1) * (max_col - min_col + 1)
        for r in range(min_row, max_row + 1):
            for c in range(min_col, max_col + 1):
                sizes[(r, c)] = size
    return sizes


class MatrixGrid:
    """Grid over a list of rows; ``merges`` are ``(min_row, min_col, max_row, max_col)``."""

    def __init__(self, values: Sequence[Sequence[Any]], merges: Iterable[MergeRect] = ()) -> None:
        self._values = [list(row) for row in values]
        self._merges = _merge_sizes(merges)
        self._last_row = len(self._values)
        self._last_col = max((len(row) for row in self._values), default=0)

    def used_range(self) -> tuple[int, int]:
        return self._last_row, self._last_col

    def cell(self, row: int, col: int) -> CellView:
        value = None
        if 1 <= row <= self._last_row:
            source = self._values[row - 1]
            if 1 <= col <= len(source):
                value = source[col - 1]
        merge_size = self._merges.get((row, col), 1)
        if value is None and merge_size == 1:
            return EMPTY_CELL
        return CellView(raw_value=value, text=format_cell_text(value), merge_size=merge_size)


class WorksheetGrid:
    """Grid over an openpyxl worksheet.

    Coordinates outside the used range are answered without touching the
    worksheet, since ``Worksheet.cell`` would create them.
    """

    def __init__(self, ws: Worksheet) -> None:
        self.ws = ws
        self._last_row = ws.max_row
        self._last_col = ws.max_column
        self._merges = _merge_sizes(
            (rng.min_row, rng.min_col, rng.max_row, rng.max_col) for rng in ws.merged_cells.ranges
        )

    def used_range(self) -> tuple[int, int]:
        return self._last_row, self._last_col

    def cell(self, row: int, col: int) -> CellView:
        merge_size = self._merges.get((row, col), 1)
        if not (1 <= row <= self._last_row and 1 <= col <= self._last_col):
            return EMPTY_CELL if merge_size == 1 else CellView(merge_size=merge_size)
        value = self.ws.cell(row=row, column=col).value
        return CellView(raw_value=value, text=format_cell_text(value), merge_size=merge_size)
