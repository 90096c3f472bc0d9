"""Row classification heuristics for broker report worksheets."""

from __future__ import annotations

import re

from broker_report_fixer.grid import Grid
from broker_report_fixer.models import ScanOptions

PROBE_SIZE = 10
TITLE_MIN_MERGE = 100
HEADER_MAX_MERGE = 60
PAGE_BREAK_MAX_LEN = 15


class LayoutError(ValueError):
    """The worksheet does not look like a report the scanner can read."""


def strip_newlines(text: str) -> str:
    return text.replace("\r", "").replace("\n", "")


def find_anchor_column(grid: Grid, *, probe: bool = True) -> int:
    """Return the column all row checks read from.

    Scans the top-left 10×10 block row by row and returns the column of the
    first cell with text.
    """
    if not probe:
        return 1
    for r in range(1, PROBE_SIZE + 1):
        for c in range(1, PROBE_SIZE + 1):
            if grid.cell(r, c).text:
                return c
    raise LayoutError(
        f"No text found in the top-left {PROBE_SIZE}x{PROBE_SIZE} cells; not a recognizable report"
    )


class SheetLayout:
    """A grid plus the anchor column and options every row check needs."""

    def __init__(self, grid: Grid, options: ScanOptions | None = None) -> None:
        self.grid = grid
        self.options = options or ScanOptions()
        self.last_row, self.last_col = grid.used_range()
        self.anchor_col = find_anchor_column(grid, probe=self.options.anchor_probe)
        self._page_break_re = re.compile(
            rf"\d+ {re.escape(self.options.page_break_word)} \d+"
        )

    def text(self, row: int, col: int | None = None) -> str:
        return self.grid.cell(row, self.anchor_col if col is None else col).text

    def is_header_cell(self, row: int, col: int) -> bool:
        cell = self.grid.cell(row, col)
        return cell.merge_size < HEADER_MAX_MERGE and bool(cell.text)

    def is_header(self, row: int) -> bool:
        col = self.anchor_col
        return self.is_header_cell(row, col) or (col > 1 and self.is_header_cell(row, col - 1))

    def is_page_break(self, row: int) -> bool:
        """True for a short ``"N из M"`` page footer row."""
        text = ""
        col = self.anchor_col
        while col <= self.last_col and len(text) < PAGE_BREAK_MAX_LEN:
            text += self.grid.cell(row, col).text
            col += 1
        return len(text) < PAGE_BREAK_MAX_LEN and bool(self._page_break_re.search(text))

    def is_table_title(self, row: int) -> bool:
        if self.grid.cell(row, self.anchor_col).merge_size <= TITLE_MIN_MERGE:
            return False
        if self.is_header(row + 1):
            return True
        return self.is_page_break(row + 1) and self.is_header(row + 2)
