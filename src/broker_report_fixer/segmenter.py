"""Split a report worksheet into free-text lines and data tables."""

from __future__ import annotations

from collections.abc import Iterator

from broker_report_fixer.builder import build_table
from broker_report_fixer.grid import Grid
from broker_report_fixer.layout import SheetLayout
from broker_report_fixer.models import ScanOptions, Segment, TextLine


class Segmenter:
    """Cursor over a worksheet, yielding segments top to bottom.

    ``row`` is the next row to classify; iteration stops once it passes the
    last used row.
    """

    def __init__(self, grid: Grid, options: ScanOptions | None = None, *, start_row: int = 1) -> None:
        self.layout = SheetLayout(grid, options)
        self.row = start_row

    def __iter__(self) -> Iterator[Segment]:
        layout = self.layout
        while self.row <= layout.last_row:
            if layout.is_table_title(self.row):
                table, self.row = build_table(layout, self.row)
                yield table
            else:
                line = TextLine(layout.text(self.row))
                self.row += 1
                yield line


def iter_segments(grid: Grid, options: ScanOptions | None = None) -> Iterator[Segment]:
    """Yield the segments of *grid* in source order."""
    return iter(Segmenter(grid, options))
