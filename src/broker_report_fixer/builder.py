"""Rebuild one data table starting at its title row."""

from __future__ import annotations

from typing import Any

from broker_report_fixer.coercion import coerce_value
from broker_report_fixer.layout import SheetLayout, strip_newlines
from broker_report_fixer.models import Table


def read_header(layout: SheetLayout, row: int) -> list[tuple[int, str]]:
    """Return ``(column, name)`` for every non-empty cell right of the anchor."""
    header: list[tuple[int, str]] = []
    for col in range(layout.anchor_col, layout.last_col + 1):
        text = layout.text(row, col)
        if text:
            header.append((col, strip_newlines(text)))
    return header


def _is_repeated_header(layout: SheetLayout, row: int, header: list[tuple[int, str]]) -> bool:
    return all(strip_newlines(layout.text(row, col)) == name for col, name in header)


def _is_trailing_footer(layout: SheetLayout, row: int, header: list[tuple[int, str]]) -> bool:
    # A lone note in the sheet's last row closes the report, it is not data.
    if row != layout.last_row or len(header) < 2:
        return False
    if not layout.text(row):
        return False
    return all(
        layout.grid.cell(row, col).raw_value in (None, "")
        for col, _name in header
        if col != layout.anchor_col
    )


def _read_row(layout: SheetLayout, row: int, header: list[tuple[int, str]]) -> dict[str, Any]:
    options = layout.options
    values: dict[str, Any] = {}
    for col, name in header:
        value = layout.grid.cell(row, col).raw_value
        if value is None or value == "":
            continue
        if options.numeric_coercion:
            value = coerce_value(value, locale=options.number_locale)
        values.setdefault(name, value)
    return values


def build_table(layout: SheetLayout, row: int) -> tuple[Table, int]:
    """Read the table whose title sits at *row*.

    Returns the table and the first row that does not belong to it (past the
    used range, a new title row, or a trailing footer line).
    """
    name = layout.text(row)
    row += 1
    if layout.is_page_break(row):
        row += 1

    header = read_header(layout, row)
    rows: list[dict[str, Any]] = []
    row += 1
    while row <= layout.last_row and not layout.is_table_title(row):
        if _is_trailing_footer(layout, row, header):
            break
        if not _is_repeated_header(layout, row, header):
            values = _read_row(layout, row, header)
            if values:
                rows.append(values)
        row += 1

    columns = tuple(col_name for _col, col_name in header)
    return Table(name=name, columns=columns, rows=tuple(rows)), row
