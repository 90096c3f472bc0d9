"""Excel writer — lays segments out as text rows and Excel tables."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

import pandas as pd
from openpyxl.cell.cell import Cell
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table as ExcelTable
from openpyxl.worksheet.table import TableStyleInfo
from openpyxl.worksheet.worksheet import Worksheet

from broker_report_fixer.grid import format_cell_text
from broker_report_fixer.models import ScanOptions, Segment, Table, TextLine

# ── Style constants ──────────────────────────────────────────────

TITLE_FONT = Font(bold=True)
TIME_FMT = "h:mm:ss AM/PM"
TABLE_STYLE = "TableStyleMedium9"

TABLE_COLUMN = 2
_MAX_AUTO_WIDTH = 60


# ── Helpers ──────────────────────────────────────────────────────


def _header_labels(columns: Iterable[str]) -> list[str]:
    """Excel tables need unique, non-empty header cells."""
    labels: list[str] = []
    seen: set[str] = set()
    for idx, name in enumerate(columns, 1):
        base = name.strip() or f"Column{idx}"
        label = base
        n = 2
        while label.casefold() in seen:
            label = f"{base}{n}"
            n += 1
        seen.add(label.casefold())
        labels.append(label)
    return labels


def _excel_value(val: Any) -> Any:
    try:
        if pd.isna(val):
            return None
    except (TypeError, ValueError):
        return val

    if isinstance(val, pd.Timestamp):
        return val.to_pydatetime()

    if isinstance(val, datetime) and val.tzinfo:
        return val.replace(tzinfo=None)

    return val


def _write_cell(ws: Worksheet, row: int, col: int, value: Any) -> Cell:
    cell = ws.cell(row=row, column=col, value=value)
    if isinstance(value, str) and value.startswith("="):
        cell.data_type = "s"
    return cell


def _import_frame(ws: Worksheet, frame: pd.DataFrame, labels: list[str], row: int, col: int) -> int:
    """Write *labels* and *frame* as a grid at (*row*, *col*); return rows written."""
    for c_idx, label in enumerate(labels):
        _write_cell(ws, row, col + c_idx, label)
    for r_idx, values in enumerate(frame.itertuples(index=False, name=None), 1):
        for c_idx, val in enumerate(values):
            _write_cell(ws, row + r_idx, col + c_idx, _excel_value(val))
    return len(frame) + 1


def _is_time_column(name: str, options: ScanOptions) -> bool:
    folded = name.casefold()
    return options.time_word.casefold() in folded and options.date_word.casefold() not in folded


def _fix_time_columns(
    ws: Worksheet, table: Table, first_row: int, last_row: int, options: ScanOptions
) -> None:
    """Keep only the time of day in time columns that hold full datetimes."""
    for c_idx, name in enumerate(table.columns):
        if not _is_time_column(name, options):
            continue
        col = TABLE_COLUMN + c_idx
        for (cell,) in ws.iter_rows(min_row=first_row, max_row=last_row, min_col=col, max_col=col):
            if isinstance(cell.value, datetime):
                cell.value = cell.value.time()
            cell.number_format = TIME_FMT


def _auto_width(ws: Worksheet, min_col: int, max_col: int) -> None:
    for c_idx in range(min_col, max_col + 1):
        width = 0
        for (cell,) in ws.iter_rows(min_row=1, max_row=ws.max_row, min_col=c_idx, max_col=c_idx):
            if cell.value is None:
                continue
            width = max(width, len(format_cell_text(cell.value)))
        ws.column_dimensions[get_column_letter(c_idx)].width = min(width + 2, _MAX_AUTO_WIDTH)


def _add_excel_table(ws: Worksheet, header_row: int, last_row: int, ncols: int) -> str:
    """Turn the written range into an Excel Table object; return its name."""
    name = f"Table{header_row}"
    ref = (
        f"{get_column_letter(TABLE_COLUMN)}{header_row}:"
        f"{get_column_letter(TABLE_COLUMN + ncols - 1)}{last_row}"
    )
    excel_table = ExcelTable(displayName=name, ref=ref)
    excel_table.tableStyleInfo = TableStyleInfo(
        name=TABLE_STYLE, showFirstColumn=False,
        showLastColumn=False, showRowStripes=True, showColumnStripes=False,
    )
    ws.add_table(excel_table)
    return name


# ── Public API ───────────────────────────────────────────────────


def render_segments(
    segments: Iterable[Segment], ws: Worksheet, options: ScanOptions | None = None
) -> int:
    """Write *segments* into *ws* from A1 down; return the next free row."""
    options = options or ScanOptions()
    autosized = False
    row = 1
    for segment in segments:
        if isinstance(segment, TextLine):
            if segment.content:
                _write_cell(ws, row, 1, segment.content)
            row += 1
            continue

        row += 1
        _write_cell(ws, row, 1, segment.name).font = TITLE_FONT
        row += 1

        header_row = row
        ncols = len(segment.columns)
        written = 1
        if ncols:
            written = _import_frame(
                ws, segment.to_frame(), _header_labels(segment.columns), header_row, TABLE_COLUMN
            )
        last_data_row = header_row + len(segment.rows)

        if ncols:
            if options.time_column_fixup and segment.rows:
                _fix_time_columns(ws, segment, header_row + 1, last_data_row, options)
            if not autosized:
                _auto_width(ws, TABLE_COLUMN, TABLE_COLUMN + ncols - 1)
                autosized = True
            # an Excel table needs at least one body row
            _add_excel_table(ws, header_row, max(last_data_row, header_row + 1), ncols)

        row = header_row + written + 2
    return row
