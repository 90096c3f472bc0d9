"""Conversion pipeline — one report in, one fixed workbook out."""

from __future__ import annotations

import zipfile
from collections.abc import Callable
from pathlib import Path

from openpyxl import Workbook
from openpyxl.utils.exceptions import InvalidFileException

from broker_report_fixer import OUTPUT_DIR_NAME, OUTPUT_SUFFIX, REPORT_PATTERN
from broker_report_fixer.io import discover_reports, load_grid, output_path_for, save_workbook
from broker_report_fixer.layout import LayoutError
from broker_report_fixer.models import FileResult, RunSummary, ScanOptions, Segment, Table
from broker_report_fixer.renderer import render_segments
from broker_report_fixer.segmenter import iter_segments

# Errors that fail a single report without stopping the batch.
REPORT_ERRORS: tuple[type[Exception], ...] = (
    LayoutError,
    OSError,
    ValueError,
    KeyError,
    InvalidFileException,
    zipfile.BadZipFile,
)


def read_segments(path: Path, options: ScanOptions | None = None) -> list[Segment]:
    """Load *path* and return its segments in source order."""
    return list(iter_segments(load_grid(path), options))


def convert_report(
    source: Path, destination: Path, options: ScanOptions | None = None
) -> FileResult:
    """Rebuild *source* into a new workbook saved at *destination*.

    The workbook is assembled in memory and written once, so a failure
    leaves no output behind.
    """
    options = options or ScanOptions()
    segments = read_segments(source, options)

    wb = Workbook()
    ws = wb.active
    if ws is None:
        ws = wb.create_sheet()
    render_segments(segments, ws, options)
    save_workbook(wb, destination)

    tables = [segment for segment in segments if isinstance(segment, Table)]
    return FileResult(
        source=str(source),
        output=str(destination),
        status="converted",
        tables=len(tables),
        text_lines=len(segments) - len(tables),
        rows=sum(len(table.rows) for table in tables),
    )


def process_reports(
    root: Path,
    out_dir: Path | None = None,
    options: ScanOptions | None = None,
    *,
    pattern: str = REPORT_PATTERN,
    suffix: str = OUTPUT_SUFFIX,
    on_result: Callable[[FileResult], None] | None = None,
) -> RunSummary:
    """Convert every report under *root*; existing outputs are left alone.

    Each file succeeds or fails on its own; ``on_result`` is called after
    every file.
    """
    root = Path(root).resolve()
    out_dir = (root / OUTPUT_DIR_NAME) if out_dir is None else Path(out_dir).resolve()
    summary = RunSummary()

    for source in discover_reports(root, pattern=pattern, suffix=suffix, exclude_dir=out_dir):
        destination = output_path_for(source, root, out_dir, suffix=suffix)
        if destination.exists():
            result = FileResult(source=str(source), output=str(destination), status="skipped")
        else:
            try:
                result = convert_report(source, destination, options)
            except REPORT_ERRORS as exc:
                result = FileResult(source=str(source), status="failed", error=str(exc))
        summary.results.append(result)
        if on_result is not None:
            on_result(result)
    return summary
