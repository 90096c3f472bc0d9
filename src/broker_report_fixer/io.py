"""I/O helpers — load report workbooks, find inputs, write outputs."""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook

from broker_report_fixer import OUTPUT_SUFFIX, REPORT_PATTERN
from broker_report_fixer.grid import WorksheetGrid

_EXCEL_SUFFIXES = (".xlsx", ".xlsm", ".xltx", ".xltm")

# ── Loading ──────────────────────────────────────────────────────


def load_grid(path: Path) -> WorksheetGrid:
    """Open *path* and return a grid over its first worksheet.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ValueError
        If the extension is not an Excel workbook openpyxl can read.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    suffix = path.suffix.lower()
    if suffix not in _EXCEL_SUFFIXES:
        raise ValueError(f"Unsupported file type: {suffix!r}. Use .xlsx")

    wb = load_workbook(path, data_only=True)
    return WorksheetGrid(wb.worksheets[0])


# ── Discovery / naming ───────────────────────────────────────────


def _is_within(path: Path, parent: Path) -> bool:
    try:
        path.relative_to(parent)
    except ValueError:
        return False
    return True


def discover_reports(
    root: Path,
    *,
    pattern: str = REPORT_PATTERN,
    suffix: str = OUTPUT_SUFFIX,
    exclude_dir: Path | None = None,
) -> list[Path]:
    """Return report files under *root* (recursive, sorted), skipping outputs."""
    root = Path(root)
    excluded = Path(exclude_dir).resolve() if exclude_dir is not None else None
    found: list[Path] = []
    for path in sorted(root.rglob(pattern)):
        if not path.is_file() or path.stem.endswith(suffix):
            continue
        if excluded is not None and _is_within(path.resolve(), excluded):
            continue
        found.append(path)
    return found


def output_path_for(
    source: Path, root: Path, out_dir: Path, *, suffix: str = OUTPUT_SUFFIX
) -> Path:
    """Map *source* to its output file, folding sub-folders into the name.

    ``root/2023/q1/broker-report-x.xlsx`` becomes
    ``out_dir/broker-report-x-2023-q1-fixed.xlsx``.
    """
    source = Path(source)
    name = source.stem
    subfolder = source.parent.relative_to(root) if _is_within(source, Path(root)) else source.parent
    if subfolder.parts:
        name += "-" + "-".join(subfolder.parts)
    return Path(out_dir) / f"{name}{suffix}.xlsx"


# ── Writing ──────────────────────────────────────────────────────


def save_workbook(wb: Workbook, path: Path) -> Path:
    """Save *wb* to *path* in one write (temp file + replace)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.stem + ".tmp" + path.suffix)
    try:
        wb.save(tmp_path)
        tmp_path.replace(path)
    finally:
        tmp_path.unlink(missing_ok=True)
    return path


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    if isinstance(obj, Mapping):
        return dict(obj)
    item = getattr(obj, "item", None)
    if callable(item):
        converted = item()
        if isinstance(converted, (str, int, float, bool)) or converted is None:
            return converted
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_json(path: Path, data: Any) -> Path:
    """Write *data* as pretty-printed JSON to *path* (atomic + deterministic)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = json.dumps(
        data,
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
        default=_json_default,
    ) + "\n"
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(payload, encoding="utf-8")
    tmp_path.replace(path)
    return path
