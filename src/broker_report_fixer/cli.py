"""CLI entry point for broker-report-fixer."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table as RichTable

from broker_report_fixer import OUTPUT_DIR_NAME, OUTPUT_SUFFIX, REPORT_PATTERN, __version__
from broker_report_fixer.io import write_json
from broker_report_fixer.models import FileResult, ScanOptions, Segment, Table
from broker_report_fixer.pipeline import REPORT_ERRORS, process_reports, read_segments

app = typer.Typer(
    name="brfix",
    help="broker-report-fixer — Turn paginated broker reports into clean Excel tables.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()

_PREVIEW_WIDTH = 60


class NumberLocaleOption(str, Enum):
    ru = "ru"
    en = "en"


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {msg}")


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"broker-report-fixer v{__version__}")
        raise typer.Exit()


def _build_options(
    *,
    anchor_probe: bool,
    numeric: bool,
    time_fixup: bool,
    number_locale: NumberLocaleOption,
    page_break_word: str,
) -> ScanOptions:
    try:
        return ScanOptions(
            anchor_probe=anchor_probe,
            numeric_coercion=numeric,
            time_column_fixup=time_fixup,
            number_locale=number_locale.value,
            page_break_word=page_break_word,
        )
    except (TypeError, ValueError) as exc:
        _err(str(exc))
        raise typer.Exit(code=2)


def _preview(text: str) -> str:
    text = " ".join(text.split())
    if len(text) > _PREVIEW_WIDTH:
        return text[: _PREVIEW_WIDTH - 1] + "…"
    return text


def _segment_payload(segment: Segment) -> dict[str, object]:
    if isinstance(segment, Table):
        return {
            "kind": "table",
            "name": segment.name,
            "columns": list(segment.columns),
            "rows": [dict(row) for row in segment.rows],
        }
    return {"kind": "text", "content": segment.content}


def _report_result(result: FileResult, quiet: bool) -> None:
    name = Path(result.source).name
    if result.status == "failed":
        _err(f"{name}: {result.error}")
    elif quiet:
        return
    elif result.status == "skipped":
        console.print(f"  [yellow]![/yellow] {name}: output exists, skipped")
    else:
        console.print(
            f"  [green]✓[/green] {name}: {result.tables} tables, {result.rows} rows "
            f"-> {result.output}"
        )


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """broker-report-fixer CLI."""


# ── run command ──────────────────────────────────────────────────


@app.command()
def run(
    root: Path = typer.Option(
        Path("."), "--root", "-r",
        help="Directory searched recursively for broker reports.",
        exists=True, file_okay=False, dir_okay=True,
    ),
    out_dir: Path | None = typer.Option(
        None, "--out-dir", "-o",
        help=f"Output directory (default: <root>/{OUTPUT_DIR_NAME}).",
    ),
    pattern: str = typer.Option(
        REPORT_PATTERN, "--pattern",
        help="File name pattern of the reports to convert.",
    ),
    suffix: str = typer.Option(
        OUTPUT_SUFFIX, "--suffix",
        help="Suffix appended to output names; inputs ending with it are ignored.",
    ),
    anchor_probe: bool = typer.Option(
        True, "--anchor-probe/--no-anchor-probe",
        help="Locate the text column in the top-left cells instead of using column A.",
    ),
    numeric: bool = typer.Option(
        True, "--numeric/--no-numeric",
        help="Convert numbers stored as text into numeric cells.",
    ),
    time_fixup: bool = typer.Option(
        True, "--time-fixup/--no-time-fixup",
        help="Show only the time of day in time columns.",
    ),
    number_locale: NumberLocaleOption = typer.Option(
        NumberLocaleOption.ru, "--number-locale",
        help="Number format of the reports: ru (1 234,56) or en (1,234.56).",
    ),
    page_break_word: str = typer.Option(
        "из", "--page-break-word",
        help='The word "of" in page footers such as "1 из 3".',
    ),
    summary_json: Path | None = typer.Option(
        None, "--summary-json",
        help="Also write the run summary as JSON to this path.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress informational output; errors are still printed.",
    ),
) -> None:
    """Convert every broker report under the root directory."""
    echo = _printer(quiet)
    options = _build_options(
        anchor_probe=anchor_probe,
        numeric=numeric,
        time_fixup=time_fixup,
        number_locale=number_locale,
        page_break_word=page_break_word,
    )
    target_dir = out_dir if out_dir is not None else root / OUTPUT_DIR_NAME

    if not quiet:
        console.print(Panel(
            f"[bold]broker-report-fixer[/bold] v{__version__}\n"
            f"Root:   {root}\nOutput: {target_dir}",
            title="Run Start", border_style="blue",
        ))
        console.print(
            "  Scan mode: "
            f"anchor_probe={options.anchor_probe}, numeric={options.numeric_coercion}, "
            f"time_fixup={options.time_column_fixup}, number_locale={options.number_locale}"
        )

    echo(f"[blue]>[/blue] Converting {pattern} …")
    try:
        summary = process_reports(
            root,
            target_dir,
            options,
            pattern=pattern,
            suffix=suffix,
            on_result=lambda result: _report_result(result, quiet),
        )
    except Exception as exc:
        _err(f"Unexpected internal error: {exc}")
        raise typer.Exit(code=1)

    if summary_json is not None:
        path = write_json(summary_json, summary.to_dict())
        echo(f"  Summary -> {path}")

    if not summary.results:
        echo(f"  [yellow]![/yellow] No files matching {pattern} under {root}")

    if not quiet:
        style = "red" if summary.failed else "green"
        console.print(Panel(
            f"[{style}]Done[/{style}] — {summary.converted} converted, "
            f"{summary.skipped} skipped, {summary.failed} failed",
            title="Run Complete", border_style=style,
        ))

    if summary.failed:
        raise typer.Exit(code=2)


# ── inspect command ──────────────────────────────────────────────


@app.command()
def inspect(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to a broker report workbook.",
        exists=True, readable=True, dir_okay=False,
    ),
    json_path: Path | None = typer.Option(
        None, "--json",
        help="Write the recognized segments as JSON to this path.",
    ),
    anchor_probe: bool = typer.Option(
        True, "--anchor-probe/--no-anchor-probe",
        help="Locate the text column in the top-left cells instead of using column A.",
    ),
    numeric: bool = typer.Option(
        True, "--numeric/--no-numeric",
        help="Convert numbers stored as text into numeric cells.",
    ),
    number_locale: NumberLocaleOption = typer.Option(
        NumberLocaleOption.ru, "--number-locale",
        help="Number format of the report: ru (1 234,56) or en (1,234.56).",
    ),
    page_break_word: str = typer.Option(
        "из", "--page-break-word",
        help='The word "of" in page footers such as "1 из 3".',
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress the outline; still writes --json.",
    ),
) -> None:
    """Show how a report is split into text and tables, without writing a workbook.

    Exit 0 = recognized, exit 2 = unreadable file or layout.
    """
    options = _build_options(
        anchor_probe=anchor_probe,
        numeric=numeric,
        time_fixup=False,
        number_locale=number_locale,
        page_break_word=page_break_word,
    )
    try:
        segments = read_segments(input_file, options)
    except REPORT_ERRORS as exc:
        _err(str(exc))
        raise typer.Exit(code=2)

    tables = [segment for segment in segments if isinstance(segment, Table)]
    if not quiet:
        tbl = RichTable(title=f"Segments of {input_file.name}", show_lines=False)
        tbl.add_column("#", justify="right")
        tbl.add_column("Kind", style="bold")
        tbl.add_column("Content")
        tbl.add_column("Columns", justify="right")
        tbl.add_column("Rows", justify="right")
        for idx, segment in enumerate(segments, 1):
            if isinstance(segment, Table):
                tbl.add_row(
                    str(idx), "[cyan]table[/cyan]", _preview(segment.name),
                    str(len(segment.columns)), str(len(segment.rows)),
                )
            elif segment.content:
                tbl.add_row(str(idx), "text", _preview(segment.content), "", "")
        console.print(tbl)
        console.print(
            f"  {len(tables)} tables, {sum(len(t.rows) for t in tables)} rows, "
            f"{len(segments) - len(tables)} text lines"
        )

    if json_path is not None:
        path = write_json(json_path, [_segment_payload(segment) for segment in segments])
        console.print(f"  Segments -> {path}")
