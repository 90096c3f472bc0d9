"""CLI integration smoke tests for broker-report-fixer."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook
from typer.testing import CliRunner

import broker_report_fixer.cli as cli_mod
from broker_report_fixer import __version__
from broker_report_fixer.cli import app

runner = CliRunner()


def _write_report(path: Path) -> Path:
    wb = Workbook()
    ws = wb.active
    ws["A1"] = "Отчёт"
    ws["A2"] = "Сделки"
    ws.merge_cells(start_row=2, start_column=1, end_row=2, end_column=110)
    ws["A3"] = "Дата"
    ws["B3"] = "Сумма"
    ws["A4"] = "01.01.2024"
    ws["B4"] = "1 000,25"
    ws["A5"] = "Конец"
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    return path


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_run_converts_reports_and_writes_summary(tmp_path: Path) -> None:
    _write_report(tmp_path / "broker-report-1.xlsx")
    _write_report(tmp_path / "q1" / "broker-report-2.xlsx")
    summary_path = tmp_path / "summary.json"

    result = runner.invoke(
        app,
        ["run", "--root", str(tmp_path), "--summary-json", str(summary_path), "--quiet"],
    )

    assert result.exit_code == 0, result.output
    out_dir = tmp_path / "fixed"
    assert (out_dir / "broker-report-1-fixed.xlsx").exists()
    assert (out_dir / "broker-report-2-q1-fixed.xlsx").exists()
    summary = json.loads(summary_path.read_text(encoding="utf-8"))
    assert (summary["converted"], summary["skipped"], summary["failed"]) == (2, 0, 0)
    ws = load_workbook(out_dir / "broker-report-1-fixed.xlsx").active
    assert ws["C5"].value == 1000.25


def test_run_twice_skips_existing_outputs(tmp_path: Path) -> None:
    _write_report(tmp_path / "broker-report-1.xlsx")

    first = runner.invoke(app, ["run", "--root", str(tmp_path)])
    output = tmp_path / "fixed" / "broker-report-1-fixed.xlsx"
    stamp = output.stat().st_mtime_ns
    second = runner.invoke(app, ["run", "--root", str(tmp_path)])

    assert first.exit_code == 0
    assert second.exit_code == 0
    assert "skipped" in second.output
    assert output.stat().st_mtime_ns == stamp


def test_run_reports_failed_file_and_exits_2(tmp_path: Path) -> None:
    _write_report(tmp_path / "broker-report-good.xlsx")
    Workbook().save(tmp_path / "broker-report-blank.xlsx")

    result = runner.invoke(app, ["run", "--root", str(tmp_path), "--quiet"])

    assert result.exit_code == 2
    assert "broker-report-blank.xlsx" in result.output
    assert (tmp_path / "fixed" / "broker-report-good-fixed.xlsx").exists()
    assert not (tmp_path / "fixed" / "broker-report-blank-fixed.xlsx").exists()


def test_run_custom_out_dir_suffix_and_flags(tmp_path: Path) -> None:
    _write_report(tmp_path / "broker-report-1.xlsx")
    out_dir = tmp_path / "clean"

    result = runner.invoke(
        app,
        [
            "run",
            "--root", str(tmp_path),
            "--out-dir", str(out_dir),
            "--suffix", "-clean",
            "--no-numeric",
            "--quiet",
        ],
    )

    assert result.exit_code == 0, result.output
    ws = load_workbook(out_dir / "broker-report-1-clean.xlsx").active
    assert ws["C5"].value == "1 000,25"


def test_run_with_no_reports_is_not_an_error(tmp_path: Path) -> None:
    result = runner.invoke(app, ["run", "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert "No files matching" in result.output


def test_run_unexpected_error_exits_1(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def _boom(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("kaboom")

    monkeypatch.setattr(cli_mod, "process_reports", _boom)

    result = runner.invoke(app, ["run", "--root", str(tmp_path), "--quiet"])

    assert result.exit_code == 1
    assert "Unexpected internal error: kaboom" in result.output


def test_run_rejects_blank_page_break_word(tmp_path: Path) -> None:
    result = runner.invoke(app, ["run", "--root", str(tmp_path), "--page-break-word", " "])

    assert result.exit_code == 2
    assert "page_break_word" in result.output


def test_inspect_prints_outline_and_writes_json(tmp_path: Path) -> None:
    source = _write_report(tmp_path / "broker-report-1.xlsx")
    json_path = tmp_path / "segments.json"

    result = runner.invoke(app, ["inspect", "--input", str(source), "--json", str(json_path)])

    assert result.exit_code == 0, result.output
    assert "Сделки" in result.output
    assert "1 tables, 1 rows" in result.output
    segments = json.loads(json_path.read_text(encoding="utf-8"))
    assert segments == [
        {"kind": "text", "content": "Отчёт"},
        {
            "kind": "table",
            "name": "Сделки",
            "columns": ["Дата", "Сумма"],
            "rows": [{"Дата": "01.01.2024", "Сумма": 1000.25}],
        },
        {"kind": "text", "content": "Конец"},
    ]


def test_inspect_unrecognized_layout_exits_2(tmp_path: Path) -> None:
    source = tmp_path / "broker-report-blank.xlsx"
    Workbook().save(source)

    result = runner.invoke(app, ["inspect", "--input", str(source)])

    assert result.exit_code == 2
    assert "top-left" in result.output
