from __future__ import annotations

from datetime import date, datetime, time

from openpyxl import Workbook

from broker_report_fixer.grid import CellView, MatrixGrid, WorksheetGrid, format_cell_text


def test_format_cell_text_renders_report_values() -> None:
    assert format_cell_text(None) == ""
    assert format_cell_text("Сделки") == "Сделки"
    assert format_cell_text(2024.0) == "2024"
    assert format_cell_text(12.5) == "12.5"
    assert format_cell_text(7) == "7"
    assert format_cell_text(True) == "TRUE"
    assert format_cell_text(date(2024, 1, 31)) == "31.01.2024"
    assert format_cell_text(datetime(2024, 1, 31)) == "31.01.2024"
    assert format_cell_text(datetime(2024, 1, 31, 9, 5, 7)) == "31.01.2024 09:05:07"
    assert format_cell_text(time(18, 45)) == "18:45:00"


def test_matrix_grid_reports_values_text_and_merges() -> None:
    grid = MatrixGrid(
        [["Title", None], ["A", 2.0], ["x"]],
        merges=[(1, 1, 1, 2)],
    )

    assert grid.used_range() == (3, 2)
    assert grid.cell(1, 1) == CellView(raw_value="Title", text="Title", merge_size=2)
    assert grid.cell(1, 2).merge_size == 2
    assert grid.cell(2, 2) == CellView(raw_value=2.0, text="2", merge_size=1)
    assert grid.cell(3, 2) == CellView()
    assert grid.cell(50, 50) == CellView()


def test_worksheet_grid_reads_merges_and_values() -> None:
    wb = Workbook()
    ws = wb.active
    ws.append(["Отчёт"])
    ws.append(["Сделки"])
    ws.merge_cells(start_row=2, start_column=1, end_row=3, end_column=4)
    ws.append([])
    ws.append(["Дата", "Сумма"])

    grid = WorksheetGrid(ws)

    assert grid.used_range() == (4, 4)
    assert grid.cell(1, 1).text == "Отчёт"
    assert grid.cell(2, 1).merge_size == 8
    assert grid.cell(3, 4).merge_size == 8
    assert grid.cell(4, 2).raw_value == "Сумма"
    assert grid.cell(4, 1).merge_size == 1


def test_worksheet_grid_does_not_grow_the_sheet_when_probing() -> None:
    wb = Workbook()
    ws = wb.active
    ws.append(["only"])

    grid = WorksheetGrid(ws)

    assert grid.cell(10, 10) == CellView()
    assert grid.cell(2, 1) == CellView()
    assert (ws.max_row, ws.max_column) == (1, 1)
