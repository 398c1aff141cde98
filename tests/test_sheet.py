"""Tests for the workbook and worksheet wrappers."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

import pytest
from openpyxl import load_workbook

from recordsheet.exceptions import InvalidArgumentError, WorkbookExportError
from recordsheet.models import CellStyle, FormattedValue
from recordsheet.sheet import Workbook, _display_width


def test_first_sheet_reuses_default_worksheet() -> None:
    workbook = Workbook()

    assert workbook.sheet_names == []
    workbook.add_worksheet("Alpha")
    workbook.add_worksheet("Beta")

    assert workbook.sheet_names == ["Alpha", "Beta"]
    assert workbook.openpyxl_workbook.sheetnames == ["Alpha", "Beta"]
    assert workbook.has_sheet("ALPHA")
    assert workbook["Beta"].title == "Beta"
    with pytest.raises(KeyError):
        workbook["Gamma"]


def test_duplicate_sheet_names_are_rejected() -> None:
    workbook = Workbook()
    workbook.add_worksheet("Data")

    with pytest.raises(InvalidArgumentError, match="already contains"):
        workbook.add_worksheet("data")


def test_write_applies_style_hints() -> None:
    sheet = Workbook().add_worksheet("Styled")
    style = CellStyle(
        number_format="#,##0.00", fill_color="FFFF00", bold=True, border=True, horizontal="right"
    )

    sheet.write(3, 2, FormattedValue(12.5, style))

    cell = sheet.worksheet.cell(row=3, column=2)
    assert sheet.get_value(3, 2) == 12.5
    assert cell.number_format == "#,##0.00"
    assert cell.fill.fgColor.rgb.endswith("FFFF00")
    assert cell.font.bold
    assert cell.border.top.style == "thin"
    assert cell.alignment.horizontal == "right"


def test_default_style_leaves_cell_untouched() -> None:
    sheet = Workbook().add_worksheet("Plain")

    sheet.write(1, 1, FormattedValue("text", CellStyle()))

    cell = sheet.worksheet.cell(row=1, column=1)
    assert cell.number_format == "General"
    assert not cell.font.bold
    assert cell.border.left.style is None


def test_column_range() -> None:
    sheet = Workbook().add_worksheet("Ranges")

    assert sheet.column_range(3, 2, 9) == "C2:C9"
    assert sheet.column_range(28, 2, 2) == "AB2:AB2"


def test_freeze_is_noop_without_counts() -> None:
    sheet = Workbook().add_worksheet("Freeze")

    sheet.freeze(0, 0)
    assert sheet.worksheet.freeze_panes is None

    sheet.freeze(rows=2)
    assert sheet.worksheet.freeze_panes == "A3"


def test_autosize_respects_maximum_width() -> None:
    sheet = Workbook(max_column_width=20).add_worksheet("Widths")
    sheet.set_value(1, 1, "short")
    sheet.set_value(1, 2, "y" * 50)

    sheet.autosize_columns()

    assert sheet.worksheet.column_dimensions["A"].width == 7
    assert sheet.worksheet.column_dimensions["B"].width == 20


def test_display_width_by_value_type() -> None:
    assert _display_width(1234567.5, "#,##0.00") == len("1,234,567.50")
    assert _display_width(1500, "#,##0") == len("1,500")
    assert _display_width(datetime(2024, 1, 1, 8), "yyyy-mm-dd hh:mm:ss") == 19
    assert _display_width(datetime(2024, 1, 1), "yyyy-mm-dd") == 10
    assert _display_width(date(2024, 1, 1), "General") == 10
    assert _display_width("two\nlines here", "General") == len("lines here")


def test_save_and_serialize(tmp_path: Path) -> None:
    workbook = Workbook()
    workbook.add_worksheet("Saved").set_value(1, 1, "hello")

    target = tmp_path / "saved.xlsx"
    workbook.save(target)
    stream = workbook.to_stream()

    assert load_workbook(target)["Saved"]["A1"].value == "hello"
    assert stream.tell() == 0
    assert stream.read(2) == b"PK"
    assert workbook.to_bytes()[:2] == b"PK"


def test_save_to_missing_directory_raises_export_error(tmp_path: Path) -> None:
    workbook = Workbook()
    workbook.add_worksheet("Sheet")

    with pytest.raises(WorkbookExportError):
        workbook.save(tmp_path / "missing" / "out.xlsx")
