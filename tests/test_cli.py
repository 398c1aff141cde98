"""Tests for the command line interface."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Union

import pytest
from openpyxl import load_workbook
from typer.testing import CliRunner

from recordsheet import cli, get_version
from recordsheet.config import Settings

runner = CliRunner()


@pytest.fixture(autouse=True)
def logging_levels(monkeypatch: pytest.MonkeyPatch) -> List[Union[int, str]]:
    levels: List[Union[int, str]] = []
    monkeypatch.setattr(cli, "configure_logging", levels.append)
    monkeypatch.setattr(cli, "get_settings", lambda: Settings())
    return levels


@pytest.fixture
def products_json(tmp_path: Path) -> Path:
    source = tmp_path / "products.json"
    source.write_text(
        json.dumps(
            [
                {"ProductId": 1, "Name": "Laptop", "Price": 999.99, "Quantity": 10},
                {"ProductId": 2, "Name": "Mouse", "Price": 29.99, "Quantity": 50},
            ]
        ),
        encoding="utf-8",
    )
    return source


def test_export_writes_workbook(products_json: Path) -> None:
    result = runner.invoke(cli.app, ["export", str(products_json)])

    assert result.exit_code == 0, result.output
    target = products_json.with_suffix(".xlsx")
    assert "Exported 2 records to" in result.output
    worksheet = load_workbook(target)["products"]
    assert worksheet["A1"].value == "Product Id"
    assert worksheet["C4"].value == pytest.approx(1029.98)


def test_export_options(products_json: Path, tmp_path: Path) -> None:
    target = tmp_path / "out" / "report.xlsx"
    target.parent.mkdir()

    result = runner.invoke(
        cli.app,
        [
            "export",
            str(products_json),
            "--output",
            str(target),
            "--sheet",
            "Catalog",
            "-a",
            "sum",
            "-a",
            "max",
            "--exclude-ids",
            "--freeze-header",
            "--header-color",
            "#FFA500",
        ],
    )

    assert result.exit_code == 0, result.output
    worksheet = load_workbook(target)["Catalog"]
    assert worksheet["A1"].value == "Name"
    assert worksheet["A1"].fill.fgColor.rgb.endswith("FFA500")
    assert worksheet.freeze_panes == "A2"
    assert [worksheet["A4"].value, worksheet["A5"].value] == ["Sum", "Max"]
    assert worksheet["C5"].value == 50


def test_export_without_aggregates(products_json: Path) -> None:
    result = runner.invoke(cli.app, ["export", str(products_json), "-a", "none"])

    assert result.exit_code == 0, result.output
    assert load_workbook(products_json.with_suffix(".xlsx"))["products"].max_row == 3


def test_export_reports_invalid_sheet_name(products_json: Path) -> None:
    result = runner.invoke(cli.app, ["export", str(products_json), "--sheet", "Q1:Q2"])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "invalid character ':'" in result.output


def test_export_reports_invalid_color(products_json: Path) -> None:
    result = runner.invoke(cli.app, ["export", str(products_json), "--header-color", "teal"])

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_export_reports_unreadable_input(tmp_path: Path) -> None:
    source = tmp_path / "notes.txt"
    source.write_text("hello", encoding="utf-8")

    result = runner.invoke(cli.app, ["export", str(source)])

    assert result.exit_code == 1
    assert "Unsupported input format" in result.output


def test_export_verbose_enables_debug_logging(
    products_json: Path, logging_levels: List[Union[int, str]]
) -> None:
    runner.invoke(cli.app, ["export", str(products_json), "--verbose"])
    runner.invoke(cli.app, ["export", str(products_json)])

    assert logging_levels == [logging.DEBUG, "INFO"]


def test_default_sheet_name_is_sanitized() -> None:
    assert cli._default_sheet_name(Path("sales:q1?.csv")) == "sales_q1_"
    assert cli._default_sheet_name(Path("x" * 40 + ".json")) == "x" * 31


def test_version_command() -> None:
    result = runner.invoke(cli.app, ["version"])

    assert result.exit_code == 0
    assert result.output.strip() == get_version()
