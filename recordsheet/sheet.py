"""Thin wrappers around openpyxl workbooks and worksheets."""

from __future__ import annotations

import io
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Union

from openpyxl import Workbook as OpenpyxlWorkbook
from openpyxl.formatting.rule import Rule
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .exceptions import InvalidArgumentError, WorkbookExportError
from .models import CellStyle, FormattedValue

LOGGER = logging.getLogger(__name__)

THIN_SIDE = Side(style="thin")
THIN_BORDER = Border(left=THIN_SIDE, right=THIN_SIDE, top=THIN_SIDE, bottom=THIN_SIDE)

DEFAULT_MAX_COLUMN_WIDTH = 60


class Sheet:
    """A single worksheet with the operations the generator needs."""

    def __init__(
        self, worksheet: Worksheet, max_column_width: int = DEFAULT_MAX_COLUMN_WIDTH
    ) -> None:
        self.worksheet = worksheet
        self.max_column_width = max_column_width

    @property
    def title(self) -> str:
        return self.worksheet.title

    def set_value(self, row: int, column: int, value: Any) -> None:
        self.worksheet.cell(row=row, column=column, value=value)

    def get_value(self, row: int, column: int) -> Any:
        return self.worksheet.cell(row=row, column=column).value

    def set_style(self, row: int, column: int, style: CellStyle) -> None:
        """Apply a style hint to one cell."""
        cell = self.worksheet.cell(row=row, column=column)
        if style.number_format:
            cell.number_format = style.number_format
        if style.fill_color:
            cell.fill = PatternFill(
                start_color=style.fill_color, end_color=style.fill_color, fill_type="solid"
            )
        if style.bold:
            cell.font = Font(bold=True)
        if style.horizontal:
            cell.alignment = Alignment(horizontal=style.horizontal)
        if style.border:
            cell.border = THIN_BORDER

    def write(self, row: int, column: int, formatted: FormattedValue) -> None:
        self.set_value(row, column, formatted.display)
        self.set_style(row, column, formatted.style)

    def column_range(self, column: int, first_row: int, last_row: int) -> str:
        """Return an A1 reference such as ``C2:C9`` for part of a column."""
        letter = get_column_letter(column)
        return f"{letter}{first_row}:{letter}{last_row}"

    def add_conditional_format(self, cell_range: str, rule: Rule) -> None:
        self.worksheet.conditional_formatting.add(cell_range, rule)

    def freeze(self, rows: int = 0, columns: int = 0) -> None:
        """Keep the first ``rows`` rows and ``columns`` columns visible."""
        if rows <= 0 and columns <= 0:
            return
        self.worksheet.freeze_panes = self.worksheet.cell(row=rows + 1, column=columns + 1)

    def autosize_columns(self) -> None:
        """Size every used column to its widest displayed value."""
        widths: Dict[str, int] = {}
        for row in self.worksheet.iter_rows():
            for cell in row:
                if cell.value is None:
                    continue
                letter = cell.column_letter
                width = _display_width(cell.value, cell.number_format)
                widths[letter] = max(widths.get(letter, 0), width)
        for letter, width in widths.items():
            self.worksheet.column_dimensions[letter].width = min(width + 2, self.max_column_width)


def _display_width(value: Any, number_format: str) -> int:
    if isinstance(value, bool):
        return len(str(value))
    if isinstance(value, datetime):
        return 19 if "h" in number_format else 10
    if isinstance(value, date):
        return 10
    if isinstance(value, (int, float)):
        decimals = 2 if number_format.endswith(".00") else 0
        grouping = "," if "," in number_format else ""
        return len(f"{value:{grouping}.{decimals}f}")
    return max((len(line) for line in str(value).splitlines()), default=0)


class Workbook:
    """An openpyxl workbook whose sheets are created through :class:`Sheet`."""

    def __init__(self, max_column_width: int = DEFAULT_MAX_COLUMN_WIDTH) -> None:
        self.max_column_width = max_column_width
        self.openpyxl_workbook = OpenpyxlWorkbook()
        # openpyxl always starts with one sheet; reuse it for the first add.
        self._placeholder: Optional[Worksheet] = self.openpyxl_workbook.active

    @property
    def sheet_names(self) -> List[str]:
        if self._placeholder is not None:
            return []
        return list(self.openpyxl_workbook.sheetnames)

    def has_sheet(self, name: str) -> bool:
        return name.lower() in {existing.lower() for existing in self.sheet_names}

    def add_worksheet(self, name: str) -> Sheet:
        """Create a sheet called ``name``.

        Raises:
            InvalidArgumentError: When a sheet with the same name (any case) exists.
        """
        if self.has_sheet(name):
            raise InvalidArgumentError(f"Workbook already contains a sheet named '{name}'.")
        if self._placeholder is not None:
            worksheet = self._placeholder
            worksheet.title = name
            self._placeholder = None
        else:
            worksheet = self.openpyxl_workbook.create_sheet(title=name)
        return Sheet(worksheet, max_column_width=self.max_column_width)

    def discard(self, sheet: Sheet) -> None:
        """Remove a sheet created by :meth:`add_worksheet`."""
        self.openpyxl_workbook.remove(sheet.worksheet)
        if self.openpyxl_workbook.worksheets:
            self.openpyxl_workbook.active = 0
        else:
            # openpyxl cannot save an empty workbook; restore a placeholder.
            self._placeholder = self.openpyxl_workbook.create_sheet()
        LOGGER.debug("Discarded sheet %s", sheet.title)

    def __getitem__(self, name: str) -> Sheet:
        if name not in self.sheet_names:
            raise KeyError(name)
        return Sheet(self.openpyxl_workbook[name], max_column_width=self.max_column_width)

    def save(self, target: Union[str, Path, BinaryIO]) -> None:
        """Write the workbook to a path or binary stream.

        Raises:
            WorkbookExportError: When the workbook cannot be written.
        """
        try:
            self.openpyxl_workbook.save(target)
        except OSError as exc:
            raise WorkbookExportError(f"Failed to save workbook to {target!r}.") from exc
        LOGGER.debug("Workbook with sheets %s written to %r", self.sheet_names, target)

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self.save(buffer)
        return buffer.getvalue()

    def to_stream(self) -> io.BytesIO:
        """Return the serialized workbook as a stream positioned at the start."""
        buffer = io.BytesIO(self.to_bytes())
        buffer.seek(0)
        return buffer
