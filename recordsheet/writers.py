"""Row writers for header, data and aggregate rows."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence, Tuple

from .aggregation import AggregationStrategy, AggregationStrategyFactory
from .exceptions import InvalidArgumentError
from .formatters import DECIMAL_FORMAT, INTEGER_FORMAT, FormatterRegistry
from .models import AggregateKind, CellStyle, FieldDescriptor, FormattedValue, ValueKind
from .sheet import Sheet

LOGGER = logging.getLogger(__name__)

HEADER_ROW = 1
FIRST_DATA_ROW = HEADER_ROW + 1


class HeaderWriter:
    """Write the header row."""

    def write(self, sheet: Sheet, fields: Sequence[FieldDescriptor], header_color: str) -> None:
        style = CellStyle(fill_color=header_color, bold=True, border=True, horizontal="center")
        for column, field in enumerate(fields, start=1):
            sheet.write(HEADER_ROW, column, FormattedValue(field.label, style))


class DataRowWriter:
    """Write one row per record, formatting each cell by its field's type."""

    def __init__(
        self,
        formatter_registry: FormatterRegistry,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.formatter_registry = formatter_registry
        self.logger = logger or LOGGER

    def write(self, sheet: Sheet, records: Sequence[Any], fields: Sequence[FieldDescriptor]) -> int:
        """Write data rows below the header.

        ``None`` records are skipped without leaving an empty row.

        Returns:
            Number of rows written.
        """
        formatters = [self.formatter_registry.for_field(field) for field in fields]
        row = FIRST_DATA_ROW
        skipped = 0
        for index, record in enumerate(records):
            if record is None:
                skipped += 1
                continue
            for column, (field, formatter) in enumerate(zip(fields, formatters), start=1):
                try:
                    formatted = self.formatter_registry.format_with(formatter, field.read(record))
                except (TypeError, ValueError, ArithmeticError) as exc:
                    raise InvalidArgumentError(
                        f"Cannot format field '{field.name}' of record {index}: {exc}"
                    ) from exc
                bordered = FormattedValue(formatted.display, formatted.style.bordered())
                sheet.write(row, column, bordered)
            row += 1

        if skipped:
            self.logger.debug("Skipped %d null records on sheet %s", skipped, sheet.title)
        return row - FIRST_DATA_ROW


class AggregateRowWriter:
    """Write one aggregate row per requested kind below the data."""

    def __init__(
        self,
        strategy_factory: AggregationStrategyFactory,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.strategy_factory = strategy_factory
        self.logger = logger or LOGGER

    def write(
        self,
        sheet: Sheet,
        records: Sequence[Any],
        fields: Sequence[FieldDescriptor],
        first_row: int,
        requested: AggregateKind,
    ) -> int:
        """Write aggregate rows starting at ``first_row``.

        Nothing is written for an empty record list.

        Returns:
            Number of aggregate rows written.
        """
        if not records or requested == AggregateKind.NONE:
            return 0

        strategies = self.strategy_factory.strategies_for(requested)
        numeric_columns = [
            (column, field) for column, field in enumerate(fields, start=1) if field.is_numeric
        ]
        for offset, strategy in enumerate(strategies):
            self._write_row(sheet, records, fields, numeric_columns, first_row + offset, strategy)

        self.logger.debug(
            "Wrote %d aggregate rows for %d numeric columns on sheet %s",
            len(strategies),
            len(numeric_columns),
            sheet.title,
        )
        return len(strategies)

    def _write_row(
        self,
        sheet: Sheet,
        records: Sequence[Any],
        fields: Sequence[FieldDescriptor],
        numeric_columns: List[Tuple[int, FieldDescriptor]],
        row: int,
        strategy: AggregationStrategy,
    ) -> None:
        for column, field in numeric_columns:
            try:
                value = strategy.calculate(records, field)
            except (TypeError, ValueError, ArithmeticError) as exc:
                raise InvalidArgumentError(
                    f"Cannot compute {strategy.label} of field '{field.name}': {exc}"
                ) from exc
            style = CellStyle(
                number_format=self._number_format(strategy, field),
                fill_color=strategy.fill_color,
                bold=True,
                border=True,
            )
            sheet.write(row, column, FormattedValue(value, style))

        if numeric_columns and not fields[0].is_numeric:
            label_style = CellStyle(fill_color=strategy.fill_color, bold=True, border=True)
            sheet.write(row, 1, FormattedValue(strategy.label, label_style))

    @staticmethod
    def _number_format(strategy: AggregationStrategy, field: FieldDescriptor) -> str:
        if strategy.kind == AggregateKind.COUNT:
            return INTEGER_FORMAT
        if field.value_kind == ValueKind.DECIMAL:
            return DECIMAL_FORMAT
        return INTEGER_FORMAT
