"""Cell value formatters selected by declared field type."""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Sequence

from .fields import classify, unwrap_optional
from .models import CellStyle, FieldDescriptor, FormattedValue, ValueKind, to_integer

LOGGER = logging.getLogger(__name__)

DECIMAL_FORMAT = "#,##0.00"
INTEGER_FORMAT = "#,##0"
DATETIME_FORMAT = "yyyy-mm-dd hh:mm:ss"
DATE_FORMAT = "yyyy-mm-dd"

DEFAULT_STYLE = CellStyle()
EMPTY_CELL = FormattedValue("", DEFAULT_STYLE)


class CellValueFormatter:
    """Base class for value formatters.

    Subclasses declare the value kinds they handle and a priority; the
    registry picks the highest priority formatter matching a field.
    """

    value_kinds: FrozenSet[ValueKind] = frozenset()
    priority: int = 10

    def matches(self, value_kind: ValueKind) -> bool:
        return value_kind in self.value_kinds

    def format(self, value: Any) -> FormattedValue:
        raise NotImplementedError


class DecimalFormatter(CellValueFormatter):
    """Fixed-point and floating values with two decimals and thousands separators."""

    value_kinds = frozenset({ValueKind.DECIMAL})
    style = CellStyle(number_format=DECIMAL_FORMAT)

    def format(self, value: Any) -> FormattedValue:
        return FormattedValue(float(value), self.style)


class IntegerFormatter(CellValueFormatter):
    """Integer values with thousands separators."""

    value_kinds = frozenset({ValueKind.INTEGER})
    style = CellStyle(number_format=INTEGER_FORMAT)

    def format(self, value: Any) -> FormattedValue:
        return FormattedValue(to_integer(value), self.style)


class DateTimeFormatter(CellValueFormatter):
    value_kinds = frozenset({ValueKind.DATETIME})
    style = CellStyle(number_format=DATETIME_FORMAT)

    def format(self, value: Any) -> FormattedValue:
        # Workbooks cannot store offsets; keep the wall-clock time.
        if isinstance(value, datetime) and value.tzinfo is not None:
            value = value.replace(tzinfo=None)
        return FormattedValue(value, self.style)


class DateFormatter(CellValueFormatter):
    value_kinds = frozenset({ValueKind.DATE})
    style = CellStyle(number_format=DATE_FORMAT)

    def format(self, value: date) -> FormattedValue:
        return FormattedValue(datetime.combine(value, time.min), self.style)


class BooleanFormatter(CellValueFormatter):
    value_kinds = frozenset({ValueKind.BOOLEAN})

    def format(self, value: Any) -> FormattedValue:
        return FormattedValue("Yes" if value else "No", DEFAULT_STYLE)


class TextFormatter(CellValueFormatter):
    """Fallback formatter; matches every type."""

    priority = 0

    def matches(self, value_kind: ValueKind) -> bool:
        return True

    def format(self, value: Any) -> FormattedValue:
        if isinstance(value, Enum):
            return FormattedValue(value.name, DEFAULT_STYLE)
        return FormattedValue(str(value), DEFAULT_STYLE)


def default_formatters() -> List[CellValueFormatter]:
    """Return the built-in formatters in registration order."""
    return [
        DecimalFormatter(),
        IntegerFormatter(),
        DateTimeFormatter(),
        DateFormatter(),
        BooleanFormatter(),
        TextFormatter(),
    ]


class FormatterRegistry:
    """Priority ordered set of cell value formatters."""

    def __init__(
        self,
        formatters: Optional[Sequence[CellValueFormatter]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Create a registry.

        Args:
            formatters: Formatters to register. Defaults to the built-in set.
                A fallback text formatter is appended when none is present.
            logger: Optional logger for diagnostics.
        """
        self.logger = logger or LOGGER
        registered = list(formatters) if formatters is not None else default_formatters()
        if not any(isinstance(formatter, TextFormatter) for formatter in registered):
            registered.append(TextFormatter())
        # Stable sort keeps registration order among equal priorities.
        self._formatters = sorted(registered, key=lambda formatter: -formatter.priority)
        self._by_kind: Dict[ValueKind, CellValueFormatter] = {}

    @property
    def formatters(self) -> List[CellValueFormatter]:
        return list(self._formatters)

    def resolve_kind(self, value_kind: ValueKind) -> CellValueFormatter:
        """Return the highest priority formatter for ``value_kind``."""
        formatter = self._by_kind.get(value_kind)
        if formatter is None:
            formatter = next(f for f in self._formatters if f.matches(value_kind))
            self._by_kind[value_kind] = formatter
        return formatter

    def resolve(self, declared_type: Any) -> CellValueFormatter:
        """Return the formatter for a declared type, unwrapping ``Optional``."""
        value_type, _ = unwrap_optional(declared_type)
        value_kind, _ = classify(value_type)
        return self.resolve_kind(value_kind)

    def for_field(self, field: FieldDescriptor) -> CellValueFormatter:
        return self.resolve_kind(field.value_kind)

    def format_cell(self, raw_value: Any, declared_type: Any) -> FormattedValue:
        """Produce the display value and style for ``raw_value``.

        Args:
            raw_value: Runtime value read from a record.
            declared_type: The field's declared type, possibly ``Optional``.

        Returns:
            The display value and style hint; ``("", default style)`` for ``None``.
        """
        if raw_value is None:
            return EMPTY_CELL
        return self.resolve(declared_type).format(raw_value)

    @staticmethod
    def format_with(formatter: CellValueFormatter, raw_value: Any) -> FormattedValue:
        """Format ``raw_value`` with an already resolved formatter."""
        if raw_value is None:
            return EMPTY_CELL
        return formatter.format(raw_value)
