"""Typed models shared across the sheet generation pipeline."""

from __future__ import annotations

import dataclasses
import operator
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum, Flag
from typing import Annotated, Any, Callable, Iterable, List, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PlainValidator, field_validator


class Colors:
    """RGB colors used by the default styles."""

    LIGHT_BLUE = "ADD8E6"
    LIGHT_GRAY = "D3D3D3"
    ALICE_BLUE = "F0F8FF"
    LIGHT_YELLOW = "FFFFE0"
    LIGHT_GREEN = "90EE90"
    LAVENDER = "E6E6FA"
    LIGHT_PINK = "FFB6C1"
    YELLOW = "FFFF00"
    RED = "FF0000"
    GREEN = "008000"
    BLUE = "0000FF"


_HEX_COLOR = re.compile(r"^(?:[0-9A-F]{2})?[0-9A-F]{6}$")


def normalize_color(value: str) -> str:
    """Return ``value`` as a six digit uppercase RGB string.

    Accepts an optional leading ``#`` and 8 digit ARGB values, whose alpha
    channel is dropped.

    Raises:
        ValueError: When ``value`` is not a hex color.
    """
    candidate = str(value).strip().lstrip("#").upper()
    if not _HEX_COLOR.match(candidate):
        raise ValueError(f"Invalid color {value!r}; expected RRGGBB or AARRGGBB hex digits.")
    return candidate[-6:]


class AggregateKind(Flag):
    """Aggregates that can be appended below numeric columns."""

    NONE = 0
    SUM = 1
    AVERAGE = 2
    MIN = 4
    MAX = 8
    COUNT = 16
    ALL = SUM | AVERAGE | MIN | MAX | COUNT

    @classmethod
    def parse(cls, value: Any) -> "AggregateKind":
        """Build a flag set from a flag, an int, a name list or a comma separated string.

        Raises:
            ValueError: When a name does not match any aggregate kind.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.NONE
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        if isinstance(value, str):
            value = [part for part in value.split(",")]

        result = cls.NONE
        for item in value:
            if isinstance(item, cls):
                result |= item
                continue
            name = str(getattr(item, "value", item)).strip().upper()
            if not name:
                continue
            try:
                result |= cls[name]
            except KeyError:
                raise ValueError(f"Unknown aggregate kind: {item!r}") from None
        return result


# Aggregate rows are always written in this order.
AGGREGATE_ORDER = (
    AggregateKind.SUM,
    AggregateKind.AVERAGE,
    AggregateKind.MIN,
    AggregateKind.MAX,
    AggregateKind.COUNT,
)


class RuleKind(str, Enum):
    """Conditional formatting rule kinds."""

    HIGHLIGHT_NEGATIVES = "highlight_negatives"
    HIGHLIGHT_POSITIVES = "highlight_positives"
    COLOR_SCALE = "color_scale"
    DATA_BARS = "data_bars"
    HIGHLIGHT_DUPLICATES = "highlight_duplicates"
    HIGHLIGHT_TOP_N = "highlight_top_n"


class ValueKind(Enum):
    """Canonical display category of a field, resolved once per field."""

    DECIMAL = "decimal"
    INTEGER = "integer"
    DATETIME = "datetime"
    DATE = "date"
    BOOLEAN = "boolean"
    TEXT = "text"


def to_integer(value: Any) -> int:
    """Convert ``value`` to ``int`` without discarding a fractional part.

    Raises:
        ValueError: When ``value`` is not an integral number.
    """
    try:
        return operator.index(value)
    except TypeError:
        pass
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"{value!r} is not an integer.") from None
    if not number.is_finite() or number != number.to_integral_value():
        raise ValueError(f"{value!r} is not an integer.")
    return int(number)


class NumericKind(Enum):
    """The seven numeric storage representations that can be aggregated."""

    DECIMAL = ("decimal", True, None)
    DOUBLE = ("double", True, 15)
    SINGLE = ("single", True, 7)
    INT64 = ("int64", False, None)
    INT32 = ("int32", False, None)
    INT16 = ("int16", False, None)
    INT8 = ("int8", False, None)

    def __init__(self, tag: str, is_floating: bool, significant_digits: Optional[int]) -> None:
        self.tag = tag
        self.is_floating = is_floating
        self.significant_digits = significant_digits

    @property
    def value_kind(self) -> ValueKind:
        return ValueKind.DECIMAL if self.is_floating else ValueKind.INTEGER

    def zero(self) -> Union[int, float, Decimal]:
        if self is NumericKind.DECIMAL:
            return Decimal(0)
        return 0.0 if self.is_floating else 0

    def widen(self, value: Any) -> Union[int, float, Decimal]:
        """Convert a raw field value into this kind's exact Python number."""
        if self is NumericKind.DECIMAL:
            return value if isinstance(value, Decimal) else Decimal(str(value))
        if self.is_floating:
            return float(value)
        return to_integer(value)


@dataclass(frozen=True)
class CellStyle:
    """Declarative display format and styling for a single cell."""

    number_format: Optional[str] = None
    fill_color: Optional[str] = None
    bold: bool = False
    border: bool = False
    horizontal: Optional[str] = None

    def bordered(self) -> "CellStyle":
        """Return a copy of this style with a thin border."""
        return dataclasses.replace(self, border=True)


class FormattedValue(NamedTuple):
    """A display value paired with its style hint."""

    display: Any
    style: CellStyle


@dataclass(frozen=True)
class FieldDescriptor:
    """Metadata and a bound accessor for one exportable record attribute."""

    name: str
    declared_type: Any
    value_type: Any
    nullable: bool
    label: str
    value_kind: ValueKind
    numeric_kind: Optional[NumericKind]
    accessor: Callable[[Any], Any] = dataclasses.field(compare=False, repr=False)

    @property
    def is_numeric(self) -> bool:
        return self.numeric_kind is not None

    def read(self, record: Any) -> Any:
        """Return this field's value on ``record``."""
        return self.accessor(record)


class FormattingRule(BaseModel):
    """Conditional formatting request for a single column."""

    model_config = ConfigDict(frozen=True)

    column: str
    kind: RuleKind
    min_color: str = Colors.RED
    max_color: str = Colors.GREEN
    bar_color: str = Colors.BLUE
    top_n: int = Field(default=10, ge=1)

    @field_validator("min_color", "max_color", "bar_color", mode="before")
    @classmethod
    def _normalize_colors(cls, value: Any) -> str:
        return normalize_color(value)


class ConditionalFormatting:
    """Fluent builder collecting conditional formatting rules."""

    def __init__(self) -> None:
        self.rules: List[FormattingRule] = []

    def highlight_negatives(self, column: str) -> "ConditionalFormatting":
        return self._add(column, RuleKind.HIGHLIGHT_NEGATIVES)

    def highlight_positives(self, column: str) -> "ConditionalFormatting":
        return self._add(column, RuleKind.HIGHLIGHT_POSITIVES)

    def color_scale(
        self,
        column: str,
        min_color: str = Colors.RED,
        max_color: str = Colors.GREEN,
    ) -> "ConditionalFormatting":
        return self._add(column, RuleKind.COLOR_SCALE, min_color=min_color, max_color=max_color)

    def data_bars(self, column: str, bar_color: str = Colors.BLUE) -> "ConditionalFormatting":
        return self._add(column, RuleKind.DATA_BARS, bar_color=bar_color)

    def highlight_duplicates(self, column: str) -> "ConditionalFormatting":
        return self._add(column, RuleKind.HIGHLIGHT_DUPLICATES)

    def highlight_top_n(self, column: str, top_n: int = 10) -> "ConditionalFormatting":
        return self._add(column, RuleKind.HIGHLIGHT_TOP_N, top_n=top_n)

    def _add(self, column: str, kind: RuleKind, **options: Any) -> "ConditionalFormatting":
        self.rules.append(FormattingRule(column=column, kind=kind, **options))
        return self


def _coerce_rules(value: Any) -> Any:
    if isinstance(value, ConditionalFormatting):
        return list(value.rules)
    return value


class SheetConfig(BaseModel):
    """Options controlling how a record collection is rendered into a sheet.

    Attributes:
        exclude_id_fields: Drop fields whose name ends in ``id`` (any case).
        header_color: Header row fill as an RGB hex string.
        aggregates: Aggregate rows to append below numeric columns.
        conditional_formatting: Rules applied to the data range of their column.
        freeze_rows: Number of leading rows kept visible while scrolling.
        freeze_columns: Number of leading columns kept visible while scrolling.
        strict_rule_columns: Fail instead of skipping rules naming unknown columns.
    """

    model_config = ConfigDict(validate_assignment=True)

    exclude_id_fields: bool = False
    header_color: str = Colors.LIGHT_BLUE
    aggregates: Annotated[AggregateKind, PlainValidator(AggregateKind.parse)] = AggregateKind.SUM
    conditional_formatting: List[FormattingRule] = Field(default_factory=list)
    freeze_rows: int = 0
    freeze_columns: int = 0
    strict_rule_columns: bool = False

    @field_validator("header_color", mode="before")
    @classmethod
    def _normalize_header_color(cls, value: Any) -> str:
        return normalize_color(value)

    @field_validator("conditional_formatting", mode="before")
    @classmethod
    def _unwrap_builder(cls, value: Any) -> Any:
        return _coerce_rules(value)

    def with_rules(self, rules: Iterable[FormattingRule]) -> "SheetConfig":
        """Return a copy with ``rules`` appended to the conditional formatting."""
        return self.model_copy(
            update={"conditional_formatting": [*self.conditional_formatting, *rules]}
        )

    def freeze_header_row(self) -> "SheetConfig":
        """Return a copy that keeps the header row visible."""
        return self.model_copy(update={"freeze_rows": 1})
