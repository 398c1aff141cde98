"""Column aggregates over the seven numeric representations."""

from __future__ import annotations

import logging
import math
from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

from .exceptions import UnknownAggregateKindError
from .models import AGGREGATE_ORDER, AggregateKind, Colors, FieldDescriptor, NumericKind

LOGGER = logging.getLogger(__name__)

_THOUSANDTH = Decimal("0.001")

Number = Union[int, float, Decimal]


def truncate_to_thousandths(value: Number, significant_digits: Optional[int] = None) -> float:
    """Truncate ``value`` toward zero at three decimal places.

    Floats are first read as a decimal with ``significant_digits`` significant
    digits, so binary noise such as ``0.30000000000000004`` does not survive
    into the result.
    """
    if isinstance(value, Decimal):
        if not value.is_finite():
            return float(value)
        exact = value
    else:
        if not math.isfinite(value):
            return float(value)
        digits = significant_digits or 17
        exact = Decimal(format(value, f".{digits}g"))

    with localcontext() as context:
        context.prec = max(context.prec, exact.adjusted() + 8)
        return float(exact.quantize(_THOUSANDTH, rounding=ROUND_DOWN))


class NumericAggregator:
    """Compute aggregates for a numeric field over a materialized record list.

    Null values and null records count as zero for ``sum`` and ``average``
    and are ignored by ``min`` / ``max``. ``average`` divides by the total
    number of records. Floating and fixed-point results are truncated to
    three decimals after the arithmetic.
    """

    def sum(self, records: Sequence[Any], field: FieldDescriptor) -> float:
        kind = self._kind(field)
        return self._refine(kind, self._total(records, field, kind))

    def average(self, records: Sequence[Any], field: FieldDescriptor) -> float:
        kind = self._kind(field)
        if not records:
            return 0.0
        return self._refine(kind, self._total(records, field, kind) / len(records))

    def min(self, records: Sequence[Any], field: FieldDescriptor) -> float:
        kind = self._kind(field)
        present = self._present(records, field, kind)
        return self._refine(kind, min(present)) if present else 0.0

    def max(self, records: Sequence[Any], field: FieldDescriptor) -> float:
        kind = self._kind(field)
        present = self._present(records, field, kind)
        return self._refine(kind, max(present)) if present else 0.0

    def count(self, records: Sequence[Any], field: Optional[FieldDescriptor] = None) -> float:
        return float(len(records))

    def _kind(self, field: FieldDescriptor) -> NumericKind:
        if field.numeric_kind is None:
            raise TypeError(f"Field '{field.name}' of type {field.value_type!r} is not numeric.")
        return field.numeric_kind

    def _values(
        self, records: Sequence[Any], field: FieldDescriptor, kind: NumericKind
    ) -> Iterator[Optional[Number]]:
        for record in records:
            raw = None if record is None else field.read(record)
            yield None if raw is None else kind.widen(raw)

    def _present(
        self, records: Sequence[Any], field: FieldDescriptor, kind: NumericKind
    ) -> List[Number]:
        return [value for value in self._values(records, field, kind) if value is not None]

    def _total(self, records: Sequence[Any], field: FieldDescriptor, kind: NumericKind) -> Number:
        return sum(
            (value for value in self._values(records, field, kind) if value is not None),
            kind.zero(),
        )

    def _refine(self, kind: NumericKind, value: Number) -> float:
        if not kind.is_floating:
            return float(value)
        return truncate_to_thousandths(value, kind.significant_digits)


class AggregationStrategy:
    """Computes one aggregate kind for a column."""

    kind: AggregateKind = AggregateKind.NONE
    label: str = ""
    fill_color: str = Colors.LIGHT_GRAY

    def __init__(self, aggregator: Optional[NumericAggregator] = None) -> None:
        self.aggregator = aggregator or NumericAggregator()

    def calculate(self, records: Sequence[Any], field: FieldDescriptor) -> float:
        raise NotImplementedError


class SumAggregation(AggregationStrategy):
    kind = AggregateKind.SUM
    label = "Sum"
    fill_color = Colors.LIGHT_GRAY

    def calculate(self, records: Sequence[Any], field: FieldDescriptor) -> float:
        return self.aggregator.sum(records, field)


class AverageAggregation(AggregationStrategy):
    kind = AggregateKind.AVERAGE
    label = "Average"
    fill_color = Colors.ALICE_BLUE

    def calculate(self, records: Sequence[Any], field: FieldDescriptor) -> float:
        return self.aggregator.average(records, field)


class MinAggregation(AggregationStrategy):
    kind = AggregateKind.MIN
    label = "Min"
    fill_color = Colors.LIGHT_YELLOW

    def calculate(self, records: Sequence[Any], field: FieldDescriptor) -> float:
        return self.aggregator.min(records, field)


class MaxAggregation(AggregationStrategy):
    kind = AggregateKind.MAX
    label = "Max"
    fill_color = Colors.LIGHT_GREEN

    def calculate(self, records: Sequence[Any], field: FieldDescriptor) -> float:
        return self.aggregator.max(records, field)


class CountAggregation(AggregationStrategy):
    kind = AggregateKind.COUNT
    label = "Count"
    fill_color = Colors.LAVENDER

    def calculate(self, records: Sequence[Any], field: FieldDescriptor) -> float:
        return self.aggregator.count(records, field)


class AggregationStrategyFactory:
    """Resolve aggregate kinds to their strategies."""

    def __init__(
        self,
        aggregator: Optional[NumericAggregator] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.logger = logger or LOGGER
        aggregator = aggregator or NumericAggregator()
        self._strategies: Dict[AggregateKind, AggregationStrategy] = {}
        for strategy_cls in (
            SumAggregation,
            AverageAggregation,
            MinAggregation,
            MaxAggregation,
            CountAggregation,
        ):
            self.register(strategy_cls(aggregator))

    def register(self, strategy: AggregationStrategy) -> None:
        self._strategies[strategy.kind] = strategy

    def get_strategy(self, kind: AggregateKind) -> AggregationStrategy:
        """Return the strategy registered for a single aggregate kind.

        Raises:
            UnknownAggregateKindError: When no strategy is registered for ``kind``.
        """
        try:
            return self._strategies[kind]
        except KeyError:
            raise UnknownAggregateKindError(f"Unknown aggregate kind: {kind!r}") from None

    def strategies_for(self, requested: AggregateKind) -> List[AggregationStrategy]:
        """Return strategies for every kind in ``requested``, in emission order."""
        return [self.get_strategy(kind) for kind in AGGREGATE_ORDER if kind in requested]
