"""Conditional formatting rules applied to column ranges."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Optional

from openpyxl.formatting.rule import CellIsRule, ColorScaleRule, DataBarRule, Rule
from openpyxl.styles import PatternFill
from openpyxl.styles.differential import DifferentialStyle

from .exceptions import UnknownRuleKindError
from .models import Colors, FormattingRule, RuleKind

if TYPE_CHECKING:
    from .sheet import Sheet

LOGGER = logging.getLogger(__name__)


def _highlight_fill(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


class RuleApplier:
    """Translates a formatting rule into an openpyxl rule on a range."""

    kind: RuleKind

    def apply(self, sheet: "Sheet", cell_range: str, rule: FormattingRule) -> None:
        sheet.add_conditional_format(cell_range, self.build(rule))

    def build(self, rule: FormattingRule) -> Rule:
        raise NotImplementedError


class NegativeHighlightApplier(RuleApplier):
    kind = RuleKind.HIGHLIGHT_NEGATIVES

    def build(self, rule: FormattingRule) -> Rule:
        return CellIsRule(
            operator="lessThan", formula=["0"], fill=_highlight_fill(Colors.LIGHT_PINK)
        )


class PositiveHighlightApplier(RuleApplier):
    kind = RuleKind.HIGHLIGHT_POSITIVES

    def build(self, rule: FormattingRule) -> Rule:
        return CellIsRule(
            operator="greaterThan", formula=["0"], fill=_highlight_fill(Colors.LIGHT_GREEN)
        )


class ColorScaleApplier(RuleApplier):
    """Two-stop gradient from the column minimum to its maximum."""

    kind = RuleKind.COLOR_SCALE

    def build(self, rule: FormattingRule) -> Rule:
        return ColorScaleRule(
            start_type="min",
            start_color=rule.min_color,
            end_type="max",
            end_color=rule.max_color,
        )


class DataBarsApplier(RuleApplier):
    kind = RuleKind.DATA_BARS

    def build(self, rule: FormattingRule) -> Rule:
        return DataBarRule(start_type="min", end_type="max", color=rule.bar_color)


class DuplicatesApplier(RuleApplier):
    kind = RuleKind.HIGHLIGHT_DUPLICATES

    def build(self, rule: FormattingRule) -> Rule:
        return Rule(
            type="duplicateValues",
            dxf=DifferentialStyle(fill=_highlight_fill(Colors.YELLOW)),
        )


class TopNApplier(RuleApplier):
    kind = RuleKind.HIGHLIGHT_TOP_N

    def build(self, rule: FormattingRule) -> Rule:
        return Rule(
            type="top10",
            rank=rule.top_n,
            dxf=DifferentialStyle(fill=_highlight_fill(Colors.LIGHT_GREEN)),
        )


class RuleApplierFactory:
    """Resolve rule kinds to their appliers."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or LOGGER
        self._appliers: Dict[RuleKind, RuleApplier] = {}
        for applier in (
            NegativeHighlightApplier(),
            PositiveHighlightApplier(),
            ColorScaleApplier(),
            DataBarsApplier(),
            DuplicatesApplier(),
            TopNApplier(),
        ):
            self.register(applier)

    def register(self, applier: RuleApplier) -> None:
        self._appliers[applier.kind] = applier

    def get_applier(self, kind: RuleKind) -> RuleApplier:
        """Return the applier registered for ``kind``.

        Raises:
            UnknownRuleKindError: When no applier is registered for ``kind``.
        """
        try:
            return self._appliers[kind]
        except KeyError:
            raise UnknownRuleKindError(f"Unknown formatting rule kind: {kind!r}") from None
