"""Tests for conditional formatting appliers and rule models."""

from __future__ import annotations

from typing import List, Tuple

import pytest
from openpyxl.formatting.rule import Rule
from pydantic import ValidationError

from recordsheet.conditional import (
    ColorScaleApplier,
    RuleApplier,
    RuleApplierFactory,
    TopNApplier,
)
from recordsheet.exceptions import UnknownRuleKindError
from recordsheet.models import ConditionalFormatting, FormattingRule, RuleKind, SheetConfig


class FakeSheet:
    """Records conditional formats instead of writing them."""

    def __init__(self) -> None:
        self.formats: List[Tuple[str, Rule]] = []

    def add_conditional_format(self, cell_range: str, rule: Rule) -> None:
        self.formats.append((cell_range, rule))


def _build(kind: RuleKind, **options: object) -> Rule:
    rule = FormattingRule(column="Price", kind=kind, **options)
    return RuleApplierFactory().get_applier(kind).build(rule)


def test_negative_and_positive_highlights_compare_against_zero() -> None:
    negative = _build(RuleKind.HIGHLIGHT_NEGATIVES)
    positive = _build(RuleKind.HIGHLIGHT_POSITIVES)

    assert negative.type == "cellIs"
    assert negative.operator == "lessThan"
    assert list(negative.formula) == ["0"]
    assert negative.dxf.fill.fgColor.rgb.endswith("FFB6C1")

    assert positive.operator == "greaterThan"
    assert positive.dxf.fill.fgColor.rgb.endswith("90EE90")


def test_color_scale_runs_from_minimum_to_maximum() -> None:
    rule = _build(RuleKind.COLOR_SCALE, min_color="#ffffff", max_color="FF0000FF")

    assert rule.type == "colorScale"
    assert [cfvo.type for cfvo in rule.colorScale.cfvo] == ["min", "max"]
    assert rule.colorScale.color[0].rgb.endswith("FFFFFF")
    assert rule.colorScale.color[1].rgb.endswith("0000FF")


def test_color_scale_defaults_to_red_green() -> None:
    rule = _build(RuleKind.COLOR_SCALE)

    assert rule.colorScale.color[0].rgb.endswith("FF0000")
    assert rule.colorScale.color[1].rgb.endswith("008000")


def test_data_bars_use_bar_color() -> None:
    rule = _build(RuleKind.DATA_BARS, bar_color="00AA00")

    assert rule.type == "dataBar"
    assert rule.dataBar.color.rgb.endswith("00AA00")


def test_duplicates_and_top_n() -> None:
    duplicates = _build(RuleKind.HIGHLIGHT_DUPLICATES)
    top = _build(RuleKind.HIGHLIGHT_TOP_N, top_n=3)

    assert duplicates.type == "duplicateValues"
    assert duplicates.dxf.fill.fgColor.rgb.endswith("FFFF00")
    assert top.type == "top10"
    assert top.rank == 3
    assert top.dxf.fill.fgColor.rgb.endswith("90EE90")


def test_applier_adds_rule_to_range() -> None:
    sheet = FakeSheet()
    rule = FormattingRule(column="Price", kind=RuleKind.HIGHLIGHT_TOP_N, top_n=5)

    TopNApplier().apply(sheet, "C2:C9", rule)

    assert len(sheet.formats) == 1
    cell_range, built = sheet.formats[0]
    assert cell_range == "C2:C9"
    assert built.rank == 5


def test_factory_rejects_unregistered_kind() -> None:
    factory = RuleApplierFactory()
    factory._appliers.pop(RuleKind.DATA_BARS)

    with pytest.raises(UnknownRuleKindError):
        factory.get_applier(RuleKind.DATA_BARS)


def test_factory_accepts_replacement_applier() -> None:
    class FlatScaleApplier(ColorScaleApplier):
        def build(self, rule: FormattingRule) -> Rule:
            return super().build(rule.model_copy(update={"max_color": rule.min_color}))

    factory = RuleApplierFactory()
    factory.register(FlatScaleApplier())

    applier: RuleApplier = factory.get_applier(RuleKind.COLOR_SCALE)
    built = applier.build(FormattingRule(column="Price", kind=RuleKind.COLOR_SCALE))
    assert built.colorScale.color[1].rgb.endswith("FF0000")


def test_builder_collects_rules_in_order() -> None:
    formatting = (
        ConditionalFormatting()
        .highlight_negatives("Profit")
        .color_scale("Price")
        .data_bars("Quantity", bar_color="00AA00")
        .highlight_duplicates("Name")
        .highlight_top_n("Price", top_n=3)
        .highlight_positives("Profit")
    )

    assert [(rule.column, rule.kind) for rule in formatting.rules] == [
        ("Profit", RuleKind.HIGHLIGHT_NEGATIVES),
        ("Price", RuleKind.COLOR_SCALE),
        ("Quantity", RuleKind.DATA_BARS),
        ("Name", RuleKind.HIGHLIGHT_DUPLICATES),
        ("Price", RuleKind.HIGHLIGHT_TOP_N),
        ("Profit", RuleKind.HIGHLIGHT_POSITIVES),
    ]
    assert formatting.rules[2].bar_color == "00AA00"
    assert formatting.rules[4].top_n == 3

    config = SheetConfig(conditional_formatting=formatting)
    assert config.conditional_formatting == formatting.rules


def test_rule_validation() -> None:
    with pytest.raises(ValidationError):
        FormattingRule(column="Price", kind=RuleKind.COLOR_SCALE, min_color="not-a-color")
    with pytest.raises(ValidationError):
        FormattingRule(column="Price", kind=RuleKind.HIGHLIGHT_TOP_N, top_n=0)
    with pytest.raises(ValidationError):
        FormattingRule(column="Price", kind="sparkle")

    assert FormattingRule(column="Price", kind="data_bars").kind is RuleKind.DATA_BARS
