"""Top-level package for recordsheet."""

from importlib import metadata

from .models import (
    AggregateKind,
    CellStyle,
    Colors,
    ConditionalFormatting,
    FormattingRule,
    RuleKind,
    SheetConfig,
)
from .service import SheetGenerator, WorkbookBuilder


def get_version() -> str:
    """Return the installed package version."""
    try:
        return metadata.version("recordsheet")
    except metadata.PackageNotFoundError:
        return "0.1.0"


__all__ = [
    "AggregateKind",
    "CellStyle",
    "Colors",
    "ConditionalFormatting",
    "FormattingRule",
    "RuleKind",
    "SheetConfig",
    "SheetGenerator",
    "WorkbookBuilder",
    "get_version",
]
