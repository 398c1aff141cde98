"""Custom exceptions for the recordsheet package."""


class SheetGenerationError(Exception):
    """Base exception for sheet generation failures."""


class InvalidArgumentError(SheetGenerationError, ValueError):
    """Raised when generation inputs fail validation."""


class NoExportableFieldsError(SheetGenerationError):
    """Raised when a record type exposes no readable fields."""


class UnknownAggregateKindError(SheetGenerationError, LookupError):
    """Raised when no aggregation strategy is registered for a kind."""


class UnknownRuleKindError(SheetGenerationError, LookupError):
    """Raised when no conditional formatting applier is registered for a kind."""


class UnknownColumnError(SheetGenerationError, LookupError):
    """Raised in strict mode when a formatting rule names a missing column."""


class WorkbookExportError(SheetGenerationError):
    """Raised when a workbook cannot be serialized."""


class RecordLoadError(SheetGenerationError):
    """Raised when an input file cannot be turned into records."""
