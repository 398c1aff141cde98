"""High-level orchestration for sheet generation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from .aggregation import AggregationStrategyFactory
from .conditional import RuleApplierFactory
from .config import Settings, get_settings
from .exceptions import InvalidArgumentError, NoExportableFieldsError, UnknownColumnError
from .fields import FieldExtractor
from .formatters import FormatterRegistry
from .models import AggregateKind, FieldDescriptor, FormattingRule, SheetConfig
from .sheet import Sheet, Workbook
from .writers import FIRST_DATA_ROW, AggregateRowWriter, DataRowWriter, HeaderWriter

LOGGER = logging.getLogger(__name__)

MAX_SHEET_NAME_LENGTH = 31
INVALID_SHEET_NAME_CHARACTERS = (":", "\\", "/", "?", "*", "[", "]")


def validate_sheet_name(sheet_name: Any) -> None:
    """Check ``sheet_name`` against the workbook naming rules.

    Raises:
        InvalidArgumentError: When the name is blank, too long or contains a
            reserved character.
    """
    if not isinstance(sheet_name, str) or not sheet_name.strip():
        raise InvalidArgumentError("Sheet name cannot be null or empty.")

    if len(sheet_name) > MAX_SHEET_NAME_LENGTH:
        raise InvalidArgumentError(
            f"Sheet name '{sheet_name}' exceeds maximum length of {MAX_SHEET_NAME_LENGTH} "
            f"characters. Current length: {len(sheet_name)}."
        )

    for character in INVALID_SHEET_NAME_CHARACTERS:
        if character in sheet_name:
            raise InvalidArgumentError(
                f"Sheet name '{sheet_name}' contains invalid character '{character}'. "
                f"Sheet names cannot contain: {' '.join(INVALID_SHEET_NAME_CHARACTERS)}"
            )


class SheetGenerator:
    """Coordinate field extraction, row writing, aggregates and formatting.

    Build one generator and reuse it for every export; it holds no per-call
    state.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        field_extractor: Optional[FieldExtractor] = None,
        formatter_registry: Optional[FormatterRegistry] = None,
        aggregation_factory: Optional[AggregationStrategyFactory] = None,
        rule_factory: Optional[RuleApplierFactory] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Create a new sheet generator."""
        self.settings = settings or get_settings()
        self.field_extractor = field_extractor or FieldExtractor()
        self.formatter_registry = formatter_registry or FormatterRegistry()
        self.aggregation_factory = aggregation_factory or AggregationStrategyFactory()
        self.rule_factory = rule_factory or RuleApplierFactory()
        self.logger = logger or LOGGER
        self.header_writer = HeaderWriter()
        self.data_writer = DataRowWriter(self.formatter_registry)
        self.aggregate_writer = AggregateRowWriter(self.aggregation_factory)

    def generate(
        self,
        records: Iterable[Any],
        sheet_name: str,
        config: SheetConfig,
        record_type: Optional[type] = None,
        workbook: Optional[Workbook] = None,
    ) -> Sheet:
        """Render ``records`` into a new sheet.

        Args:
            records: Records of one type. ``None`` entries are skipped.
            sheet_name: Name of the sheet to create.
            config: Rendering options.
            record_type: Type whose fields become columns. Inferred from the
                first record when omitted; required for an empty collection.
            workbook: Workbook receiving the sheet. A new one is created when omitted.

        Returns:
            The populated sheet.

        Raises:
            InvalidArgumentError: When an argument fails validation or a value
                does not fit its field's declared type. The sheet is removed from
                ``workbook`` on any failure while writing.
            NoExportableFieldsError: When the record type has no readable fields.
            UnknownColumnError: In strict mode, when a rule names a missing column.
        """
        self._validate_inputs(records, sheet_name, config, workbook)
        rows = list(records)
        record_type = self._resolve_record_type(rows, record_type)

        fields = self.field_extractor.extract(record_type, config.exclude_id_fields)
        if not fields:
            raise NoExportableFieldsError(
                f"Type '{record_type.__name__}' has no readable fields. Cannot generate sheet."
            )
        rule_columns = self._resolve_rule_columns(fields, config)

        if workbook is None:
            workbook = Workbook(max_column_width=self.settings.max_column_width)
        sheet = workbook.add_worksheet(sheet_name)
        try:
            written = self._populate(sheet, rows, fields, rule_columns, config)
        except Exception:
            self.logger.error("Generation of sheet %s failed; removing it", sheet_name)
            workbook.discard(sheet)
            raise

        self.logger.info(
            "Generated sheet %s with %d columns and %d rows", sheet_name, len(fields), written
        )
        return sheet

    def generate_workbook(
        self,
        records: Iterable[Any],
        sheet_name: str,
        config: SheetConfig,
        record_type: Optional[type] = None,
    ) -> Workbook:
        """Render ``records`` into a new single-sheet workbook."""
        workbook = Workbook(max_column_width=self.settings.max_column_width)
        self.generate(records, sheet_name, config, record_type=record_type, workbook=workbook)
        return workbook

    def generate_bytes(
        self,
        records: Iterable[Any],
        sheet_name: str,
        config: SheetConfig,
        record_type: Optional[type] = None,
    ) -> bytes:
        """Render ``records`` and return the serialized ``.xlsx`` document."""
        return self.generate_workbook(records, sheet_name, config, record_type).to_bytes()

    def generate_file(
        self,
        records: Iterable[Any],
        sheet_name: str,
        file_path: Union[str, Path],
        config: SheetConfig,
        record_type: Optional[type] = None,
    ) -> Path:
        """Render ``records`` and save the workbook to ``file_path``."""
        path = Path(file_path)
        self.generate_workbook(records, sheet_name, config, record_type).save(path)
        self.logger.info("Workbook written to %s", path)
        return path

    def _validate_inputs(
        self,
        records: Any,
        sheet_name: Any,
        config: Any,
        workbook: Optional[Workbook],
    ) -> None:
        if records is None:
            raise InvalidArgumentError(
                "Record collection cannot be None. Pass an empty collection when there is no data."
            )

        validate_sheet_name(sheet_name)

        if config is None:
            raise InvalidArgumentError("Configuration cannot be None. Pass a SheetConfig instance.")

        for rule in config.conditional_formatting:
            if not rule.column or not rule.column.strip():
                raise InvalidArgumentError(
                    f"Conditional formatting rule {rule.kind.value} has an empty column name."
                )

        if config.freeze_rows < 0:
            raise InvalidArgumentError(
                f"Freeze row count cannot be negative. Got {config.freeze_rows}."
            )
        if config.freeze_columns < 0:
            raise InvalidArgumentError(
                f"Freeze column count cannot be negative. Got {config.freeze_columns}."
            )

        if workbook is not None and workbook.has_sheet(sheet_name):
            raise InvalidArgumentError(f"Workbook already contains a sheet named '{sheet_name}'.")

    def _resolve_record_type(self, rows: Sequence[Any], record_type: Optional[type]) -> type:
        if record_type is not None:
            return record_type
        for record in rows:
            if record is not None:
                return type(record)
        raise InvalidArgumentError(
            "Cannot infer the record type of an empty collection. Pass record_type explicitly."
        )

    def _resolve_rule_columns(
        self, fields: Sequence[FieldDescriptor], config: SheetConfig
    ) -> List[Tuple[FormattingRule, int]]:
        positions = {field.name: column for column, field in enumerate(fields, start=1)}
        resolved: List[Tuple[FormattingRule, int]] = []
        for rule in config.conditional_formatting:
            column = positions.get(rule.column)
            if column is None:
                if config.strict_rule_columns:
                    raise UnknownColumnError(
                        f"Conditional formatting rule {rule.kind.value} targets unknown column "
                        f"'{rule.column}'. Available columns: {', '.join(positions)}."
                    )
                self.logger.warning(
                    "Skipping %s rule for unknown column '%s'", rule.kind.value, rule.column
                )
                continue
            # Resolve the applier now so a registry mismatch fails before writing.
            self.rule_factory.get_applier(rule.kind)
            resolved.append((rule, column))
        return resolved

    def _populate(
        self,
        sheet: Sheet,
        rows: Sequence[Any],
        fields: Sequence[FieldDescriptor],
        rule_columns: Sequence[Tuple[FormattingRule, int]],
        config: SheetConfig,
    ) -> int:
        self.header_writer.write(sheet, fields, config.header_color)
        written = self.data_writer.write(sheet, rows, fields)
        self.logger.debug("Wrote %d data rows to sheet %s", written, sheet.title)

        if config.aggregates != AggregateKind.NONE:
            self.aggregate_writer.write(sheet, rows, fields, written + 2, config.aggregates)

        if rule_columns and written:
            self._apply_conditional_formatting(sheet, rule_columns, written)

        sheet.freeze(config.freeze_rows, config.freeze_columns)
        sheet.autosize_columns()
        return written

    def _apply_conditional_formatting(
        self, sheet: Sheet, rule_columns: Sequence[Tuple[FormattingRule, int]], written: int
    ) -> None:
        last_row = FIRST_DATA_ROW + written - 1
        for rule, column in rule_columns:
            cell_range = sheet.column_range(column, FIRST_DATA_ROW, last_row)
            self.rule_factory.get_applier(rule.kind).apply(sheet, cell_range, rule)
            self.logger.debug("Applied %s rule to %s", rule.kind.value, cell_range)


class WorkbookBuilder:
    """Assemble several record collections into one workbook."""

    def __init__(
        self,
        generator: Optional[SheetGenerator] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.generator = generator or SheetGenerator()
        self.logger = logger or LOGGER
        self._sheets: List[Tuple[str, List[Any], SheetConfig, Optional[type]]] = []

    def add_sheet(
        self,
        sheet_name: str,
        records: Iterable[Any],
        config: Optional[SheetConfig] = None,
        record_type: Optional[type] = None,
    ) -> "WorkbookBuilder":
        """Queue a sheet; the default configuration comes from the generator's settings.

        Raises:
            InvalidArgumentError: When the name is invalid or already queued.
        """
        validate_sheet_name(sheet_name)
        if any(name.lower() == sheet_name.lower() for name, _, _, _ in self._sheets):
            raise InvalidArgumentError(f"Workbook already contains a sheet named '{sheet_name}'.")
        if records is None:
            raise InvalidArgumentError(
                f"Record collection for sheet '{sheet_name}' cannot be None."
            )
        config = config or self.generator.settings.to_sheet_config()
        self._sheets.append((sheet_name, list(records), config, record_type))
        return self

    def build(self) -> Workbook:
        """Generate every queued sheet into a new workbook."""
        workbook = Workbook(max_column_width=self.generator.settings.max_column_width)
        for sheet_name, records, config, record_type in self._sheets:
            self.generator.generate(
                records, sheet_name, config, record_type=record_type, workbook=workbook
            )
        if not self._sheets:
            self.logger.debug("Building workbook without sheets")
        return workbook

    def save(self, file_path: Union[str, Path]) -> Path:
        path = Path(file_path)
        self.build().save(path)
        return path

    def to_bytes(self) -> bytes:
        return self.build().to_bytes()
