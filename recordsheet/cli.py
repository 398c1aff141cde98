"""Command-line interface for recordsheet."""

from __future__ import annotations

import logging
import re
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer

from . import get_version
from .config import Settings, get_settings
from .exceptions import SheetGenerationError
from .loaders import load_records
from .logging_config import configure_logging, get_logger
from .models import AggregateKind, SheetConfig
from .service import MAX_SHEET_NAME_LENGTH, SheetGenerator

LOGGER = get_logger(__name__)

app = typer.Typer(help="Export JSON or CSV records to a styled Excel sheet.")


class AggregateName(str, Enum):
    sum = "sum"
    average = "average"
    min = "min"
    max = "max"
    count = "count"
    all = "all"
    none = "none"


@app.command()
def export(
    input_path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="JSON array of objects or CSV file with a header row.",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Destination .xlsx path. Defaults to the input path with an .xlsx suffix.",
    ),
    sheet: Optional[str] = typer.Option(
        None,
        "--sheet",
        "-s",
        help="Sheet name. Defaults to the input file name.",
    ),
    aggregate: Optional[List[AggregateName]] = typer.Option(
        None,
        "--aggregate",
        "-a",
        help="Aggregate row to append below numeric columns. Repeat for several.",
    ),
    exclude_ids: bool = typer.Option(
        False,
        "--exclude-ids",
        help="Leave out columns whose name ends in 'id'.",
    ),
    freeze_header: bool = typer.Option(
        False,
        "--freeze-header",
        help="Keep the header row visible while scrolling.",
    ),
    header_color: Optional[str] = typer.Option(
        None,
        "--header-color",
        help="Header fill as RGB hex, e.g. ADD8E6.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging.",
    ),
) -> None:
    """Convert INPUT_PATH into an Excel workbook."""
    settings = get_settings()
    configure_logging(logging.DEBUG if verbose else settings.log_level)

    try:
        record_type, records = load_records(input_path)
        config = _build_config(settings, aggregate, exclude_ids, freeze_header, header_color)
        generator = SheetGenerator(settings=settings)
        saved_path = generator.generate_file(
            records,
            sheet or _default_sheet_name(input_path),
            output or input_path.with_suffix(".xlsx"),
            config,
            record_type=record_type,
        )
    except (SheetGenerationError, ValueError) as exc:
        LOGGER.debug("Export failed", exc_info=True)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(f"Exported {len(records)} records to {saved_path}")


@app.command()
def version() -> None:
    """Print the installed version."""
    typer.echo(get_version())


def _build_config(
    settings: Settings,
    aggregate: Optional[List[AggregateName]],
    exclude_ids: bool,
    freeze_header: bool,
    header_color: Optional[str],
) -> SheetConfig:
    overrides = {"exclude_id_fields": exclude_ids}
    if aggregate:
        overrides["aggregates"] = AggregateKind.parse([name.value for name in aggregate])
    if freeze_header:
        overrides["freeze_rows"] = 1
    if header_color:
        overrides["header_color"] = header_color
    return settings.to_sheet_config(**overrides)


def _default_sheet_name(input_path: Path) -> str:
    name = re.sub(r"[:\\/?*\[\]]", "_", input_path.stem).strip() or "Sheet1"
    return name[:MAX_SHEET_NAME_LENGTH]


def main() -> None:  # pragma: no cover - CLI entrypoint
    app()


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    main()
