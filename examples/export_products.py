"""Export an in-memory product list with aggregates and conditional formatting."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from recordsheet import AggregateKind, ConditionalFormatting, SheetConfig, SheetGenerator
from recordsheet.logging_config import configure_logging


@dataclass
class Product:
    ProductId: int
    Name: str
    Category: str
    Price: Decimal
    Quantity: int
    Margin: Optional[float]


def build_products() -> List[Product]:
    """Return a small catalog with a negative margin and a missing value."""
    return [
        Product(1, "Laptop", "Computers", Decimal("999.99"), 10, 0.18),
        Product(2, "Mouse", "Accessories", Decimal("29.99"), 50, 0.42),
        Product(3, "Keyboard", "Accessories", Decimal("79.99"), 30, 0.35),
        Product(4, "Monitor", "Displays", Decimal("249.50"), 15, -0.05),
        Product(5, "Docking Station", "Accessories", Decimal("189.00"), 8, None),
    ]


def main() -> None:
    """Write ``reports/products.xlsx``."""
    configure_logging(logging.INFO)

    formatting = (
        ConditionalFormatting()
        .color_scale("Price")
        .data_bars("Quantity")
        .highlight_negatives("Margin")
        .highlight_duplicates("Category")
    )
    config = SheetConfig(
        exclude_id_fields=True,
        aggregates=AggregateKind.SUM | AggregateKind.AVERAGE | AggregateKind.MAX,
        conditional_formatting=formatting,
    ).freeze_header_row()

    output_path = Path("reports") / "products.xlsx"
    output_path.parent.mkdir(parents=True, exist_ok=True)
    saved_path = SheetGenerator().generate_file(build_products(), "Products", output_path, config)
    print(f"Workbook saved to: {saved_path}")


if __name__ == "__main__":
    main()
