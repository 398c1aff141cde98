"""Assemble several record collections into one workbook."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from recordsheet import AggregateKind, SheetConfig, WorkbookBuilder
from recordsheet.config import get_settings
from recordsheet.logging_config import configure_logging
from recordsheet.service import SheetGenerator


class Customer(BaseModel):
    customer_id: int
    company_name: str
    since: date
    is_active: bool


class Order(BaseModel):
    order_id: int
    customer_id: int
    placed_at: datetime
    total: Decimal
    discount: Optional[float] = None

    @property
    def net_total(self) -> Decimal:
        return self.total - self.total * Decimal(str(self.discount or 0))


def main() -> None:
    """Build ``reports/sales.xlsx`` using environment driven defaults."""
    settings = get_settings()
    configure_logging(settings.log_level)

    customers = [
        Customer(customer_id=1, company_name="Acme", since=date(2019, 4, 1), is_active=True),
        Customer(customer_id=2, company_name="Globex", since=date(2021, 9, 15), is_active=False),
    ]
    orders = [
        Order(
            order_id=10,
            customer_id=1,
            placed_at=datetime(2024, 3, 1, 9, 30),
            total=Decimal("120.00"),
        ),
        Order(
            order_id=11,
            customer_id=2,
            placed_at=datetime(2024, 3, 2, 14, 5),
            total=Decimal("80.50"),
            discount=0.1,
        ),
    ]

    builder = (
        WorkbookBuilder(SheetGenerator(settings=settings))
        .add_sheet("Customers", customers, SheetConfig(exclude_id_fields=True, aggregates="none"))
        .add_sheet("Orders", orders, settings.to_sheet_config(aggregates=AggregateKind.ALL))
        .add_sheet("Returns", [], record_type=Order)
    )

    output_path = Path("reports") / "sales.xlsx"
    output_path.parent.mkdir(parents=True, exist_ok=True)
    print(f"Workbook saved to: {builder.save(output_path)}")


if __name__ == "__main__":
    main()
