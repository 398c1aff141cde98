"""Shared pytest fixtures."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

import pytest

from recordsheet.config import Settings
from recordsheet.fields import FieldExtractor
from recordsheet.models import FieldDescriptor
from recordsheet.service import SheetGenerator


@dataclass
class Product:
    ProductId: int
    Name: str
    Price: Decimal
    Quantity: int


@dataclass
class Order:
    OrderId: int
    Customer: str
    Total: Optional[Decimal]
    Discount: Optional[float]
    Items: Optional[int]
    PlacedAt: datetime
    ShipDate: Optional[date]
    IsPaid: bool


@dataclass
class PriceQty:
    Label: str
    Price: float
    Qty: int


@pytest.fixture
def settings() -> Settings:
    """Return settings with the documented defaults."""
    return Settings(
        RECORDSHEET_HEADER_COLOR="ADD8E6",
        RECORDSHEET_DEFAULT_AGGREGATES="sum",
        RECORDSHEET_STRICT_RULE_COLUMNS=False,
        RECORDSHEET_MAX_COLUMN_WIDTH=60,
        RECORDSHEET_LOG_LEVEL="INFO",
    )


@pytest.fixture
def generator(settings: Settings) -> SheetGenerator:
    """Return a sheet generator wired with the default registries."""
    return SheetGenerator(settings=settings)


@pytest.fixture
def products() -> List[Product]:
    """Return a representative product list."""
    return [
        Product(ProductId=1, Name="Laptop", Price=Decimal("999.99"), Quantity=10),
        Product(ProductId=2, Name="Mouse", Price=Decimal("29.99"), Quantity=50),
        Product(ProductId=3, Name="Keyboard", Price=Decimal("79.99"), Quantity=30),
    ]


@pytest.fixture
def orders() -> List[Order]:
    """Return orders mixing every supported value kind, including nulls."""
    return [
        Order(
            OrderId=100,
            Customer="Acme",
            Total=Decimal("10.5"),
            Discount=0.1,
            Items=3,
            PlacedAt=datetime(2024, 3, 1, 9, 30, 0),
            ShipDate=date(2024, 3, 4),
            IsPaid=True,
        ),
        Order(
            OrderId=101,
            Customer="Globex",
            Total=None,
            Discount=None,
            Items=None,
            PlacedAt=datetime(2024, 3, 2, 14, 0, 0),
            ShipDate=None,
            IsPaid=False,
        ),
        Order(
            OrderId=102,
            Customer="Initech",
            Total=Decimal("30.0"),
            Discount=0.25,
            Items=7,
            PlacedAt=datetime(2024, 3, 3, 18, 45, 0),
            ShipDate=date(2024, 3, 6),
            IsPaid=True,
        ),
    ]


@pytest.fixture
def price_qty_records() -> List[PriceQty]:
    """Return the three-record price/quantity scenario."""
    return [
        PriceQty(Label="A", Price=10.0, Qty=5),
        PriceQty(Label="B", Price=20.0, Qty=10),
        PriceQty(Label="C", Price=30.0, Qty=15),
    ]


@pytest.fixture
def order_fields() -> List[FieldDescriptor]:
    """Return the extracted fields of :class:`Order`."""
    return FieldExtractor().extract(Order)
