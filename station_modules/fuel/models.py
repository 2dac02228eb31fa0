"""
Fuel Domain Models (``station_modules.fuel.models``).

Frozen value objects for pumps, product prices and daily pump readings.
These carry no database identity beyond the row id and no I/O; services
build them from repository rows with ``from_row``.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID

from station_kernel.domain.quantities import as_decimal


@dataclass(frozen=True)
class Pump:
    """A dispenser pump; each pump dispenses exactly one product."""
    id: UUID
    station_id: str
    pump_number: int
    product_type: str
    tank_id: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Pump":
        return cls(
            id=row["id"],
            station_id=row["station_id"],
            pump_number=int(row["pump_number"]),
            product_type=row["product_type"],
            tank_id=row.get("tank_id"),
        )


@dataclass(frozen=True)
class ProductPrice:
    """Price per litre of a product from ``effective_date`` onwards."""
    id: UUID
    product_type: str
    price_per_litre: Decimal
    effective_date: date

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ProductPrice":
        return cls(
            id=row["id"],
            product_type=row["product_type"],
            price_per_litre=as_decimal(row["price_per_litre"]),
            effective_date=row["effective_date"],
        )


@dataclass(frozen=True)
class FuelRecord:
    """
    One pump reading.

    ``sales_volume`` is ``meter_closing - meter_opening`` floored at zero,
    and ``total_sales`` is that volume at the product's price on entry.
    Both are persisted as computed, not recomputed on read.
    """
    id: UUID
    station_code: str
    pump_id: UUID
    product_type: str
    record_date: date
    opening_stock: Decimal
    closing_stock: Decimal
    meter_opening: Decimal
    meter_closing: Decimal
    sales_volume: Decimal | None
    price_per_litre: Decimal
    total_sales: Decimal
    input_mode: str = "manual"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "FuelRecord":
        volume = row.get("sales_volume")
        return cls(
            id=row["id"],
            station_code=row["station_code"],
            pump_id=row["pump_id"],
            product_type=row["product_type"],
            record_date=row["record_date"],
            opening_stock=as_decimal(row["opening_stock"]),
            closing_stock=as_decimal(row["closing_stock"]),
            meter_opening=as_decimal(row["meter_opening"]),
            meter_closing=as_decimal(row["meter_closing"]),
            sales_volume=None if volume is None else as_decimal(volume),
            price_per_litre=as_decimal(row["price_per_litre"]),
            total_sales=as_decimal(row["total_sales"]),
            input_mode=row.get("input_mode") or "manual",
        )
