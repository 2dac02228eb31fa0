"""
Stock Domain Models (``station_modules.stock.models``).

Responsibility
--------------
Frozen value objects for monthly stock reconciliation: the per-product
period record and the advisory closing-stock estimate.

Invariants
----------
- ``StockPeriod.actual_closing_stock`` and ``StockPeriod.excess`` are both
  present or both absent.
- When present, ``excess == opening_stock - actual_closing_stock``.
- All quantities use ``Decimal`` -- never ``float``.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping
from uuid import UUID

from station_kernel.domain.quantities import ZERO, as_decimal
from station_kernel.logging_config import get_logger

logger = get_logger("modules.stock.models")


class ReconciliationStatus(str, Enum):
    """Lifecycle of a stock period: OPEN -> RECONCILED, never back."""
    OPEN = "open"
    RECONCILED = "reconciled"


@dataclass(frozen=True)
class StockPeriod:
    """
    One product's stock position for one calendar month at one station.

    Contract: Immutable value object.  ``opening_stock`` is fixed when the
    period is initialized; the closing count and excess arrive together when
    the period is finalized.
    """
    id: UUID
    station_id: str
    product_type: str
    period_key: date
    opening_stock: Decimal
    actual_closing_stock: Decimal | None = None
    excess: Decimal | None = None

    def __post_init__(self):
        if (self.actual_closing_stock is None) != (self.excess is None):
            raise ValueError(
                "actual_closing_stock and excess must both be set or both be absent"
            )
        if self.is_reconciled and self.excess != self.opening_stock - self.actual_closing_stock:
            logger.warning(
                "stock_period_excess_mismatch",
                extra={
                    "record_id": str(self.id),
                    "opening_stock": str(self.opening_stock),
                    "actual_closing_stock": str(self.actual_closing_stock),
                    "excess": str(self.excess),
                },
            )

    @property
    def is_reconciled(self) -> bool:
        return self.actual_closing_stock is not None

    @property
    def status(self) -> ReconciliationStatus:
        if self.is_reconciled:
            return ReconciliationStatus.RECONCILED
        return ReconciliationStatus.OPEN

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "StockPeriod":
        """Build from a ``monthly_stock`` repository row."""
        closing = row.get("actual_closing_stock")
        excess = row.get("excess")
        return cls(
            id=row["id"],
            station_id=row["station_id"],
            product_type=row["product_type"],
            period_key=row["period_key"],
            opening_stock=as_decimal(row["opening_stock"]),
            actual_closing_stock=None if closing is None else as_decimal(closing),
            excess=None if excess is None else as_decimal(excess),
        )


@dataclass(frozen=True)
class ClosingStockEstimate:
    """
    Advisory projection: opening stock minus recorded sales for the month.

    Never persisted; the physically counted closing stock is authoritative.
    """
    total_sales_volume: Decimal
    estimated_closing_stock: Decimal

    @classmethod
    def zero(cls) -> "ClosingStockEstimate":
        return cls(total_sales_volume=ZERO, estimated_closing_stock=ZERO)
