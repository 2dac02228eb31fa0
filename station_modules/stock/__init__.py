"""
Stock Module (``station_modules.stock``).

Responsibility
--------------
Monthly stock carry-forward and reconciliation per station and product:
open a month with last month's counted closing stock, project the closing
figure from recorded sales, and record the physical count with its
excess/shortage.

Architecture
------------
Layer: **Modules**.  Depends on the kernel ``Repository`` and
``SalesLedger`` abstractions; the fuel module supplies the production
sales ledger.
"""

from station_modules.stock.models import (
    ClosingStockEstimate,
    ReconciliationStatus,
    StockPeriod,
)
from station_modules.stock.service import MONTHLY_STOCK_TABLE, StockReconciliationEngine

__all__ = [
    "ClosingStockEstimate",
    "ReconciliationStatus",
    "StockPeriod",
    "MONTHLY_STOCK_TABLE",
    "StockReconciliationEngine",
]
