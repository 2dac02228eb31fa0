"""
Reporting Models (``station_modules.reporting.models``).

Read-only aggregates for the end-of-day view.  ``ChartSlice`` carries
everything a pie chart needs so the presentation layer does no arithmetic.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class ProductSales:
    product_type: str
    sales_volume: Decimal
    total_sales: Decimal


@dataclass(frozen=True)
class ChartSlice:
    """One pie slice: a product's share of the day's sales value."""
    name: str
    value: Decimal
    color: str
    percent: Decimal


@dataclass(frozen=True)
class DailySummary:
    """
    Sales and expenses for one station on one day.

    ``sales_by_product`` keeps the order in which products first appear in
    the day's readings; ``chart_slices`` follows the same order.
    """
    station_id: str
    summary_date: date
    sales_by_product: tuple[ProductSales, ...]
    total_sales: Decimal
    total_volume: Decimal
    total_expenses: Decimal
    net_sales: Decimal
    chart_slices: tuple[ChartSlice, ...] = field(default_factory=tuple)

    def sales_for(self, product_type: str) -> ProductSales | None:
        for sales in self.sales_by_product:
            if sales.product_type == product_type:
                return sales
        return None
