"""
Reporting Service (``station_modules.reporting.service``).

Builds the daily summary from the day's pump readings and expenses:
per-product volume and value, expense total, net sales, and pie chart
slices.  Pure read path; nothing is written.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from station_kernel.domain.catalog import DEFAULT_CHART_COLORS
from station_kernel.domain.clock import Clock, SystemClock
from station_kernel.domain.quantities import ZERO, as_decimal
from station_kernel.logging_config import get_logger
from station_kernel.repository import Filter, OrderBy, Repository
from station_modules.expense.service import EXPENSES_TABLE
from station_modules.fuel.service import FUEL_RECORDS_TABLE
from station_modules.reporting.models import ChartSlice, DailySummary, ProductSales

logger = get_logger("modules.reporting.service")

_HUNDRED = Decimal("100")


class DailySummaryService:
    """End-of-day aggregates for a station."""

    def __init__(
        self,
        repository: Repository,
        chart_colors: Sequence[str] = DEFAULT_CHART_COLORS,
        clock: Clock | None = None,
    ):
        if not chart_colors:
            raise ValueError("chart_colors must not be empty")
        self._repository = repository
        self._chart_colors = tuple(chart_colors)
        self._clock = clock or SystemClock()

    def daily_summary(self, station_id: str, summary_date: date | None = None) -> DailySummary:
        day = summary_date or self._clock.today()

        fuel_rows = self._repository.find(
            FUEL_RECORDS_TABLE,
            [Filter.eq("station_code", station_id), Filter.eq("record_date", day)],
            [OrderBy("created_at")],
        )
        volumes: dict[str, Decimal] = {}
        values: dict[str, Decimal] = {}
        for row in fuel_rows:
            product = row["product_type"]
            volumes[product] = volumes.get(product, ZERO) + as_decimal(row.get("sales_volume"))
            values[product] = values.get(product, ZERO) + as_decimal(row.get("total_sales"))

        sales_by_product = tuple(
            ProductSales(product_type=p, sales_volume=volumes[p], total_sales=values[p])
            for p in volumes
        )
        total_sales = sum((s.total_sales for s in sales_by_product), ZERO)
        total_volume = sum((s.sales_volume for s in sales_by_product), ZERO)

        expense_rows = self._repository.find(
            EXPENSES_TABLE,
            [Filter.eq("station_id", station_id), Filter.eq("expense_date", day)],
        )
        total_expenses = sum((as_decimal(row.get("amount")) for row in expense_rows), ZERO)

        summary = DailySummary(
            station_id=station_id,
            summary_date=day,
            sales_by_product=sales_by_product,
            total_sales=total_sales,
            total_volume=total_volume,
            total_expenses=total_expenses,
            net_sales=total_sales - total_expenses,
            chart_slices=self._chart_slices(sales_by_product, total_sales),
        )
        logger.debug(
            "daily_summary_built",
            extra={
                "station_id": station_id,
                "summary_date": day.isoformat(),
                "products": len(sales_by_product),
                "total_sales": str(total_sales),
                "total_expenses": str(total_expenses),
            },
        )
        return summary

    def _chart_slices(
        self,
        sales_by_product: Sequence[ProductSales],
        total: Decimal,
    ) -> tuple[ChartSlice, ...]:
        slices = []
        for index, sales in enumerate(sales_by_product):
            percent = ZERO if total == ZERO else sales.total_sales * _HUNDRED / total
            slices.append(
                ChartSlice(
                    name=sales.product_type,
                    value=sales.total_sales,
                    color=self._chart_colors[index % len(self._chart_colors)],
                    percent=percent,
                )
            )
        return tuple(slices)
