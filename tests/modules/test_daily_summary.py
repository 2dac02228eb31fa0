"""
Tests for the daily summary (``station_modules.reporting.service``).

Validates:
- Per-product sales aggregation and totals
- Net sales = total sales - total expenses
- Chart slices: palette cycling, percentages, zero-total day
- Products listed in first-seen order
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from station_modules.reporting import ChartSlice, DailySummaryService
from tests.fakes import InMemoryRepository

DAY = date(2024, 2, 10)


@pytest.fixture
def priced_pumps(fuel_service, station_id, test_actor_id):
    fuel_service.set_product_price("PMS", "600", date(2024, 1, 1), test_actor_id)
    fuel_service.set_product_price("AGO", "1000", date(2024, 1, 1), test_actor_id)
    return {
        "PMS": fuel_service.register_pump(station_id, 1, "PMS", test_actor_id),
        "AGO": fuel_service.register_pump(station_id, 2, "AGO", test_actor_id),
        "PMS2": fuel_service.register_pump(station_id, 3, "PMS", test_actor_id),
    }


class TestDailySummary:
    def test_aggregates_sales_and_expenses(
        self, summary_service, fuel_service, expense_service, station_id, test_actor_id, priced_pumps,
    ):
        fuel_service.record_reading(station_id, priced_pumps["PMS"].id, "0", "100", test_actor_id, record_date=DAY)
        fuel_service.record_reading(station_id, priced_pumps["PMS2"].id, "0", "50", test_actor_id, record_date=DAY)
        fuel_service.record_reading(station_id, priced_pumps["AGO"].id, "0", "30", test_actor_id, record_date=DAY)
        fuel_service.record_reading(station_id, priced_pumps["AGO"].id, "0", "999", test_actor_id, record_date=date(2024, 2, 11))
        expense_service.record_expense(station_id, "Water", "2000", test_actor_id, expense_date=DAY)
        expense_service.record_expense(station_id, "Diesel", "8000", test_actor_id, expense_date=DAY)

        summary = summary_service.daily_summary(station_id, DAY)

        assert summary.sales_for("PMS").sales_volume == Decimal("150")
        assert summary.sales_for("PMS").total_sales == Decimal("90000")
        assert summary.sales_for("AGO").total_sales == Decimal("30000")
        assert summary.sales_for("LPG") is None
        assert summary.total_volume == Decimal("180")
        assert summary.total_sales == Decimal("120000")
        assert summary.total_expenses == Decimal("10000")
        assert summary.net_sales == Decimal("110000")

    def test_chart_slice_percentages(
        self, summary_service, fuel_service, station_id, test_actor_id, priced_pumps,
    ):
        fuel_service.record_reading(station_id, priced_pumps["PMS"].id, "0", "150", test_actor_id, record_date=DAY)
        fuel_service.record_reading(station_id, priced_pumps["AGO"].id, "0", "30", test_actor_id, record_date=DAY)

        summary = summary_service.daily_summary(station_id, DAY)

        percents = {s.name: s.percent for s in summary.chart_slices}
        assert percents == {"PMS": Decimal("75"), "AGO": Decimal("25")}
        assert sum(percents.values()) == Decimal("100")

    def test_empty_day(self, summary_service, station_id):
        summary = summary_service.daily_summary(station_id, DAY)

        assert summary.sales_by_product == ()
        assert summary.chart_slices == ()
        assert summary.total_sales == Decimal("0")
        assert summary.net_sales == Decimal("0")

    def test_expenses_only_gives_negative_net(
        self, summary_service, expense_service, station_id, test_actor_id,
    ):
        expense_service.record_expense(station_id, "Rent", "5000", test_actor_id, expense_date=DAY)
        assert summary_service.daily_summary(station_id, DAY).net_sales == Decimal("-5000")

    def test_defaults_to_today(self, summary_service, station_id, deterministic_clock):
        assert summary_service.daily_summary(station_id).summary_date == deterministic_clock.today()


class TestChartSlices:
    """Ordering and colour assignment, checked on rows with known insertion order."""

    def _fuel_row(self, product, total, volume="1"):
        return {
            "station_code": "S1",
            "product_type": product,
            "record_date": DAY,
            "sales_volume": Decimal(volume),
            "total_sales": Decimal(total),
        }

    def test_first_seen_order_and_palette_cycle(self):
        repository = InMemoryRepository()
        for product, total in [("LPG", "10"), ("PMS", "20"), ("LPG", "10"), ("AGO", "40"), ("KERO", "20")]:
            repository.insert("fuel_records", self._fuel_row(product, total))

        service = DailySummaryService(repository, chart_colors=("#111111", "#222222", "#333333"))
        summary = service.daily_summary("S1", DAY)

        assert [s.product_type for s in summary.sales_by_product] == ["LPG", "PMS", "AGO", "KERO"]
        assert summary.chart_slices == (
            ChartSlice("LPG", Decimal("20"), "#111111", Decimal("20")),
            ChartSlice("PMS", Decimal("20"), "#222222", Decimal("20")),
            ChartSlice("AGO", Decimal("40"), "#333333", Decimal("40")),
            ChartSlice("KERO", Decimal("20"), "#111111", Decimal("20")),
        )

    def test_zero_total_gives_zero_percent(self):
        repository = InMemoryRepository()
        repository.insert("fuel_records", self._fuel_row("PMS", "0", volume="0"))

        [chart_slice] = DailySummaryService(repository).daily_summary("S1", DAY).chart_slices

        assert chart_slice.percent == Decimal("0")
        assert chart_slice.color == "#0088FE"

    def test_missing_values_count_as_zero(self):
        repository = InMemoryRepository()
        repository.insert("fuel_records", {**self._fuel_row("PMS", "50"), "sales_volume": None})

        summary = DailySummaryService(repository).daily_summary("S1", DAY)

        assert summary.total_volume == Decimal("0")
        assert summary.total_sales == Decimal("50")

    def test_empty_palette_rejected(self):
        with pytest.raises(ValueError):
            DailySummaryService(InMemoryRepository(), chart_colors=())
