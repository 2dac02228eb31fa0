"""
Stock engine behaviour against in-memory and failing collaborators.

Covers what a healthy database cannot easily produce: a concurrent
initializer winning the race, sales-ledger and repository outages during
an estimate, broken notification sinks, and the exact excess invariant
over generated quantities.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from station_kernel.exceptions import DependencyFailureError, StockPeriodAlreadyExistsError
from station_kernel.notifications import NotificationKind
from station_kernel.repository import SalesEntry, SalesLedger
from station_modules.stock import ClosingStockEstimate, StockReconciliationEngine
from tests.fakes import (
    ExplodingNotificationSink,
    FailingRepository,
    FailingSalesLedger,
    InMemoryRepository,
    RacingRepository,
    RecordingNotificationSink,
)

FEB = date(2024, 2, 1)
ACTOR = uuid4()

quantities = st.decimals(
    min_value=Decimal("-1000000000"),
    max_value=Decimal("1000000000"),
    places=9,
    allow_nan=False,
    allow_infinity=False,
)


class StaticLedger(SalesLedger):
    def __init__(self, entries):
        self.entries = entries
        self.calls = []

    def find_sales_in_range(self, station_id, product_type, start_inclusive, end_exclusive):
        self.calls.append((station_id, product_type, start_inclusive, end_exclusive))
        return list(self.entries)


def _engine(repository=None, ledger=None, sink=None):
    return StockReconciliationEngine(
        repository or InMemoryRepository(),
        ledger or StaticLedger([]),
        sink or RecordingNotificationSink(),
    )


class TestConcurrentInitialize:
    def test_lost_race_reported_as_already_exists(self):
        sink = RecordingNotificationSink()
        engine = _engine(repository=RacingRepository(), sink=sink)

        with pytest.raises(StockPeriodAlreadyExistsError) as exc_info:
            engine.initialize_period("S1", "PMS", FEB, ACTOR)

        assert isinstance(exc_info.value.__cause__, Exception)
        assert sink.last == (NotificationKind.ERROR, "PMS stock is already initialized for February 2024")


class TestEstimateDegradation:
    def test_ledger_failure_yields_zero_estimate(self, captured_logs):
        engine = _engine(ledger=FailingSalesLedger())

        assert engine.estimate_closing_stock("S1", "PMS", FEB) == ClosingStockEstimate.zero()
        assert any(r["message"] == "closing_stock_estimate_failed" for r in captured_logs())

    def test_repository_failure_yields_zero_estimate(self):
        engine = _engine(repository=FailingRepository("monthly_stock"))
        assert engine.estimate_closing_stock("S1", "PMS", FEB) == ClosingStockEstimate.zero()

    def test_repository_failure_still_raises_on_initialize(self):
        engine = _engine(repository=FailingRepository("monthly_stock"))
        with pytest.raises(DependencyFailureError):
            engine.initialize_period("S1", "PMS", FEB, ACTOR)

    def test_non_dependency_errors_propagate(self):
        class BrokenLedger(SalesLedger):
            def find_sales_in_range(self, *args):
                raise KeyError("sales_volume")

        with pytest.raises(KeyError):
            _engine(ledger=BrokenLedger()).estimate_closing_stock("S1", "PMS", FEB)

    def test_missing_volumes_count_as_zero(self):
        ledger = StaticLedger([
            SalesEntry(date(2024, 2, 1), Decimal("12.5")),
            SalesEntry(date(2024, 2, 2), None),
            SalesEntry(date(2024, 2, 3), Decimal("7.5")),
        ])
        estimate = _engine(ledger=ledger).estimate_closing_stock("S1", "PMS", FEB)
        assert estimate.total_sales_volume == Decimal("20")

    def test_ledger_queried_with_half_open_month(self):
        ledger = StaticLedger([])
        _engine(ledger=ledger).estimate_closing_stock("S1", "AGO", date(2024, 12, 31))
        assert ledger.calls == [("S1", "AGO", date(2024, 12, 1), date(2025, 1, 1))]


class TestSingleWrite:
    def test_finalize_issues_exactly_one_update(self):
        repository = InMemoryRepository()
        engine = _engine(repository=repository)
        period = engine.initialize_period("S1", "PMS", FEB, ACTOR)
        repository.calls.clear()

        engine.finalize_period(period.id, "75", ACTOR)

        assert repository.writes() == [("update", "monthly_stock")]

    def test_initialize_issues_exactly_one_insert(self):
        repository = InMemoryRepository()
        _engine(repository=repository).initialize_period("S1", "PMS", FEB, ACTOR)
        assert repository.writes() == [("insert", "monthly_stock")]


class TestNotificationFailures:
    def test_broken_sink_does_not_fail_initialize(self):
        engine = _engine(sink=ExplodingNotificationSink())
        period = engine.initialize_period("S1", "PMS", FEB, ACTOR)
        assert period.opening_stock == Decimal("0")

    def test_broken_sink_does_not_mask_conflict(self):
        engine = _engine(sink=ExplodingNotificationSink())
        engine.initialize_period("S1", "PMS", FEB, ACTOR)
        with pytest.raises(StockPeriodAlreadyExistsError):
            engine.initialize_period("S1", "PMS", FEB, ACTOR)


class TestReconciliationProperties:
    @settings(max_examples=75, deadline=None)
    @given(opening=quantities, closing=quantities)
    def test_excess_exact_and_carried_forward(self, opening, closing):
        repository = InMemoryRepository()
        engine = _engine(repository=repository)
        january = engine.initialize_period("S1", "PMS", date(2024, 1, 1), ACTOR)
        repository.update("monthly_stock", january.id, {"opening_stock": opening})

        reconciled = engine.finalize_period(january.id, str(closing), ACTOR)
        february = engine.initialize_period("S1", "PMS", FEB, ACTOR)

        assert reconciled.excess == opening - closing
        assert reconciled.actual_closing_stock is not None and reconciled.excess is not None
        assert february.opening_stock == closing

    @settings(max_examples=50, deadline=None)
    @given(volumes=st.lists(st.one_of(st.none(), quantities.filter(lambda q: q >= 0)), max_size=20))
    def test_estimate_is_opening_minus_sales(self, volumes):
        entries = [SalesEntry(FEB, v) for v in volumes]
        estimate = _engine(ledger=StaticLedger(entries)).estimate_closing_stock("S1", "PMS", FEB)

        total = sum((v for v in volumes if v is not None), Decimal("0"))
        assert estimate.total_sales_volume == total
        assert estimate.estimated_closing_stock == -total
