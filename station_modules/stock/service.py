"""
Stock Reconciliation Engine (``station_modules.stock.service``).

Responsibility
--------------
Carries each product's stock forward month to month and reconciles it
against the physical count:

1. ``initialize_period`` opens a month with the previous month's counted
   closing stock (or zero on cold start).
2. ``estimate_closing_stock`` projects the closing figure from recorded
   sales.  Advisory only, never written back.
3. ``finalize_period`` records the counted closing stock and the derived
   excess/shortage in one update.

Invariants
----------
- One record per (station, product, period).  A second initialize raises
  ``StockPeriodAlreadyExistsError`` and leaves the existing opening stock
  untouched; a uniqueness violation from the repository (two callers
  racing) is reported the same way.
- ``excess = opening_stock - actual_closing_stock``, written together with
  the closing stock in a single repository update.
- A reconciled record is never finalized again
  (``StockPeriodAlreadyReconciledError``).
- Input is validated before any read or write.

Failure Modes
-------------
- Validation and conflict errors propagate after an error notification.
- ``DependencyFailureError`` propagates from initialize/finalize and is
  downgraded to a zero estimate in ``estimate_closing_stock``.

Usage::

    engine = StockReconciliationEngine(repository, FuelSalesLedger(repository))
    period = engine.initialize_period("S1", "PMS", date(2024, 2, 1), actor_id)
    estimate = engine.estimate_closing_stock("S1", "PMS", date(2024, 2, 1))
    engine.finalize_period(period.id, "90", actor_id)
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Any
from uuid import UUID

from station_kernel.domain.catalog import DEFAULT_PRODUCT_TYPES, validate_product_type
from station_kernel.domain.periods import month_range, period_label, previous_period, start_of_month
from station_kernel.domain.quantities import ZERO, as_decimal, excess, parse_quantity
from station_kernel.exceptions import (
    DependencyFailureError,
    DuplicateRecordError,
    StockPeriodAlreadyExistsError,
    StockPeriodAlreadyReconciledError,
    StockPeriodNotFoundError,
)
from station_kernel.logging_config import LogContext, get_logger
from station_kernel.notifications import (
    LoggingNotificationSink,
    NotificationKind,
    NotificationSink,
    deliver,
)
from station_kernel.repository import Filter, OrderBy, Repository, SalesLedger
from station_modules.stock.models import ClosingStockEstimate, StockPeriod

logger = get_logger("modules.stock.service")

MONTHLY_STOCK_TABLE = "monthly_stock"


class StockReconciliationEngine:
    """
    Monthly stock carry-forward and reconciliation.

    Contract
    --------
    Reads and writes ``monthly_stock`` rows through a ``Repository`` and
    reads sales through a ``SalesLedger``.  Each operation issues its reads
    first and at most one write.  The engine never commits: the caller's
    unit of work (``session_scope()``) owns the transaction.

    Non-goals
    ---------
    - No locking or retries; concurrent initializers are separated by the
      repository's uniqueness constraint.
    - Does not enforce non-negative counts.  A closing count above the
      opening stock yields a negative excess, which is a valid shortage.
    """

    def __init__(
        self,
        repository: Repository,
        sales_ledger: SalesLedger,
        notifier: NotificationSink | None = None,
        product_types: Sequence[str] = DEFAULT_PRODUCT_TYPES,
    ):
        self._repository = repository
        self._sales_ledger = sales_ledger
        self._notifier = notifier or LoggingNotificationSink()
        self._product_types = tuple(product_types)

    @property
    def product_types(self) -> tuple[str, ...]:
        return self._product_types

    # =========================================================================
    # Queries
    # =========================================================================

    def list_period(self, station_id: str, period_key: date) -> list[StockPeriod]:
        """All product records for a station and month, ordered by product."""
        rows = self._repository.find(
            MONTHLY_STOCK_TABLE,
            [
                Filter.eq("station_id", station_id),
                Filter.eq("period_key", start_of_month(period_key)),
            ],
            [OrderBy("product_type")],
        )
        return [StockPeriod.from_row(row) for row in rows]

    def find_record(
        self, station_id: str, product_type: str, period_key: date
    ) -> StockPeriod | None:
        row = self._repository.find_one(
            MONTHLY_STOCK_TABLE,
            [
                Filter.eq("station_id", station_id),
                Filter.eq("product_type", product_type),
                Filter.eq("period_key", start_of_month(period_key)),
            ],
        )
        return StockPeriod.from_row(row) if row is not None else None

    def get_record(self, record_id: UUID | str) -> StockPeriod:
        """
        Raises:
            StockPeriodNotFoundError: If no record has this id.
        """
        row = self._repository.find_one(MONTHLY_STOCK_TABLE, [Filter.eq("id", record_id)])
        if row is None:
            raise StockPeriodNotFoundError(str(record_id))
        return StockPeriod.from_row(row)

    # =========================================================================
    # Initialize
    # =========================================================================

    def initialize_period(
        self,
        station_id: str,
        product_type: str,
        period_key: date,
        actor_id: UUID,
    ) -> StockPeriod:
        """
        Open a stock period, carrying forward last month's counted closing stock.

        Preconditions:
            - ``product_type`` is one of the configured products.
        Postconditions:
            - A new OPEN record exists with ``opening_stock`` equal to the
              previous month's ``actual_closing_stock`` when that month is
              reconciled, otherwise zero.

        Raises:
            InvalidProductTypeError: Unknown product.
            StockPeriodAlreadyExistsError: A record for the key already exists.
            DependencyFailureError: Repository failure.
        """
        key = start_of_month(period_key)
        with LogContext.bind(station_id=station_id, period_key=key.isoformat()):
            try:
                validate_product_type(product_type, self._product_types)

                if self.find_record(station_id, product_type, key) is not None:
                    raise StockPeriodAlreadyExistsError(station_id, product_type, key.isoformat())

                prior = self.find_record(station_id, product_type, previous_period(key))
                opening_stock = (
                    prior.actual_closing_stock
                    if prior is not None and prior.is_reconciled
                    else ZERO
                )

                try:
                    row = self._repository.insert(
                        MONTHLY_STOCK_TABLE,
                        {
                            "station_id": station_id,
                            "product_type": product_type,
                            "period_key": key,
                            "opening_stock": opening_stock,
                            "created_by_id": actor_id,
                        },
                    )
                except DuplicateRecordError as exc:
                    raise StockPeriodAlreadyExistsError(
                        station_id, product_type, key.isoformat()
                    ) from exc

            except StockPeriodAlreadyExistsError:
                logger.warning(
                    "stock_period_already_initialized",
                    extra={"product_type": product_type},
                )
                self._notify_error(
                    f"{product_type} stock is already initialized for {period_label(key)}"
                )
                raise
            except Exception:
                logger.error(
                    "stock_period_initialize_failed",
                    extra={"product_type": product_type},
                    exc_info=True,
                )
                self._notify_error("Failed to initialize stock")
                raise

            period = StockPeriod.from_row(row)
            logger.info(
                "stock_period_initialized",
                extra={
                    "record_id": str(period.id),
                    "product_type": product_type,
                    "opening_stock": str(period.opening_stock),
                    "carried_forward": prior is not None and prior.is_reconciled,
                },
            )
            deliver(
                self._notifier,
                NotificationKind.SUCCESS,
                f"{product_type} stock initialized for {period_label(key)}",
            )
            return period

    def initialize_all_products(
        self,
        station_id: str,
        period_key: date,
        actor_id: UUID,
    ) -> list[StockPeriod]:
        """Initialize every configured product not yet opened for the month."""
        existing = {p.product_type for p in self.list_period(station_id, period_key)}
        return [
            self.initialize_period(station_id, product_type, period_key, actor_id)
            for product_type in self._product_types
            if product_type not in existing
        ]

    # =========================================================================
    # Estimate
    # =========================================================================

    def estimate_closing_stock(
        self,
        station_id: str,
        product_type: str,
        period_key: date,
    ) -> ClosingStockEstimate:
        """
        Project the month's closing stock from recorded sales.

        Sums ``sales_volume`` over ``[month start, next month start)`` (missing
        volumes count as zero) and subtracts it from the record's opening stock
        (zero when the month is not initialized).  A failing lookup yields a
        zero estimate instead of an error.
        """
        start, end = month_range(period_key)
        try:
            record = self.find_record(station_id, product_type, start)
            entries = self._sales_ledger.find_sales_in_range(
                station_id, product_type, start, end
            )
        except DependencyFailureError:
            logger.warning(
                "closing_stock_estimate_failed",
                extra={
                    "station_id": station_id,
                    "product_type": product_type,
                    "period_key": start.isoformat(),
                },
                exc_info=True,
            )
            return ClosingStockEstimate.zero()

        total_volume = sum((as_decimal(e.sales_volume) for e in entries), ZERO)
        opening_stock = record.opening_stock if record is not None else ZERO
        estimate = ClosingStockEstimate(
            total_sales_volume=total_volume,
            estimated_closing_stock=opening_stock - total_volume,
        )
        logger.debug(
            "closing_stock_estimated",
            extra={
                "station_id": station_id,
                "product_type": product_type,
                "period_key": start.isoformat(),
                "entry_count": len(entries),
                "total_sales_volume": str(total_volume),
            },
        )
        return estimate

    # =========================================================================
    # Finalize
    # =========================================================================

    def finalize_period(
        self,
        record_id: UUID | str,
        actual_closing_stock: Any,
        actor_id: UUID,
    ) -> StockPeriod:
        """
        Record the counted closing stock and the derived excess/shortage.

        Preconditions:
            - ``actual_closing_stock`` parses to a finite number (checked
              before any repository call).
            - The record exists and is OPEN.
        Postconditions:
            - ``actual_closing_stock`` and ``excess`` are stored together by
              one repository update.

        Raises:
            InvalidQuantityError: Malformed closing stock.
            StockPeriodNotFoundError: Unknown record.
            StockPeriodAlreadyReconciledError: Record already finalized.
            DependencyFailureError: Repository failure.
        """
        with LogContext.bind(record_id=str(record_id)):
            try:
                closing = parse_quantity(actual_closing_stock, "actual_closing_stock")
                record = self.get_record(record_id)
                if record.is_reconciled:
                    raise StockPeriodAlreadyReconciledError(
                        str(record.id), str(record.actual_closing_stock)
                    )

                row = self._repository.update(
                    MONTHLY_STOCK_TABLE,
                    record.id,
                    {
                        "actual_closing_stock": closing,
                        "excess": excess(record.opening_stock, closing),
                        "updated_by_id": actor_id,
                    },
                )
            except Exception:
                logger.error("stock_period_finalize_failed", exc_info=True)
                self._notify_error("Failed to update stock")
                raise

            period = StockPeriod.from_row(row)
            logger.info(
                "stock_period_finalized",
                extra={
                    "station_id": period.station_id,
                    "product_type": period.product_type,
                    "period_key": period.period_key.isoformat(),
                    "opening_stock": str(period.opening_stock),
                    "actual_closing_stock": str(period.actual_closing_stock),
                    "excess": str(period.excess),
                },
            )
            deliver(
                self._notifier,
                NotificationKind.SUCCESS,
                "Actual closing stock updated successfully",
            )
            return period

    def _notify_error(self, message: str) -> None:
        deliver(self._notifier, NotificationKind.ERROR, message)
