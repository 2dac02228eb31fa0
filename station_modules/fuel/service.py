"""
Fuel Module Service (``station_modules.fuel.service``).

Responsibility
--------------
Pump and price reference data, daily pump readings, and the sales ledger
those readings form:

- ``FuelService.record_reading`` derives sales volume and value from the
  meter readings and the product's current price, then stores the reading.
- ``FuelSalesLedger`` answers "what was sold in this date range" for the
  stock reconciliation engine.

Invariants
----------
- A reading is only accepted for a pump registered at the same station.
- The current price of a product is its latest ``effective_date`` row; a
  product with no price row prices at zero.
- Blank numeric fields count as zero, malformed ones are rejected before
  any write.

Usage::

    fuel = FuelService(repository)
    pump = fuel.register_pump("S1", 1, "PMS", actor_id)
    fuel.set_product_price("PMS", "617", date(2024, 1, 1), actor_id)
    fuel.record_reading("S1", pump.id, "1000", "1450", actor_id)
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from station_kernel.domain.catalog import DEFAULT_PRODUCT_TYPES, validate_product_type
from station_kernel.domain.clock import Clock, SystemClock
from station_kernel.domain.quantities import ZERO, parse_quantity, sales_volume, total_sales
from station_kernel.exceptions import InvalidQuantityError, PumpNotFoundError
from station_kernel.logging_config import LogContext, get_logger
from station_kernel.notifications import (
    LoggingNotificationSink,
    NotificationKind,
    NotificationSink,
    deliver,
)
from station_kernel.repository import (
    Filter,
    OrderBy,
    Repository,
    SalesEntry,
    SalesLedger,
)
from station_modules.fuel.models import FuelRecord, ProductPrice, Pump

logger = get_logger("modules.fuel.service")

PUMPS_TABLE = "pumps"
PRODUCT_PRICES_TABLE = "product_prices"
FUEL_RECORDS_TABLE = "fuel_records"


class FuelService:
    """
    Pumps, prices and pump readings for a station.

    Contract
    --------
    Every write goes through one ``Repository.insert``.  The service never
    commits; the caller's unit of work owns the transaction.
    """

    def __init__(
        self,
        repository: Repository,
        notifier: NotificationSink | None = None,
        product_types: Sequence[str] = DEFAULT_PRODUCT_TYPES,
        clock: Clock | None = None,
        default_input_mode: str = "manual",
    ):
        self._repository = repository
        self._notifier = notifier or LoggingNotificationSink()
        self._product_types = tuple(product_types)
        self._clock = clock or SystemClock()
        self._default_input_mode = default_input_mode

    # =========================================================================
    # Pumps
    # =========================================================================

    def register_pump(
        self,
        station_id: str,
        pump_number: int,
        product_type: str,
        actor_id: UUID,
        tank_id: str | None = None,
    ) -> Pump:
        """
        Raises:
            InvalidProductTypeError: Unknown product.
            DuplicateRecordError: Pump number already used at the station.
        """
        validate_product_type(product_type, self._product_types)
        row = self._repository.insert(
            PUMPS_TABLE,
            {
                "station_id": station_id,
                "pump_number": int(pump_number),
                "product_type": product_type,
                "tank_id": tank_id,
                "created_by_id": actor_id,
            },
        )
        pump = Pump.from_row(row)
        logger.info(
            "pump_registered",
            extra={
                "station_id": station_id,
                "pump_number": pump.pump_number,
                "product_type": product_type,
            },
        )
        return pump

    def list_pumps(self, station_id: str) -> list[Pump]:
        rows = self._repository.find(
            PUMPS_TABLE,
            [Filter.eq("station_id", station_id)],
            [OrderBy("pump_number")],
        )
        return [Pump.from_row(row) for row in rows]

    def get_pump(self, station_id: str, pump_id: UUID | str | None) -> Pump:
        """
        Raises:
            PumpNotFoundError: No pump selected, unknown pump, or a pump of
                another station.
        """
        if not pump_id:
            raise PumpNotFoundError("", station_id)
        row = self._repository.find_one(
            PUMPS_TABLE,
            [Filter.eq("id", pump_id), Filter.eq("station_id", station_id)],
        )
        if row is None:
            raise PumpNotFoundError(str(pump_id), station_id)
        return Pump.from_row(row)

    # =========================================================================
    # Prices
    # =========================================================================

    def set_product_price(
        self,
        product_type: str,
        price_per_litre: Any,
        effective_date: date,
        actor_id: UUID,
    ) -> ProductPrice:
        """
        Raises:
            InvalidProductTypeError: Unknown product.
            InvalidQuantityError: Malformed or negative price.
        """
        validate_product_type(product_type, self._product_types)
        price = parse_quantity(price_per_litre, "price_per_litre")
        if price < ZERO:
            raise InvalidQuantityError("price_per_litre", str(price_per_litre))

        row = self._repository.insert(
            PRODUCT_PRICES_TABLE,
            {
                "product_type": product_type,
                "price_per_litre": price,
                "effective_date": effective_date,
                "created_by_id": actor_id,
            },
        )
        logger.info(
            "product_price_set",
            extra={
                "product_type": product_type,
                "price_per_litre": str(price),
                "effective_date": effective_date.isoformat(),
            },
        )
        return ProductPrice.from_row(row)

    def latest_prices(self) -> dict[str, Decimal]:
        """Current price per product: the row with the latest effective date."""
        rows = self._repository.find(
            PRODUCT_PRICES_TABLE,
            order_by=[OrderBy("effective_date", descending=True), OrderBy("created_at", descending=True)],
        )
        prices: dict[str, Decimal] = {}
        for row in rows:
            price = ProductPrice.from_row(row)
            prices.setdefault(price.product_type, price.price_per_litre)
        return prices

    def price_for(self, product_type: str) -> Decimal:
        return self.latest_prices().get(product_type, ZERO)

    # =========================================================================
    # Readings
    # =========================================================================

    def record_reading(
        self,
        station_id: str,
        pump_id: UUID | str | None,
        meter_opening: Any,
        meter_closing: Any,
        actor_id: UUID,
        record_date: date | None = None,
        opening_stock: Any = None,
        closing_stock: Any = None,
        input_mode: str | None = None,
    ) -> FuelRecord:
        """
        Store one pump reading with its derived sales figures.

        Postconditions:
            - ``sales_volume = max(0, meter_closing - meter_opening)``.
            - ``total_sales = sales_volume * current price of the pump's product``.

        Raises:
            PumpNotFoundError: Pump missing or registered at another station.
            InvalidQuantityError: Malformed numeric input.
            DependencyFailureError: Repository failure.
        """
        with LogContext.bind(station_id=station_id):
            try:
                readings = {
                    "meter_opening": parse_quantity(meter_opening, "meter_opening", blank_as_zero=True),
                    "meter_closing": parse_quantity(meter_closing, "meter_closing", blank_as_zero=True),
                    "opening_stock": parse_quantity(opening_stock, "opening_stock", blank_as_zero=True),
                    "closing_stock": parse_quantity(closing_stock, "closing_stock", blank_as_zero=True),
                }
                pump = self.get_pump(station_id, pump_id)
                volume = sales_volume(readings["meter_opening"], readings["meter_closing"])
                price = self.price_for(pump.product_type)

                row = self._repository.insert(
                    FUEL_RECORDS_TABLE,
                    {
                        "station_code": station_id,
                        "pump_id": pump.id,
                        "product_type": pump.product_type,
                        "record_date": record_date or self._clock.today(),
                        **readings,
                        "sales_volume": volume,
                        "price_per_litre": price,
                        "total_sales": total_sales(volume, price),
                        "input_mode": input_mode or self._default_input_mode,
                        "created_by_id": actor_id,
                    },
                )
            except Exception:
                logger.error("fuel_record_save_failed", exc_info=True)
                deliver(self._notifier, NotificationKind.ERROR, "Failed to save fuel record")
                raise

            record = FuelRecord.from_row(row)
            logger.info(
                "fuel_record_saved",
                extra={
                    "record_id": str(record.id),
                    "pump_number": pump.pump_number,
                    "product_type": record.product_type,
                    "sales_volume": str(record.sales_volume),
                    "total_sales": str(record.total_sales),
                },
            )
            deliver(self._notifier, NotificationKind.SUCCESS, "Fuel record saved successfully")
            return record

    def list_records(self, station_id: str, record_date: date) -> list[FuelRecord]:
        rows = self._repository.find(
            FUEL_RECORDS_TABLE,
            [Filter.eq("station_code", station_id), Filter.eq("record_date", record_date)],
            [OrderBy("product_type"), OrderBy("created_at")],
        )
        return [FuelRecord.from_row(row) for row in rows]


class FuelSalesLedger(SalesLedger):
    """Sales ledger backed by ``fuel_records``."""

    def __init__(self, repository: Repository):
        self._repository = repository

    def find_sales_in_range(
        self,
        station_id: str,
        product_type: str,
        start_inclusive: date,
        end_exclusive: date,
    ) -> list[SalesEntry]:
        rows = self._repository.find(
            FUEL_RECORDS_TABLE,
            [
                Filter.eq("station_code", station_id),
                Filter.eq("product_type", product_type),
                Filter.gte("record_date", start_inclusive),
                Filter.lt("record_date", end_exclusive),
            ],
        )
        return [
            SalesEntry(record_date=row["record_date"], sales_volume=row.get("sales_volume"))
            for row in rows
        ]
