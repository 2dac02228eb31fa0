"""
Fuel Module (``station_modules.fuel``).

Pumps, product prices and daily pump readings.  The readings double as the
station's sales ledger (``FuelSalesLedger``) consumed by the stock module.
"""

from station_modules.fuel.models import FuelRecord, ProductPrice, Pump
from station_modules.fuel.service import (
    FUEL_RECORDS_TABLE,
    PRODUCT_PRICES_TABLE,
    PUMPS_TABLE,
    FuelSalesLedger,
    FuelService,
)

__all__ = [
    "FuelRecord",
    "ProductPrice",
    "Pump",
    "FUEL_RECORDS_TABLE",
    "PRODUCT_PRICES_TABLE",
    "PUMPS_TABLE",
    "FuelSalesLedger",
    "FuelService",
]
