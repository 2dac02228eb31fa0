"""Reporting Module (``station_modules.reporting``): daily summary."""

from station_modules.reporting.models import ChartSlice, DailySummary, ProductSales
from station_modules.reporting.service import DailySummaryService

__all__ = ["ChartSlice", "DailySummary", "DailySummaryService", "ProductSales"]
