"""Expense Domain Models (``station_modules.expense.models``)."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID

from station_kernel.domain.quantities import as_decimal


@dataclass(frozen=True)
class Expense:
    """An expense booked against a station on a day."""
    id: UUID
    station_id: str
    expense_date: date
    description: str
    amount: Decimal
    category: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Expense":
        return cls(
            id=row["id"],
            station_id=row["station_id"],
            expense_date=row["expense_date"],
            description=row["description"],
            amount=as_decimal(row["amount"]),
            category=row.get("category"),
        )
