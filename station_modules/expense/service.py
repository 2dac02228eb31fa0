"""
Expense Module Service (``station_modules.expense.service``).

Records station expenses and reads them back per day for the daily
summary.  A description and a numeric amount are required; the category is
optional but must come from the configured list when given.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from station_kernel.domain.catalog import DEFAULT_EXPENSE_CATEGORIES
from station_kernel.domain.clock import Clock, SystemClock
from station_kernel.domain.quantities import ZERO, parse_quantity
from station_kernel.exceptions import InvalidExpenseError
from station_kernel.logging_config import LogContext, get_logger
from station_kernel.notifications import (
    LoggingNotificationSink,
    NotificationKind,
    NotificationSink,
    deliver,
)
from station_kernel.repository import Filter, OrderBy, Repository
from station_modules.expense.models import Expense

logger = get_logger("modules.expense.service")

EXPENSES_TABLE = "expenses"


class ExpenseService:
    """Expense entry and per-day lookup."""

    def __init__(
        self,
        repository: Repository,
        notifier: NotificationSink | None = None,
        categories: Sequence[str] = DEFAULT_EXPENSE_CATEGORIES,
        clock: Clock | None = None,
    ):
        self._repository = repository
        self._notifier = notifier or LoggingNotificationSink()
        self._categories = tuple(categories)
        self._clock = clock or SystemClock()

    @property
    def categories(self) -> tuple[str, ...]:
        return self._categories

    def record_expense(
        self,
        station_id: str,
        description: str,
        amount: Any,
        actor_id: UUID,
        expense_date: date | None = None,
        category: str | None = None,
    ) -> Expense:
        """
        Raises:
            InvalidExpenseError: Blank description or unknown category.
            InvalidQuantityError: Missing or malformed amount.
            DependencyFailureError: Repository failure.
        """
        with LogContext.bind(station_id=station_id):
            try:
                text = (description or "").strip()
                if not text:
                    raise InvalidExpenseError("description", "description is required")
                value = parse_quantity(amount, "amount")
                if category and category not in self._categories:
                    raise InvalidExpenseError(
                        "category",
                        f"{category!r} is not one of {', '.join(self._categories)}",
                    )

                row = self._repository.insert(
                    EXPENSES_TABLE,
                    {
                        "station_id": station_id,
                        "expense_date": expense_date or self._clock.today(),
                        "description": text,
                        "amount": value,
                        "category": category or None,
                        "created_by_id": actor_id,
                    },
                )
            except Exception:
                logger.error("expense_save_failed", exc_info=True)
                deliver(self._notifier, NotificationKind.ERROR, "Failed to save expense")
                raise

            expense = Expense.from_row(row)
            logger.info(
                "expense_recorded",
                extra={
                    "record_id": str(expense.id),
                    "amount": str(expense.amount),
                    "category": expense.category,
                },
            )
            deliver(self._notifier, NotificationKind.SUCCESS, "Expense recorded successfully")
            return expense

    def list_expenses(self, station_id: str, expense_date: date) -> list[Expense]:
        rows = self._repository.find(
            EXPENSES_TABLE,
            [Filter.eq("station_id", station_id), Filter.eq("expense_date", expense_date)],
            [OrderBy("created_at")],
        )
        return [Expense.from_row(row) for row in rows]

    def total_for_day(self, station_id: str, expense_date: date) -> Decimal:
        return sum(
            (e.amount for e in self.list_expenses(station_id, expense_date)),
            ZERO,
        )
