"""Expense Module (``station_modules.expense``)."""

from station_modules.expense.models import Expense
from station_modules.expense.service import EXPENSES_TABLE, ExpenseService

__all__ = ["Expense", "EXPENSES_TABLE", "ExpenseService"]
