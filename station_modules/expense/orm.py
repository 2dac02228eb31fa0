"""
Module: station_modules.expense.orm
Responsibility: SQLAlchemy ORM persistence for station expenses.
Architecture position: Modules > Expense > ORM.  Inherits from TrackedBase.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from station_kernel.db.base import TrackedBase


class ExpenseModel(TrackedBase):
    """ORM model for one expense paid out of the station's takings."""

    __tablename__ = "expenses"

    __table_args__ = (
        Index("idx_expense_station_date", "station_id", "expense_date"),
    )

    station_id: Mapped[str] = mapped_column(String(100))
    expense_date: Mapped[date] = mapped_column()
    description: Mapped[str] = mapped_column(Text)
    amount: Mapped[Decimal] = mapped_column()
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<ExpenseModel {self.station_id} {self.expense_date} {self.amount}>"
