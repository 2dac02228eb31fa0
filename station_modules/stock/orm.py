"""
Module: station_modules.stock.orm
Responsibility: SQLAlchemy ORM persistence for monthly stock periods.
Architecture position: Modules > Stock > ORM.  Inherits from TrackedBase
    (station_kernel.db.base).  Stations are opaque string identifiers with
    no foreign key.

Invariants enforced:
    - uq_monthly_stock_period: at most one row per
      (station_id, product_type, period_key).
    - Quantities use Decimal (Numeric(38,9)) -- NEVER float.
    - actual_closing_stock and excess are nullable together; the engine
      writes them in one UPDATE.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from station_kernel.db.base import TrackedBase


class MonthlyStockModel(TrackedBase):
    """
    ORM model for one product's stock position in one calendar month.

    Maps to: station_modules.stock.models.StockPeriod (frozen dataclass).
    """

    __tablename__ = "monthly_stock"

    __table_args__ = (
        UniqueConstraint(
            "station_id", "product_type", "period_key",
            name="uq_monthly_stock_period",
        ),
        Index("idx_monthly_stock_station_period", "station_id", "period_key"),
    )

    station_id: Mapped[str] = mapped_column(String(100))
    product_type: Mapped[str] = mapped_column(String(20))

    # First day of the calendar month
    period_key: Mapped[date] = mapped_column()

    opening_stock: Mapped[Decimal] = mapped_column()
    actual_closing_stock: Mapped[Decimal | None] = mapped_column(nullable=True)
    excess: Mapped[Decimal | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return (
            f"<MonthlyStockModel {self.station_id}/{self.product_type} "
            f"{self.period_key} opening={self.opening_stock}>"
        )
