"""
Module: station_modules.fuel.orm
Responsibility: SQLAlchemy ORM persistence for pumps, product prices and
    daily pump readings (the station's sales ledger).
Architecture position: Modules > Fuel > ORM.  Inherits from TrackedBase
    (station_kernel.db.base).

Invariants enforced:
    - uq_pump_number: pump numbers are unique within a station.
    - All volumes, prices and sales values use Decimal (Numeric(38,9)).
    - fuel_records.pump_id references pumps by UUID without a foreign key,
      so readings survive pump renumbering.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from station_kernel.db.base import TrackedBase


class PumpModel(TrackedBase):
    """ORM model for a dispenser pump bound to one product."""

    __tablename__ = "pumps"

    __table_args__ = (
        UniqueConstraint("station_id", "pump_number", name="uq_pump_number"),
    )

    station_id: Mapped[str] = mapped_column(String(100))
    pump_number: Mapped[int] = mapped_column()
    product_type: Mapped[str] = mapped_column(String(20))
    tank_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<PumpModel {self.station_id}#{self.pump_number} {self.product_type}>"


class ProductPriceModel(TrackedBase):
    """ORM model for a price-per-litre effective from a date."""

    __tablename__ = "product_prices"

    __table_args__ = (
        Index("idx_product_price_effective", "product_type", "effective_date"),
    )

    product_type: Mapped[str] = mapped_column(String(20))
    price_per_litre: Mapped[Decimal] = mapped_column()
    effective_date: Mapped[date] = mapped_column()

    def __repr__(self) -> str:
        return f"<ProductPriceModel {self.product_type} {self.price_per_litre} from {self.effective_date}>"


class FuelRecordModel(TrackedBase):
    """
    ORM model for one pump reading on one day.

    sales_volume is nullable: rows imported from older sheets may carry
    no volume, which every reader treats as zero.
    """

    __tablename__ = "fuel_records"

    __table_args__ = (
        Index("idx_fuel_record_station_date", "station_code", "record_date"),
        Index("idx_fuel_record_product", "station_code", "product_type", "record_date"),
    )

    station_code: Mapped[str] = mapped_column(String(100))
    pump_id: Mapped[UUID] = mapped_column()
    product_type: Mapped[str] = mapped_column(String(20))
    record_date: Mapped[date] = mapped_column()

    opening_stock: Mapped[Decimal] = mapped_column()
    closing_stock: Mapped[Decimal] = mapped_column()
    meter_opening: Mapped[Decimal] = mapped_column()
    meter_closing: Mapped[Decimal] = mapped_column()

    sales_volume: Mapped[Decimal | None] = mapped_column(nullable=True)
    price_per_litre: Mapped[Decimal] = mapped_column()
    total_sales: Mapped[Decimal] = mapped_column()

    input_mode: Mapped[str] = mapped_column(String(20), default="manual")

    def __repr__(self) -> str:
        return (
            f"<FuelRecordModel {self.station_code} {self.record_date} "
            f"{self.product_type} vol={self.sales_volume}>"
        )
