"""
ORM base classes for every station table.

``Base`` fixes the column conventions once so module models only declare
their own fields:

- ``id`` is a uuid4 primary key, stored as a 36-character string so the
  same schema runs on PostgreSQL and SQLite.
- ``Decimal`` annotations map to ``ExactDecimal``: ``Numeric(38, 9)`` on
  PostgreSQL, fixed-point text on SQLite (whose NUMERIC affinity would
  store a float).  Litres, prices and naira amounts are never floats.
- ``datetime`` annotations are timezone-aware.

``TrackedBase`` adds who/when columns.  ``created_at`` is filled by the
database and doubles as the insertion order repositories sort on.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, ClassVar
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, Date, DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """``uuid.UUID`` in Python, ``VARCHAR(36)`` in the database."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class ExactDecimal(TypeDecorator):
    """
    ``Decimal`` stored without loss on every backend.

    PostgreSQL keeps ``NUMERIC(38, 9)``.  SQLite gets ``VARCHAR`` holding the
    plain fixed-point string, read back with ``Decimal(text)``.  Values are
    expected to fit the column already (see ``parse_quantity``); nothing is
    rounded here.  Filters and ordering on these columns would compare text
    on SQLite, so queries never use them as keys.
    """

    impl = Numeric(38, 9)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(48))
        return dialect.type_descriptor(Numeric(38, 9, asdecimal=True))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, Decimal):
            value = Decimal(str(value))
        return format(value, "f") if dialect.name == "sqlite" else value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value if isinstance(value, Decimal) else Decimal(str(value))


class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict] = {
        Decimal: ExactDecimal(),
        datetime: DateTime(timezone=True),
        date: Date,
        UUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)

    def to_row(self) -> dict[str, Any]:
        """Plain dict of column values, the shape repositories hand to services."""
        return {column.key: getattr(self, column.key) for column in self.__table__.columns}


class TrackedBase(Base):
    """
    Adds creation and last-update audit columns.

    ``created_by_id`` is required on every insert; ``updated_by_id`` is set
    by the first update (for stock records, the month-end finalize).
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )
    created_by_id: Mapped[UUID] = mapped_column(nullable=False)
    updated_by_id: Mapped[UUID | None] = mapped_column(nullable=True)
