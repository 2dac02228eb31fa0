"""
Module: station_kernel.repository
Responsibility: Table-level record access for every module.  Services read
    and write rows by table name and filter predicate through the abstract
    ``Repository``; ``SqlAlchemyRepository`` is the production binding onto
    the ORM models registered on ``Base``.  Also declares the ``SalesLedger``
    collaborator consumed by the stock reconciliation engine.
Architecture position: Kernel.  May import from db/ and exceptions.
    MUST NOT import from station_modules or outer layers.

Invariants enforced:
    - Flush-only: the repository never commits or rolls back.  The caller
      (``session_scope()``, a test harness) owns the transaction boundary.
      A failed flush leaves the session needing a rollback; nothing the
      caller wrote earlier in the unit of work is discarded until the caller
      rolls back (``session_scope()`` does so before re-raising).
    - One ``update()`` call is one UPDATE statement: every column in
      ``changes`` lands together or not at all.
    - Rows cross the boundary as plain dicts keyed by column name, never as
      ORM instances.

Failure modes:
    - DuplicateRecordError on uniqueness (integrity) violations.
    - RecordNotFoundError when ``update()`` targets an unknown id.
    - UnknownTableError when no model is registered for the table name.
    - DependencyFailureError for any other database error.
"""

import operator
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from station_kernel.db.base import Base
from station_kernel.exceptions import (
    DependencyFailureError,
    DuplicateRecordError,
    RecordNotFoundError,
    UnknownTableError,
)
from station_kernel.logging_config import get_logger

logger = get_logger("repository")

Row = dict[str, Any]

_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "eq": operator.eq,
    "gte": operator.ge,
    "lt": operator.lt,
}


@dataclass(frozen=True)
class Filter:
    """Column predicate: equality or a half-open range bound."""

    column: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in _OPERATORS:
            raise ValueError(f"op must be one of {sorted(_OPERATORS)}, got {self.op!r}")

    @classmethod
    def eq(cls, column: str, value: Any) -> "Filter":
        return cls(column, "eq", value)

    @classmethod
    def gte(cls, column: str, value: Any) -> "Filter":
        return cls(column, "gte", value)

    @classmethod
    def lt(cls, column: str, value: Any) -> "Filter":
        return cls(column, "lt", value)

    def matches(self, row: Mapping[str, Any]) -> bool:
        """Evaluate the predicate against a plain row."""
        return bool(_OPERATORS[self.op](row.get(self.column), self.value))


@dataclass(frozen=True)
class OrderBy:
    column: str
    descending: bool = False


class Repository(ABC):
    """
    Row-level CRUD by table name.

    Contract:
        ``find`` returns zero or more rows matching every filter.  ``insert``
        returns the stored row including generated columns.  ``update``
        applies a partial record to one row and returns the stored row.
        None of them commit or roll back.  After ``insert`` or ``update``
        raises, the unit of work is unusable until the caller rolls it back.
    """

    @abstractmethod
    def find(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        order_by: Sequence[OrderBy] = (),
    ) -> list[Row]:
        ...

    @abstractmethod
    def insert(self, table: str, record: Mapping[str, Any]) -> Row:
        ...

    @abstractmethod
    def update(self, table: str, record_id: UUID, changes: Mapping[str, Any]) -> Row:
        ...

    def find_one(self, table: str, filters: Sequence[Filter]) -> Row | None:
        """First matching row or None."""
        rows = self.find(table, filters)
        return rows[0] if rows else None


class SqlAlchemyRepository(Repository):
    """
    Repository bound to a SQLAlchemy session.

    Table names resolve to ORM classes registered on ``Base`` (see
    ``station_modules._orm_registry``).
    """

    def __init__(self, session: Session):
        self.session = session

    def find(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        order_by: Sequence[OrderBy] = (),
    ) -> list[Row]:
        model = self._model_for(table)
        stmt = select(model)
        for f in filters:
            stmt = stmt.where(_OPERATORS[f.op](self._column(model, f.column), f.value))
        for o in order_by:
            column = self._column(model, o.column)
            stmt = stmt.order_by(column.desc() if o.descending else column.asc())

        try:
            return [obj.to_row() for obj in self.session.execute(stmt).scalars()]
        except SQLAlchemyError as exc:
            raise DependencyFailureError(f"find {table}", str(exc)) from exc

    def insert(self, table: str, record: Mapping[str, Any]) -> Row:
        model = self._model_for(table)
        for name in record:
            self._column(model, name)
        obj = model(**record)
        self.session.add(obj)
        self._flush(table, "insert")
        logger.debug("record_inserted", extra={"table": table, "record_id": str(obj.id)})
        return self._refresh_row(table, obj)

    def update(self, table: str, record_id: UUID, changes: Mapping[str, Any]) -> Row:
        model = self._model_for(table)
        for name in changes:
            self._column(model, name)

        try:
            obj = self.session.get(model, _as_uuid(table, record_id))
        except SQLAlchemyError as exc:
            raise DependencyFailureError(f"update {table}", str(exc)) from exc
        if obj is None:
            raise RecordNotFoundError(table, str(record_id))

        for name, value in changes.items():
            setattr(obj, name, value)
        self._flush(table, "update")
        logger.debug(
            "record_updated",
            extra={"table": table, "record_id": str(obj.id), "columns": sorted(changes)},
        )
        return self._refresh_row(table, obj)

    def _flush(self, table: str, operation: str) -> None:
        try:
            self.session.flush()
        except IntegrityError as exc:
            logger.warning(
                "repository_integrity_conflict",
                extra={"table": table, "operation": operation},
            )
            raise DuplicateRecordError(table, str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            raise DependencyFailureError(f"{operation} {table}", str(exc)) from exc

    def _refresh_row(self, table: str, obj: Base) -> Row:
        try:
            return obj.to_row()
        except SQLAlchemyError as exc:
            raise DependencyFailureError(f"read back {table}", str(exc)) from exc

    @staticmethod
    def _model_for(table: str) -> type[Base]:
        for mapper in Base.registry.mappers:
            model = mapper.class_
            if getattr(model, "__tablename__", None) == table:
                return model
        raise UnknownTableError(table)

    @staticmethod
    def _column(model: type[Base], name: str):
        if name not in model.__table__.columns:
            raise ValueError(f"{model.__tablename__} has no column {name!r}")
        return getattr(model, name)


def _as_uuid(table: str, record_id: UUID | str) -> UUID:
    if isinstance(record_id, UUID):
        return record_id
    try:
        return UUID(str(record_id))
    except ValueError:
        raise RecordNotFoundError(table, str(record_id)) from None


# ---------------------------------------------------------------------------
# Sales ledger collaborator
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SalesEntry:
    """One sales-ledger line; volume may be missing on legacy rows."""

    record_date: date
    sales_volume: Decimal | None


class SalesLedger(ABC):
    """
    Source of recorded sales used for closing-stock estimates.

    Contract:
        Returns every entry for (station, product) with
        ``start_inclusive <= record_date < end_exclusive``.  Implementations
        raise ``DependencyFailureError`` when the backing store fails.
    """

    @abstractmethod
    def find_sales_in_range(
        self,
        station_id: str,
        product_type: str,
        start_inclusive: date,
        end_exclusive: date,
    ) -> list[SalesEntry]:
        ...
