"""
Tests for SqlAlchemyRepository (``station_kernel.repository``).

Validates:
- Rows cross the boundary as plain dicts including generated columns
- Filter operators (eq, gte, lt) and ordering
- Uniqueness violations surface as DuplicateRecordError
- Unknown tables, columns and ids are typed errors
- Flush-only: a rollback discards everything the repository wrote
"""

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from station_kernel.exceptions import (
    ConflictError,
    DependencyFailureError,
    DuplicateRecordError,
    RecordNotFoundError,
    UnknownTableError,
)
from station_kernel.repository import Filter, OrderBy


def _stock_row(actor_id, product="PMS", period=date(2024, 1, 1), opening="1000"):
    return {
        "station_id": "S1",
        "product_type": product,
        "period_key": period,
        "opening_stock": Decimal(opening),
        "created_by_id": actor_id,
    }


class TestInsertAndFind:
    def test_insert_returns_generated_columns(self, repository, test_actor_id):
        row = repository.insert("monthly_stock", _stock_row(test_actor_id))

        assert isinstance(row["id"], UUID)
        assert row["created_at"] is not None
        assert row["actual_closing_stock"] is None
        assert row["excess"] is None
        assert row["opening_stock"] == Decimal("1000")
        assert row["period_key"] == date(2024, 1, 1)

    def test_find_by_equality(self, repository, test_actor_id):
        repository.insert("monthly_stock", _stock_row(test_actor_id, "PMS"))
        repository.insert("monthly_stock", _stock_row(test_actor_id, "AGO"))

        rows = repository.find("monthly_stock", [Filter.eq("product_type", "AGO")])

        assert [r["product_type"] for r in rows] == ["AGO"]

    def test_find_by_id_string(self, repository, test_actor_id):
        row = repository.insert("monthly_stock", _stock_row(test_actor_id))

        found = repository.find_one("monthly_stock", [Filter.eq("id", str(row["id"]))])

        assert found is not None
        assert found["id"] == row["id"]

    def test_find_one_none_when_empty(self, repository):
        assert repository.find_one("monthly_stock", [Filter.eq("station_id", "nowhere")]) is None

    def test_half_open_date_range(self, repository, test_actor_id):
        for period in (date(2023, 12, 1), date(2024, 1, 1), date(2024, 2, 1)):
            repository.insert("monthly_stock", _stock_row(test_actor_id, period=period))

        rows = repository.find(
            "monthly_stock",
            [Filter.gte("period_key", date(2024, 1, 1)), Filter.lt("period_key", date(2024, 2, 1))],
        )

        assert [r["period_key"] for r in rows] == [date(2024, 1, 1)]

    def test_order_by_descending(self, repository, test_actor_id):
        for product in ("AGO", "LPG", "PMS"):
            repository.insert("monthly_stock", _stock_row(test_actor_id, product))

        rows = repository.find("monthly_stock", order_by=[OrderBy("product_type", descending=True)])

        assert [r["product_type"] for r in rows] == ["PMS", "LPG", "AGO"]


class TestUpdate:
    def test_update_writes_all_columns_together(self, repository, test_actor_id):
        row = repository.insert("monthly_stock", _stock_row(test_actor_id))

        updated = repository.update(
            "monthly_stock",
            row["id"],
            {
                "actual_closing_stock": Decimal("150"),
                "excess": Decimal("850"),
                "updated_by_id": test_actor_id,
            },
        )

        assert updated["actual_closing_stock"] == Decimal("150")
        assert updated["excess"] == Decimal("850")
        assert updated["updated_by_id"] == test_actor_id
        assert updated["opening_stock"] == Decimal("1000")

    def test_update_unknown_id(self, repository):
        with pytest.raises(RecordNotFoundError) as exc_info:
            repository.update("monthly_stock", uuid4(), {"excess": Decimal("1")})
        assert exc_info.value.table == "monthly_stock"

    def test_update_malformed_id(self, repository):
        with pytest.raises(RecordNotFoundError):
            repository.update("monthly_stock", "not-a-uuid", {"excess": Decimal("1")})


class TestErrors:
    def test_duplicate_key(self, repository, session, test_actor_id):
        repository.insert("monthly_stock", _stock_row(test_actor_id))
        session.commit()

        with pytest.raises(DuplicateRecordError) as exc_info:
            repository.insert("monthly_stock", _stock_row(test_actor_id, opening="5"))

        assert isinstance(exc_info.value, ConflictError)
        assert exc_info.value.table == "monthly_stock"

    def test_conflict_leaves_rollback_to_caller(self, repository, session, test_actor_id):
        repository.insert("monthly_stock", _stock_row(test_actor_id))
        session.commit()
        pending = repository.insert("monthly_stock", _stock_row(test_actor_id, "LPG"))

        with pytest.raises(DuplicateRecordError):
            repository.insert("monthly_stock", _stock_row(test_actor_id))

        # the failed unit of work waits for the caller's decision
        assert session.in_transaction()

        session.rollback()
        rows = repository.find("monthly_stock")
        assert [r["product_type"] for r in rows] == ["PMS"]
        assert pending["id"] not in {r["id"] for r in rows}

    def test_unknown_table(self, repository):
        with pytest.raises(UnknownTableError) as exc_info:
            repository.find("tanks")
        assert isinstance(exc_info.value, DependencyFailureError)

    def test_unknown_column_in_filter(self, repository):
        with pytest.raises(ValueError, match="no column"):
            repository.find("monthly_stock", [Filter.eq("colour", "red")])

    def test_unknown_column_in_insert(self, repository, test_actor_id):
        with pytest.raises(ValueError):
            repository.insert("monthly_stock", {**_stock_row(test_actor_id), "colour": "red"})

    def test_invalid_filter_operator(self):
        with pytest.raises(ValueError):
            Filter("period_key", "between", None)


def test_repository_never_commits(repository, test_actor_id):
    repository.insert("monthly_stock", _stock_row(test_actor_id))
    assert len(repository.find("monthly_stock")) == 1

    repository.session.rollback()

    assert repository.find("monthly_stock") == []


def test_filter_matches_plain_rows():
    row = {"record_date": date(2024, 2, 10), "product_type": "PMS"}
    assert Filter.gte("record_date", date(2024, 2, 1)).matches(row)
    assert Filter.lt("record_date", date(2024, 3, 1)).matches(row)
    assert not Filter.eq("product_type", "AGO").matches(row)
