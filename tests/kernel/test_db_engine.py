"""
Tests for engine and unit-of-work helpers (``station_kernel.db.engine``).

Each test builds its own in-memory engine through ``init_engine_from_url``
and resets the module-level engine afterwards.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import inspect

from station_kernel.db.engine import (
    get_engine,
    get_session,
    init_engine_from_url,
    is_postgres,
    reset_engine,
    session_scope,
)
from station_kernel.exceptions import DuplicateRecordError
from station_kernel.repository import SqlAlchemyRepository
from station_modules._orm_registry import create_all_tables


@pytest.fixture
def memory_engine():
    eng = init_engine_from_url("sqlite://")
    create_all_tables()
    yield eng
    reset_engine()


def _insert_stock(session, actor_id, product="PMS"):
    return SqlAlchemyRepository(session).insert(
        "monthly_stock",
        {
            "station_id": "S1",
            "product_type": product,
            "period_key": date(2024, 1, 1),
            "opening_stock": Decimal("0"),
            "created_by_id": actor_id,
        },
    )


def test_get_engine_requires_initialization():
    reset_engine()
    with pytest.raises(RuntimeError):
        get_engine()


def test_create_all_tables_registers_every_module_table(memory_engine):
    tables = set(inspect(memory_engine).get_table_names())
    assert {"monthly_stock", "pumps", "product_prices", "fuel_records", "expenses"} <= tables


def test_sqlite_is_not_postgres(memory_engine):
    assert is_postgres() is False


def test_session_scope_commits(memory_engine, test_actor_id):
    with session_scope() as session:
        _insert_stock(session, test_actor_id)

    other = get_session()
    try:
        assert len(SqlAlchemyRepository(other).find("monthly_stock")) == 1
    finally:
        other.close()


def test_session_scope_rolls_back_and_reraises(memory_engine, test_actor_id):
    with pytest.raises(RuntimeError, match="abort"):
        with session_scope() as session:
            _insert_stock(session, test_actor_id)
            raise RuntimeError("abort")

    other = get_session()
    try:
        assert SqlAlchemyRepository(other).find("monthly_stock") == []
    finally:
        other.close()


def test_file_database_persists_across_engines(tmp_path, test_actor_id):
    url = f"sqlite:///{tmp_path / 'station.db'}"
    try:
        init_engine_from_url(url)
        create_all_tables()
        with session_scope() as session:
            _insert_stock(session, test_actor_id, "AGO")

        init_engine_from_url(url)
        with session_scope() as session:
            rows = SqlAlchemyRepository(session).find("monthly_stock")
        assert [r["product_type"] for r in rows] == ["AGO"]
    finally:
        reset_engine()


def test_session_scope_discards_whole_unit_after_conflict(memory_engine, test_actor_id):
    with pytest.raises(DuplicateRecordError):
        with session_scope() as session:
            _insert_stock(session, test_actor_id, "AGO")
            _insert_stock(session, test_actor_id)
            _insert_stock(session, test_actor_id)

    other = get_session()
    try:
        assert SqlAlchemyRepository(other).find("monthly_stock") == []
    finally:
        other.close()
