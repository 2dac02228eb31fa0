"""
Pytest fixtures for the station ledger test suite.

Provides:
- Structured logging setup and log capture
- An in-memory SQLite database with the full schema
- Repository, clock, notification and service fixtures

Database tests run against SQLite (``sqlite://`` with a static pool, so one
connection holds the whole database).  Tables are created once per session
and emptied after every test.
"""

import json
import logging
from io import StringIO
from typing import Generator
from uuid import UUID, uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from station_kernel.db.base import Base
from station_kernel.domain.clock import DeterministicClock
from station_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from station_kernel.repository import SqlAlchemyRepository
from station_modules._orm_registry import import_all_orm_models
from station_modules.expense import ExpenseService
from station_modules.fuel import FuelSalesLedger, FuelService
from station_modules.reporting import DailySummaryService
from station_modules.stock import StockReconciliationEngine
from tests.fakes import RecordingNotificationSink

# Test actor ID for all test operations
TEST_ACTOR_ID = uuid4()

TEST_STATION_ID = "S1"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture station_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, stock_engine):
            stock_engine.initialize_period(...)
            logs = captured_logs()
            assert any(r["message"] == "stock_period_initialized" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("station_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture(scope="session")
def db_engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine with every module table, shared by the session."""
    import_all_orm_models()
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


def _delete_all_rows(engine: Engine) -> None:
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    """Session with real commits; every row is deleted at teardown."""
    sess = Session(bind=db_engine, expire_on_commit=False)
    yield sess
    try:
        sess.rollback()
        sess.close()
    finally:
        _delete_all_rows(db_engine)


@pytest.fixture
def repository(session) -> SqlAlchemyRepository:
    return SqlAlchemyRepository(session)


# =============================================================================
# Common fixtures
# =============================================================================


@pytest.fixture
def test_actor_id() -> UUID:
    """Provide a consistent test actor ID."""
    return TEST_ACTOR_ID


@pytest.fixture
def station_id() -> str:
    return TEST_STATION_ID


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing."""
    return DeterministicClock()


@pytest.fixture
def notifications() -> RecordingNotificationSink:
    return RecordingNotificationSink()


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def fuel_service(repository, notifications, deterministic_clock) -> FuelService:
    return FuelService(repository, notifications, clock=deterministic_clock)


@pytest.fixture
def stock_engine(repository, notifications) -> StockReconciliationEngine:
    return StockReconciliationEngine(repository, FuelSalesLedger(repository), notifications)


@pytest.fixture
def expense_service(repository, notifications, deterministic_clock) -> ExpenseService:
    return ExpenseService(repository, notifications, clock=deterministic_clock)


@pytest.fixture
def summary_service(repository, deterministic_clock) -> DailySummaryService:
    return DailySummaryService(repository, clock=deterministic_clock)
