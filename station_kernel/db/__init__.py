"""Database layer: ORM base classes, engine and unit of work."""

from station_kernel.db.base import Base, ExactDecimal, TrackedBase, UUIDString
from station_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)

__all__ = [
    "Base",
    "TrackedBase",
    "UUIDString",
    "ExactDecimal",
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "reset_engine",
]
