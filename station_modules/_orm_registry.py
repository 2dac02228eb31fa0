"""
Module ORM Registry (``station_modules._orm_registry``).

Responsibility
--------------
Import every ``station_modules.*.orm`` module so that ``Base.metadata``
holds the complete schema before tables are created, and provide
``create_all_tables()``, the single entry point scripts and tests use to
build it.

Architecture position
---------------------
**Modules layer** -- utility.  Imports from sibling ``station_modules``
packages and from ``station_kernel.db.engine`` (modules -> kernel).
MUST NOT be imported by ``station_kernel``.
"""


def import_all_orm_models() -> None:
    """Register every module ORM model.  Idempotent."""
    import station_modules.expense.orm  # noqa: F401
    import station_modules.fuel.orm  # noqa: F401
    import station_modules.stock.orm  # noqa: F401


def create_all_tables() -> None:
    """Import all module ORM models, then create every table."""
    from station_kernel.db.engine import create_tables

    import_all_orm_models()
    create_tables()
