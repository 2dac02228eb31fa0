#!/usr/bin/env python3
"""
Station ledger operator CLI.

Drives the station services against the configured database: schema setup,
monthly stock reconciliation, pump and price reference data, pump readings,
expenses and the daily summary.  Every subcommand runs in one unit of work
(``session_scope``); a failed command rolls back and exits with status 1.

Usage:
    python3 scripts/station_cli.py [--config PATH] [--database-url URL] <command> [options]

Examples:
    # Create the schema
    python3 scripts/station_cli.py init-db

    # Open February for every product, carrying forward January's counts
    python3 scripts/station_cli.py init-stock --station S1 --period 2024-02

    # Project and then record the counted closing stock
    python3 scripts/station_cli.py estimate-stock --station S1 --product PMS --period 2024-02
    python3 scripts/station_cli.py finalize-stock --record-id <uuid> --closing 90

    # Pumps, prices and a day's reading
    python3 scripts/station_cli.py add-pump --station S1 --number 1 --product PMS
    python3 scripts/station_cli.py set-price --product PMS --price 617 --effective-date 2024-01-01
    python3 scripts/station_cli.py record-fuel --station S1 --pump-id <uuid> \\
        --meter-opening 1000 --meter-closing 1450

    # Expenses and the end-of-day view
    python3 scripts/station_cli.py add-expense --station S1 --description "Generator diesel" --amount 15000
    python3 scripts/station_cli.py summary --station S1 --date 2024-02-10
"""

from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path
from uuid import UUID

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from station_config import StationConfig, get_active_config  # noqa: E402
from station_kernel.db.engine import init_engine_from_url, session_scope  # noqa: E402
from station_kernel.domain.clock import SystemClock  # noqa: E402
from station_kernel.domain.periods import parse_period_key, period_label  # noqa: E402
from station_kernel.exceptions import StationKernelError  # noqa: E402
from station_kernel.logging_config import LogContext, configure_logging, get_logger, set_log_level  # noqa: E402
from station_kernel.notifications import ConsoleNotificationSink  # noqa: E402
from station_kernel.repository import SqlAlchemyRepository  # noqa: E402
from station_modules._orm_registry import create_all_tables  # noqa: E402
from station_modules.expense import ExpenseService  # noqa: E402
from station_modules.fuel import FuelSalesLedger, FuelService  # noqa: E402
from station_modules.reporting import DailySummaryService  # noqa: E402
from station_modules.stock import StockReconciliationEngine  # noqa: E402

logger = get_logger("scripts.station_cli")

# Recorded as created_by_id / updated_by_id when no operator is given.
CLI_ACTOR_ID = UUID("00000000-0000-0000-0000-00000000c11a")


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="station_cli",
        description="Fuel station back office: stock reconciliation, pump readings, expenses.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", type=Path, default=None, help="Configuration YAML file.")
    parser.add_argument(
        "--database-url",
        default=None,
        help="Database URL (overrides configuration and DATABASE_URL).",
    )
    parser.add_argument(
        "--actor-id",
        type=UUID,
        default=CLI_ACTOR_ID,
        help="Operator UUID recorded on every write.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create all tables.")

    p = sub.add_parser("init-stock", help="Open a month's stock records.")
    p.add_argument("--station", required=True)
    p.add_argument("--period", required=True, help="Month as YYYY-MM.")
    p.add_argument("--product", default=None, help="One product; default: every configured product.")

    p = sub.add_parser("finalize-stock", help="Record the counted closing stock.")
    p.add_argument("--record-id", required=True)
    p.add_argument("--closing", required=True, help="Physically counted closing stock.")

    p = sub.add_parser("estimate-stock", help="Project closing stock from recorded sales.")
    p.add_argument("--station", required=True)
    p.add_argument("--product", required=True)
    p.add_argument("--period", required=True, help="Month as YYYY-MM.")

    p = sub.add_parser("list-stock", help="Show a month's stock records.")
    p.add_argument("--station", required=True)
    p.add_argument("--period", required=True, help="Month as YYYY-MM.")

    p = sub.add_parser("add-pump", help="Register a pump.")
    p.add_argument("--station", required=True)
    p.add_argument("--number", required=True, type=int)
    p.add_argument("--product", required=True)
    p.add_argument("--tank", default=None)

    p = sub.add_parser("set-price", help="Set a product's price per litre.")
    p.add_argument("--product", required=True)
    p.add_argument("--price", required=True)
    p.add_argument("--effective-date", type=_iso_date, default=None, help="Default: today.")

    p = sub.add_parser("record-fuel", help="Record a pump reading.")
    p.add_argument("--station", required=True)
    p.add_argument("--pump-id", required=True)
    p.add_argument("--meter-opening", default="")
    p.add_argument("--meter-closing", default="")
    p.add_argument("--opening-stock", default="")
    p.add_argument("--closing-stock", default="")
    p.add_argument("--date", type=_iso_date, default=None, help="Default: today.")
    p.add_argument("--input-mode", default=None, choices=["manual", "automatic"])

    p = sub.add_parser("add-expense", help="Record an expense.")
    p.add_argument("--station", required=True)
    p.add_argument("--description", required=True)
    p.add_argument("--amount", required=True)
    p.add_argument("--category", default=None)
    p.add_argument("--date", type=_iso_date, default=None, help="Default: today.")

    p = sub.add_parser("summary", help="Daily sales and expense summary.")
    p.add_argument("--station", required=True)
    p.add_argument("--date", type=_iso_date, default=None, help="Default: today.")

    return parser


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _stock_engine(config: StationConfig, repository, sink) -> StockReconciliationEngine:
    return StockReconciliationEngine(
        repository,
        FuelSalesLedger(repository),
        notifier=sink,
        product_types=config.product_types,
    )


def _cmd_init_stock(args, config, repository, sink) -> None:
    engine = _stock_engine(config, repository, sink)
    period_key = parse_period_key(args.period)
    if args.product:
        periods = [engine.initialize_period(args.station, args.product, period_key, args.actor_id)]
    else:
        periods = engine.initialize_all_products(args.station, period_key, args.actor_id)
        if not periods:
            print(f"  All products already initialized for {period_label(period_key)}.")
    for period in periods:
        print(f"  {period.product_type}: opening {period.opening_stock} {config.volume_unit}  id={period.id}")


def _cmd_finalize_stock(args, config, repository, sink) -> None:
    engine = _stock_engine(config, repository, sink)
    period = engine.finalize_period(args.record_id, args.closing, args.actor_id)
    print(
        f"  {period.product_type} {period_label(period.period_key)}: "
        f"opening {period.opening_stock}, closing {period.actual_closing_stock}, "
        f"excess {period.excess} {config.volume_unit}"
    )


def _cmd_estimate_stock(args, config, repository, sink) -> None:
    engine = _stock_engine(config, repository, sink)
    estimate = engine.estimate_closing_stock(args.station, args.product, parse_period_key(args.period))
    print(f"  Total sales volume:      {estimate.total_sales_volume} {config.volume_unit}")
    print(f"  Estimated closing stock: {estimate.estimated_closing_stock} {config.volume_unit}")


def _cmd_list_stock(args, config, repository, sink) -> None:
    engine = _stock_engine(config, repository, sink)
    period_key = parse_period_key(args.period)
    periods = engine.list_period(args.station, period_key)
    print(f"  Stock for {args.station}, {period_label(period_key)}")
    if not periods:
        print("  (no records)")
        return
    print(f"  {'Product':<8} {'Opening':>14} {'Closing':>14} {'Excess':>14}  {'Status':<10} Id")
    for p in periods:
        closing = "-" if p.actual_closing_stock is None else p.actual_closing_stock
        excess = "-" if p.excess is None else p.excess
        print(
            f"  {p.product_type:<8} {p.opening_stock!s:>14} {closing!s:>14} {excess!s:>14}  "
            f"{p.status.value:<10} {p.id}"
        )


def _cmd_add_pump(args, config, repository, sink) -> None:
    fuel = FuelService(repository, sink, product_types=config.product_types)
    pump = fuel.register_pump(args.station, args.number, args.product, args.actor_id, tank_id=args.tank)
    print(f"  Pump {pump.pump_number} ({pump.product_type}) registered  id={pump.id}")


def _cmd_set_price(args, config, repository, sink) -> None:
    fuel = FuelService(repository, sink, product_types=config.product_types)
    effective = args.effective_date or SystemClock().today()
    price = fuel.set_product_price(args.product, args.price, effective, args.actor_id)
    print(
        f"  {price.product_type}: {config.currency_symbol}{price.price_per_litre}"
        f"/{config.volume_unit} from {price.effective_date.isoformat()}"
    )


def _cmd_record_fuel(args, config, repository, sink) -> None:
    fuel = FuelService(
        repository,
        sink,
        product_types=config.product_types,
        default_input_mode=config.default_input_mode,
    )
    record = fuel.record_reading(
        args.station,
        args.pump_id,
        args.meter_opening,
        args.meter_closing,
        args.actor_id,
        record_date=args.date,
        opening_stock=args.opening_stock,
        closing_stock=args.closing_stock,
        input_mode=args.input_mode,
    )
    print(
        f"  {record.product_type}: {record.sales_volume} {config.volume_unit} "
        f"x {config.currency_symbol}{record.price_per_litre} = "
        f"{config.currency_symbol}{record.total_sales}"
    )


def _cmd_add_expense(args, config, repository, sink) -> None:
    expenses = ExpenseService(repository, sink, categories=config.expense_categories)
    expense = expenses.record_expense(
        args.station,
        args.description,
        args.amount,
        args.actor_id,
        expense_date=args.date,
        category=args.category,
    )
    print(f"  {expense.expense_date.isoformat()} {expense.description}: {config.currency_symbol}{expense.amount}")


def _cmd_summary(args, config, repository, sink) -> None:
    service = DailySummaryService(repository, chart_colors=config.chart_colors)
    summary = service.daily_summary(args.station, args.date)
    cur, unit = config.currency_symbol, config.volume_unit
    print(f"  Daily summary for {summary.station_id}, {summary.summary_date.isoformat()}")
    for sales in summary.sales_by_product:
        print(f"    {sales.product_type:<8} {sales.sales_volume} {unit}  {cur}{sales.total_sales}")
    print(f"  Total volume:   {summary.total_volume} {unit}")
    print(f"  Total sales:    {cur}{summary.total_sales}")
    print(f"  Total expenses: {cur}{summary.total_expenses}")
    print(f"  Net sales:      {cur}{summary.net_sales}")
    for chart_slice in summary.chart_slices:
        print(f"    {chart_slice.name:<8} {chart_slice.percent:.1f}%  {chart_slice.color}")


_COMMANDS = {
    "init-stock": _cmd_init_stock,
    "finalize-stock": _cmd_finalize_stock,
    "estimate-stock": _cmd_estimate_stock,
    "list-stock": _cmd_list_stock,
    "add-pump": _cmd_add_pump,
    "set-price": _cmd_set_price,
    "record-fuel": _cmd_record_fuel,
    "add-expense": _cmd_add_expense,
    "summary": _cmd_summary,
}


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    # INFO until the configured level is known, so the config trace is kept
    configure_logging()
    try:
        config = get_active_config(args.config)
    except (OSError, KeyError, ValueError) as exc:
        logger.error("config_load_failed", extra={"config_path": args.config}, exc_info=True)
        print(f"  ERROR: Failed to load config: {exc}", file=sys.stderr)
        return 1
    set_log_level(config.log_level_value)

    database_url = args.database_url or config.database_url

    try:
        init_engine_from_url(database_url)
    except Exception as exc:
        print(f"  ERROR: Database init failed: {exc}", file=sys.stderr)
        return 1

    if args.command == "init-db":
        create_all_tables()
        print("  Tables created.")
        return 0

    sink = ConsoleNotificationSink()
    with LogContext.bind(actor_id=str(args.actor_id)):
        try:
            with session_scope() as session:
                _COMMANDS[args.command](args, config, SqlAlchemyRepository(session), sink)
        except StationKernelError as exc:
            logger.warning("cli_command_failed", extra={"command": args.command, "error_code": exc.code})
            print(f"  ERROR: {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
