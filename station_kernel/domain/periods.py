"""
Periods -- calendar-month period keys.

Responsibility:
    A stock period is identified by the first day of its calendar month.
    This module owns all month arithmetic: normalizing a date to its period
    key, stepping whole months forward and backward, and producing the
    half-open date range a period covers.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Every value returned as a period key has ``day == 1``.
    - Month steps never overflow the day of month: the input is normalized
      to day 1 before stepping, so Jan 31 minus one month is Dec 1.
    - ``month_range`` is half-open: start inclusive, next month's start
      exclusive.
"""

from datetime import date, datetime

from station_kernel.exceptions import InvalidPeriodKeyError


def start_of_month(value: date) -> date:
    """Period key containing ``value``."""
    if isinstance(value, datetime):
        value = value.date()
    return value.replace(day=1)


def add_months(value: date, months: int) -> date:
    """
    Step ``months`` whole months from the period containing ``value``.

    >>> add_months(date(2024, 1, 31), -1)
    datetime.date(2023, 12, 1)
    >>> add_months(date(2024, 11, 1), 3)
    datetime.date(2025, 2, 1)
    """
    key = start_of_month(value)
    month_index = key.year * 12 + (key.month - 1) + months
    year, month_zero = divmod(month_index, 12)
    return date(year, month_zero + 1, 1)


def previous_period(value: date) -> date:
    """Period key one month before the period containing ``value``."""
    return add_months(value, -1)


def next_period(value: date) -> date:
    """Period key one month after the period containing ``value``."""
    return add_months(value, 1)


def month_range(value: date) -> tuple[date, date]:
    """(start inclusive, end exclusive) of the period containing ``value``."""
    start = start_of_month(value)
    return start, next_period(start)


def parse_period_key(value: date | str) -> date:
    """
    Parse a period key from a date or an ISO ``YYYY-MM`` / ``YYYY-MM-DD`` string.

    Raises:
        InvalidPeriodKeyError: If the value is not a recognizable month.
    """
    if isinstance(value, date):
        return start_of_month(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 7:
                return date.fromisoformat(f"{text}-01")
            return start_of_month(date.fromisoformat(text))
        except ValueError:
            raise InvalidPeriodKeyError(value) from None
    raise InvalidPeriodKeyError(repr(value))


def period_label(value: date) -> str:
    """Human-readable month label, e.g. ``January 2024``."""
    return start_of_month(value).strftime("%B %Y")
