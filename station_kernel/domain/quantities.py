"""
Quantities -- numeric input parsing and the station's one-line formulas.

Responsibility:
    Converts operator-typed amounts into ``Decimal`` and computes the derived
    figures that are persisted alongside the raw readings: pump sales volume,
    sales value, and stock excess/shortage.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Parsed quantities are finite Decimals that the ``Numeric(38, 9)``
      columns store exactly: at most 9 decimal places and magnitude below
      ``10**28``.  Anything finer or larger is rejected, never rounded.
    - Differences of parsed quantities (volume, excess) are computed at
      column precision, so ``excess == opening - closing`` survives a
      round trip through the database.
    - Floats are converted through ``str()`` so ``0.1`` becomes
      ``Decimal("0.1")``.  ``bool`` is rejected even though it is an ``int``.
    - Sales volume is never negative (a meter reset reads as zero sales).
"""

from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation
from typing import Any

from station_kernel.exceptions import InvalidQuantityError

ZERO = Decimal("0")

QUANTITY_SCALE = 9
QUANTUM = Decimal(1).scaleb(-QUANTITY_SCALE)
MAX_MAGNITUDE = Decimal(10) ** 28

# Numeric(38, 9): wide enough for the difference of two parsed quantities
_COLUMN_CONTEXT = Context(prec=38)


def parse_quantity(value: Any, field_name: str, *, blank_as_zero: bool = False) -> Decimal:
    """
    Parse an operator-supplied amount.

    Args:
        value: Decimal, int, float, or numeric string.
        field_name: Name reported in the error.
        blank_as_zero: Treat ``None`` and blank strings as zero instead of
            rejecting them.

    Raises:
        InvalidQuantityError: Non-numeric, NaN or infinite input, more than
            9 decimal places, or magnitude of ``10**28`` or more.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if blank_as_zero:
            return ZERO
        raise InvalidQuantityError(field_name, "" if value is None else value)

    if isinstance(value, bool):
        raise InvalidQuantityError(field_name, str(value))

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip().replace(",", ""))
        except InvalidOperation:
            raise InvalidQuantityError(field_name, value) from None
    else:
        raise InvalidQuantityError(field_name, repr(value))

    if not result.is_finite() or abs(result) >= MAX_MAGNITUDE:
        raise InvalidQuantityError(field_name, str(value))
    if result.quantize(QUANTUM, context=_COLUMN_CONTEXT) != result:
        raise InvalidQuantityError(field_name, str(value))
    return result


def sales_volume(meter_opening: Decimal, meter_closing: Decimal) -> Decimal:
    """Litres dispensed between two meter readings, floored at zero."""
    return max(ZERO, _COLUMN_CONTEXT.subtract(meter_closing, meter_opening))


def total_sales(volume: Decimal, price_per_litre: Decimal) -> Decimal:
    """Sales value of ``volume`` at ``price_per_litre``, rounded half up to 9 places."""
    value = _COLUMN_CONTEXT.multiply(volume, price_per_litre)
    if value.as_tuple().exponent < -QUANTITY_SCALE:
        value = value.quantize(QUANTUM, rounding=ROUND_HALF_UP, context=_COLUMN_CONTEXT)
    return value


def excess(opening_stock: Decimal, actual_closing_stock: Decimal) -> Decimal:
    """Opening minus counted closing: positive is surplus, negative is shortage."""
    return _COLUMN_CONTEXT.subtract(opening_stock, actual_closing_stock)


def as_decimal(value: Any) -> Decimal:
    """Stored numeric column value as Decimal, None counting as zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
