"""
Catalog -- closed code sets shared by every module.

Defaults for the products a station sells, the expense categories it books,
and the palette used for chart slices.  Deployments override all three
through ``station_config``.
"""

from collections.abc import Sequence

from station_kernel.exceptions import InvalidProductTypeError

DEFAULT_PRODUCT_TYPES: tuple[str, ...] = ("PMS", "AGO", "LPG")

DEFAULT_EXPENSE_CATEGORIES: tuple[str, ...] = (
    "Maintenance",
    "Utilities",
    "Staff Wages",
    "Fuel Purchase",
    "Office Supplies",
    "Insurance",
    "Transportation",
    "Security",
    "Other",
)

DEFAULT_CHART_COLORS: tuple[str, ...] = ("#0088FE", "#00C49F", "#FFBB28", "#FF8042")


def validate_product_type(product_type: str, allowed: Sequence[str]) -> str:
    """
    Return ``product_type`` if it is in ``allowed``.

    Raises:
        InvalidProductTypeError: If the code is not in the closed set.
    """
    if product_type not in allowed:
        raise InvalidProductTypeError(product_type, tuple(allowed))
    return product_type
