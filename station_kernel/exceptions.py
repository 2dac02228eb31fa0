"""
Typed Exception Hierarchy for the Station Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (the CLI, a dashboard, a scheduled job) must react differently to a
missing record, a duplicate month, a malformed amount, or a database outage.
Matching on message text is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example - RIGHT way:
    try:
        engine.initialize_period("S1", "PMS", date(2024, 2, 1), actor_id)
    except StockPeriodAlreadyExistsError as e:
        show_error(f"{e.product_type} already initialized for {e.period_key}")

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from StationKernelError:

    StationKernelError (base)
    |
    +-- NotFoundError
    |   +-- RecordNotFoundError
    |   +-- StockPeriodNotFoundError
    |   +-- PumpNotFoundError
    |
    +-- ConflictError
    |   +-- DuplicateRecordError
    |   +-- StockPeriodAlreadyExistsError
    |   +-- StockPeriodAlreadyReconciledError
    |
    +-- ValidationError
    |   +-- InvalidQuantityError
    |   +-- InvalidProductTypeError
    |   +-- InvalidExpenseError
    |   +-- InvalidPeriodKeyError
    |
    +-- DependencyFailureError
        +-- UnknownTableError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                             | When Raised
-------------|----------------------------------|-----------------------------------
Not found    | RECORD_NOT_FOUND                 | Repository update on unknown id
             | STOCK_PERIOD_NOT_FOUND           | Finalize on unknown stock record
             | PUMP_NOT_FOUND                   | Reading for unknown/foreign pump
-------------|----------------------------------|-----------------------------------
Conflict     | DUPLICATE_RECORD                 | Uniqueness violation on insert
             | STOCK_PERIOD_ALREADY_EXISTS      | Second initialize for same month
             | STOCK_PERIOD_ALREADY_RECONCILED  | Second finalize for same record
-------------|----------------------------------|-----------------------------------
Validation   | INVALID_QUANTITY                 | Non-numeric / NaN / infinite amount
             | INVALID_PRODUCT_TYPE             | Product outside configured set
             | INVALID_EXPENSE                  | Blank description, bad category
             | INVALID_PERIOD_KEY               | Unparseable month identifier
-------------|----------------------------------|-----------------------------------
Dependency   | DEPENDENCY_FAILURE               | Database / ledger call failed
             | UNKNOWN_TABLE                    | Repository asked for unknown table

===============================================================================
HANDLING PATTERNS
===============================================================================

1. Validation errors are raised BEFORE any write is attempted.
2. Conflicts are reported to the caller, never silently swallowed.
3. DependencyFailureError propagates from authoritative writes. Only the
   advisory closing-stock estimate downgrades it to a zero result.
"""


class StationKernelError(Exception):
    """
    Base exception for all station kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "STATION_KERNEL_ERROR"


# Not-found exceptions


class NotFoundError(StationKernelError):
    """Base exception for references to records that do not exist."""

    code: str = "NOT_FOUND"


class RecordNotFoundError(NotFoundError):
    """Row with given id does not exist in the given table."""

    code: str = "RECORD_NOT_FOUND"

    def __init__(self, table: str, record_id: str):
        self.table = table
        self.record_id = record_id
        super().__init__(f"Record not found in {table}: {record_id}")


class StockPeriodNotFoundError(NotFoundError):
    """Monthly stock record with given id does not exist."""

    code: str = "STOCK_PERIOD_NOT_FOUND"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Stock period record not found: {record_id}")


class PumpNotFoundError(NotFoundError):
    """Pump does not exist or belongs to a different station."""

    code: str = "PUMP_NOT_FOUND"

    def __init__(self, pump_id: str, station_id: str):
        self.pump_id = pump_id
        self.station_id = station_id
        super().__init__(f"Pump {pump_id} not found for station {station_id}")


# Conflict exceptions


class ConflictError(StationKernelError):
    """Base exception for writes that collide with existing state."""

    code: str = "CONFLICT"


class DuplicateRecordError(ConflictError):
    """Insert rejected by a uniqueness constraint."""

    code: str = "DUPLICATE_RECORD"

    def __init__(self, table: str, detail: str):
        self.table = table
        self.detail = detail
        super().__init__(f"Duplicate record in {table}: {detail}")


class StockPeriodAlreadyExistsError(ConflictError):
    """A stock record already exists for (station, product, period)."""

    code: str = "STOCK_PERIOD_ALREADY_EXISTS"

    def __init__(self, station_id: str, product_type: str, period_key: str):
        self.station_id = station_id
        self.product_type = product_type
        self.period_key = period_key
        super().__init__(
            f"{product_type} stock for station {station_id} is already "
            f"initialized for period {period_key}"
        )


class StockPeriodAlreadyReconciledError(ConflictError):
    """
    Stock record already has an actual closing stock.

    A reconciled record never returns to the open state, so a second
    finalize is rejected rather than overwriting the first count.
    """

    code: str = "STOCK_PERIOD_ALREADY_RECONCILED"

    def __init__(self, record_id: str, actual_closing_stock: str):
        self.record_id = record_id
        self.actual_closing_stock = actual_closing_stock
        super().__init__(
            f"Stock period {record_id} is already reconciled "
            f"(actual closing stock {actual_closing_stock})"
        )


# Validation exceptions


class ValidationError(StationKernelError):
    """Base exception for malformed caller input."""

    code: str = "VALIDATION_ERROR"


class InvalidQuantityError(ValidationError):
    """Amount or volume is not a finite number."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, field_name: str, value: str):
        self.field_name = field_name
        self.value = value
        super().__init__(f"Invalid value for {field_name}: {value!r}")


class InvalidProductTypeError(ValidationError):
    """Product code is not one of the configured products."""

    code: str = "INVALID_PRODUCT_TYPE"

    def __init__(self, product_type: str, allowed: tuple[str, ...]):
        self.product_type = product_type
        self.allowed = allowed
        super().__init__(
            f"Unknown product type {product_type!r}; expected one of {', '.join(allowed)}"
        )


class InvalidExpenseError(ValidationError):
    """Expense entry is missing a description or uses an unknown category."""

    code: str = "INVALID_EXPENSE"

    def __init__(self, field_name: str, reason: str):
        self.field_name = field_name
        self.reason = reason
        super().__init__(f"Invalid expense {field_name}: {reason}")


class InvalidPeriodKeyError(ValidationError):
    """Month identifier could not be parsed."""

    code: str = "INVALID_PERIOD_KEY"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid period key: {value!r}")


# Dependency exceptions


class DependencyFailureError(StationKernelError):
    """
    A repository or sales-ledger call failed (network, permission, driver).

    Wraps the underlying error so callers can handle all backend failures
    with one except clause; the original is kept on ``__cause__``.
    """

    code: str = "DEPENDENCY_FAILURE"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")


class UnknownTableError(DependencyFailureError):
    """Repository has no model registered under the table name."""

    code: str = "UNKNOWN_TABLE"

    def __init__(self, table: str):
        self.table = table
        super().__init__("table lookup", f"no model registered for table {table!r}")
