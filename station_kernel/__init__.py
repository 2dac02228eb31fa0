"""
Station Kernel

Shared infrastructure for the fuel station back office:
- Typed exceptions with machine-readable codes
- Structured JSON logging
- SQLAlchemy engine, sessions and ORM base classes
- Calendar-month period arithmetic and quantity parsing
- Table-level repository interface and notification sink
"""

__version__ = "0.1.0"
