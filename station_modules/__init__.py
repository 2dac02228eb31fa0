"""
Station Modules.

Domain modules built on the Station Kernel.  Each module contains frozen
domain models, ORM tables where it persists anything, and a service:

- Stock: monthly stock carry-forward and reconciliation
- Fuel: pumps, product prices, daily pump readings (the sales ledger)
- Expense: daily expense entry
- Reporting: end-of-day summary and chart aggregates
"""
