"""Spending Ledger: a small double-entry bookkeeping core."""

__version__ = "0.1.0"
