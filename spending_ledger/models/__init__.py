"""
Database models package.

Every model is imported here so that Base.metadata knows
about all tables before create_all() runs.
"""

from spending_ledger.models.base import Base
from spending_ledger.models.enums import (
    AccountType,
    EntryType,
    TransactionType,
)
from spending_ledger.models.account import Account
from spending_ledger.models.journal_line import JournalLine
from spending_ledger.models.journal_entry import JournalEntry
from spending_ledger.models.simple_transaction import SimpleTransaction

__all__ = [
    "Base",
    "AccountType",
    "EntryType",
    "TransactionType",
    "Account",
    "JournalLine",
    "JournalEntry",
    "SimpleTransaction",
]
