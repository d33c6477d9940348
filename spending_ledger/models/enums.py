"""
Shared enumerations for the ledger models.

The string values are what gets stored and exported,
so they must not change.
"""

import enum
from decimal import Decimal


class EntryType(str, enum.Enum):
    """Direction of a journal line."""
    DEBIT = "Debit"
    CREDIT = "Credit"

    @property
    def abbreviation(self) -> str:
        return "Dr" if self is EntryType.DEBIT else "Cr"

    @property
    def opposite(self) -> "EntryType":
        return EntryType.CREDIT if self is EntryType.DEBIT else EntryType.DEBIT


class AccountType(str, enum.Enum):
    """The account categories this ledger uses."""
    ASSET = "Asset"
    INCOME = "Income"
    EXPENSE = "Expense"

    @property
    def normal_balance(self) -> EntryType:
        """The entry type that increases an account of this type."""
        if self is AccountType.INCOME:
            return EntryType.CREDIT
        return EntryType.DEBIT

    @property
    def sign_multiplier(self) -> Decimal:
        # Only for flat-balance views. The ledger balance uses
        # normal_balance instead.
        if self is AccountType.ASSET:
            return Decimal(1)
        return Decimal(-1)


class TransactionType(str, enum.Enum):
    """Kinds of flat (single-sided) transactions."""
    INCOME = "Income"
    EXPENSE = "Expense"
    SALE = "Sale"
