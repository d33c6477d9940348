"""
Pydantic schemas for ledger operations.

These are the API contract. Derived values such as balances
and entry totals are methods on the models, so the responses
are built explicitly rather than read straight off attributes.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from spending_ledger.models.account import Account
from spending_ledger.models.enums import AccountType, EntryType
from spending_ledger.models.journal_entry import JournalEntry


# --- Request Schemas ---

class AddMoneyRequest(BaseModel):
    """Money coming into the spending account."""
    amount: Decimal = Field(gt=0, decimal_places=4)
    description: str = Field(min_length=1, max_length=255)
    is_sale: bool = False
    date: datetime | None = None


class SpendMoneyRequest(BaseModel):
    """Money leaving the spending account."""
    amount: Decimal = Field(gt=0, decimal_places=4)
    description: str = Field(min_length=1, max_length=255)
    date: datetime | None = None


class ExportRequest(BaseModel):
    destination: str | None = None


# --- Response Schemas ---

class AccountResponse(BaseModel):
    id: uuid.UUID
    name: str
    account_type: AccountType
    is_active: bool
    created_at: datetime
    balance: Decimal
    formatted_balance: str

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            name=account.name,
            account_type=account.account_type,
            is_active=account.is_active,
            created_at=account.created_at,
            balance=account.balance(),
            formatted_balance=account.formatted_balance(),
        )


class JournalLineResponse(BaseModel):
    id: uuid.UUID
    account_id: uuid.UUID
    account_name: str
    entry_type: EntryType
    amount: Decimal


class JournalEntryResponse(BaseModel):
    id: uuid.UUID
    date: datetime
    description: str
    created_at: datetime
    is_balanced: bool
    total_debits: Decimal
    total_credits: Decimal
    lines: list[JournalLineResponse]

    @classmethod
    def from_entry(cls, entry: JournalEntry) -> "JournalEntryResponse":
        return cls(
            id=entry.id,
            date=entry.date,
            description=entry.description,
            created_at=entry.created_at,
            is_balanced=entry.is_balanced(),
            total_debits=entry.total_debits(),
            total_credits=entry.total_credits(),
            lines=[
                JournalLineResponse(
                    id=line.id,
                    account_id=line.account_id,
                    account_name=line.account.name,
                    entry_type=line.entry_type,
                    amount=line.amount,
                )
                for line in entry.lines
            ],
        )


class BalanceResponse(BaseModel):
    """Balance of the spending account."""
    balance: Decimal
    formatted_balance: str


class IntegrityResponse(BaseModel):
    """Trial balance over every posted line."""
    total_debits: Decimal
    total_credits: Decimal
    difference: Decimal
    is_balanced: bool


class ExportResult(BaseModel):
    """Where a snapshot was written and how many rows it holds."""
    path: str
    accounts: int = 0
    journal_entries: int = 0
    journal_lines: int = 0
    transactions: int = 0
