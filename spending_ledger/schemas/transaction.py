"""
Pydantic schemas for flat (single-sided) transactions.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from spending_ledger.models.enums import TransactionType


class TransactionSummary(BaseModel):
    """Aggregates over a list of flat transactions."""
    total_transactions: int = 0
    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    current_balance: Decimal = Decimal("0")
    first_transaction_date: datetime | None = None
    last_transaction_date: datetime | None = None


class SimpleTransactionCreate(BaseModel):
    """A flat transaction as older versions of the app recorded it."""
    amount: Decimal = Field(gt=0, decimal_places=4)
    description: str = Field(min_length=1, max_length=255)
    transaction_type: TransactionType
    date: datetime | None = None


class SimpleTransactionResponse(BaseModel):
    id: uuid.UUID
    date: datetime
    amount: Decimal
    description: str
    transaction_type: TransactionType
    signed_amount: Decimal

    model_config = {"from_attributes": True}


class ImportResult(BaseModel):
    """Journal entries created from flat transactions."""
    imported: int
    entry_ids: list[uuid.UUID]
