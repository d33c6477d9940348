"""
Flat transaction model.

The single-sided record older versions of the app kept: one
signed amount per transaction and no balancing counterpart.
It is kept for import and the flat export only. Its sign rules
never feed into ledger balances.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, DateTime, Numeric, Enum as SAEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from spending_ledger.formatting import format_money, parse_amount, to_naive_utc
from spending_ledger.models.base import Base
from spending_ledger.models.enums import TransactionType


class SimpleTransaction(Base):
    __tablename__ = "simple_transactions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    description: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )
    transaction_type: Mapped[TransactionType] = mapped_column(
        SAEnum(TransactionType, name="transaction_type_enum"),
        nullable=False,
    )

    @classmethod
    def create(
        cls,
        amount: Decimal,
        description: str,
        transaction_type: TransactionType,
        date: datetime | None = None,
    ) -> "SimpleTransaction":
        """Raises InvalidAmount unless amount is a storable positive value."""
        return cls(
            id=uuid.uuid4(),
            date=to_naive_utc(date) if date else datetime.utcnow(),
            amount=parse_amount(amount),
            description=description,
            transaction_type=TransactionType(transaction_type),
        )

    def revise(
        self,
        amount: Decimal,
        description: str,
        transaction_type: TransactionType,
        date: datetime | None = None,
    ) -> None:
        """Replace the recorded values in place. The id never changes."""
        self.amount = parse_amount(amount)
        self.description = description
        self.transaction_type = TransactionType(transaction_type)
        if date:
            self.date = to_naive_utc(date)

    @property
    def signed_amount(self) -> Decimal:
        """Income and sales count up, expenses count down."""
        if self.transaction_type == TransactionType.EXPENSE:
            return -self.amount
        return self.amount

    def formatted_amount(self) -> str:
        return format_money(self.amount)

    def __repr__(self) -> str:
        return (
            f"<SimpleTransaction {self.transaction_type.value} "
            f"{self.amount}>"
        )
