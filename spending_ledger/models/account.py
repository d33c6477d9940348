"""
Ledger account model (chart of accounts).

An account never stores its balance. The balance is derived
from the journal lines posted to it every time it is asked for.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Boolean, DateTime, Enum as SAEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from spending_ledger.formatting import format_money
from spending_ledger.models.base import Base
from spending_ledger.models.enums import AccountType


class Account(Base):
    """
    A named account with a fixed type.

    The lines collection is a back-index only: journal entries
    own their lines. An account with lines cannot be deleted.
    """

    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(
        String(100), nullable=False, index=True
    )
    account_type: Mapped[AccountType] = mapped_column(
        SAEnum(AccountType, name="account_type_enum"),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    # passive_deletes="all" leaves the RESTRICT foreign key in charge
    # instead of letting the ORM null out line.account_id
    lines: Mapped[list["JournalLine"]] = relationship(
        back_populates="account",
        passive_deletes="all",
    )

    @classmethod
    def create(cls, name: str, account_type: AccountType) -> "Account":
        """Build a new, active account with no lines."""
        return cls(
            id=uuid.uuid4(),
            name=name,
            account_type=AccountType(account_type),
            is_active=True,
            created_at=datetime.utcnow(),
        )

    @validates("account_type")
    def _account_type_is_fixed(self, key, value):
        current = self.account_type
        if current is not None and AccountType(value) != current:
            raise ValueError(
                f"Account type of '{self.name}' cannot change "
                f"from {current.value} to {AccountType(value).value}"
            )
        return value

    def balance(self) -> Decimal:
        """
        Sum of lines on the normal-balance side minus the rest.

        Asset and expense accounts grow with debits, income
        accounts grow with credits.
        """
        normal = self.account_type.normal_balance
        total = Decimal("0")
        for line in self.lines:
            if line.entry_type == normal:
                total += line.amount
            else:
                total -= line.amount
        return total

    def formatted_balance(self) -> str:
        return format_money(self.balance())

    def __repr__(self) -> str:
        return f"<Account {self.name} ({self.account_type.value})>"
