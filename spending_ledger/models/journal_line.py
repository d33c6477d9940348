"""
Journal line model.

A line posts one amount, on one side, to one account, as part
of exactly one journal entry. Lines are never edited once they
have been written; they disappear only when their entry is deleted.
"""

import uuid
from decimal import Decimal

from sqlalchemy import (
    Integer, Numeric, ForeignKey,
    Enum as SAEnum, Uuid, inspect,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from spending_ledger.exceptions import ImmutableLineError, InvalidAmount
from spending_ledger.formatting import fits_amount_column, format_money
from spending_ledger.models.base import Base
from spending_ledger.models.enums import EntryType


class JournalLine(Base):
    """
    One debit or credit inside a journal entry.

    The stored amount is never negative: the direction comes
    from entry_type together with the account's normal balance.
    """

    __tablename__ = "journal_lines"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    entry_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("journal_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    line_number: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1
    )
    entry_type: Mapped[EntryType] = mapped_column(
        SAEnum(EntryType, name="entry_type_enum"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )

    account: Mapped["Account"] = relationship(back_populates="lines")
    entry: Mapped["JournalEntry"] = relationship(back_populates="lines")

    @validates(
        "entry_type", "amount", "line_number",
        "account_id", "entry_id", "account", "entry",
    )
    def _validate_posting(self, key, value):
        # Covers the relationships too, including appends made from
        # the account or entry side through back_populates
        state = inspect(self)
        if state.persistent or state.detached:
            raise ImmutableLineError(
                f"Journal line {self.id} is posted and cannot be modified"
            )
        if key == "amount":
            value = Decimal(value)
            if (
                not value.is_finite()
                or value < 0
                or not fits_amount_column(value)
            ):
                raise InvalidAmount(value)
        return value

    def formatted_amount(self) -> str:
        return format_money(self.amount)

    def __repr__(self) -> str:
        return (
            f"<JournalLine {self.entry_type.abbreviation} "
            f"{self.amount}>"
        )
