"""
Journal entry model.

An entry is one dated unit of work made of two or more lines.
It owns its lines: deleting the entry deletes them. Totals and
the balanced check are always recomputed from the lines.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from spending_ledger.formatting import to_naive_utc
from spending_ledger.models.base import Base
from spending_ledger.models.enums import EntryType
from spending_ledger.models.journal_line import JournalLine


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, index=True
    )
    description: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    lines: Mapped[list[JournalLine]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=JournalLine.line_number,
    )

    @classmethod
    def create(
        cls, date: datetime | None = None, description: str = ""
    ) -> "JournalEntry":
        """Build a new entry with no lines. Dates are stored as naive UTC."""
        now = datetime.utcnow()
        return cls(
            id=uuid.uuid4(),
            date=to_naive_utc(date) if date else now,
            description=description,
            created_at=now,
        )

    def add_line(
        self, account, entry_type: EntryType, amount: Decimal
    ) -> JournalLine:
        """
        Post an amount to an account as part of this entry.

        The line is attached to this entry and to the account's
        lines in the same assignment. Balance is not checked here;
        callers check is_balanced() before committing.
        """
        line = JournalLine(
            id=uuid.uuid4(),
            line_number=len(self.lines) + 1,
            entry_type=EntryType(entry_type),
            amount=amount,
        )
        line.account = account
        line.entry = self
        return line

    def detach_lines(self) -> None:
        """Undo add_line on the account side for an entry never committed."""
        for line in list(self.lines):
            if line.account is not None and line in line.account.lines:
                line.account.lines.remove(line)

    def _total(self, entry_type: EntryType) -> Decimal:
        return sum(
            (line.amount for line in self.lines
             if line.entry_type == entry_type),
            Decimal("0"),
        )

    def total_debits(self) -> Decimal:
        return self._total(EntryType.DEBIT)

    def total_credits(self) -> Decimal:
        return self._total(EntryType.CREDIT)

    def is_balanced(self) -> bool:
        # Exact Decimal comparison, no tolerance
        return self.total_debits() == self.total_credits()

    def __repr__(self) -> str:
        return f"<JournalEntry {self.date:%Y-%m-%d} {self.description!r}>"
