"""
Tests for account types, entry types and derived values
on the models, without going through the service.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select, func

from spending_ledger.exceptions import ImmutableLineError, InvalidAmount
from spending_ledger.formatting import to_epoch_seconds
from spending_ledger.models.account import Account
from spending_ledger.models.enums import AccountType, EntryType, TransactionType
from spending_ledger.models.journal_entry import JournalEntry
from spending_ledger.models.journal_line import JournalLine
from spending_ledger.models.simple_transaction import SimpleTransaction


class TestEnums:

    def test_normal_balances(self):
        assert AccountType.ASSET.normal_balance == EntryType.DEBIT
        assert AccountType.INCOME.normal_balance == EntryType.CREDIT
        assert AccountType.EXPENSE.normal_balance == EntryType.DEBIT

    def test_sign_multipliers(self):
        assert AccountType.ASSET.sign_multiplier == 1
        assert AccountType.INCOME.sign_multiplier == -1
        assert AccountType.EXPENSE.sign_multiplier == -1

    def test_entry_type_labels(self):
        assert EntryType.DEBIT.abbreviation == "Dr"
        assert EntryType.CREDIT.abbreviation == "Cr"
        assert EntryType.DEBIT.value == "Debit"
        assert EntryType.CREDIT.opposite == EntryType.DEBIT


class TestAccount:

    def test_create_sets_defaults(self):
        account = Account.create("Wallet", AccountType.ASSET)

        assert account.id is not None
        assert account.is_active is True
        assert account.created_at is not None
        assert account.lines == []
        assert account.balance() == Decimal("0")

    def test_asset_balance_debits_minus_credits(self):
        cash = Account.create("Cash", AccountType.ASSET)
        income = Account.create("Gifts", AccountType.INCOME)
        entry = JournalEntry.create(description="gift")
        entry.add_line(cash, EntryType.DEBIT, Decimal("25.00"))
        entry.add_line(income, EntryType.CREDIT, Decimal("25.00"))

        assert cash.balance() == Decimal("25.00")
        # Income grows on the credit side
        assert income.balance() == Decimal("25.00")

    def test_balance_ignores_line_order(self):
        cash = Account.create("Cash", AccountType.ASSET)
        other = Account.create("Other", AccountType.EXPENSE)
        amounts = [
            (EntryType.DEBIT, Decimal("10.10")),
            (EntryType.CREDIT, Decimal("3.05")),
            (EntryType.DEBIT, Decimal("0.95")),
        ]
        for entry_type, amount in amounts:
            entry = JournalEntry.create(description="x")
            entry.add_line(cash, entry_type, amount)
            entry.add_line(other, entry_type.opposite, amount)

        forward = cash.balance()
        cash.lines.reverse()
        assert cash.balance() == forward == Decimal("8.00")

    def test_formatted_balance(self):
        cash = Account.create("Cash", AccountType.ASSET)
        assert cash.formatted_balance() == "$0.00"

        expense = Account.create("Stuff", AccountType.EXPENSE)
        entry = JournalEntry.create(description="refund")
        entry.add_line(cash, EntryType.CREDIT, Decimal("1234.5"))
        entry.add_line(expense, EntryType.DEBIT, Decimal("1234.5"))

        assert cash.formatted_balance() == "-$1,234.50"
        assert expense.formatted_balance() == "$1,234.50"

    def test_account_type_cannot_change(self):
        account = Account.create("Cash", AccountType.ASSET)
        with pytest.raises(ValueError, match="cannot change"):
            account.account_type = AccountType.INCOME


class TestJournalEntry:

    def test_add_line_attaches_both_sides(self):
        cash = Account.create("Cash", AccountType.ASSET)
        entry = JournalEntry.create(description="one")

        line = entry.add_line(cash, EntryType.DEBIT, Decimal("5"))

        assert entry.lines == [line]
        assert cash.lines == [line]
        assert line.entry is entry
        assert line.account is cash

    def test_totals_and_balanced(self):
        cash = Account.create("Cash", AccountType.ASSET)
        income = Account.create("Income", AccountType.INCOME)
        entry = JournalEntry.create(description="split")
        entry.add_line(cash, EntryType.DEBIT, Decimal("7.50"))
        entry.add_line(income, EntryType.CREDIT, Decimal("5.00"))

        assert entry.total_debits() == Decimal("7.50")
        assert entry.total_credits() == Decimal("5.00")
        assert entry.is_balanced() is False

        entry.add_line(income, EntryType.CREDIT, Decimal("2.50"))
        assert entry.is_balanced() is True

    def test_balanced_check_is_exact(self):
        cash = Account.create("Cash", AccountType.ASSET)
        income = Account.create("Income", AccountType.INCOME)
        entry = JournalEntry.create(description="tiny")
        entry.add_line(cash, EntryType.DEBIT, Decimal("0.1") + Decimal("0.2"))
        entry.add_line(income, EntryType.CREDIT, Decimal("0.3001"))

        assert entry.is_balanced() is False

    def test_detach_lines_clears_account_side(self):
        cash = Account.create("Cash", AccountType.ASSET)
        entry = JournalEntry.create(description="undo")
        entry.add_line(cash, EntryType.DEBIT, Decimal("5"))

        entry.detach_lines()

        assert cash.lines == []
        assert cash.balance() == Decimal("0")

    def test_negative_line_amount_rejected(self):
        cash = Account.create("Cash", AccountType.ASSET)
        entry = JournalEntry.create(description="bad")
        with pytest.raises(InvalidAmount):
            entry.add_line(cash, EntryType.DEBIT, Decimal("-1"))

    def test_line_amount_must_fit_four_places(self):
        cash = Account.create("Cash", AccountType.ASSET)
        entry = JournalEntry.create(description="tiny")
        with pytest.raises(InvalidAmount):
            entry.add_line(cash, EntryType.DEBIT, Decimal("0.00001"))
        line = entry.add_line(cash, EntryType.DEBIT, Decimal("0.0001"))
        assert line.amount == Decimal("0.0001")


class TestJournalLinePersistence:

    def test_posted_line_is_immutable(self, db_session):
        cash = Account.create("Cash", AccountType.ASSET)
        income = Account.create("Income", AccountType.INCOME)
        entry = JournalEntry.create(description="fixed")
        line = entry.add_line(cash, EntryType.DEBIT, Decimal("3"))
        entry.add_line(income, EntryType.CREDIT, Decimal("3"))
        db_session.add_all([cash, income, entry])
        db_session.commit()

        with pytest.raises(ImmutableLineError):
            line.amount = Decimal("4")
        with pytest.raises(ImmutableLineError):
            line.entry_type = EntryType.CREDIT

    def test_deleting_entry_cascades_to_lines(self, db_session):
        cash = Account.create("Cash", AccountType.ASSET)
        income = Account.create("Income", AccountType.INCOME)
        entry = JournalEntry.create(description="gone")
        entry.add_line(cash, EntryType.DEBIT, Decimal("3"))
        entry.add_line(income, EntryType.CREDIT, Decimal("3"))
        db_session.add_all([cash, income, entry])
        db_session.commit()

        db_session.delete(entry)
        db_session.commit()

        assert db_session.execute(
            select(func.count(JournalLine.id))
        ).scalar_one() == 0
        assert cash.balance() == Decimal("0")

    def test_posted_line_keeps_its_account_and_entry(self, db_session):
        cash = Account.create("Cash", AccountType.ASSET)
        income = Account.create("Income", AccountType.INCOME)
        other = Account.create("Other", AccountType.ASSET)
        entry = JournalEntry.create(description="fixed")
        line = entry.add_line(cash, EntryType.DEBIT, Decimal("3"))
        entry.add_line(income, EntryType.CREDIT, Decimal("3"))
        spare = JournalEntry.create(description="spare")
        db_session.add_all([cash, income, other, entry, spare])
        db_session.commit()

        with pytest.raises(ImmutableLineError):
            line.account = other
        with pytest.raises(ImmutableLineError):
            line.account_id = other.id
        with pytest.raises(ImmutableLineError):
            other.lines.append(line)
        with pytest.raises(ImmutableLineError):
            line.entry = spare
        with pytest.raises(ImmutableLineError):
            line.entry_id = spare.id
        with pytest.raises(ImmutableLineError):
            line.line_number = 9

        db_session.commit()
        db_session.expire_all()
        assert cash.balance() == Decimal("3")
        assert other.balance() == Decimal("0")
        assert len(entry.lines) == 2
        assert entry.lines[0].id == line.id


class TestSimpleTransaction:

    @pytest.mark.parametrize(
        "amount", [0, Decimal("-1"), Decimal("0.00001"), "NaN"]
    )
    def test_create_rejects_unstorable_amounts(self, amount):
        with pytest.raises(InvalidAmount):
            SimpleTransaction.create(amount, "x", TransactionType.INCOME)

    def test_offset_date_is_stored_as_utc(self):
        when = datetime(2024, 1, 1, 10, 0, tzinfo=timezone(timedelta(hours=5)))
        txn = SimpleTransaction.create(
            Decimal("5"), "abroad", TransactionType.SALE, date=when
        )

        assert txn.date == datetime(2024, 1, 1, 5, 0)
        assert to_epoch_seconds(txn.date) == when.timestamp()

    def test_revise_keeps_id(self):
        txn = SimpleTransaction.create(
            Decimal("5"), "lemonade", TransactionType.SALE,
            date=datetime(2024, 2, 1),
        )
        original_id = txn.id

        txn.revise(Decimal("7.25"), "toy", TransactionType.EXPENSE)

        assert txn.id == original_id
        assert txn.signed_amount == Decimal("-7.25")
        assert txn.description == "toy"
        # No new date keeps the recorded one
        assert txn.date == datetime(2024, 2, 1)

    def test_revise_rejects_bad_amount(self):
        txn = SimpleTransaction.create(Decimal("5"), "x", TransactionType.INCOME)
        with pytest.raises(InvalidAmount):
            txn.revise(Decimal("0"), "x", TransactionType.INCOME)
        assert txn.amount == Decimal("5")
