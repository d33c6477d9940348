"""
Ledger service, the core of the system.

This service enforces the fundamental rules:
1. Every journal entry balances (debits = credits) before commit
2. Posted lines are never edited, only removed with their entry
3. Accounts with lines cannot be deleted
4. Balances are always derived from lines

All postings go through this service.
"""

import logging
import threading
import uuid
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from spending_ledger.exceptions import (
    AccountHasLines,
    AccountNotFound,
    AccountsNotInitialized,
    EntryNotFound,
    PersistFailed,
    UnbalancedEntry,
)
from spending_ledger.formatting import format_money, parse_amount
from spending_ledger.models.account import Account
from spending_ledger.models.enums import AccountType, EntryType, TransactionType
from spending_ledger.models.journal_entry import JournalEntry
from spending_ledger.models.journal_line import JournalLine
from spending_ledger.models.simple_transaction import SimpleTransaction

logger = logging.getLogger(__name__)

SPENDING_MONEY = "Spending Money"
CONTRIBUTIONS = "Contributions"
SALES = "Sales"
PURCHASES = "Purchases"

# The default chart of accounts, created on first use
DEFAULT_ACCOUNTS: dict[str, AccountType] = {
    SPENDING_MONEY: AccountType.ASSET,
    CONTRIBUTIONS: AccountType.INCOME,
    SALES: AccountType.INCOME,
    PURCHASES: AccountType.EXPENSE,
}

# Bootstrap and postings are serialized per process. Reentrant so a
# posting may call back into bootstrap-guarded helpers.
_ledger_lock = threading.RLock()


class LedgerService:
    """
    All ledger operations pass through this service.

    The service takes a session as its constructor argument.
    Postings commit their own entry, so a returned entry is
    always durable.
    """

    def __init__(self, db: Session):
        self.db = db
        self.accounts: dict[str, Account] = {}

    # --- Bootstrap ---

    def ensure_default_accounts(self) -> dict[str, Account]:
        """
        Resolve the four default accounts, creating any that are missing.

        Safe to call any number of times: existing accounts are
        matched by name and never duplicated.
        """
        with _ledger_lock:
            existing = self.db.execute(select(Account)).scalars().all()
            by_name: dict[str, Account] = {}
            for account in existing:
                # Oldest wins if a name was ever duplicated
                by_name.setdefault(account.name, account)

            created = []
            for name, account_type in DEFAULT_ACCOUNTS.items():
                if name not in by_name:
                    account = Account.create(name, account_type)
                    self.db.add(account)
                    by_name[name] = account
                    created.append(name)

            if created:
                self._commit()
                logger.info("Created default accounts: %s", ", ".join(created))

            self.accounts = {name: by_name[name] for name in DEFAULT_ACCOUNTS}
            return self.accounts

    def _require(self, *names: str) -> list[Account]:
        missing = [name for name in names if name not in self.accounts]
        if missing:
            raise AccountsNotInitialized(missing)
        return [self.accounts[name] for name in names]

    # --- Posting ---

    def _money_in(
        self, amount, is_sale: bool = False
    ) -> list[tuple[Account, EntryType, Decimal]]:
        value = parse_amount(amount)
        spending, income = self._require(
            SPENDING_MONEY, SALES if is_sale else CONTRIBUTIONS
        )
        return [
            (spending, EntryType.DEBIT, value),
            (income, EntryType.CREDIT, value),
        ]

    def _money_out(self, amount) -> list[tuple[Account, EntryType, Decimal]]:
        value = parse_amount(amount)
        purchases, spending = self._require(PURCHASES, SPENDING_MONEY)
        return [
            (purchases, EntryType.DEBIT, value),
            (spending, EntryType.CREDIT, value),
        ]

    def add_money(
        self,
        amount,
        description: str,
        is_sale: bool = False,
        date: datetime | None = None,
    ) -> JournalEntry:
        """
        Record money coming in.

        Accounting:
            DEBIT  Spending Money (asset increases)
            CREDIT Sales or Contributions (income increases)
        """
        return self._post(description, date, self._money_in(amount, is_sale))

    def spend_money(
        self,
        amount,
        description: str,
        date: datetime | None = None,
    ) -> JournalEntry:
        """
        Record money going out.

        Accounting:
            DEBIT  Purchases (expense increases)
            CREDIT Spending Money (asset decreases)
        """
        return self._post(description, date, self._money_out(amount))

    def import_transactions(
        self, transactions: Iterable[SimpleTransaction]
    ) -> list[JournalEntry]:
        """
        Re-post flat transactions as balanced journal entries.

        Income becomes a contribution, a sale is credited to Sales
        and an expense is a purchase. Only the transaction's amount
        and type are used; its signed amount is ignored.

        All or nothing: every amount is checked before anything is
        built, and the entries are committed together.
        """
        planned = []
        for txn in transactions:
            if txn.transaction_type == TransactionType.EXPENSE:
                postings = self._money_out(txn.amount)
            else:
                postings = self._money_in(
                    txn.amount,
                    is_sale=txn.transaction_type == TransactionType.SALE,
                )
            planned.append((txn, postings))

        with _ledger_lock:
            entries: list[JournalEntry] = []
            try:
                for txn, postings in planned:
                    entries.append(
                        self._build(txn.description, txn.date, postings)
                    )
            except UnbalancedEntry:
                for entry in entries:
                    entry.detach_lines()
                raise
            if entries:
                self._persist(entries)

        logger.info("Imported %d flat transactions", len(entries))
        return entries

    def _build(
        self,
        description: str,
        date: datetime | None,
        postings: list[tuple[Account, EntryType, Decimal]],
    ) -> JournalEntry:
        """Build an entry with all of its lines and check that it balances."""
        entry = JournalEntry.create(date=date, description=description)
        for account, entry_type, amount in postings:
            entry.add_line(account, entry_type, amount)

        if len(entry.lines) < 2 or not entry.is_balanced():
            debits, credits = entry.total_debits(), entry.total_credits()
            entry.detach_lines()
            logger.error(
                "Rejected unbalanced entry %r: debits=%s credits=%s",
                description, debits, credits,
            )
            raise UnbalancedEntry(debits, credits)
        return entry

    def _persist(self, entries: list[JournalEntry]) -> None:
        """Insert built entries and commit them as one unit."""
        self.db.add_all(entries)
        try:
            self._commit()
        except PersistFailed:
            for entry in entries:
                entry.detach_lines()
            raise

    def _post(
        self,
        description: str,
        date: datetime | None,
        postings: list[tuple[Account, EntryType, Decimal]],
    ) -> JournalEntry:
        """
        Build an entry with all of its lines, check it, then commit it.

        Nothing reaches the session until the entry is complete
        and balanced, so no reader can see a half-built entry.
        """
        with _ledger_lock:
            entry = self._build(description, date, postings)
            self._persist([entry])
            logger.info(
                "Posted entry %s %r for %s",
                entry.id, description, entry.total_debits(),
            )
            return entry

    def _commit(self) -> None:
        """Commit, or roll back and raise PersistFailed."""
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Ledger commit failed")
            raise PersistFailed(str(e)) from e

    # --- Balances ---

    def current_balance(self) -> Decimal:
        """Balance of the spending account, zero before bootstrap."""
        spending = self.accounts.get(SPENDING_MONEY)
        if spending is None:
            return Decimal("0")
        return spending.balance()

    def formatted_balance(self) -> str:
        return format_money(self.current_balance())

    def check_integrity(self) -> dict:
        """
        Trial balance across the whole ledger.

        Because every entry balances, total debits over all
        lines must equal total credits.
        """
        totals = dict(
            self.db.execute(
                select(
                    JournalLine.entry_type,
                    func.coalesce(func.sum(JournalLine.amount), 0),
                ).group_by(JournalLine.entry_type)
            ).all()
        )
        total_debits = Decimal(str(totals.get(EntryType.DEBIT, 0)))
        total_credits = Decimal(str(totals.get(EntryType.CREDIT, 0)))
        difference = total_debits - total_credits
        return {
            "total_debits": total_debits,
            "total_credits": total_credits,
            "difference": difference,
            "is_balanced": difference == 0,
        }

    # --- Lookups ---

    def get_account(self, account_id: uuid.UUID) -> Account:
        account = self.db.get(Account, account_id)
        if not account:
            raise AccountNotFound(account_id)
        return account

    def get_account_by_name(self, name: str) -> Account | None:
        return self.db.execute(
            select(Account)
            .where(Account.name == name)
            .order_by(Account.created_at)
            .limit(1)
        ).scalar_one_or_none()

    def list_accounts(self) -> list[Account]:
        accounts = self.db.execute(
            select(Account).order_by(Account.created_at, Account.id)
        ).scalars().all()
        return list(accounts)

    def get_entry(self, entry_id: uuid.UUID) -> JournalEntry:
        entry = self.db.get(JournalEntry, entry_id)
        if not entry:
            raise EntryNotFound(entry_id)
        return entry

    def list_entries(self) -> list[JournalEntry]:
        """Return all entries, newest first."""
        entries = self.db.execute(
            select(JournalEntry)
            .order_by(JournalEntry.date.desc(), JournalEntry.created_at.desc())
        ).scalars().all()
        return list(entries)

    # --- Deletion ---

    def delete_entry(self, entry_id: uuid.UUID) -> None:
        """
        Delete an entry together with its lines.

        Balances of the affected accounts drop the removed
        lines as soon as this returns.
        """
        with _ledger_lock:
            entry = self.get_entry(entry_id)
            accounts = {line.account for line in entry.lines}
            self.db.delete(entry)
            self._commit()
            for account in accounts:
                self.db.expire(account, ["lines"])
            logger.info("Deleted entry %s", entry_id)

    def delete_account(self, account_id: uuid.UUID) -> None:
        """Delete an account. Refused while any line references it."""
        with _ledger_lock:
            account = self.get_account(account_id)
            line_count = self.db.execute(
                select(func.count(JournalLine.id))
                .where(JournalLine.account_id == account.id)
            ).scalar_one()
            if line_count:
                raise AccountHasLines(account.name, line_count)

            name = account.name
            self.db.delete(account)
            self._commit()
            self.accounts = {
                key: acct for key, acct in self.accounts.items()
                if acct is not account
            }
            logger.info("Deleted account %s (%s)", name, account_id)
