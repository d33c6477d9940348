"""
Ledger exporter.

Writes a point-in-time copy of the whole ledger into a flat
SQLite file for reporting tools. Balances and entry totals are
computed at export time and stored as REAL, so the snapshot
trades exact Decimal values for portability.

The export only reads. Run without holding the ledger lock,
the snapshot may be stale relative to concurrent writers.
"""

import logging
from pathlib import Path

from sqlalchemy import (
    Column, Float, ForeignKey, Integer, MetaData, Table, Text, select,
)
from sqlalchemy.orm import Session

from spending_ledger.formatting import to_epoch_seconds, to_float
from spending_ledger.models.account import Account
from spending_ledger.models.journal_entry import JournalEntry
from spending_ledger.schemas.ledger import ExportResult
from spending_ledger.services.snapshot import (
    default_snapshot_path,
    write_snapshot,
)

logger = logging.getLogger(__name__)


snapshot_metadata = MetaData()

accounts_table = Table(
    "accounts",
    snapshot_metadata,
    Column("id", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("type", Text, nullable=False),
    Column("is_active", Integer, nullable=False),
    Column("created_at", Float, nullable=False),
    Column("balance", Float, nullable=False),
)

journal_entries_table = Table(
    "journal_entries",
    snapshot_metadata,
    Column("id", Text, primary_key=True),
    Column("date", Float, nullable=False),
    Column("description", Text, nullable=False),
    Column("created_at", Float, nullable=False),
    Column("is_balanced", Integer, nullable=False),
    Column("total_debits", Float, nullable=False),
    Column("total_credits", Float, nullable=False),
)

journal_lines_table = Table(
    "journal_lines",
    snapshot_metadata,
    Column("id", Text, primary_key=True),
    Column("entry_id", Text, ForeignKey("journal_entries.id"), nullable=False),
    Column("account_id", Text, ForeignKey("accounts.id"), nullable=False),
    Column("entry_type", Text, nullable=False),
    Column("amount", Float, nullable=False),
)

LEDGER_SUMMARY_VIEW = """
    CREATE VIEW ledger_summary AS
    SELECT
        (SELECT COUNT(*) FROM journal_entries) AS total_entries,
        (SELECT COUNT(*) FROM journal_lines) AS total_lines,
        (SELECT COALESCE(SUM(amount), 0) FROM journal_lines
            WHERE entry_type = 'Debit') AS total_debits,
        (SELECT COALESCE(SUM(amount), 0) FROM journal_lines
            WHERE entry_type = 'Credit') AS total_credits,
        (SELECT MIN(date) FROM journal_entries) AS first_entry_date,
        (SELECT MAX(date) FROM journal_entries) AS last_entry_date
"""


def account_row(account: Account) -> dict:
    return {
        "id": str(account.id),
        "name": account.name,
        "type": account.account_type.value,
        "is_active": 1 if account.is_active else 0,
        "created_at": to_epoch_seconds(account.created_at),
        "balance": to_float(account.balance()),
    }


def entry_row(entry: JournalEntry) -> dict:
    return {
        "id": str(entry.id),
        "date": to_epoch_seconds(entry.date),
        "description": entry.description,
        "created_at": to_epoch_seconds(entry.created_at),
        "is_balanced": 1 if entry.is_balanced() else 0,
        "total_debits": to_float(entry.total_debits()),
        "total_credits": to_float(entry.total_credits()),
    }


def line_rows(entry: JournalEntry) -> list[dict]:
    """Lines come from the entry that owns them, never a separate query."""
    return [
        {
            "id": str(line.id),
            "entry_id": str(entry.id),
            "account_id": str(line.account_id),
            "entry_type": line.entry_type.value,
            "amount": to_float(line.amount),
        }
        for line in entry.lines
    ]


class LedgerExporter:

    def __init__(self, db: Session, export_dir: str | Path | None = None):
        self.db = db
        self.export_dir = export_dir

    def export(self, destination: str | Path | None = None) -> ExportResult:
        """
        Snapshot every account, entry and line into a new SQLite file.

        Any file already at the destination is replaced. On failure
        no file is left behind and an ExportError is raised.
        """
        path = Path(destination) if destination else default_snapshot_path(
            self.export_dir
        )

        accounts = self.db.execute(
            select(Account).order_by(Account.created_at, Account.id)
        ).scalars().all()
        entries = self.db.execute(
            select(JournalEntry)
            .order_by(JournalEntry.created_at, JournalEntry.id)
        ).scalars().all()

        accounts_data = [account_row(a) for a in accounts]
        entries_data = [entry_row(e) for e in entries]
        lines_data = [row for e in entries for row in line_rows(e)]

        write_snapshot(
            path,
            snapshot_metadata,
            [
                (accounts_table, accounts_data),
                (journal_entries_table, entries_data),
                (journal_lines_table, lines_data),
            ],
            views=[LEDGER_SUMMARY_VIEW],
        )
        logger.info(
            "Exported %d accounts, %d entries, %d lines to %s",
            len(accounts_data), len(entries_data), len(lines_data), path,
        )
        return ExportResult(
            path=str(path),
            accounts=len(accounts_data),
            journal_entries=len(entries_data),
            journal_lines=len(lines_data),
        )
