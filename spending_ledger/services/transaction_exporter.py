"""
Flat transaction exporter.

Exports the single-sided transaction list used by older
versions of the app, together with an account_summary view.
summarize() computes the same aggregates in Python.
"""

import logging
from collections.abc import Iterable
from decimal import Decimal
from pathlib import Path

from sqlalchemy import Column, Float, MetaData, Table, Text

from spending_ledger.formatting import to_epoch_seconds, to_float
from spending_ledger.models.simple_transaction import SimpleTransaction
from spending_ledger.schemas.ledger import ExportResult
from spending_ledger.schemas.transaction import TransactionSummary
from spending_ledger.services.snapshot import (
    default_snapshot_path,
    write_snapshot,
)

logger = logging.getLogger(__name__)


flat_metadata = MetaData()

transactions_table = Table(
    "transactions",
    flat_metadata,
    Column("id", Text, primary_key=True),
    Column("date", Float, nullable=False),
    Column("amount", Float, nullable=False),
    Column("description", Text, nullable=False),
    Column("type", Text, nullable=False),
    Column("signed_amount", Float, nullable=False),
)

ACCOUNT_SUMMARY_VIEW = """
    CREATE VIEW account_summary AS
    SELECT
        COUNT(*) AS total_transactions,
        SUM(CASE WHEN signed_amount > 0 THEN signed_amount ELSE 0 END)
            AS total_income,
        SUM(CASE WHEN signed_amount < 0 THEN ABS(signed_amount) ELSE 0 END)
            AS total_expenses,
        SUM(signed_amount) AS current_balance,
        MIN(date) AS first_transaction_date,
        MAX(date) AS last_transaction_date
    FROM transactions
"""


def summarize(transactions: Iterable[SimpleTransaction]) -> TransactionSummary:
    """One pass over the transactions, mirroring account_summary."""
    summary = TransactionSummary()
    for txn in transactions:
        signed = txn.signed_amount
        summary.total_transactions += 1
        if signed > 0:
            summary.total_income += signed
        elif signed < 0:
            summary.total_expenses += -signed
        summary.current_balance += signed
        if (summary.first_transaction_date is None
                or txn.date < summary.first_transaction_date):
            summary.first_transaction_date = txn.date
        if (summary.last_transaction_date is None
                or txn.date > summary.last_transaction_date):
            summary.last_transaction_date = txn.date
    return summary


def transaction_row(txn: SimpleTransaction) -> dict:
    return {
        "id": str(txn.id),
        "date": to_epoch_seconds(txn.date),
        "amount": to_float(txn.amount),
        "description": txn.description,
        "type": txn.transaction_type.value,
        "signed_amount": to_float(txn.signed_amount),
    }


class TransactionExporter:

    def __init__(self, export_dir: str | Path | None = None):
        self.export_dir = export_dir

    def export(
        self,
        transactions: Iterable[SimpleTransaction],
        destination: str | Path | None = None,
    ) -> ExportResult:
        path = Path(destination) if destination else default_snapshot_path(
            self.export_dir
        )
        rows = [
            transaction_row(txn)
            for txn in sorted(transactions, key=lambda t: (t.date, str(t.id)))
        ]
        write_snapshot(
            path,
            flat_metadata,
            [(transactions_table, rows)],
            views=[ACCOUNT_SUMMARY_VIEW],
        )
        logger.info("Exported %d flat transactions to %s", len(rows), path)
        return ExportResult(path=str(path), transactions=len(rows))
