"""Business logic services."""

from spending_ledger.services.ledger_service import LedgerService
from spending_ledger.services.ledger_exporter import LedgerExporter
from spending_ledger.services.transaction_exporter import TransactionExporter

__all__ = ["LedgerService", "LedgerExporter", "TransactionExporter"]
