"""
Ledger error taxonomy.

Every error here is recoverable: it is raised to the caller,
never swallowed, and never used for normal control flow.
The API layer turns them into HTTP responses.
"""

from decimal import Decimal


class LedgerError(Exception):
    """Base class for all ledger failures."""


class InvalidAmount(LedgerError, ValueError):
    """A posting amount that cannot be stored as a positive amount."""

    def __init__(self, amount):
        self.amount = amount
        super().__init__(
            f"Amount must be a positive number with at most "
            f"4 decimal places, got {amount!r}"
        )


class AccountsNotInitialized(LedgerError):
    """A posting ran before the default accounts were resolved."""

    def __init__(self, missing: list[str] | None = None):
        self.missing = missing or []
        detail = "Accounts have not been properly initialized"
        if self.missing:
            detail += f" (missing: {', '.join(self.missing)})"
        super().__init__(detail)


class UnbalancedEntry(LedgerError):
    """Debits and credits of a journal entry differ."""

    def __init__(self, total_debits: Decimal, total_credits: Decimal):
        self.total_debits = total_debits
        self.total_credits = total_credits
        super().__init__(
            f"Journal entry is not balanced: "
            f"debits={total_debits}, credits={total_credits}"
        )


class AccountHasLines(LedgerError):
    """An account cannot be deleted while lines reference it."""

    def __init__(self, account_name: str, line_count: int):
        self.account_name = account_name
        self.line_count = line_count
        super().__init__(
            f"Account '{account_name}' has {line_count} journal "
            f"line(s) and cannot be deleted"
        )


class AccountNotFound(LedgerError):
    def __init__(self, account_id):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


class EntryNotFound(LedgerError):
    def __init__(self, entry_id):
        self.entry_id = entry_id
        super().__init__(f"Journal entry {entry_id} not found")


class TransactionNotFound(LedgerError):
    def __init__(self, transaction_id):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")


class ImmutableLineError(LedgerError):
    """A posted journal line was modified."""


class PersistFailed(LedgerError):
    """The storage layer failed; the original error is the __cause__."""


# --- Export errors ---

class ExportError(LedgerError):
    """Base class for snapshot export failures."""


class SnapshotCreationFailed(ExportError):
    """The snapshot file could not be created or opened."""


class SchemaFailed(ExportError):
    """Snapshot tables or views could not be created."""


class RowWriteFailed(ExportError):
    """A row could not be written into the snapshot."""
