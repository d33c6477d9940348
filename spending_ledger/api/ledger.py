"""
Ledger API endpoints.

The API layer is thin: it maps HTTP to LedgerService and
LedgerExporter calls and turns ledger errors into status codes.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from spending_ledger.exceptions import (
    AccountHasLines,
    AccountNotFound,
    AccountsNotInitialized,
    EntryNotFound,
    ExportError,
    LedgerError,
    PersistFailed,
    TransactionNotFound,
)
from spending_ledger.models.base import get_db
from spending_ledger.services.ledger_exporter import LedgerExporter
from spending_ledger.services.ledger_service import LedgerService
from spending_ledger.schemas.ledger import (
    AccountResponse,
    AddMoneyRequest,
    BalanceResponse,
    ExportRequest,
    ExportResult,
    IntegrityResponse,
    JournalEntryResponse,
    SpendMoneyRequest,
)

router = APIRouter(prefix="/ledger", tags=["Ledger"])


def _status_for(error: LedgerError) -> int:
    if isinstance(
        error, (AccountNotFound, EntryNotFound, TransactionNotFound)
    ):
        return 404
    if isinstance(error, AccountHasLines):
        return 409
    if isinstance(error, (PersistFailed, ExportError, AccountsNotInitialized)):
        return 500
    return 400


def http_error(db: Session, error: LedgerError) -> HTTPException:
    db.rollback()
    return HTTPException(status_code=_status_for(error), detail=str(error))


def get_ledger_service(db: Session = Depends(get_db)) -> LedgerService:
    """A service with the default accounts resolved for this request."""
    service = LedgerService(db)
    try:
        service.ensure_default_accounts()
    except LedgerError as e:
        raise http_error(db, e)
    return service


@router.post("/setup", response_model=list[AccountResponse])
def setup_accounts(service: LedgerService = Depends(get_ledger_service)):
    """Create the default chart of accounts if it does not exist yet."""
    return [
        AccountResponse.from_account(a)
        for a in service.accounts.values()
    ]


@router.get("/accounts", response_model=list[AccountResponse])
def list_accounts(service: LedgerService = Depends(get_ledger_service)):
    """All accounts with their derived balances."""
    return [AccountResponse.from_account(a) for a in service.list_accounts()]


@router.delete("/accounts/{account_id}", status_code=204)
def delete_account(
    account_id: uuid.UUID,
    service: LedgerService = Depends(get_ledger_service),
):
    """Delete an account. Refused with 409 while lines reference it."""
    try:
        service.delete_account(account_id)
    except LedgerError as e:
        raise http_error(service.db, e)


@router.post(
    "/add-money", response_model=JournalEntryResponse, status_code=201
)
def add_money(
    request: AddMoneyRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    """Debit Spending Money, credit Contributions (or Sales)."""
    try:
        entry = service.add_money(
            request.amount,
            request.description,
            is_sale=request.is_sale,
            date=request.date,
        )
    except LedgerError as e:
        raise http_error(service.db, e)
    return JournalEntryResponse.from_entry(entry)


@router.post(
    "/spend-money", response_model=JournalEntryResponse, status_code=201
)
def spend_money(
    request: SpendMoneyRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    """Debit Purchases, credit Spending Money."""
    try:
        entry = service.spend_money(
            request.amount, request.description, date=request.date
        )
    except LedgerError as e:
        raise http_error(service.db, e)
    return JournalEntryResponse.from_entry(entry)


@router.get("/balance", response_model=BalanceResponse)
def get_balance(service: LedgerService = Depends(get_ledger_service)):
    """Current balance of the spending account."""
    return BalanceResponse(
        balance=service.current_balance(),
        formatted_balance=service.formatted_balance(),
    )


@router.get("/entries", response_model=list[JournalEntryResponse])
def list_entries(service: LedgerService = Depends(get_ledger_service)):
    """All journal entries, newest first."""
    return [JournalEntryResponse.from_entry(e) for e in service.list_entries()]


@router.get("/entries/{entry_id}", response_model=JournalEntryResponse)
def get_entry(
    entry_id: uuid.UUID,
    service: LedgerService = Depends(get_ledger_service),
):
    try:
        return JournalEntryResponse.from_entry(service.get_entry(entry_id))
    except LedgerError as e:
        raise http_error(service.db, e)


@router.delete("/entries/{entry_id}", status_code=204)
def delete_entry(
    entry_id: uuid.UUID,
    service: LedgerService = Depends(get_ledger_service),
):
    """Delete an entry and its lines."""
    try:
        service.delete_entry(entry_id)
    except LedgerError as e:
        raise http_error(service.db, e)


@router.get("/integrity", response_model=IntegrityResponse)
def check_integrity(service: LedgerService = Depends(get_ledger_service)):
    """Trial balance over every posted line."""
    return IntegrityResponse(**service.check_integrity())


@router.post("/export", response_model=ExportResult, status_code=201)
def export_ledger(
    request: ExportRequest,
    db: Session = Depends(get_db),
):
    """Write a SQLite snapshot of the ledger and report where it went."""
    try:
        return LedgerExporter(db).export(request.destination)
    except LedgerError as e:
        raise http_error(db, e)
