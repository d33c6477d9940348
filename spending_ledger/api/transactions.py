"""
Flat transaction API endpoints.

Flat transactions are kept for import from older versions of
the app and for the flat export. They do not move ledger
balances until they are imported as journal entries.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from spending_ledger.api.ledger import http_error, get_ledger_service
from spending_ledger.exceptions import LedgerError, TransactionNotFound
from spending_ledger.models.base import get_db
from spending_ledger.models.simple_transaction import SimpleTransaction
from spending_ledger.schemas.ledger import ExportRequest, ExportResult
from spending_ledger.schemas.transaction import (
    ImportResult,
    SimpleTransactionCreate,
    SimpleTransactionResponse,
    TransactionSummary,
)
from spending_ledger.services.ledger_service import LedgerService
from spending_ledger.services.transaction_exporter import (
    TransactionExporter,
    summarize,
)

router = APIRouter(prefix="/transactions", tags=["Transactions"])


def _all_transactions(db: Session) -> list[SimpleTransaction]:
    return list(
        db.execute(
            select(SimpleTransaction).order_by(SimpleTransaction.date)
        ).scalars().all()
    )


def _get_transaction(
    db: Session, transaction_id: uuid.UUID
) -> SimpleTransaction:
    txn = db.get(SimpleTransaction, transaction_id)
    if not txn:
        raise http_error(db, TransactionNotFound(transaction_id))
    return txn


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.post("", response_model=SimpleTransactionResponse, status_code=201)
def record_transaction(
    request: SimpleTransactionCreate,
    db: Session = Depends(get_db),
):
    """Store a flat transaction."""
    try:
        txn = SimpleTransaction.create(
            request.amount,
            request.description,
            request.transaction_type,
            date=request.date,
        )
    except LedgerError as e:
        raise http_error(db, e)
    db.add(txn)
    _commit(db)
    return txn


@router.get("", response_model=list[SimpleTransactionResponse])
def list_transactions(db: Session = Depends(get_db)):
    return _all_transactions(db)


@router.get("/summary", response_model=TransactionSummary)
def transaction_summary(db: Session = Depends(get_db)):
    """Totals over all flat transactions."""
    return summarize(_all_transactions(db))


@router.put("/{transaction_id}", response_model=SimpleTransactionResponse)
def update_transaction(
    transaction_id: uuid.UUID,
    request: SimpleTransactionCreate,
    db: Session = Depends(get_db),
):
    """
    Replace a flat transaction's values, keeping its id.

    The stored date is kept when the request has none.
    """
    txn = _get_transaction(db, transaction_id)
    try:
        txn.revise(
            request.amount,
            request.description,
            request.transaction_type,
            date=request.date,
        )
    except LedgerError as e:
        raise http_error(db, e)
    _commit(db)
    return txn


@router.delete("/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    db.delete(_get_transaction(db, transaction_id))
    _commit(db)


@router.post("/export", response_model=ExportResult, status_code=201)
def export_transactions(
    request: ExportRequest,
    db: Session = Depends(get_db),
):
    """Write the flat transactions and their summary view to SQLite."""
    try:
        return TransactionExporter().export(
            _all_transactions(db), request.destination
        )
    except LedgerError as e:
        raise http_error(db, e)


@router.post("/import", response_model=ImportResult, status_code=201)
def import_transactions(
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Post every flat transaction into the ledger as a journal entry.

    All or nothing: a failing transaction leaves the ledger as it
    was. Not idempotent: a second successful import posts every
    transaction again.
    """
    try:
        entries = service.import_transactions(_all_transactions(service.db))
    except LedgerError as e:
        raise http_error(service.db, e)
    return ImportResult(
        imported=len(entries),
        entry_ids=[entry.id for entry in entries],
    )
