"""
Liveness endpoint.

Answers without bootstrapping anything, so it can be polled
before the first /ledger/setup call.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from spending_ledger.config import get_settings
from spending_ledger.models.account import Account
from spending_ledger.models.base import get_db
from spending_ledger.services.ledger_service import DEFAULT_ACCOUNTS

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Report the app version, database reachability and which
    default accounts are still missing.
    """
    settings = get_settings()
    try:
        names = set(
            db.execute(
                select(Account.name).where(
                    Account.name.in_(list(DEFAULT_ACCOUNTS))
                )
            ).scalars()
        )
    except SQLAlchemyError:
        db.rollback()
        return {
            "status": "degraded",
            "version": settings.APP_VERSION,
            "database": "unreachable",
        }

    missing = [name for name in DEFAULT_ACCOUNTS if name not in names]
    return {
        "status": "ok",
        "version": settings.APP_VERSION,
        "database": "ok",
        "ledger_initialized": not missing,
        "missing_accounts": missing,
    }
