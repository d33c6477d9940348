"""
Spending Ledger: FastAPI application.

This is the entry point for the application.
All routers are registered here.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from spending_ledger.config import get_settings
from spending_ledger.logging_utils import configure_logging
from spending_ledger.models.base import init_db
from spending_ledger.api.health import router as health_router
from spending_ledger.api.ledger import router as ledger_router
from spending_ledger.api.transactions import router as transactions_router

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Double-entry ledger for a single spending account",
    lifespan=lifespan,
)

# Register routers
app.include_router(health_router)
app.include_router(ledger_router)
app.include_router(transactions_router)
