"""
Shared test fixtures.

Tests run against their own SQLite file, never the real
database. Tables are created before each test and dropped
after it, so every test starts from an empty ledger.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from spending_ledger.main import app
from spending_ledger.models.base import Base, get_db, make_engine
from spending_ledger.services.ledger_service import LedgerService


TEST_DATABASE_URL = "sqlite:///./test.db"

# make_engine switches on SQLite foreign keys, which the
# cascade and restrict rules depend on
engine = make_engine(TEST_DATABASE_URL)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def ledger(db_session):
    """A LedgerService with the default accounts already created."""
    service = LedgerService(db_session)
    service.ensure_default_accounts()
    return service


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    get_db is overridden so the app uses the test session.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
