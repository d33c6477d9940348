"""
Database engine, session management, and base model.

The session is the ledger's persistence collaborator: select()
fetches, add() inserts, delete() removes, commit() saves. The
ledger never talks to the storage engine any other way.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from spending_ledger.config import get_settings

settings = get_settings()


def make_engine(url: str) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections get foreign keys switched on, otherwise
    the RESTRICT and CASCADE rules on journal_lines are ignored.
    """
    connect_args = {}
    if url.startswith("sqlite"):
        # The API may hand a session to a worker thread
        connect_args["check_same_thread"] = False

    engine = create_engine(
        url,
        pool_pre_ping=True,
        connect_args=connect_args,
    )

    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# --- Engine ---
engine = make_engine(settings.DATABASE_URL)

# --- Session Factory ---
# autocommit=False: a journal entry and its lines become durable
# in one commit() or not at all.
# autoflush=False: nothing is sent to the database until we
# flush or commit explicitly.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


# --- Base Model Class ---
class Base(DeclarativeBase):
    pass


def init_db(bind: Engine | None = None) -> None:
    """Create any missing tables."""
    # Import models so their tables are registered on Base.metadata
    import spending_ledger.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The try/finally guarantees the session is closed even
    when the endpoint raises.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
