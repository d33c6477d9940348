"""
Snapshot writer shared by the exporters.

A snapshot is a fresh SQLite file holding flat tables. Writing
is all or nothing: on any failure the partial file is removed
and a typed ExportError is raised, chained to the cause.
"""

import logging
import time
from collections.abc import Iterable
from pathlib import Path

from sqlalchemy import MetaData, Table, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from spending_ledger.config import get_settings
from spending_ledger.exceptions import (
    ExportError,
    RowWriteFailed,
    SchemaFailed,
    SnapshotCreationFailed,
)
from spending_ledger.models.base import make_engine

logger = logging.getLogger(__name__)


def default_snapshot_path(export_dir: str | Path | None = None) -> Path:
    """<EXPORT_DIR>/spending_money_<epoch millis>.db"""
    directory = Path(export_dir or get_settings().EXPORT_DIR)
    return directory / f"spending_money_{int(time.time() * 1000)}.db"


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.exception("Could not remove partial snapshot %s", path)


def _open(path: Path) -> Engine:
    """Replace whatever is at path with an empty SQLite database."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.unlink(missing_ok=True)
        engine = make_engine(f"sqlite:///{path}")
        # Connecting is what actually creates the file
        with engine.connect():
            pass
    except (OSError, SQLAlchemyError) as e:
        _discard(path)
        raise SnapshotCreationFailed(
            f"Failed to create snapshot database at {path}"
        ) from e
    return engine


def write_snapshot(
    path: Path,
    metadata: MetaData,
    rows: Iterable[tuple[Table, list[dict]]],
    views: Iterable[str] = (),
) -> Path:
    """
    Create a snapshot at path from table definitions and rows.

    Tables are filled in the order given, so parents must come
    before the tables that reference them.
    """
    path = Path(path)
    engine = _open(path)
    try:
        try:
            metadata.create_all(engine)
            with engine.begin() as conn:
                for view in views:
                    conn.execute(text(view))
        except SQLAlchemyError as e:
            raise SchemaFailed("Failed to create snapshot tables") from e

        with engine.begin() as conn:
            for table, table_rows in rows:
                if not table_rows:
                    continue
                try:
                    conn.execute(table.insert(), table_rows)
                except SQLAlchemyError as e:
                    raise RowWriteFailed(
                        f"Failed to write rows into {table.name}"
                    ) from e
    except Exception as e:
        engine.dispose()
        _discard(path)
        logger.exception("Snapshot export to %s failed", path)
        if isinstance(e, ExportError):
            raise
        raise RowWriteFailed(f"Failed to write snapshot {path}") from e

    engine.dispose()
    logger.info("Wrote snapshot %s", path)
    return path
