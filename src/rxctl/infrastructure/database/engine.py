"""Database engine setup for SQLite with WAL mode.

WAL mode lets dashboard reads run alongside a fulfillment write; the
busy timeout bounds how long a second writer waits for the lock before
its transaction fails. The DB is stored at {data_root}/.rxctl/rxctl.db.

SQLAlchemy Core (not ORM) is used because rxctl is a short-lived CLI
process with a handful of tables and explicit transaction boundaries.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from rxctl.infrastructure.database.schema import metadata

DB_DIRNAME = ".rxctl"
DB_FILENAME = "rxctl.db"


def create_db_engine(db_path: Path, *, busy_timeout: float = 5.0) -> Engine:
    """Create a SQLite engine with WAL mode and foreign keys enabled."""
    engine = create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"timeout": busy_timeout, "check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def init_database(data_root: Path, *, busy_timeout: float = 5.0) -> Engine:
    """Initialize the rxctl database at ``{data_root}/.rxctl/rxctl.db``.

    Creates the ``.rxctl/`` directory and all tables from
    :data:`schema.metadata`. Idempotent — safe to call on an existing
    database.

    Returns the engine ready for use.
    """
    db_dir = data_root / DB_DIRNAME
    db_dir.mkdir(parents=True, exist_ok=True)

    engine = create_db_engine(db_dir / DB_FILENAME, busy_timeout=busy_timeout)
    metadata.create_all(engine)
    return engine
