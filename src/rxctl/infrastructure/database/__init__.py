"""SQLite database engine and schema via SQLAlchemy Core."""

from rxctl.infrastructure.database.engine import create_db_engine, init_database
from rxctl.infrastructure.database.schema import (
    audit_log,
    fill_records,
    medications,
    metadata,
    patients,
)

__all__ = [
    "audit_log",
    "create_db_engine",
    "fill_records",
    "init_database",
    "medications",
    "metadata",
    "patients",
]
