"""SQLAlchemy Core table definitions for the rxctl database.

Dates are ISO ``YYYY-MM-DD`` text; timestamps are ISO 8601 UTC text.
``medications.stock`` carries no CHECK constraint: the non-negative
invariant belongs to the fulfillment path and the ledger's guarded
decrement, not to the storage layer.
"""

from __future__ import annotations

from sqlalchemy import (
    REAL,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
)

metadata = MetaData()

patients = Table(
    "patients",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("birth_date", Text, nullable=False),
    Column("phone", Text, nullable=False),
    Column("email", Text),
    Column("address", Text),
    Column("city", Text),
    Column("state", Text),
    Column("postal_code", Text),
    Column("health_card_num", Text),
    Column("allergies", Text),
    Column("insurance_provider", Text),
    Column("insurance_id", Text),
)

medications = Table(
    "medications",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("din", Text, nullable=False, unique=True),  # Health Canada DIN
    Column("ndc", Text),  # US NDC / barcode
    Column("description", Text),
    Column("stock", Integer, nullable=False, default=0, server_default="0"),
    Column("price", REAL, nullable=False, default=0.0, server_default="0.0"),
    Column("expiration", Text, nullable=False),
)

# Append-only: rows are never updated or deleted. AUTOINCREMENT keeps
# identities monotonic even if the newest row is ever removed out of band.
fill_records = Table(
    "fill_records",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("patient_id", Integer, ForeignKey("patients.id"), nullable=False),
    Column("medication_id", Integer, ForeignKey("medications.id"), nullable=False),
    Column("prescriber", Text, nullable=False),
    Column("sig", Text, nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("refills", Integer, nullable=False, default=0, server_default="0"),
    Column("days_supply", Integer, nullable=False),
    Column("fill_date", Text, nullable=False),
    Column("next_refill_date", Text, nullable=False),
    sqlite_autoincrement=True,
)

audit_log = Table(
    "audit_log",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", Text, nullable=False),
    Column("action", Text, nullable=False),
    Column("details", Text),
    Column("timestamp", Text, nullable=False),
)

# ---------------------------------------------------------------------------
# Indexes for frequently filtered columns
# ---------------------------------------------------------------------------

Index("ix_fill_records_pair", fill_records.c.patient_id, fill_records.c.medication_id)
Index("ix_fill_records_next_refill", fill_records.c.next_refill_date)
Index("ix_medications_stock", medications.c.stock)
