"""Read and append access to the fill record store."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, insert, select

from rxctl.domain.records import FillRecord
from rxctl.infrastructure.database.schema import fill_records, medications, patients

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine


def _fill_select() -> Any:
    """SELECT of fill records joined with patient/medication display names."""
    return (
        select(
            fill_records,
            patients.c.name.label("patient_name"),
            medications.c.name.label("medication_name"),
        )
        .select_from(
            fill_records.outerjoin(patients, fill_records.c.patient_id == patients.c.id)
            .outerjoin(medications, fill_records.c.medication_id == medications.c.id)
        )
        .order_by(fill_records.c.id)
    )


def row_to_fill(row: Mapping[str, Any]) -> FillRecord:
    """Hydrate a FillRecord from a (possibly joined) row mapping."""
    return FillRecord(
        id=row["id"],
        patient_id=row["patient_id"],
        medication_id=row["medication_id"],
        prescriber=row["prescriber"],
        sig=row["sig"],
        quantity=row["quantity"],
        refills=row["refills"],
        days_supply=row["days_supply"],
        fill_date=date.fromisoformat(row["fill_date"]),
        next_refill_date=date.fromisoformat(row["next_refill_date"]),
        patient_name=row.get("patient_name"),
        medication_name=row.get("medication_name"),
    )


def insert_fill(
    conn: Connection,
    *,
    patient_id: int,
    medication_id: int,
    prescriber: str,
    sig: str,
    quantity: int,
    refills: int,
    days_supply: int,
    fill_date: date,
    next_refill_date: date,
) -> int:
    """Append a fill record inside the caller's transaction. Returns its identity."""
    result = conn.execute(
        insert(fill_records).values(
            patient_id=patient_id,
            medication_id=medication_id,
            prescriber=prescriber,
            sig=sig,
            quantity=quantity,
            refills=refills,
            days_supply=days_supply,
            fill_date=fill_date.isoformat(),
            next_refill_date=next_refill_date.isoformat(),
        )
    )
    assert result.lastrowid is not None
    return int(result.lastrowid)


def pair_records(conn: Connection, patient_id: int, medication_id: int) -> list[FillRecord]:
    """All records of one pair, in identity order, on the caller's connection."""
    stmt = _fill_select().where(
        fill_records.c.patient_id == patient_id,
        fill_records.c.medication_id == medication_id,
    )
    return [row_to_fill(row) for row in conn.execute(stmt).mappings()]


class FillRepository:
    """Encapsulates SQL for read-side fill record queries."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def all_records(self) -> list[FillRecord]:
        """Every fill record, in identity order, with display names."""
        with self._engine.connect() as conn:
            rows = conn.execute(_fill_select()).mappings().all()
        return [row_to_fill(row) for row in rows]

    def pair_records(self, patient_id: int, medication_id: int) -> list[FillRecord]:
        with self._engine.connect() as conn:
            return pair_records(conn, patient_id, medication_id)

    def patient_records(self, patient_id: int) -> list[FillRecord]:
        """Every fill for one patient across all medications, in identity order."""
        stmt = _fill_select().where(fill_records.c.patient_id == patient_id)
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [row_to_fill(row) for row in rows]

    def get(self, fill_id: int) -> FillRecord | None:
        with self._engine.connect() as conn:
            stmt = _fill_select().where(fill_records.c.id == fill_id)
            row = conn.execute(stmt).mappings().first()
        return row_to_fill(row) if row is not None else None

    def count(self) -> int:
        with self._engine.connect() as conn:
            return int(conn.execute(select(func.count(fill_records.c.id))).scalar_one())

    def stock_levels(self) -> list[int]:
        """Current stock of every medication."""
        with self._engine.connect() as conn:
            return [int(s) for s in conn.execute(select(medications.c.stock)).scalars()]
