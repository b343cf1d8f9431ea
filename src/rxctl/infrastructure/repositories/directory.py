"""Plain field storage for patients and medications.

No derived state lives here. Stock is written only through
:meth:`DirectoryRepository.update_medication` (an explicit catalog edit)
or by the fulfillment path via :mod:`rxctl.infrastructure.ledger`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import insert, select, update

from rxctl.infrastructure.database.schema import medications, patients

if TYPE_CHECKING:
    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

PATIENT_FIELDS = (
    "name",
    "birth_date",
    "phone",
    "email",
    "address",
    "city",
    "state",
    "postal_code",
    "health_card_num",
    "allergies",
    "insurance_provider",
    "insurance_id",
)

MEDICATION_FIELDS = ("name", "din", "ndc", "description", "stock", "price", "expiration")

MEDICATION_MUTABLE_FIELDS = frozenset({"stock", "price", "description"})


def patient_exists(conn: Connection, patient_id: int) -> bool:
    row = conn.execute(select(patients.c.id).where(patients.c.id == patient_id)).first()
    return row is not None


class DirectoryRepository:
    """Encapsulates SQL for patient and medication records."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    # ------------------------------------------------------------------
    # Patients
    # ------------------------------------------------------------------

    def insert_patient(self, conn: Connection, values: dict[str, Any]) -> int:
        row = {k: values.get(k) for k in PATIENT_FIELDS}
        result = conn.execute(insert(patients).values(**row))
        assert result.lastrowid is not None
        return int(result.lastrowid)

    def list_patients(self, *, search: str | None = None) -> list[dict[str, Any]]:
        """List patients by name, optionally only names containing *search* (any case)."""
        stmt = select(patients).order_by(patients.c.name)
        if search:
            stmt = stmt.where(patients.c.name.icontains(search, autoescape=True))
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [dict(row) for row in rows]

    def get_patient(self, patient_id: int) -> dict[str, Any] | None:
        stmt = select(patients).where(patients.c.id == patient_id)
        with self._engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return dict(row) if row is not None else None

    # ------------------------------------------------------------------
    # Medications
    # ------------------------------------------------------------------

    def insert_medication(self, conn: Connection, values: dict[str, Any]) -> int:
        row = {k: values.get(k) for k in MEDICATION_FIELDS}
        result = conn.execute(insert(medications).values(**row))
        assert result.lastrowid is not None
        return int(result.lastrowid)

    def din_exists(self, conn: Connection, din: str) -> bool:
        row = conn.execute(select(medications.c.id).where(medications.c.din == din)).first()
        return row is not None

    def list_medications(self, *, below: int | None = None) -> list[dict[str, Any]]:
        """List the formulary by name, optionally only stock strictly below *below*."""
        stmt = select(medications).order_by(medications.c.name)
        if below is not None:
            stmt = stmt.where(medications.c.stock < below)
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [dict(row) for row in rows]

    def get_medication(
        self,
        medication_id: int,
        *,
        conn: Connection | None = None,
    ) -> dict[str, Any] | None:
        stmt = select(medications).where(medications.c.id == medication_id)
        if conn is not None:
            row = conn.execute(stmt).mappings().first()
        else:
            with self._engine.connect() as read_conn:
                row = read_conn.execute(stmt).mappings().first()
        return dict(row) if row is not None else None

    def update_medication(
        self,
        conn: Connection,
        medication_id: int,
        changes: dict[str, Any],
    ) -> None:
        """Apply stock/price/description *changes*; other keys are ignored."""
        values = {k: v for k, v in changes.items() if k in MEDICATION_MUTABLE_FIELDS}
        if not values:
            return
        conn.execute(update(medications).where(medications.c.id == medication_id).values(**values))
