"""DirectoryService — patient and medication records.

Plain field storage with no derived state. The one stock write here is
an explicit catalog edit (``update_medication``); fulfillment
decrements go through :class:`~rxctl.services.fulfillment.FulfillmentService`.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.exc import IntegrityError

from rxctl.services._helpers import validation_message
from rxctl.services.base import BaseService
from rxctl.services.result import ServiceResult


class NewPatient(BaseModel):
    model_config = {"frozen": True}

    name: str = Field(min_length=1)
    birth_date: date
    phone: str = Field(min_length=1)
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    health_card_num: str | None = None
    allergies: str | None = None
    insurance_provider: str | None = None
    insurance_id: str | None = None


class NewMedication(BaseModel):
    model_config = {"frozen": True}

    name: str = Field(min_length=1)
    din: str = Field(min_length=1)
    ndc: str | None = None
    description: str | None = None
    stock: int = Field(default=0, ge=0)
    price: float = Field(default=0.0, ge=0)
    expiration: date


class MedicationChanges(BaseModel):
    model_config = {"frozen": True}

    stock: int | None = Field(default=None, ge=0)
    price: float | None = Field(default=None, ge=0)
    description: str | None = None


class DirectoryService(BaseService):
    """Handles patient and formulary records."""

    # ------------------------------------------------------------------
    # Patients
    # ------------------------------------------------------------------

    def add_patient(self, name: str, **fields: Any) -> ServiceResult:
        op = "add_patient"
        try:
            patient = NewPatient(name=name, **fields)
        except ValidationError as exc:
            return ServiceResult.failure(op, "VALIDATION_FAILED", validation_message(exc))

        values = patient.model_dump()
        values["birth_date"] = patient.birth_date.isoformat()
        with self._store.transaction() as txn:
            patient_id = self._store.directory.insert_patient(txn.conn, values)

        warnings: list[str] = []
        self._dispatch_event(
            "post_patient_add",
            {"actor": self._store.settings.user, "patient_id": patient_id, "name": patient.name},
            warnings,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": patient_id, "name": patient.name},
            warnings=warnings,
        )

    def list_patients(self, *, search: str | None = None) -> ServiceResult:
        """Patients by name; *search* keeps names containing it, ignoring case."""
        needle = search.strip() if search else None
        items = self._store.directory.list_patients(search=needle or None)
        return ServiceResult(
            ok=True,
            op="list_patients",
            data={"items": items, "count": len(items)},
            meta={"search": needle} if needle else None,
        )

    def get_patient(self, patient_id: int) -> ServiceResult:
        op = "get_patient"
        row = self._store.directory.get_patient(patient_id)
        if row is None:
            return ServiceResult.failure(op, "NOT_FOUND", f"No patient found with ID: {patient_id}")
        return ServiceResult(ok=True, op=op, data=row)

    # ------------------------------------------------------------------
    # Medications
    # ------------------------------------------------------------------

    def add_medication(self, name: str, **fields: Any) -> ServiceResult:
        op = "add_medication"
        try:
            med = NewMedication(name=name, **fields)
        except ValidationError as exc:
            return ServiceResult.failure(op, "VALIDATION_FAILED", validation_message(exc))

        values = med.model_dump()
        values["expiration"] = med.expiration.isoformat()
        try:
            with self._store.transaction() as txn:
                if self._store.directory.din_exists(txn.conn, med.din):
                    return ServiceResult.failure(
                        op, "DUPLICATE", f"A medication with DIN {med.din} already exists"
                    )
                medication_id = self._store.directory.insert_medication(txn.conn, values)
        except IntegrityError:
            return ServiceResult.failure(
                op, "DUPLICATE", f"A medication with DIN {med.din} already exists"
            )

        warnings: list[str] = []
        self._dispatch_event(
            "post_medication_add",
            {
                "actor": self._store.settings.user,
                "medication_id": medication_id,
                "name": med.name,
                "din": med.din,
            },
            warnings,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": medication_id, "name": med.name, "din": med.din, "stock": med.stock},
            warnings=warnings,
        )

    def list_medications(self, *, low_only: bool = False) -> ServiceResult:
        threshold = self._store.settings.dashboard.low_stock_threshold
        items = self._store.directory.list_medications(below=threshold if low_only else None)
        for item in items:
            item["low_stock"] = item["stock"] < threshold
        return ServiceResult(
            ok=True,
            op="list_medications",
            data={"items": items, "count": len(items)},
            meta={"low_stock_threshold": threshold},
        )

    def get_medication(self, medication_id: int) -> ServiceResult:
        op = "get_medication"
        row = self._store.directory.get_medication(medication_id)
        if row is None:
            return ServiceResult.failure(
                op, "NOT_FOUND", f"No medication found with ID: {medication_id}"
            )
        return ServiceResult(ok=True, op=op, data=row)

    def update_medication(
        self,
        medication_id: int,
        *,
        stock: int | None = None,
        price: float | None = None,
        description: str | None = None,
    ) -> ServiceResult:
        """Explicit stock/price/description edit (restock, price change, relabel)."""
        op = "update_medication"
        try:
            changes = MedicationChanges(stock=stock, price=price, description=description)
        except ValidationError as exc:
            return ServiceResult.failure(op, "VALIDATION_FAILED", validation_message(exc))

        values = changes.model_dump(exclude_none=True)
        if not values:
            return ServiceResult.failure(
                op, "VALIDATION_FAILED", "Nothing to update: pass stock, price, or description"
            )

        with self._store.transaction() as txn:
            if self._store.directory.get_medication(medication_id, conn=txn.conn) is None:
                return ServiceResult.failure(
                    op, "NOT_FOUND", f"No medication found with ID: {medication_id}"
                )
            self._store.directory.update_medication(txn.conn, medication_id, values)
            row = self._store.directory.get_medication(medication_id, conn=txn.conn)

        warnings: list[str] = []
        self._dispatch_event(
            "post_medication_update",
            {"actor": self._store.settings.user, "medication_id": medication_id, "changes": values},
            warnings,
        )
        assert row is not None
        return ServiceResult(
            ok=True,
            op=op,
            data={**row, "fields_changed": sorted(values)},
            warnings=warnings,
        )
