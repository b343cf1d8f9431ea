"""Fill records, fill requests, and due-status classification enums.

A FillRecord is immutable once created. A refill is a *new* record for
the same (patient, medication) pair, never an update of an old one.
"""

from __future__ import annotations

from datetime import date
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator

PairKey = tuple[int, int]


class DueStatus(StrEnum):
    """Refill-due classification of a current fill record."""

    DUE_TODAY = "due_today"
    DUE_SOON = "due_soon"
    NOT_DUE = "not_due"


class DueFilter(StrEnum):
    """Filters accepted by the due-list query."""

    TODAY = "today"
    SOON = "soon"


class FillRecord(BaseModel):
    """One dispensing event for a patient/medication pair.

    ``patient_name`` and ``medication_name`` are display fields joined in by
    the read repository; they are not part of the record's identity.
    """

    model_config = {"frozen": True}

    id: int
    patient_id: int
    medication_id: int
    prescriber: str
    sig: str
    quantity: int
    refills: int
    days_supply: int
    fill_date: date
    next_refill_date: date
    patient_name: str | None = None
    medication_name: str | None = None

    @property
    def pair(self) -> PairKey:
        """The (patient_id, medication_id) chain key."""
        return (self.patient_id, self.medication_id)

    def to_view(self, status: DueStatus | None = None) -> dict[str, Any]:
        """Serialize to a CurrentFillView dict (ISO dates)."""
        view: dict[str, Any] = {
            "id": self.id,
            "patient_id": self.patient_id,
            "patient_name": self.patient_name,
            "medication_id": self.medication_id,
            "medication_name": self.medication_name,
            "prescriber": self.prescriber,
            "sig": self.sig,
            "quantity": self.quantity,
            "refills": self.refills,
            "days_supply": self.days_supply,
            "fill_date": self.fill_date.isoformat(),
            "next_refill_date": self.next_refill_date.isoformat(),
        }
        if status is not None:
            view["status"] = str(status)
        return view


class FillRequest(BaseModel):
    """Validated input to the fulfillment coordinator."""

    model_config = {"frozen": True}

    patient_id: int
    medication_id: int
    prescriber: str = Field(min_length=1)
    sig: str = Field(min_length=1)
    quantity: int = Field(gt=0)
    refills: int = Field(default=0, ge=0)
    days_supply: int = Field(gt=0)
    fill_date: date
    actor: str = "system"

    @field_validator("prescriber", "sig")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            msg = "must not be blank"
            raise ValueError(msg)
        return stripped
