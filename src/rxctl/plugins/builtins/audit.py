"""Built-in audit plugin — append-only action log.

The sink writes one ``audit_log`` row per lifecycle event in its own
short transaction, outside the transaction that produced the event.
A failed write is logged and dropped: audit is best-effort and must
never fail or roll back the operation it describes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import pluggy
from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError

from rxctl.infrastructure.database.schema import audit_log
from rxctl.services._helpers import now_iso

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

hookimpl = pluggy.HookimplMarker("rxctl")

logger = logging.getLogger(__name__)


class AuditSink:
    """Append-only writer for audit entries."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def record(self, actor: str, action: str, detail: str) -> bool:
        """Append an entry. Returns False (after logging) if the write failed."""
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    insert(audit_log).values(
                        username=actor,
                        action=action,
                        details=detail,
                        timestamp=now_iso(),
                    )
                )
        except SQLAlchemyError:
            logger.warning("Audit write failed for %s by %s", action, actor, exc_info=True)
            return False
        return True


class AuditPlugin:
    """Translates lifecycle hooks into audit entries."""

    def __init__(self, sink: AuditSink) -> None:
        self._sink = sink

    @hookimpl
    def post_fill(
        self,
        actor: str,
        fill_id: int,
        patient_id: int,
        medication_id: int,
        quantity: int,
        stock_remaining: int,
        refill_of: int | None,
    ) -> None:
        action = "REFILL_PRESCRIPTION" if refill_of is not None else "FILL_PRESCRIPTION"
        detail = (
            f"Rx #{fill_id}: {quantity} units of medication {medication_id} "
            f"for patient {patient_id} ({stock_remaining} left)"
        )
        if refill_of is not None:
            detail += f", refill of Rx #{refill_of}"
        self._sink.record(actor, action, detail)

    @hookimpl
    def post_patient_add(self, actor: str, patient_id: int, name: str) -> None:
        self._sink.record(actor, "ADD_PATIENT", f"Patient #{patient_id}: {name}")

    @hookimpl
    def post_medication_add(self, actor: str, medication_id: int, name: str, din: str) -> None:
        detail = f"Medication #{medication_id}: {name} (DIN {din})"
        self._sink.record(actor, "ADD_MEDICATION", detail)

    @hookimpl
    def post_medication_update(
        self,
        actor: str,
        medication_id: int,
        changes: dict[str, Any],
    ) -> None:
        fields = ", ".join(f"{k}={v}" for k, v in sorted(changes.items()))
        self._sink.record(actor, "UPDATE_MEDICATION", f"Medication #{medication_id}: {fields}")
