"""FulfillmentService — atomic prescription fill and refill.

Pipeline: VALIDATE → CHECK STOCK → SCHEDULE → INSERT → DECREMENT → COMMIT → NOTIFY

Everything between CHECK STOCK and COMMIT runs in one store
transaction: a fill record and its stock decrement are written together
or not at all. Rejections (unknown ids, short stock, out-of-order
dates) happen before the first write. NOTIFY runs after commit and can
never undo or fail a fill.
"""

from __future__ import annotations

from datetime import date
from enum import StrEnum
from typing import Any

import structlog
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from rxctl.domain.chain import current_for
from rxctl.domain.records import FillRecord, FillRequest
from rxctl.domain.schedule import next_refill_date
from rxctl.infrastructure.ledger import Reservation, StockConflictError
from rxctl.services._helpers import validation_message
from rxctl.services.base import BaseService
from rxctl.services.result import ServiceResult

log = structlog.get_logger(__name__)


class FillState(StrEnum):
    """Progress of one fulfillment through its transaction."""

    STARTED = "started"
    STOCK_CHECKED = "stock_checked"
    RECORD_INSERTED = "record_inserted"
    STOCK_DECREMENTED = "stock_decremented"
    COMMITTED = "committed"


def _rolled_back(op: str, state: FillState, exc: Exception) -> ServiceResult:
    return ServiceResult.failure(
        op,
        "TRANSACTION_FAILED",
        "Fulfillment rolled back; no stock or records were changed. Retry the fill.",
        state=str(state),
        reason=str(exc),
    )


class FulfillmentService(BaseService):
    """Coordinates stock deduction and fill-record insertion."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def fill_prescription(
        self,
        patient_id: int,
        medication_id: int,
        *,
        prescriber: str,
        sig: str,
        quantity: int,
        days_supply: int,
        fill_date: date,
        refills: int = 0,
        actor: str | None = None,
    ) -> ServiceResult:
        """Fill a new prescription for a patient/medication pair."""
        op = "fill"
        try:
            request = FillRequest(
                patient_id=patient_id,
                medication_id=medication_id,
                prescriber=prescriber,
                sig=sig,
                quantity=quantity,
                refills=refills,
                days_supply=days_supply,
                fill_date=fill_date,
                actor=actor or self._store.settings.user,
            )
        except ValidationError as exc:
            return ServiceResult.failure(op, "VALIDATION_FAILED", validation_message(exc))
        return self._fulfill(request, op=op)

    def refill(
        self,
        fill_id: int,
        *,
        fill_date: date,
        actor: str | None = None,
    ) -> ServiceResult:
        """Refill a pair from its current record.

        Prescriber, instructions, quantity and days supply carry over;
        the refills-authorized count drops by one (never below zero).
        """
        op = "refill"
        prior = self._store.fills.get(fill_id)
        if prior is None:
            return ServiceResult.failure(
                op, "NOT_FOUND", f"No fill record found with ID: {fill_id}", fill_id=fill_id
            )

        warnings: list[str] = []
        if prior.refills == 0:
            warnings.append(f"Rx #{prior.id} has no refills remaining")

        try:
            request = FillRequest(
                patient_id=prior.patient_id,
                medication_id=prior.medication_id,
                prescriber=prior.prescriber,
                sig=prior.sig,
                quantity=prior.quantity,
                refills=max(prior.refills - 1, 0),
                days_supply=prior.days_supply,
                fill_date=fill_date,
                actor=actor or self._store.settings.user,
            )
        except ValidationError as exc:
            return ServiceResult.failure(op, "VALIDATION_FAILED", validation_message(exc))
        return self._fulfill(request, op=op, refill_of=prior.id, warnings=warnings)

    # ------------------------------------------------------------------
    # Transaction (private)
    # ------------------------------------------------------------------

    def _fulfill(
        self,
        request: FillRequest,
        *,
        op: str,
        refill_of: int | None = None,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        warnings = list(warnings or [])
        pid, mid, qty = request.patient_id, request.medication_id, request.quantity
        flog = log.bind(op=op, patient_id=pid, medication_id=mid, quantity=qty)
        state = FillState.STARTED

        try:
            with self._store.transaction() as txn:
                # ── VALIDATE ─────────────────────────────────────────
                if not txn.patient_exists(pid):
                    return ServiceResult.failure(
                        op, "NOT_FOUND", f"No patient found with ID: {pid}", patient_id=pid
                    )

                current = current_for(txn.pair_records(pid, mid), (pid, mid))
                rejection = self._check_chain(op, request, current, refill_of)
                if rejection is not None:
                    assert rejection.error is not None
                    flog.info("fill.rejected", code=rejection.error.code)
                    return rejection

                # ── CHECK STOCK ──────────────────────────────────────
                reservation = txn.reserve_stock(mid, qty)
                if reservation is Reservation.NOT_FOUND:
                    return ServiceResult.failure(
                        op, "NOT_FOUND", f"No medication found with ID: {mid}", medication_id=mid
                    )
                if reservation is Reservation.INSUFFICIENT_STOCK:
                    available = txn.stock_of(mid)
                    flog.info("fill.rejected", code="INSUFFICIENT_STOCK", available=available)
                    return ServiceResult.failure(
                        op,
                        "INSUFFICIENT_STOCK",
                        f"Insufficient stock: requested {qty}, only {available} on hand",
                        medication_id=mid,
                        requested=qty,
                        available=available,
                    )
                state = FillState.STOCK_CHECKED

                # ── SCHEDULE + INSERT ────────────────────────────────
                due = next_refill_date(request.fill_date, request.days_supply)
                fill_id = txn.insert_fill(
                    patient_id=pid,
                    medication_id=mid,
                    prescriber=request.prescriber,
                    sig=request.sig,
                    quantity=qty,
                    refills=request.refills,
                    days_supply=request.days_supply,
                    fill_date=request.fill_date,
                    next_refill_date=due,
                )
                state = FillState.RECORD_INSERTED

                # ── DECREMENT ────────────────────────────────────────
                remaining = txn.decrement_stock(mid, qty)
                state = FillState.STOCK_DECREMENTED
        except StockConflictError as exc:
            # Another fill drew stock down after the check; see what is left now.
            row = self._store.directory.get_medication(mid)
            available = row["stock"] if row is not None else None
            flog.warning("fill.stock_conflict", state=str(state), available=available)
            if available is not None and available < qty:
                return ServiceResult.failure(
                    op,
                    "INSUFFICIENT_STOCK",
                    f"Insufficient stock: requested {qty}, only {available} on hand",
                    medication_id=mid,
                    requested=qty,
                    available=available,
                    state=str(state),
                )
            return _rolled_back(op, state, exc)
        except SQLAlchemyError as exc:
            flog.warning("fill.rolled_back", state=str(state), error=str(exc))
            return _rolled_back(op, state, exc)
        state = FillState.COMMITTED

        record = FillRecord(
            id=fill_id,
            patient_id=pid,
            medication_id=mid,
            prescriber=request.prescriber,
            sig=request.sig,
            quantity=qty,
            refills=request.refills,
            days_supply=request.days_supply,
            fill_date=request.fill_date,
            next_refill_date=due,
        )
        flog.info("fill.committed", fill_id=fill_id, stock_remaining=remaining)

        # ── NOTIFY ───────────────────────────────────────────────────
        self._dispatch_event(
            "post_fill",
            {
                "actor": request.actor,
                "fill_id": fill_id,
                "patient_id": pid,
                "medication_id": mid,
                "quantity": qty,
                "stock_remaining": remaining,
                "refill_of": refill_of,
            },
            warnings,
        )

        data: dict[str, Any] = record.to_view()
        data["stock_remaining"] = remaining
        data["refill_of"] = refill_of
        data["state"] = str(state)
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    @staticmethod
    def _check_chain(
        op: str,
        request: FillRequest,
        current: FillRecord | None,
        refill_of: int | None,
    ) -> ServiceResult | None:
        """Reject fills that would break the pair's append-only ordering."""
        if refill_of is not None and (current is None or current.id != refill_of):
            current_id = current.id if current is not None else None
            return ServiceResult.failure(
                op,
                "NOT_CURRENT",
                f"Rx #{refill_of} has been superseded by Rx #{current_id}; refill that instead",
                fill_id=refill_of,
                current_id=current_id,
            )
        if current is not None and request.fill_date < current.fill_date:
            return ServiceResult.failure(
                op,
                "OUT_OF_ORDER",
                (
                    f"Fill date {request.fill_date.isoformat()} precedes the current fill "
                    f"Rx #{current.id} ({current.fill_date.isoformat()})"
                ),
                current_id=current.id,
            )
        return None
