"""DashboardService — refill-due counts and lists.

Read-only surfaces using ``engine.connect()`` (no write transaction):
- stats: due-today / due-soon / low-stock counts
- due_list: current records due today or soon, soonest first
- upcoming: next refills across all current records, capped
- history: one pair's full refill chain with the current record flagged
- patient_history: every fill for one patient, current records flagged

Every surface takes an explicit reference date ``now`` so results are
reproducible: the same ``now`` over the same records gives the same answer.
"""

from __future__ import annotations

from datetime import date

from rxctl.domain import dashboard as agg
from rxctl.domain.chain import ChainIntegrityError, chain_anomalies, chain_for, current_records
from rxctl.domain.records import DueFilter, FillRecord
from rxctl.domain.schedule import classify
from rxctl.services.base import BaseService
from rxctl.services.result import ServiceResult


class DashboardService(BaseService):
    """Aggregates the current refill set for dashboards and work lists."""

    def stats(self, now: date) -> ServiceResult:
        """Due-today, due-soon, and low-stock counts as of *now*."""
        op = "dashboard_stats"
        loaded = self._classified(op, now)
        if isinstance(loaded, ServiceResult):
            return loaded
        classified, warnings = loaded

        cfg = self._store.settings.dashboard
        counts = agg.due_counts(classified)
        low = agg.low_stock_count(self._store.fills.stock_levels(), cfg.low_stock_threshold)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "due_today_count": counts.due_today,
                "due_soon_count": counts.due_soon,
                "low_stock_count": low,
                "active_count": len(classified),
            },
            warnings=warnings,
            meta={"now": now.isoformat(), "low_stock_threshold": cfg.low_stock_threshold},
        )

    def due_list(self, due_filter: DueFilter | str, now: date) -> ServiceResult:
        """Current records due today (overdue included) or soon, soonest first."""
        op = "due_list"
        try:
            selected_filter = DueFilter(due_filter)
        except ValueError:
            choices = ", ".join(f.value for f in DueFilter)
            return ServiceResult.failure(
                op, "VALIDATION_FAILED", f"Unknown due filter {due_filter!r}; expected {choices}"
            )

        loaded = self._classified(op, now)
        if isinstance(loaded, ServiceResult):
            return loaded
        classified, warnings = loaded

        items = [c.record.to_view(c.status) for c in agg.due_list(classified, selected_filter)]
        return ServiceResult(
            ok=True,
            op=op,
            data={"filter": selected_filter.value, "items": items, "count": len(items)},
            warnings=warnings,
            meta={"now": now.isoformat()},
        )

    def upcoming(self, now: date) -> ServiceResult:
        """The soonest refills across all current records, capped by config."""
        op = "upcoming"
        loaded = self._classified(op, now)
        if isinstance(loaded, ServiceResult):
            return loaded
        classified, warnings = loaded

        limit = self._store.settings.dashboard.upcoming_limit
        items = [c.record.to_view(c.status) for c in agg.upcoming(classified, limit=limit)]
        return ServiceResult(
            ok=True,
            op=op,
            data={"items": items, "count": len(items)},
            warnings=warnings,
            meta={"now": now.isoformat(), "limit": limit},
        )

    def history(self, patient_id: int, medication_id: int) -> ServiceResult:
        """A pair's refill chain in creation order, current record flagged."""
        op = "history"
        chain = chain_for(
            self._store.fills.pair_records(patient_id, medication_id),
            (patient_id, medication_id),
        )
        if not chain:
            return ServiceResult.failure(
                op,
                "NOT_FOUND",
                f"No fills for patient {patient_id} and medication {medication_id}",
                patient_id=patient_id,
                medication_id=medication_id,
            )

        current_id = chain[-1].id
        items = []
        for record in chain:
            view = record.to_view()
            view["current"] = record.id == current_id
            items.append(view)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "patient_id": patient_id,
                "medication_id": medication_id,
                "current_id": current_id,
                "items": items,
                "count": len(items),
            },
            warnings=[a.describe() for a in chain_anomalies(chain)],
        )

    def patient_history(self, patient_id: int, now: date) -> ServiceResult:
        """Every fill for one patient across all medications, oldest first.

        Each item carries ``current`` (not yet superseded by a refill) and
        its due ``status`` against *now*. Superseded fills are classified by
        their own next refill date, so a past refill reads as due today.
        """
        op = "patient_history"
        patient = self._store.directory.get_patient(patient_id)
        if patient is None:
            return ServiceResult.failure(
                op, "NOT_FOUND", f"No patient found with ID: {patient_id}", patient_id=patient_id
            )

        records = self._store.fills.patient_records(patient_id)
        try:
            current_ids = {r.id for r in current_records(records)}
        except ChainIntegrityError as exc:
            return ServiceResult.failure(op, "CHAIN_INTEGRITY", str(exc))

        soon_days = self._store.settings.dashboard.due_soon_days
        items = []
        for record in records:
            view = record.to_view(classify(record.next_refill_date, now, soon_days=soon_days))
            view["current"] = record.id in current_ids
            items.append(view)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "patient_id": patient_id,
                "patient_name": patient["name"],
                "items": items,
                "count": len(items),
                "current_count": len(current_ids),
            },
            warnings=[a.describe() for a in chain_anomalies(records)],
            meta={"now": now.isoformat()},
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _classified(
        self,
        op: str,
        now: date,
    ) -> tuple[list[agg.ClassifiedFill], list[str]] | ServiceResult:
        """Load all records, resolve the current set, classify against *now*."""
        records: list[FillRecord] = self._store.fills.all_records()
        soon_days = self._store.settings.dashboard.due_soon_days
        try:
            classified = agg.classify_current(records, now, soon_days=soon_days)
        except ChainIntegrityError as exc:
            return ServiceResult.failure(op, "CHAIN_INTEGRITY", str(exc))
        warnings = [a.describe() for a in chain_anomalies(records)]
        return classified, warnings
