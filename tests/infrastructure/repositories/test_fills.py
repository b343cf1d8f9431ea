"""Tests for FillRepository read queries."""

from __future__ import annotations

from datetime import date

from tests.conftest import add_medication, add_patient, fill

from rxctl.infrastructure.store import Store


class TestFillRepository:
    def test_joins_display_names(self, store: Store) -> None:
        pid = add_patient(store, "Sarah Conner")
        mid = add_medication(store, "Amoxicillin", din="02243345", stock=500)
        data = fill(store, pid, mid)

        record = store.fills.get(data["id"])
        assert record is not None
        assert record.patient_name == "Sarah Conner"
        assert record.medication_name == "Amoxicillin"
        assert record.fill_date == date(2023, 11, 1)

    def test_get_missing(self, store: Store) -> None:
        assert store.fills.get(404) is None

    def test_pair_records_in_identity_order(self, store: Store) -> None:
        pid = add_patient(store)
        mid = add_medication(store, stock=500)
        other = add_medication(store, "Metformin", din="02242974", stock=500)
        first = fill(store, pid, mid)
        fill(store, pid, other)
        second = fill(store, pid, mid, fill_date=date(2023, 11, 11))

        records = store.fills.pair_records(pid, mid)
        assert [r.id for r in records] == [first["id"], second["id"]]
        assert store.fills.count() == 3

    def test_patient_records_span_medications(self, store: Store) -> None:
        pid = add_patient(store)
        someone_else = add_patient(store, "Sarah Conner")
        mid = add_medication(store, stock=500)
        other = add_medication(store, "Metformin", din="02242974", stock=500)
        first = fill(store, pid, mid)
        fill(store, someone_else, mid)
        second = fill(store, pid, other)

        records = store.fills.patient_records(pid)
        assert [r.id for r in records] == [first["id"], second["id"]]
        assert [r.medication_name for r in records] == ["Lisinopril", "Metformin"]
        assert store.fills.patient_records(404) == []

    def test_stock_levels(self, store: Store) -> None:
        add_medication(store, stock=30)
        add_medication(store, "Metformin", din="02242974", stock=150)
        assert sorted(store.fills.stock_levels()) == [30, 150]
