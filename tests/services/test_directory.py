"""Tests for DirectoryService — patients and formulary."""

from __future__ import annotations

from datetime import date

from sqlalchemy import select
from tests.conftest import add_medication, add_patient

from rxctl.infrastructure.database.schema import audit_log
from rxctl.infrastructure.store import Store
from rxctl.services.directory import DirectoryService


def _audit_actions(store: Store) -> list[str]:
    with store.engine.connect() as conn:
        return list(conn.execute(select(audit_log.c.action).order_by(audit_log.c.id)).scalars())


class TestPatients:
    def test_add_and_get(self, store: Store) -> None:
        svc = DirectoryService(store)
        result = svc.add_patient(
            "Sarah Conner",
            birth_date=date(1992, 8, 23),
            phone="604-555-0122",
            allergies="Sulfa Drugs",
        )
        assert result.ok
        assert result.op == "add_patient"

        got = svc.get_patient(result.data["id"])
        assert got.ok
        assert got.data["birth_date"] == "1992-08-23"
        assert got.data["allergies"] == "Sulfa Drugs"
        assert got.data["email"] is None
        assert _audit_actions(store) == ["ADD_PATIENT"]

    def test_blank_name_rejected(self, store: Store) -> None:
        result = DirectoryService(store).add_patient(
            "", birth_date=date(1990, 1, 1), phone="555-0100"
        )
        assert result.error.code == "VALIDATION_FAILED"
        assert "name" in result.error.message

    def test_list(self, store: Store) -> None:
        add_patient(store, "B Patient")
        add_patient(store, "A Patient")
        result = DirectoryService(store).list_patients()
        assert result.data["count"] == 2
        assert [p["name"] for p in result.data["items"]] == ["A Patient", "B Patient"]

    def test_search_matches_any_case(self, store: Store) -> None:
        add_patient(store, "John Smith")
        add_patient(store, "Jane Smithers")
        add_patient(store, "Arthur Dent")
        result = DirectoryService(store).list_patients(search="SMITH")
        assert [p["name"] for p in result.data["items"]] == ["Jane Smithers", "John Smith"]
        assert result.data["count"] == 2
        assert result.meta == {"search": "SMITH"}

    def test_search_without_match(self, store: Store) -> None:
        add_patient(store, "John Smith")
        result = DirectoryService(store).list_patients(search="conner")
        assert result.ok
        assert result.data == {"items": [], "count": 0}

    def test_search_treats_wildcards_literally(self, store: Store) -> None:
        add_patient(store, "John Smith")
        add_patient(store, "100% Pure")
        result = DirectoryService(store).list_patients(search="%")
        assert [p["name"] for p in result.data["items"]] == ["100% Pure"]

    def test_blank_search_lists_everyone(self, store: Store) -> None:
        add_patient(store, "John Smith")
        add_patient(store, "Arthur Dent")
        result = DirectoryService(store).list_patients(search="  ")
        assert result.data["count"] == 2
        assert result.meta is None

    def test_get_missing(self, store: Store) -> None:
        assert DirectoryService(store).get_patient(42).error.code == "NOT_FOUND"


class TestMedications:
    def test_add(self, store: Store) -> None:
        result = DirectoryService(store).add_medication(
            "Amoxicillin",
            din="02243345",
            description="500mg Capsule",
            stock=500,
            price=0.45,
            expiration=date(2025, 8, 15),
        )
        assert result.ok
        assert result.data["stock"] == 500
        assert _audit_actions(store) == ["ADD_MEDICATION"]

    def test_duplicate_din(self, store: Store) -> None:
        add_medication(store, din="02217479")
        result = DirectoryService(store).add_medication(
            "Other", din="02217479", expiration=date(2025, 1, 1)
        )
        assert result.error.code == "DUPLICATE"

    def test_negative_stock_rejected(self, store: Store) -> None:
        result = DirectoryService(store).add_medication(
            "Bad", din="1", stock=-1, expiration=date(2025, 1, 1)
        )
        assert result.error.code == "VALIDATION_FAILED"

    def test_list_low_only(self, store: Store) -> None:
        add_medication(store, "Lisinopril", stock=30)
        add_medication(store, "Amoxicillin", din="02243345", stock=500)
        svc = DirectoryService(store)

        everything = svc.list_medications()
        assert everything.data["count"] == 2
        flags = {m["name"]: m["low_stock"] for m in everything.data["items"]}
        assert flags == {"Lisinopril": True, "Amoxicillin": False}

        low = svc.list_medications(low_only=True)
        assert [m["name"] for m in low.data["items"]] == ["Lisinopril"]
        assert low.meta == {"low_stock_threshold": 100}

    def test_get_missing(self, store: Store) -> None:
        assert DirectoryService(store).get_medication(42).error.code == "NOT_FOUND"


class TestUpdateMedication:
    def test_restock(self, store: Store) -> None:
        mid = add_medication(store, stock=30)
        result = DirectoryService(store).update_medication(mid, stock=530)
        assert result.ok
        assert result.data["stock"] == 530
        assert result.data["fields_changed"] == ["stock"]
        assert _audit_actions(store)[-1] == "UPDATE_MEDICATION"

    def test_multiple_fields(self, store: Store) -> None:
        mid = add_medication(store)
        result = DirectoryService(store).update_medication(mid, price=0.5, description="Shelf A")
        assert result.data["fields_changed"] == ["description", "price"]
        assert result.data["price"] == 0.5

    def test_nothing_to_update(self, store: Store) -> None:
        mid = add_medication(store)
        result = DirectoryService(store).update_medication(mid)
        assert result.error.code == "VALIDATION_FAILED"

    def test_negative_stock_rejected(self, store: Store) -> None:
        mid = add_medication(store, stock=30)
        result = DirectoryService(store).update_medication(mid, stock=-5)
        assert result.error.code == "VALIDATION_FAILED"
        assert store.directory.get_medication(mid)["stock"] == 30

    def test_missing(self, store: Store) -> None:
        result = DirectoryService(store).update_medication(42, stock=1)
        assert result.error.code == "NOT_FOUND"
