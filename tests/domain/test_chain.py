"""Tests for latest-wins refill chain resolution."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from rxctl.domain.chain import (
    ChainIntegrityError,
    chain_anomalies,
    chain_for,
    current_for,
    current_records,
)
from rxctl.domain.records import FillRecord


def _record(
    record_id: int,
    patient_id: int = 3,
    medication_id: int = 5,
    fill_date: date = date(2023, 11, 1),
    days_supply: int = 10,
) -> FillRecord:
    return FillRecord(
        id=record_id,
        patient_id=patient_id,
        medication_id=medication_id,
        prescriber="Dr. Patel",
        sig="1 tab PO daily",
        quantity=10,
        refills=0,
        days_supply=days_supply,
        fill_date=fill_date,
        next_refill_date=fill_date + timedelta(days=days_supply),
    )


class TestCurrentRecords:
    def test_max_identity_wins(self) -> None:
        records = [_record(10), _record(17, fill_date=date(2023, 11, 11))]
        current = current_records(records)
        assert [r.id for r in current] == [17]

    def test_input_order_irrelevant(self) -> None:
        records = [_record(17, fill_date=date(2023, 11, 11)), _record(10)]
        assert [r.id for r in current_records(records)] == [17]

    def test_one_current_per_pair(self) -> None:
        records = [
            _record(1, patient_id=1, medication_id=1),
            _record(2, patient_id=1, medication_id=2),
            _record(3, patient_id=1, medication_id=1),
            _record(4, patient_id=2, medication_id=1),
        ]
        assert [r.id for r in current_records(records)] == [2, 3, 4]

    def test_empty(self) -> None:
        assert current_records([]) == []

    def test_duplicate_identity_rejected(self) -> None:
        with pytest.raises(ChainIntegrityError, match="Duplicate"):
            current_records([_record(5), _record(5, patient_id=9)])


class TestCurrentFor:
    def test_returns_latest_of_pair(self) -> None:
        records = [_record(10), _record(17), _record(20, patient_id=4)]
        current = current_for(records, (3, 5))
        assert current is not None
        assert current.id == 17

    def test_pair_without_records(self) -> None:
        assert current_for([_record(10)], (1, 1)) is None


class TestChainFor:
    def test_identity_order(self) -> None:
        records = [_record(17), _record(3, patient_id=1), _record(10)]
        assert [r.id for r in chain_for(records, (3, 5))] == [10, 17]


class TestChainAnomalies:
    def test_consistent_chain(self) -> None:
        records = [_record(10), _record(17, fill_date=date(2023, 11, 11))]
        assert chain_anomalies(records) == []

    def test_back_dated_record_flagged(self) -> None:
        records = [
            _record(10, fill_date=date(2023, 11, 11)),
            _record(17, fill_date=date(2023, 11, 1)),
        ]
        anomalies = chain_anomalies(records)
        assert len(anomalies) == 1
        assert anomalies[0].record_id == 17
        assert anomalies[0].predecessor_id == 10
        assert "dated before its predecessor 10" in anomalies[0].describe()

    def test_same_day_refill_is_not_an_anomaly(self) -> None:
        assert chain_anomalies([_record(10), _record(11)]) == []
