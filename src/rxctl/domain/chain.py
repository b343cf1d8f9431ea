"""Refill chain resolution — latest wins, history retained.

Each (patient, medication) pair owns an append-only chain of fill
records. The *current* record of a chain is the one no other record in
the same pair succeeds, i.e. the record with the maximum identity.

Resolution is a single grouping pass that tracks the max identity per
pair key. It relies on identities growing monotonically in creation
order; :func:`chain_anomalies` reports records that violate that
assumption instead of letting them resolve silently.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from rxctl.domain.records import FillRecord, PairKey


class ChainIntegrityError(ValueError):
    """Raised when two fill records share an identity."""


@dataclass(frozen=True)
class ChainAnomaly:
    """A record whose fill date precedes an earlier-identity record of its pair."""

    pair: PairKey
    record_id: int
    predecessor_id: int

    def describe(self) -> str:
        patient_id, medication_id = self.pair
        return (
            f"Fill {self.record_id} (patient {patient_id}, medication {medication_id}) "
            f"is dated before its predecessor {self.predecessor_id}"
        )


def current_records(records: Iterable[FillRecord]) -> list[FillRecord]:
    """Return the current record of every pair, ordered by identity.

    Pairs with zero records have no entry. Input order does not matter.

    Raises:
        ChainIntegrityError: If an identity appears more than once.
    """
    latest: dict[PairKey, FillRecord] = {}
    seen: set[int] = set()
    for record in records:
        if record.id in seen:
            msg = f"Duplicate fill record identity: {record.id}"
            raise ChainIntegrityError(msg)
        seen.add(record.id)

        held = latest.get(record.pair)
        if held is None or record.id > held.id:
            latest[record.pair] = record
    return sorted(latest.values(), key=lambda r: r.id)


def current_for(records: Iterable[FillRecord], pair: PairKey) -> FillRecord | None:
    """Return the current record of a single *pair*, or None if it has no records."""
    best: FillRecord | None = None
    for record in records:
        if record.pair == pair and (best is None or record.id > best.id):
            best = record
    return best


def chain_for(records: Iterable[FillRecord], pair: PairKey) -> list[FillRecord]:
    """Return the full history of *pair* in identity (creation) order."""
    return sorted((r for r in records if r.pair == pair), key=lambda r: r.id)


def chain_anomalies(records: Iterable[FillRecord]) -> list[ChainAnomaly]:
    """Detect chains whose identity order disagrees with fill-date order.

    An out-of-band insert with a newer identity but an older fill date
    would otherwise become "current" and hide the real latest fill.
    """
    by_pair: dict[PairKey, list[FillRecord]] = {}
    for record in records:
        by_pair.setdefault(record.pair, []).append(record)

    anomalies: list[ChainAnomaly] = []
    for pair, chain in by_pair.items():
        chain.sort(key=lambda r: r.id)
        newest = chain[0]
        for record in chain[1:]:
            if record.fill_date < newest.fill_date:
                anomalies.append(
                    ChainAnomaly(pair=pair, record_id=record.id, predecessor_id=newest.id)
                )
            else:
                newest = record
    return sorted(anomalies, key=lambda a: a.record_id)
