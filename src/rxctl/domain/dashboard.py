"""Dashboard aggregation over the current refill set.

Pure composition of :mod:`rxctl.domain.chain` and
:mod:`rxctl.domain.schedule`. Superseded history is never counted.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from rxctl.domain.chain import current_records
from rxctl.domain.records import DueFilter, DueStatus, FillRecord
from rxctl.domain.schedule import DUE_SOON_DAYS, classify, matches_filter

UPCOMING_LIMIT = 5


@dataclass(frozen=True)
class ClassifiedFill:
    """A current fill record paired with its due status."""

    record: FillRecord
    status: DueStatus


@dataclass(frozen=True)
class DueCounts:
    due_today: int
    due_soon: int


def _refill_order(item: ClassifiedFill) -> tuple[date, int]:
    return (item.record.next_refill_date, item.record.id)


def classify_current(
    records: Iterable[FillRecord],
    now: date,
    *,
    soon_days: int = DUE_SOON_DAYS,
) -> list[ClassifiedFill]:
    """Resolve current records and classify each one against *now*."""
    return [
        ClassifiedFill(record=r, status=classify(r.next_refill_date, now, soon_days=soon_days))
        for r in current_records(records)
    ]


def due_counts(classified: Iterable[ClassifiedFill]) -> DueCounts:
    today = soon = 0
    for item in classified:
        if item.status is DueStatus.DUE_TODAY:
            today += 1
        elif item.status is DueStatus.DUE_SOON:
            soon += 1
    return DueCounts(due_today=today, due_soon=soon)


def due_list(classified: Iterable[ClassifiedFill], due_filter: DueFilter) -> list[ClassifiedFill]:
    """Current records matching *due_filter*, ascending by next refill date."""
    selected = [c for c in classified if matches_filter(c.status, due_filter)]
    return sorted(selected, key=_refill_order)


def upcoming(
    classified: Iterable[ClassifiedFill],
    *,
    limit: int = UPCOMING_LIMIT,
) -> list[ClassifiedFill]:
    """All current records regardless of status, soonest first, capped at *limit*."""
    if limit <= 0:
        return []
    return sorted(classified, key=_refill_order)[:limit]


def low_stock_count(stock_levels: Iterable[int], threshold: int) -> int:
    """Number of medications whose stock is strictly below *threshold*."""
    return sum(1 for stock in stock_levels if stock < threshold)
