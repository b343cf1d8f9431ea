"""Due-date scheduling arithmetic.

Dates are calendar dates only: no timezone component, no wall-clock
access. Callers always pass the reference date ``now`` explicitly.
"""

from __future__ import annotations

from datetime import date, timedelta

from rxctl.domain.records import DueFilter, DueStatus

DUE_SOON_DAYS = 7


def next_refill_date(fill_date: date, days_supply: int) -> date:
    """Return ``fill_date + days_supply`` calendar days.

    Raises:
        ValueError: If *days_supply* is not positive.
    """
    if days_supply <= 0:
        msg = f"days_supply must be positive, got {days_supply}"
        raise ValueError(msg)
    return fill_date + timedelta(days=days_supply)


def classify(refill_date: date, now: date, *, soon_days: int = DUE_SOON_DAYS) -> DueStatus:
    """Classify a next-refill date relative to *now*.

    ``refill_date <= now`` is due today (overdue included); the window
    ``now < refill_date <= now + soon_days`` is due soon. The two are
    mutually exclusive, so a refill date equal to *now* is never due soon.
    """
    if refill_date <= now:
        return DueStatus.DUE_TODAY
    if refill_date <= now + timedelta(days=soon_days):
        return DueStatus.DUE_SOON
    return DueStatus.NOT_DUE


def matches_filter(status: DueStatus, due_filter: DueFilter) -> bool:
    """Whether *status* is selected by a due-list *due_filter*."""
    if due_filter is DueFilter.TODAY:
        return status is DueStatus.DUE_TODAY
    return status is DueStatus.DUE_SOON
