"""Inventory ledger — per-medication stock check and decrement.

The caller owns the transaction: pass a ``Connection`` obtained from
``engine.begin()`` so the decrement commits or rolls back with the
surrounding writes.

:func:`reserve` is a plain read. pysqlite only opens the write
transaction at the first INSERT or UPDATE, so another writer can still
commit between the check and the decrement. The guarded decrement
(``UPDATE ... WHERE stock >= quantity``) is what prevents over-draw:
when it matches no row, :class:`StockConflictError` is raised and the
whole transaction rolls back.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import select, update

from rxctl.infrastructure.database.schema import medications

if TYPE_CHECKING:
    from sqlalchemy import Connection


class Reservation(StrEnum):
    """Outcome of a stock reservation."""

    OK = "ok"
    INSUFFICIENT_STOCK = "insufficient_stock"
    NOT_FOUND = "not_found"


class StockConflictError(RuntimeError):
    """The guarded decrement found less stock than the reservation saw."""

    def __init__(self, medication_id: int, quantity: int) -> None:
        super().__init__(
            f"Stock for medication {medication_id} changed during fulfillment "
            f"(needed {quantity})"
        )
        self.medication_id = medication_id
        self.quantity = quantity


def current_stock(conn: Connection, medication_id: int) -> int | None:
    """Return the stock of *medication_id*, or None if it does not exist."""
    return conn.execute(
        select(medications.c.stock).where(medications.c.id == medication_id)
    ).scalar_one_or_none()


def reserve(conn: Connection, medication_id: int, quantity: int) -> Reservation:
    """Check that *quantity* units of *medication_id* are available.

    Performs no write.
    """
    stock = current_stock(conn, medication_id)
    if stock is None:
        return Reservation.NOT_FOUND
    if stock < quantity:
        return Reservation.INSUFFICIENT_STOCK
    return Reservation.OK


def decrement(conn: Connection, medication_id: int, quantity: int) -> int:
    """Deduct *quantity* units after a successful :func:`reserve`.

    Returns the stock remaining after the decrement.

    Raises:
        StockConflictError: If the guard no longer holds.
    """
    result = conn.execute(
        update(medications)
        .where(medications.c.id == medication_id, medications.c.stock >= quantity)
        .values(stock=medications.c.stock - quantity)
    )
    if result.rowcount != 1:
        raise StockConflictError(medication_id, quantity)

    remaining = current_stock(conn, medication_id)
    assert remaining is not None
    return remaining
