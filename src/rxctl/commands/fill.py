"""Commands: fill a new prescription, refill an existing one."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import click

from rxctl.commands._base import ISO_DATE, RxCommand
from rxctl.services.fulfillment import FulfillmentService

if TYPE_CHECKING:
    from rxctl.commands._context import AppContext

_FILL_EXAMPLES = """\
  rxctl fill 1 2 --prescriber "Dr. Patel" --sig "1 tab PO daily" --quantity 30 --days-supply 30
  rxctl fill 3 5 --prescriber "Dr. Wong" --sig "2 puffs q4h prn" --quantity 1 \\
      --days-supply 25 --refills 3 --date 2023-11-01
  rxctl --json --user jdoe fill 1 2 --prescriber "Dr. Patel" --sig "..." -n 10 -d 10"""

_REFILL_EXAMPLES = """\
  rxctl refill 17
  rxctl refill 17 --date 2023-11-11
  rxctl --json refill 17"""


@click.command("fill", cls=RxCommand, examples=_FILL_EXAMPLES)
@click.argument("patient_id", type=int)
@click.argument("medication_id", type=int)
@click.option("--prescriber", required=True, help="Prescribing physician.")
@click.option("--sig", required=True, help="Directions for use.")
@click.option("-n", "--quantity", required=True, type=int, help="Units to dispense.")
@click.option(
    "-d", "--days-supply", required=True, type=int, help="Days the dispensed quantity lasts."
)
@click.option("--refills", default=0, show_default=True, type=int, help="Refills authorized.")
@click.option("--date", "fill_date", type=ISO_DATE, default=None, help="Fill date (default today).")
@click.pass_obj
def fill(
    app: AppContext,
    patient_id: int,
    medication_id: int,
    prescriber: str,
    sig: str,
    quantity: int,
    days_supply: int,
    refills: int,
    fill_date: datetime | None,
) -> None:
    """Dispense a prescription and deduct it from stock."""
    svc = FulfillmentService(app.store)
    app.emit(
        svc.fill_prescription(
            patient_id,
            medication_id,
            prescriber=prescriber,
            sig=sig,
            quantity=quantity,
            days_supply=days_supply,
            refills=refills,
            fill_date=app.as_date(fill_date),
        )
    )


@click.command("refill", cls=RxCommand, examples=_REFILL_EXAMPLES)
@click.argument("fill_id", type=int)
@click.option("--date", "fill_date", type=ISO_DATE, default=None, help="Fill date (default today).")
@click.pass_obj
def refill(app: AppContext, fill_id: int, fill_date: datetime | None) -> None:
    """Refill from a pair's current fill record."""
    svc = FulfillmentService(app.store)
    app.emit(svc.refill(fill_id, fill_date=app.as_date(fill_date)))
