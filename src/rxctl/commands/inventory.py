"""Command group: medication formulary and stock."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import click

from rxctl.commands._base import ISO_DATE, RxGroup
from rxctl.services.directory import DirectoryService

if TYPE_CHECKING:
    from rxctl.commands._context import AppContext

_INVENTORY_EXAMPLES = """\
  rxctl inventory add Lisinopril --din 02217479 --stock 30 --price 0.25 --expiration 2025-11-20
  rxctl inventory list
  rxctl inventory list --low
  rxctl inventory show 4
  rxctl inventory update 4 --stock 500"""


@click.group(cls=RxGroup, examples=_INVENTORY_EXAMPLES)
@click.pass_obj
def inventory(app: AppContext) -> None:
    """Manage medications and stock levels."""


@inventory.command(
    examples="""\
  rxctl inventory add Lisinopril --din 02217479 --stock 30 --price 0.25 --expiration 2025-11-20
  rxctl inventory add Amoxicillin --din 02243345 --ndc 0093-3109-01 \\
      --description "500mg Capsule" --stock 500 --price 0.45 --expiration 2025-08-15"""
)
@click.argument("name")
@click.option("--din", required=True, help="Drug identification number (unique).")
@click.option("--ndc", default=None, help="National drug code.")
@click.option("--description", default=None, help="Strength and form.")
@click.option("--stock", default=0, show_default=True, type=int, help="Units on hand.")
@click.option("--price", default=0.0, show_default=True, type=float, help="Unit price.")
@click.option("--expiration", required=True, type=ISO_DATE, help="Expiry date (YYYY-MM-DD).")
@click.pass_obj
def add(
    app: AppContext,
    name: str,
    din: str,
    ndc: str | None,
    description: str | None,
    stock: int,
    price: float,
    expiration: datetime,
) -> None:
    """Add a medication to the formulary."""
    svc = DirectoryService(app.store)
    app.emit(
        svc.add_medication(
            name,
            din=din,
            ndc=ndc,
            description=description,
            stock=stock,
            price=price,
            expiration=expiration.date(),
        )
    )


@inventory.command(
    "list",
    examples="""\
  rxctl inventory list
  rxctl inventory list --low
  rxctl -q inventory list --low""",
)
@click.option("--low", "low_only", is_flag=True, help="Only medications below the low-stock line.")
@click.pass_obj
def list_cmd(app: AppContext, low_only: bool) -> None:
    """List medications by name with stock levels."""
    app.emit(DirectoryService(app.store).list_medications(low_only=low_only))


@inventory.command(examples="  rxctl inventory show 4\n  rxctl --json inventory show 4")
@click.argument("medication_id", type=int)
@click.pass_obj
def show(app: AppContext, medication_id: int) -> None:
    """Show one medication's details."""
    app.emit(DirectoryService(app.store).get_medication(medication_id))


@inventory.command(
    examples="""\
  rxctl inventory update 4 --stock 500
  rxctl inventory update 1 --price 0.50 --description '500mg Capsule'"""
)
@click.argument("medication_id", type=int)
@click.option("--stock", default=None, type=int, help="New stock level.")
@click.option("--price", default=None, type=float, help="New unit price.")
@click.option("--description", default=None, help="New description.")
@click.pass_obj
def update(
    app: AppContext,
    medication_id: int,
    stock: int | None,
    price: float | None,
    description: str | None,
) -> None:
    """Set stock, price, or description for a medication."""
    svc = DirectoryService(app.store)
    app.emit(
        svc.update_medication(medication_id, stock=stock, price=price, description=description)
    )
