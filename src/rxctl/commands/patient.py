"""Command group: patient directory."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import click

from rxctl.commands._base import ISO_DATE, RxGroup
from rxctl.services.dashboard import DashboardService
from rxctl.services.directory import DirectoryService

if TYPE_CHECKING:
    from rxctl.commands._context import AppContext

_PATIENT_EXAMPLES = """\
  rxctl patient add "John Smith" --birth-date 1985-04-12 --phone 416-555-0199
  rxctl patient add "Sarah Conner" --birth-date 1992-08-23 --phone 604-555-0122 \\
      --allergies "Sulfa Drugs" --insurance-provider "Manulife"
  rxctl patient list
  rxctl patient list --search smith
  rxctl patient show 1
  rxctl patient history 1 --now 2023-11-11"""


@click.group(cls=RxGroup, examples=_PATIENT_EXAMPLES)
@click.pass_obj
def patient(app: AppContext) -> None:
    """Add and look up patients."""


@patient.command(
    examples="""\
  rxctl patient add "John Smith" --birth-date 1985-04-12 --phone 416-555-0199
  rxctl --json patient add "Jane Doe" --birth-date 1970-01-01 --phone 555-0100 --city Ottawa"""
)
@click.argument("name")
@click.option("--birth-date", required=True, type=ISO_DATE, help="Date of birth (YYYY-MM-DD).")
@click.option("--phone", required=True, help="Contact phone number.")
@click.option("--email", default=None, help="Email address.")
@click.option("--address", default=None, help="Street address.")
@click.option("--city", default=None, help="City.")
@click.option("--state", default=None, help="Province or state.")
@click.option("--postal-code", default=None, help="Postal code.")
@click.option("--health-card", "health_card_num", default=None, help="Health card number.")
@click.option("--allergies", default=None, help="Known allergies.")
@click.option("--insurance-provider", default=None, help="Insurance provider.")
@click.option("--insurance-id", default=None, help="Insurance policy ID.")
@click.pass_obj
def add(app: AppContext, name: str, birth_date: datetime, **fields: str | None) -> None:
    """Register a new patient."""
    svc = DirectoryService(app.store)
    app.emit(svc.add_patient(name, birth_date=birth_date.date(), **fields))


@patient.command(
    "list",
    examples="""\
  rxctl patient list
  rxctl patient list --search smith
  rxctl -q patient list""",
)
@click.option("--search", default=None, help="Only names containing TEXT (any case).")
@click.pass_obj
def list_cmd(app: AppContext, search: str | None) -> None:
    """List patients by name."""
    app.emit(DirectoryService(app.store).list_patients(search=search))


@patient.command(examples="  rxctl patient show 1\n  rxctl --json patient show 1")
@click.argument("patient_id", type=int)
@click.pass_obj
def show(app: AppContext, patient_id: int) -> None:
    """Show one patient's details."""
    app.emit(DirectoryService(app.store).get_patient(patient_id))


@patient.command(
    examples="""\
  rxctl patient history 1
  rxctl patient history 1 --now 2023-11-11
  rxctl -v patient history 1"""
)
@click.argument("patient_id", type=int)
@click.option(
    "--now",
    type=ISO_DATE,
    default=None,
    help="Reference date for due classification (default today).",
)
@click.pass_obj
def history(app: AppContext, patient_id: int, now: datetime | None) -> None:
    """Show every fill for a patient across all medications."""
    app.emit(DashboardService(app.store).patient_history(patient_id, app.as_date(now)))
