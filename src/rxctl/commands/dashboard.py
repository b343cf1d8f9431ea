"""Command group: refill-due dashboard and pair history."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import click

from rxctl.commands._base import ISO_DATE, RxGroup
from rxctl.domain.records import DueFilter
from rxctl.services.dashboard import DashboardService

if TYPE_CHECKING:
    from rxctl.commands._context import AppContext

_DASHBOARD_EXAMPLES = """\
  rxctl dashboard stats
  rxctl dashboard stats --now 2023-11-11
  rxctl dashboard due today
  rxctl dashboard due soon --now 2023-11-11
  rxctl dashboard upcoming
  rxctl dashboard history 3 5"""

_now_option = click.option(
    "--now",
    type=ISO_DATE,
    default=None,
    help="Reference date for due classification (default today).",
)


@click.group(cls=RxGroup, examples=_DASHBOARD_EXAMPLES)
@click.pass_obj
def dashboard(app: AppContext) -> None:
    """Refill-due counts, work lists, and history."""


@dashboard.command(
    examples="""\
  rxctl dashboard stats
  rxctl --json dashboard stats --now 2023-11-11"""
)
@_now_option
@click.pass_obj
def stats(app: AppContext, now: datetime | None) -> None:
    """Count refills due today, due soon, and low-stock medications."""
    app.emit(DashboardService(app.store).stats(app.as_date(now)))


@dashboard.command(
    examples="""\
  rxctl dashboard due today
  rxctl dashboard due soon --now 2023-11-11
  rxctl -q dashboard due today"""
)
@click.argument("which", type=click.Choice([f.value for f in DueFilter]))
@_now_option
@click.pass_obj
def due(app: AppContext, which: str, now: datetime | None) -> None:
    """List current fills due today (overdue included) or due soon."""
    app.emit(DashboardService(app.store).due_list(which, app.as_date(now)))


@dashboard.command(
    examples="""\
  rxctl dashboard upcoming
  rxctl --json dashboard upcoming --now 2023-11-01"""
)
@_now_option
@click.pass_obj
def upcoming(app: AppContext, now: datetime | None) -> None:
    """Show the soonest upcoming refills."""
    app.emit(DashboardService(app.store).upcoming(app.as_date(now)))


@dashboard.command(
    examples="""\
  rxctl dashboard history 3 5
  rxctl -v dashboard history 3 5"""
)
@click.argument("patient_id", type=int)
@click.argument("medication_id", type=int)
@click.pass_obj
def history(app: AppContext, patient_id: int, medication_id: int) -> None:
    """Show every fill for a patient/medication pair, oldest first."""
    app.emit(DashboardService(app.store).history(patient_id, medication_id))
