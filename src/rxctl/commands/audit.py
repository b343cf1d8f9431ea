"""Command: audit log viewer."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from rxctl.commands._base import RxCommand
from rxctl.services.audit import DEFAULT_LIMIT, AuditService

if TYPE_CHECKING:
    from rxctl.commands._context import AppContext


@click.command(
    "audit",
    cls=RxCommand,
    examples="""\
  rxctl audit
  rxctl audit --limit 10
  rxctl --json audit""",
)
@click.option(
    "--limit", default=DEFAULT_LIMIT, show_default=True, type=int, help="Max entries to show."
)
@click.pass_obj
def audit(app: AppContext, limit: int) -> None:
    """Show recent audit entries, newest first."""
    app.emit(AuditService(app.store).list_entries(limit=limit))
