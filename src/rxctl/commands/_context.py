"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Opens the Store lazily and centralizes result
emission (stdout/stderr routing and exit codes).
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

import click

from rxctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from rxctl.config.settings import RxSettings
    from rxctl.infrastructure.store import Store
    from rxctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The store is opened on first use so ``--help`` and ``--version``
    never touch the database.
    """

    def __init__(self, settings: RxSettings) -> None:
        self.settings = settings
        self._store: Store | None = None

        from rxctl.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose, log_json=settings.log_json, actor=settings.user
        )

    @property
    def store(self) -> Store:
        """The store instance (created lazily on first access)."""
        if self._store is None:
            from rxctl.infrastructure.store import Store

            self._store = Store(self.settings)
            self._store.init_event_bus(sync=self.settings.sync)
        return self._store

    def close(self) -> None:
        """Drain pending audit events and release the database."""
        if self._store is not None:
            self._store.close()
            self._store = None

    @staticmethod
    def as_date(value: datetime | None) -> date:
        """Resolve an optional ``--date``/``--now`` value, defaulting to today."""
        if value is None:
            from rxctl.services._helpers import today

            return today()
        return value.date()

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout. Warnings go to stderr so they don't
          pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # JSON payloads already carry their warnings.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
