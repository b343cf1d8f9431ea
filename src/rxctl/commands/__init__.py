"""Subcommand modules for rxctl.

Provides register_commands(), which defers imports so ``rxctl --help``
stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from rxctl.commands.dashboard import dashboard
    from rxctl.commands.inventory import inventory
    from rxctl.commands.patient import patient

    cli.add_command(dashboard)
    cli.add_command(patient)
    cli.add_command(inventory)

    # --- Standalone commands ---
    from rxctl.commands.audit import audit
    from rxctl.commands.fill import fill, refill
    from rxctl.commands.init_cmd import init_cmd

    cli.add_command(init_cmd)
    cli.add_command(fill)
    cli.add_command(refill)
    cli.add_command(audit)
