"""Command: data root initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from rxctl.commands._base import RxCommand

if TYPE_CHECKING:
    from rxctl.commands._context import AppContext

_INIT_EXAMPLES = """\
  rxctl init
  rxctl init --seed
  rxctl -c /srv/pharmacy/rxctl.toml init"""


@click.command("init", cls=RxCommand, examples=_INIT_EXAMPLES)
@click.option("--seed", is_flag=True, help="Load demo patients and formulary into empty tables.")
@click.pass_obj
def init_cmd(app: AppContext, seed: bool) -> None:
    """Create the rxctl database under the data root."""
    from rxctl.services.init import InitService

    app.emit(InitService(app.store).init_store(seed=seed))
