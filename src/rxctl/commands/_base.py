"""Custom Click base classes with --examples support.

RxCommand and RxGroup accept an ``examples`` parameter. Passing
``--examples`` prints usage examples and exits, which keeps ``--help``
short while still documenting real invocations.
"""

from __future__ import annotations

from typing import Any

import click


def _add_examples_option(cmd: click.Command | click.Group, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class RxCommand(click.Command):
    """Click Command subclass that supports an ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class RxGroup(click.Group):
    """Click Group subclass that supports an ``--examples`` flag.

    Subcommands default to :class:`RxCommand`, so they accept
    ``examples=`` without an explicit ``cls=``.
    """

    command_class = RxCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


ISO_DATE = click.DateTime(formats=["%Y-%m-%d"])
"""Parameter type for ``YYYY-MM-DD`` options (yields a ``datetime``)."""
