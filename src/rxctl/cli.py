"""Root CLI group for rxctl with global flags and command registration."""

from __future__ import annotations

import click

from rxctl import __version__
from rxctl.commands import register_commands
from rxctl.commands._context import AppContext
from rxctl.config.settings import RxSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="rxctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output (IDs only for lists).")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--sync", is_flag=True, help="Dispatch audit events inline.")
@click.option("--user", default=None, help="Actor name recorded in the audit log.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    sync: bool,
    user: str | None,
) -> None:
    """rxctl — prescription fulfillment and refill tracking."""
    settings = RxSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        sync=sync,
        user=user,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
