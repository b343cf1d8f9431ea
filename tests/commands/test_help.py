"""Parametrized help tests for all CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from rxctl.cli import cli

# (CLI args, expected keywords in output)
HELP_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["init", "--help"], ["--seed"]),
    (["fill", "--help"], ["PATIENT_ID", "MEDICATION_ID", "--prescriber", "--days-supply"]),
    (["refill", "--help"], ["FILL_ID", "--date"]),
    (["audit", "--help"], ["--limit"]),
    (["patient", "--help"], ["add", "list", "show", "history"]),
    (["patient", "list", "--help"], ["--search"]),
    (["patient", "history", "--help"], ["PATIENT_ID", "--now"]),
    (["patient", "add", "--help"], ["--birth-date", "--phone", "--health-card"]),
    (["patient", "show", "--help"], ["PATIENT_ID"]),
    (["inventory", "--help"], ["add", "list", "show", "update"]),
    (["inventory", "add", "--help"], ["--din", "--stock", "--expiration"]),
    (["inventory", "list", "--help"], ["--low"]),
    (["inventory", "update", "--help"], ["--stock", "--price", "--description"]),
    (["dashboard", "--help"], ["stats", "due", "upcoming", "history"]),
    (["dashboard", "stats", "--help"], ["--now"]),
    (["dashboard", "due", "--help"], ["today", "soon", "--now"]),
    (["dashboard", "upcoming", "--help"], ["--now"]),
    (["dashboard", "history", "--help"], ["PATIENT_ID", "MEDICATION_ID"]),
]


@pytest.mark.parametrize(
    ("args", "keywords"),
    HELP_COMMANDS,
    ids=[" ".join(args[:-1]) for args, _ in HELP_COMMANDS],
)
def test_help(cli_runner: CliRunner, args: list[str], keywords: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    for keyword in keywords:
        assert keyword in result.output, f"{keyword!r} not in help for {args}"
