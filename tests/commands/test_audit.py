"""Tests for the audit command."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from rxctl.cli import cli


@pytest.mark.usefixtures("_isolated_root")
class TestAuditCommand:
    def test_records_actions_newest_first(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["init", "--seed"])
        fill_args = ["fill", "1", "4", "--prescriber", "Dr. Patel", "--sig", "1 tab"]
        result = cli_runner.invoke(
            cli, ["--sync", "--user", "jdoe", *fill_args, "-n", "5", "-d", "5"]
        )
        assert result.exit_code == 0
        cli_runner.invoke(cli, ["--sync", "inventory", "update", "4", "--stock", "530"])

        result = cli_runner.invoke(cli, ["--json", "audit"])
        assert result.exit_code == 0
        items = json.loads(result.stdout)["data"]["items"]
        assert [i["action"] for i in items] == ["UPDATE_MEDICATION", "FILL_PRESCRIPTION"]
        assert items[1]["user"] == "jdoe"
        assert items[0]["user"] == "system"

    def test_user_from_env(self, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RXCTL_USER", "pharmacist")
        args = ["--sync", "patient", "add", "Jane Doe", "--birth-date", "1970-01-01"]
        cli_runner.invoke(cli, [*args, "--phone", "555-0100"])
        items = json.loads(cli_runner.invoke(cli, ["--json", "audit"]).stdout)["data"]["items"]
        assert items[0]["user"] == "pharmacist"
        assert items[0]["action"] == "ADD_PATIENT"

    def test_async_dispatch_drains_on_exit(self, cli_runner: CliRunner) -> None:
        args = ["patient", "add", "Jane Doe", "--birth-date", "1970-01-01", "--phone", "555"]
        cli_runner.invoke(cli, args)
        result = cli_runner.invoke(cli, ["--json", "audit"])
        assert json.loads(result.stdout)["data"]["count"] == 1

    def test_limit(self, cli_runner: CliRunner) -> None:
        for name in ("A", "B", "C"):
            args = ["--sync", "patient", "add", name, "--birth-date", "1970-01-01"]
            cli_runner.invoke(cli, [*args, "--phone", "555"])
        result = cli_runner.invoke(cli, ["--json", "audit", "--limit", "2"])
        items = json.loads(result.stdout)["data"]["items"]
        assert len(items) == 2
        assert items[0]["details"].endswith(": C")

    def test_empty(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["audit"])
        assert result.exit_code == 0
        assert "No audit entries." in result.output

    def test_invalid_limit(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["audit", "--limit", "0"])
        assert result.exit_code == 1
        assert "ERROR" in result.stderr
