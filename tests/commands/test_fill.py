"""Tests for the fill and refill commands."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from rxctl.cli import cli

# Seeded ids: patient 1 is John Smith, medication 4 is Lisinopril 10mg (stock 30).
_FILL = [
    "fill",
    "1",
    "4",
    "--prescriber",
    "Dr. Patel",
    "--sig",
    "1 tab PO daily",
    "--date",
    "2023-11-01",
]


@pytest.fixture
def seeded(cli_runner: CliRunner, _isolated_root: None) -> CliRunner:
    result = cli_runner.invoke(cli, ["init", "--seed"])
    assert result.exit_code == 0
    return cli_runner


class TestFillCommand:
    def test_fill_json(self, seeded: CliRunner) -> None:
        result = seeded.invoke(cli, ["--json", *_FILL, "-n", "10", "-d", "10"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["next_refill_date"] == "2023-11-11"
        assert data["stock_remaining"] == 20
        assert data["refill_of"] is None

    def test_fill_rich(self, seeded: CliRunner) -> None:
        result = seeded.invoke(cli, [*_FILL, "-n", "10", "-d", "10"])
        assert result.exit_code == 0
        assert "OK" in result.output
        assert "next_refill_date: 2023-11-11" in result.output

    def test_drains_stock_then_rejects(self, seeded: CliRunner) -> None:
        first = seeded.invoke(cli, ["--json", *_FILL, "-n", "30", "-d", "30"])
        assert json.loads(first.stdout)["data"]["stock_remaining"] == 0

        args = ["--json", "fill", "1", "4", "--prescriber", "Dr. Patel", "--sig", "x"]
        second = seeded.invoke(cli, [*args, "-n", "1", "-d", "30", "--date", "2023-12-01"])
        assert second.exit_code == 1
        assert second.stdout == ""
        error = json.loads(second.stderr)["error"]
        assert error["code"] == "INSUFFICIENT_STOCK"
        assert error["detail"]["available"] == 0

        shown = json.loads(seeded.invoke(cli, ["--json", "inventory", "show", "4"]).stdout)
        assert shown["data"]["stock"] == 0

    def test_invalid_date(self, seeded: CliRunner) -> None:
        args = ["fill", "1", "4", "--prescriber", "p", "--sig", "s", "-n", "1", "-d", "1"]
        result = seeded.invoke(cli, [*args, "--date", "2023-13-45"])
        assert result.exit_code == 2
        assert "--date" in result.output

    def test_missing_required_option(self, seeded: CliRunner) -> None:
        result = seeded.invoke(cli, ["fill", "1", "4", "--sig", "s", "-n", "1", "-d", "1"])
        assert result.exit_code == 2
        assert "--prescriber" in result.output


class TestRefillCommand:
    def test_refill(self, seeded: CliRunner) -> None:
        first = seeded.invoke(cli, ["--json", *_FILL, "-n", "10", "-d", "10", "--refills", "2"])
        fill_id = json.loads(first.stdout)["data"]["id"]

        result = seeded.invoke(cli, ["--json", "refill", str(fill_id), "--date", "2023-11-11"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["refill_of"] == fill_id
        assert data["refills"] == 1
        assert data["next_refill_date"] == "2023-11-21"
        assert data["stock_remaining"] == 10

    def test_refill_without_remaining_warns(self, seeded: CliRunner) -> None:
        first = seeded.invoke(cli, ["--json", *_FILL, "-n", "10", "-d", "10"])
        fill_id = json.loads(first.stdout)["data"]["id"]
        result = seeded.invoke(cli, ["refill", str(fill_id), "--date", "2023-11-11"])
        assert result.exit_code == 0
        assert "WARNING" in result.stderr
        assert "no refills remaining" in result.stderr

    def test_refill_superseded(self, seeded: CliRunner) -> None:
        first = seeded.invoke(cli, ["--json", *_FILL, "-n", "5", "-d", "10", "--refills", "1"])
        fill_id = json.loads(first.stdout)["data"]["id"]
        seeded.invoke(cli, ["refill", str(fill_id), "--date", "2023-11-11"])

        result = seeded.invoke(cli, ["--json", "refill", str(fill_id), "--date", "2023-11-21"])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "NOT_CURRENT"

    def test_refill_unknown(self, seeded: CliRunner) -> None:
        result = seeded.invoke(cli, ["refill", "404"])
        assert result.exit_code == 1
        assert "ERROR" in result.stderr
