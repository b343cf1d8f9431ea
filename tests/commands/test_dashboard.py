"""Tests for the dashboard command group."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from rxctl.cli import cli


def _fill(runner: CliRunner, pid: int, mid: int, *, date: str, days: int) -> int:
    args = ["--json", "fill", str(pid), str(mid), "--prescriber", "Dr. Patel", "--sig", "1 tab"]
    result = runner.invoke(cli, [*args, "-n", "1", "-d", str(days), "--date", date])
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)["data"]["id"]


@pytest.fixture
def filled(cli_runner: CliRunner, _isolated_root: None) -> CliRunner:
    """Seeded store with one due-today fill and one due-soon fill as of 2023-11-11."""
    cli_runner.invoke(cli, ["init", "--seed"])
    _fill(cli_runner, 1, 4, date="2023-11-01", days=10)
    _fill(cli_runner, 2, 1, date="2023-11-01", days=14)
    return cli_runner


class TestStats:
    def test_counts(self, filled: CliRunner) -> None:
        result = filled.invoke(cli, ["--json", "dashboard", "stats", "--now", "2023-11-11"])
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["data"]["due_today_count"] == 1
        assert payload["data"]["due_soon_count"] == 1
        assert payload["data"]["low_stock_count"] == 1
        assert payload["meta"]["now"] == "2023-11-11"

    def test_rich_panel(self, filled: CliRunner) -> None:
        result = filled.invoke(cli, ["dashboard", "stats", "--now", "2023-11-11"])
        assert result.exit_code == 0
        assert "Dashboard as of 2023-11-11" in result.output
        assert "Due today" in result.output

    def test_empty_store(self, cli_runner: CliRunner, _isolated_root: None) -> None:
        result = cli_runner.invoke(cli, ["--json", "dashboard", "stats", "--now", "2023-11-11"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["due_today_count"] == 0
        assert data["due_soon_count"] == 0


class TestDueAndUpcoming:
    def test_due_today(self, filled: CliRunner) -> None:
        args = ["--json", "dashboard", "due", "today", "--now", "2023-11-11"]
        items = json.loads(filled.invoke(cli, args).stdout)["data"]["items"]
        assert [i["patient_name"] for i in items] == ["John Smith"]
        assert items[0]["status"] == "due_today"

    def test_due_soon(self, filled: CliRunner) -> None:
        args = ["--json", "dashboard", "due", "soon", "--now", "2023-11-11"]
        items = json.loads(filled.invoke(cli, args).stdout)["data"]["items"]
        assert [i["next_refill_date"] for i in items] == ["2023-11-15"]

    def test_due_rejects_unknown_filter(self, filled: CliRunner) -> None:
        result = filled.invoke(cli, ["dashboard", "due", "later"])
        assert result.exit_code == 2

    def test_due_quiet(self, filled: CliRunner) -> None:
        result = filled.invoke(cli, ["-q", "dashboard", "due", "today", "--now", "2023-11-11"])
        assert result.stdout.strip() == "1"

    def test_upcoming_orders_soonest_first(self, filled: CliRunner) -> None:
        args = ["--json", "dashboard", "upcoming", "--now", "2023-11-01"]
        items = json.loads(filled.invoke(cli, args).stdout)["data"]["items"]
        assert [i["next_refill_date"] for i in items] == ["2023-11-11", "2023-11-15"]

    def test_nothing_due(self, filled: CliRunner) -> None:
        result = filled.invoke(cli, ["dashboard", "due", "today", "--now", "2023-10-01"])
        assert result.exit_code == 0
        assert "No refills found." in result.output


class TestHistory:
    def test_chain(self, filled: CliRunner) -> None:
        _fill(filled, 1, 4, date="2023-11-11", days=10)
        result = filled.invoke(cli, ["--json", "dashboard", "history", "1", "4"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert [i["fill_date"] for i in data["items"]] == ["2023-11-01", "2023-11-11"]
        assert [i["current"] for i in data["items"]] == [False, True]
        assert data["current_id"] == data["items"][-1]["id"]

    def test_unknown_pair(self, filled: CliRunner) -> None:
        result = filled.invoke(cli, ["dashboard", "history", "5", "5"])
        assert result.exit_code == 1
        assert "No fills for patient 5" in result.stderr
