"""Shared pytest fixtures and test helpers for rxctl tests."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from rxctl.config.settings import RxSettings
from rxctl.infrastructure.database.engine import init_database
from rxctl.infrastructure.store import Store


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Engine:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def store(tmp_path: Path) -> Store:
    """Store on a temp data root with a synchronous event bus.

    Sync dispatch makes audit rows visible as soon as the service
    call returns.
    """
    settings = RxSettings.from_cli(data_root=tmp_path, sync=True)
    s = Store(settings)
    s.init_event_bus(sync=True)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp data root so the CLI creates an isolated database.

    Use via ``@pytest.mark.usefixtures("_isolated_root")`` on command test
    classes. Tests that need the path can also request ``tmp_path`` directly
    (pytest deduplicates; it's the same directory).
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("RXCTL_CONFIG", raising=False)
    monkeypatch.delenv("RXCTL_USER", raising=False)


# ---------------------------------------------------------------------------
# Shared test helpers (used across service test modules)
# ---------------------------------------------------------------------------


def add_patient(store: Store, name: str = "John Smith", **kwargs: Any) -> int:
    """Add a patient via DirectoryService, asserting success. Returns its id."""
    from rxctl.services.directory import DirectoryService

    kwargs.setdefault("birth_date", date(1985, 4, 12))
    kwargs.setdefault("phone", "416-555-0199")
    result = DirectoryService(store).add_patient(name, **kwargs)
    assert result.ok, result.error
    return result.data["id"]


def add_medication(
    store: Store,
    name: str = "Lisinopril",
    *,
    din: str = "02217479",
    stock: int = 30,
    **kwargs: Any,
) -> int:
    """Add a medication via DirectoryService, asserting success. Returns its id."""
    from rxctl.services.directory import DirectoryService

    kwargs.setdefault("price", 0.25)
    kwargs.setdefault("expiration", date(2025, 11, 20))
    result = DirectoryService(store).add_medication(name, din=din, stock=stock, **kwargs)
    assert result.ok, result.error
    return result.data["id"]


def fill(
    store: Store,
    patient_id: int,
    medication_id: int,
    *,
    fill_date: date = date(2023, 11, 1),
    quantity: int = 10,
    days_supply: int = 10,
    **kwargs: Any,
) -> dict[str, Any]:
    """Fill a prescription via FulfillmentService, asserting success."""
    from rxctl.services.fulfillment import FulfillmentService

    kwargs.setdefault("prescriber", "Dr. Patel")
    kwargs.setdefault("sig", "1 tab PO daily")
    result = FulfillmentService(store).fill_prescription(
        patient_id,
        medication_id,
        quantity=quantity,
        days_supply=days_supply,
        fill_date=fill_date,
        **kwargs,
    )
    assert result.ok, result.error
    return result.data
