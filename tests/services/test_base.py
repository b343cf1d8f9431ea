"""Tests for BaseService and service inheritance."""

from __future__ import annotations

from pathlib import Path

import pytest

from rxctl.config.settings import RxSettings
from rxctl.infrastructure.store import Store
from rxctl.services.audit import AuditService
from rxctl.services.base import BaseService
from rxctl.services.dashboard import DashboardService
from rxctl.services.directory import DirectoryService
from rxctl.services.fulfillment import FulfillmentService
from rxctl.services.init import InitService


class TestBaseService:
    def test_store_stored(self, store: Store) -> None:
        assert BaseService(store)._store is store

    def test_dispatch_without_bus_is_noop(self, tmp_path: Path) -> None:
        store = Store(RxSettings.from_cli(data_root=tmp_path))
        try:
            warnings: list[str] = []
            BaseService(store)._dispatch_event("post_fill", {}, warnings)
            assert warnings == []
        finally:
            store.close()

    def test_dispatch_failure_becomes_warning(self, store: Store) -> None:
        class ExplodingBus:
            def dispatch(self, hook_name: str, payload: dict) -> None:
                raise RuntimeError("bus down")

            def shutdown(self) -> None:
                pass

        store._event_bus = ExplodingBus()
        warnings: list[str] = []
        BaseService(store)._dispatch_event("post_fill", {}, warnings)
        assert warnings == ["Event dispatch failed for post_fill"]


ALL_SERVICES = [
    FulfillmentService,
    DashboardService,
    DirectoryService,
    AuditService,
    InitService,
]


class TestServiceInheritance:
    @pytest.mark.parametrize("service_cls", ALL_SERVICES, ids=lambda c: c.__name__)
    def test_inherits_base_service(self, service_cls: type) -> None:
        assert issubclass(service_cls, BaseService)

    @pytest.mark.parametrize("service_cls", ALL_SERVICES, ids=lambda c: c.__name__)
    def test_store_injection(self, service_cls: type, store: Store) -> None:
        assert service_cls(store)._store is store
