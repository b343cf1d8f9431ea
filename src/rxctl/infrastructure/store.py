"""Store — repository pattern with transaction coordination.

The Store is the single dependency injected into every service. It owns
the database engine, the read repositories, and the plugin event bus.
:meth:`Store.transaction` wraps ``engine.begin()``: every write made
through the yielded :class:`StoreTransaction` commits together on
success and rolls back together on any exception. Reads made before
the first write are not isolated from other writers; stock safety
comes from the guarded decrement in :mod:`rxctl.infrastructure.ledger`.

Events (audit notifications) are never dispatched inside a transaction;
services dispatch them after the ``with`` block has committed.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rxctl.infrastructure import ledger
from rxctl.infrastructure.database.engine import init_database
from rxctl.infrastructure.repositories.directory import DirectoryRepository, patient_exists
from rxctl.infrastructure.repositories.fills import FillRepository, insert_fill, pair_records

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from rxctl.config.settings import RxSettings
    from rxctl.domain.records import FillRecord

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# StoreTransaction: yielded to callers within transaction()
# ---------------------------------------------------------------------------


@dataclass
class StoreTransaction:
    """Active transaction context. All writes go through ``conn``."""

    conn: Connection

    def patient_exists(self, patient_id: int) -> bool:
        return patient_exists(self.conn, patient_id)

    def reserve_stock(self, medication_id: int, quantity: int) -> ledger.Reservation:
        return ledger.reserve(self.conn, medication_id, quantity)

    def decrement_stock(self, medication_id: int, quantity: int) -> int:
        return ledger.decrement(self.conn, medication_id, quantity)

    def stock_of(self, medication_id: int) -> int | None:
        return ledger.current_stock(self.conn, medication_id)

    def pair_records(self, patient_id: int, medication_id: int) -> list[FillRecord]:
        return pair_records(self.conn, patient_id, medication_id)

    def insert_fill(self, **values: Any) -> int:
        return insert_fill(self.conn, **values)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class Store:
    """Repository encapsulating database access and event dispatch.

    Constructed once at CLI startup from :class:`RxSettings` and stored
    on the Click context. Services receive the Store via their
    :class:`BaseService` constructor.
    """

    def __init__(self, settings: RxSettings) -> None:
        self._settings = settings
        self._engine: Engine = init_database(
            self.root,
            busy_timeout=settings.database.busy_timeout_seconds,
        )
        self._fills = FillRepository(self._engine)
        self._directory = DirectoryRepository(self._engine)
        self._event_bus: Any | None = None

    @property
    def root(self) -> Path:
        """The data root directory (parent of ``.rxctl/``)."""
        return self._settings.data_root

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def settings(self) -> RxSettings:
        return self._settings

    @property
    def fills(self) -> FillRepository:
        return self._fills

    @property
    def directory(self) -> DirectoryRepository:
        return self._directory

    @property
    def event_bus(self) -> Any | None:
        """The plugin event bus (None if not initialized)."""
        return self._event_bus

    def init_event_bus(self, *, sync: bool = False) -> None:
        """Initialize the plugin event bus.

        Creates a PluginManager, discovers entry-point plugins, registers
        the built-in AuditPlugin (when auditing is enabled), and wires up
        the EventBus.
        """
        from rxctl.plugins.builtins.audit import AuditPlugin, AuditSink
        from rxctl.plugins.event_bus import EventBus
        from rxctl.plugins.manager import PluginManager

        pm = PluginManager()
        pm.discover_and_load()

        audit_config = self._settings.audit
        if audit_config.enabled:
            pm.register_plugin(AuditPlugin(AuditSink(self._engine)), name="audit-builtin")

        self._event_bus = EventBus(pm, sync=sync, max_workers=audit_config.max_workers)

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """Atomic unit of work over the database.

        Commits when the block exits normally and rolls back every write
        when it raises. Do not dispatch events from inside the block:
        listeners must only ever see committed state.

        Usage::

            with store.transaction() as txn:
                txn.insert_fill(...)
                txn.decrement_stock(medication_id, quantity)
                # Both commit on success, both roll back on failure.
        """
        with self._engine.begin() as conn:
            try:
                yield StoreTransaction(conn=conn)
            except BaseException:
                logger.debug("Rolling back store transaction")
                raise

    def close(self) -> None:
        """Drain the event bus and release database connections."""
        if self._event_bus is not None:
            self._event_bus.shutdown()
            self._event_bus = None
        self._engine.dispose()
