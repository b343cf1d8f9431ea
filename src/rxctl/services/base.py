"""BaseService — abstract foundation for all rxctl services.

Every service receives a :class:`Store` at construction time. Services
own their transaction boundaries via ``self._store.transaction()`` and
dispatch lifecycle events only after that block has committed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rxctl.infrastructure.store import Store

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class FulfillmentService(BaseService):
            def fill_prescription(self, ...) -> ServiceResult:
                with self._store.transaction() as txn:
                    ...
                self._dispatch_event("post_fill", payload, warnings)
    """

    def __init__(self, store: Store) -> None:
        self._store = store

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Hand a lifecycle event to the bus. No-op if the bus is not initialized.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        bus = self._store.event_bus
        if bus is None:
            return
        try:
            bus.dispatch(hook_name, payload)
        except Exception:
            logger.warning("Event dispatch failed for %s", hook_name, exc_info=True)
            warnings.append(f"Event dispatch failed for {hook_name}")
