"""Fire-and-forget event dispatch via pluggy + ThreadPoolExecutor.

Events are handed to a worker pool and the caller returns immediately.
Delivery is at-most-once: a failing hook is logged and dropped, never
retried and never propagated to the operation that raised the event.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rxctl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class EventBus:
    """Non-blocking hook dispatch.

    Parameters:
        plugin_manager: Loaded PluginManager for hook dispatch.
        sync: Run hooks inline (useful for testing / ``--sync``).
        max_workers: ThreadPoolExecutor worker count.
    """

    def __init__(
        self,
        plugin_manager: PluginManager,
        *,
        sync: bool = False,
        max_workers: int = 2,
    ) -> None:
        self._pm = plugin_manager
        self._executor: ThreadPoolExecutor | None = None
        if not sync:
            self._executor = ThreadPoolExecutor(
                max_workers=max_workers,
                thread_name_prefix="rxctl-event",
            )
        self._futures: list[Future[None]] = []
        self._lock = threading.Lock()

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> None:
        """Run *hook_name* with *payload* inline (sync) or on the worker pool."""
        if self._executor is None:
            self._execute_hook(hook_name, payload)
            return
        future = self._executor.submit(self._execute_hook, hook_name, payload)
        with self._lock:
            self._futures.append(future)

    def shutdown(self) -> None:
        """Wait for in-flight events, then stop the worker pool."""
        self._wait_futures()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _execute_hook(self, hook_name: str, payload: dict[str, Any]) -> None:
        """Invoke every implementation of *hook_name*; a failure is logged and dropped."""
        hook_fn = getattr(self._pm.hook, hook_name, None)
        if hook_fn is None:
            return
        try:
            hook_fn(**payload)
        except Exception:
            logger.warning("Hook %s failed; event dropped", hook_name, exc_info=True)

    def _wait_futures(self) -> None:
        with self._lock:
            pending = list(self._futures)
            self._futures.clear()
        for future in pending:
            try:
                future.result(timeout=30)
            except TimeoutError:
                logger.warning("Event still running after 30s; abandoning wait")
