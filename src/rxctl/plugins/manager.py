"""pluggy wiring for rxctl's post-commit lifecycle hooks.

Installed packages join through the ``rxctl.plugins`` entry-point group;
the Store registers the built-in audit plugin on top of whatever loads.
"""

from __future__ import annotations

import inspect
import logging

import pluggy

from rxctl.plugins.hookspecs import RxctlHookSpec

PROJECT_NAME = "rxctl"
ENTRY_POINT_GROUP = "rxctl.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Holds the hook registry that :class:`~rxctl.plugins.event_bus.EventBus` calls into."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(RxctlHookSpec)

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def discover_and_load(self) -> list[str]:
        """Load every installed entry-point plugin. Returns all registered names."""
        loaded = self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        for plugin in self._pm.get_plugins():
            if inspect.isclass(plugin):
                self._instantiate(plugin)
        logger.debug("Loaded %d entry-point plugins", loaded)
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        name = name or type(plugin).__name__
        self._pm.register(plugin, name=name)
        logger.debug("Registered plugin: %s", name)

    def list_plugin_names(self) -> list[str]:
        return sorted(name for name, _ in self._pm.list_name_plugin())

    def _instantiate(self, plugin_cls: type) -> None:
        # An entry point may name a class; hooks need an instance to bind self.
        name = self._pm.get_name(plugin_cls) or plugin_cls.__name__
        self._pm.unregister(plugin_cls)
        try:
            instance = plugin_cls()
        except Exception:
            logger.warning("Dropping plugin %s: it could not be instantiated", name, exc_info=True)
            return
        self._pm.register(instance, name=name)
