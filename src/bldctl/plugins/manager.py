"""Plugin discovery and loading.

Discovery: entry points in the ``bldctl.plugins`` group (pip-installed
packagers), plus the built-in :class:`CommandPipelinePlugin`.
"""

from __future__ import annotations

import logging

import pluggy

from bldctl.plugins.hookspecs import BldctlHookSpec

PROJECT_NAME = "bldctl"
ENTRY_POINT_GROUP = "bldctl.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, registration, and hook dispatch."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(BldctlHookSpec)

    def discover(self) -> list[str]:
        """Load plugins from the ``bldctl.plugins`` entry-point group.

        Returns the names of all registered plugins.
        """
        count = self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        logger.debug("Loaded %d entry-point plugin(s)", count)
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly (e.g. built-in plugins)."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        """Unregister a plugin instance."""
        self._pm.unregister(plugin)

    @property
    def hook(self) -> pluggy.HookRelay:
        """Access the hook relay for dispatching pipeline steps."""
        return self._pm.hook

    def list_plugin_names(self) -> list[str]:
        """Return names of all registered plugins."""
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]
