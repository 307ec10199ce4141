"""Registers the CncToolSelector plugins and activates them in dependency order."""
from __future__ import annotations

import logging
from typing import Optional

from cnc_tool_selector.core.config import AppConfig
from cnc_tool_selector.core.event_bus import EventBus
from cnc_tool_selector.core.logger import StructuredLogger
from cnc_tool_selector.core.plugin_api import PluginBase

logger = logging.getLogger(__name__)


class PluginManager:
    def __init__(self, config: AppConfig, event_bus: EventBus,
                 logger: Optional[StructuredLogger] = None, session_id: str = ""):
        self._config = config
        self._event_bus = event_bus
        self._logger = logger
        self._session_id = session_id
        self._registered: dict = {}
        self._active: list = []

    def set_session(self, session_id: str) -> None:
        self._session_id = session_id

    def get_session(self) -> str:
        return self._session_id

    def register(self, plugin: PluginBase) -> None:
        self._registered[plugin.get_info().name] = plugin

    def activate(self, name: str) -> None:
        """Activate a plugin, activating its dependencies first.

        Raises ValueError for an unregistered plugin, a missing dependency
        or a dependency cycle.
        """
        self._activate(name, chain=())

    def _activate(self, name: str, chain: tuple) -> None:
        if name not in self._registered:
            raise ValueError(f"Plugin '{name}' not registered")
        if name in self._active:
            return
        if name in chain:
            raise ValueError("Circular plugin dependency: " + " -> ".join(chain + (name,)))

        info = self._registered[name].get_info()
        for dep in info.dependencies:
            if dep not in self._registered:
                raise ValueError(f"Missing dependency '{dep}' for plugin '{name}'")
            self._activate(dep, chain + (name,))

        self._registered[name].activate(self._context_for(info))
        self._active.append(name)
        logger.debug("Activated plugin %s %s", name, info.version)
        self._event_bus.emit("plugin.activated", {"name": name, "version": info.version})

    def _context_for(self, info) -> dict:
        context = {
            "config": self._config,
            "event_bus": self._event_bus,
            "logger": self._logger,
            "session": self.get_session,
        }
        context.update({dep: self._registered[dep] for dep in info.dependencies})
        return context

    def deactivate(self, name: str) -> None:
        if name not in self._active:
            return
        self._registered[name].deactivate()
        self._active.remove(name)
        self._event_bus.emit("plugin.deactivated", {"name": name})

    def get_plugin(self, name: str) -> Optional[PluginBase]:
        return self._registered[name] if name in self._active else None

    def active_plugins(self) -> list:
        """Names of the active plugins, in activation order."""
        return list(self._active)

    def deactivate_all(self) -> None:
        # Dependents go first.
        for name in reversed(list(self._active)):
            self.deactivate(name)
