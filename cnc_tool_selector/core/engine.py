"""Core engine - the microkernel that ties everything together."""
from __future__ import annotations

import importlib
import os
import uuid
from typing import Optional

from cnc_tool_selector.core.config import AppConfig
from cnc_tool_selector.core.event_bus import EventBus
from cnc_tool_selector.core.logger import StructuredLogger
from cnc_tool_selector.core.plugin_manager import PluginManager

BUILTIN_PLUGINS = {
    "milling": "cnc_tool_selector.plugins.milling.plugin:MillingPlugin",
    "comparison": "cnc_tool_selector.plugins.comparison.plugin:ComparisonPlugin",
    "catalogue": "cnc_tool_selector.plugins.catalogue.plugin:CataloguePlugin",
    "reporter": "cnc_tool_selector.plugins.reporter.plugin:ReporterPlugin",
}


def load_plugin_class(path: str):
    module_name, _, class_name = path.partition(":")
    module = importlib.import_module(module_name)
    return getattr(module, class_name)


class Engine:
    def __init__(self, config_path: Optional[str] = None, data_dir: str = "data"):
        self._config_path = config_path
        self._data_dir = data_dir
        self.config: Optional[AppConfig] = None
        self.event_bus: Optional[EventBus] = None
        self.logger: Optional[StructuredLogger] = None
        self.plugin_manager: Optional[PluginManager] = None
        self._current_session: Optional[str] = None

    def initialize(self) -> None:
        os.makedirs(self._data_dir, exist_ok=True)

        self.config = AppConfig(self._config_path)
        self.event_bus = EventBus(keep_history=True)
        self.logger = StructuredLogger(
            log_dir=os.path.join(self._data_dir, "logs"),
            level=self.config.get("logging.level", "DEBUG"),
        )
        self.plugin_manager = PluginManager(
            config=self.config, event_bus=self.event_bus, logger=self.logger,
        )
        self.logger.app.info("Engine initialized")

    def load_plugins(self) -> list:
        """Register every built-in plugin and activate those enabled in config.

        Returns the active plugin names, dependencies included.
        """
        for path in BUILTIN_PLUGINS.values():
            self.plugin_manager.register(load_plugin_class(path)())
        enabled = self.config.get("plugins.enabled", list(BUILTIN_PLUGINS))
        for name in enabled:
            self.plugin_manager.activate(name)
        return self.plugin_manager.active_plugins()

    def create_session(self, project_name: str = "", user_name: str = "") -> str:
        sid = uuid.uuid4().hex[:12]
        self._current_session = sid
        self.plugin_manager.set_session(sid)
        self.logger.log_operation(session_id=sid, event_type="session.created",
                                  data={"project_name": project_name, "user_name": user_name})
        self.event_bus.emit("session.created", {"session_id": sid, "project_name": project_name})
        return sid

    @property
    def current_session(self) -> Optional[str]:
        return self._current_session

    def shutdown(self) -> None:
        if self.plugin_manager:
            self.plugin_manager.deactivate_all()
        if self.logger:
            self.logger.app.info("Engine shutdown")
            self.logger.close()
