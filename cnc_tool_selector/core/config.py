"""Application settings for CncToolSelector, loaded from YAML."""
from __future__ import annotations

import copy
import os
from typing import Any, Optional

import yaml

DEFAULT_CONFIG = {
    "app": {"name": "CncToolSelector", "version": "0.1.0", "currency": "EUR"},
    "logging": {"dir": "data/logs", "level": "DEBUG"},
    "plugins": {
        "enabled": ["milling", "comparison", "catalogue", "reporter"],
    },
    "oee": {
        "defect_rate_percent": 2.0,
        "planned_production_hours_per_shift": 8.0,
        "unplanned_downtime_hours_per_shift": 0.5,
        "tool_change_time_loss_min": 5.0,
        "parts_per_year": 4000,
    },
    "comparison": {"batches_per_year": 50},
    "lookup": {"strict": False},
    "reports": {"dir": "data/reports"},
}


class AppConfig:
    """Nested settings: ``DEFAULT_CONFIG`` overlaid by an optional YAML file."""

    def __init__(self, config_path: Optional[str] = None):
        self._settings: dict = copy.deepcopy(DEFAULT_CONFIG)
        if config_path and os.path.exists(config_path):
            self._merge_into(self._settings, self._read_yaml(config_path))

    @staticmethod
    def _read_yaml(path: str) -> dict:
        with open(path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            raise ValueError("Config file %s must hold a mapping, got %s"
                             % (path, type(loaded).__name__))
        return loaded

    @classmethod
    def _merge_into(cls, target: dict, overrides: dict) -> None:
        for key, value in overrides.items():
            current = target.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                cls._merge_into(current, value)
            else:
                target[key] = value

    def get(self, dotted_key: str, default: Any = None) -> Any:
        node = self._settings
        for part in dotted_key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, dotted_key: str, value: Any) -> None:
        *parents, leaf = dotted_key.split(".")
        node = self._settings
        for part in parents:
            if not isinstance(node.get(part), dict):
                node[part] = {}
            node = node[part]
        node[leaf] = value

    def section(self, name: str) -> dict:
        """Copy of one top-level mapping, e.g. the ``oee`` shop defaults."""
        value = self._settings.get(name)
        return copy.deepcopy(value) if isinstance(value, dict) else {}

    def save(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self._settings, f, allow_unicode=True, sort_keys=False)
