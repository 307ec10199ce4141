"""Catalogue import plugin feeding the tool comparison."""
from __future__ import annotations

import logging
from typing import Any, Optional

from cnc_tool_selector.core.plugin_api import PluginBase, PluginInfo
from cnc_tool_selector.plugins.catalogue import importer
from cnc_tool_selector.plugins.comparison.aggregator import ComparisonAggregator

logger = logging.getLogger(__name__)


class CataloguePlugin(PluginBase):
    def __init__(self):
        self._comparison = None
        self._event_bus = None

    def get_info(self) -> PluginInfo:
        return PluginInfo(
            name="catalogue", version="1.0.0",
            description="Supplier catalogue import from CSV, JSON and Excel",
            author="CncToolSelector", dependencies=["comparison"])

    def activate(self, context: Any) -> None:
        ctx = context if isinstance(context, dict) else {}
        self._comparison = ctx.get("comparison")
        self._event_bus = ctx.get("event_bus")

    def deactivate(self) -> None:
        self._comparison = None

    def load(self, path: str, mapping: Optional[dict] = None) -> list:
        """Read a catalogue file into CatalogueTool records."""
        rows, columns = importer.read_catalogue(path)
        if mapping is None:
            mapping = importer.detect_field_mapping(columns)
        return importer.apply_field_mapping(rows, mapping)

    def import_into(self, path: str, aggregator: Optional[ComparisonAggregator] = None,
                    mapping: Optional[dict] = None) -> list:
        """Add every catalogue row to a comparison; returns the new entries.

        Nothing is added when any row is rejected.
        """
        if aggregator is None:
            aggregator = self._comparison.aggregator
        tools = self.load(path, mapping)
        entries = aggregator.add_many([tool.to_inputs() for tool in tools])
        logger.info("Imported %d tools from %s", len(entries), path)
        if self._event_bus:
            self._event_bus.emit("catalogue.imported", {"path": path, "count": len(entries)})
        return entries

    def catalogue_template(self) -> dict:
        return importer.catalogue_template()

    def write_template(self, path: str) -> str:
        return importer.write_template(path)
