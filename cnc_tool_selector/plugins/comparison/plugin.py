"""Multi-tool comparison plugin."""
from __future__ import annotations

from typing import Any

from cnc_tool_selector.core.plugin_api import PluginBase, PluginInfo
from cnc_tool_selector.plugins.comparison.aggregator import ComparisonAggregator

OPERATION_EVENTS = ("comparison.added", "comparison.updated",
                    "comparison.deleted", "comparison.cleared")


class ComparisonPlugin(PluginBase):
    def __init__(self):
        self._aggregator = None
        self._event_bus = None
        self._logger = None
        self._session = None
        self._handlers = {}

    def get_info(self) -> PluginInfo:
        return PluginInfo(
            name="comparison", version="1.0.0",
            description="Side-by-side tool comparison with savings projection",
            author="CncToolSelector", dependencies=["milling"])

    def activate(self, context: Any) -> None:
        ctx = context if isinstance(context, dict) else {}
        milling = ctx.get("milling")
        config = ctx.get("config")
        self._event_bus = ctx.get("event_bus")
        self._logger = ctx.get("logger")
        self._session = ctx.get("session")
        batches = config.get("comparison.batches_per_year", 50) if config else 50
        self._aggregator = ComparisonAggregator(
            calculator=milling.calculator, event_bus=self._event_bus,
            batches_per_year=batches)
        if self._event_bus and self._logger:
            for event in OPERATION_EVENTS:
                handler = self._make_audit_handler(event)
                self._handlers[event] = handler
                self._event_bus.subscribe(event, handler)

    def _make_audit_handler(self, event: str):
        def handler(data: dict) -> None:
            session_id = self._session() if callable(self._session) else ""
            self._logger.log_operation(session_id=session_id, event_type=event,
                                       user_action=event.split(".", 1)[1], data=data)
        return handler

    def deactivate(self) -> None:
        if self._event_bus:
            for event, handler in self._handlers.items():
                self._event_bus.unsubscribe(event, handler)
        self._handlers = {}
        self._aggregator = None

    @property
    def aggregator(self) -> ComparisonAggregator:
        return self._aggregator
