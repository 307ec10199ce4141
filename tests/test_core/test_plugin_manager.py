from __future__ import annotations

import pytest

from cnc_tool_selector.core.config import AppConfig
from cnc_tool_selector.core.event_bus import EventBus
from cnc_tool_selector.core.plugin_api import PluginBase, PluginInfo
from cnc_tool_selector.core.plugin_manager import PluginManager


class _Recorder(PluginBase):
    def __init__(self, name, dependencies=None):
        self._name = name
        self._deps = dependencies or []
        self.context = None
        self.active = False

    def get_info(self):
        return PluginInfo(name=self._name, version="0.1", description="test",
                          author="test", dependencies=self._deps)

    def activate(self, context):
        self.context = context
        self.active = True

    def deactivate(self):
        self.active = False


def _make_manager():
    return PluginManager(config=AppConfig(), event_bus=EventBus(keep_history=True))


class TestPluginManager:
    def test_register_and_activate(self):
        pm = _make_manager()
        plugin = _Recorder("a")
        pm.register(plugin)
        pm.activate("a")
        assert plugin.active
        assert pm.get_plugin("a") is plugin

    def test_inactive_plugin_not_returned(self):
        pm = _make_manager()
        pm.register(_Recorder("a"))
        assert pm.get_plugin("a") is None

    def test_unknown_plugin_raises(self):
        with pytest.raises(ValueError):
            _make_manager().activate("ghost")

    def test_dependency_activated_and_injected(self):
        pm = _make_manager()
        base = _Recorder("milling")
        child = _Recorder("comparison", dependencies=["milling"])
        pm.register(base)
        pm.register(child)
        pm.activate("comparison")
        assert base.active
        assert child.context["milling"] is base

    def test_missing_dependency_raises(self):
        pm = _make_manager()
        pm.register(_Recorder("comparison", dependencies=["milling"]))
        with pytest.raises(ValueError, match="Missing dependency"):
            pm.activate("comparison")

    def test_session_is_callable_in_context(self):
        pm = _make_manager()
        plugin = _Recorder("a")
        pm.register(plugin)
        pm.activate("a")
        pm.set_session("abc123")
        assert plugin.context["session"]() == "abc123"

    def test_activation_emits_event(self):
        pm = _make_manager()
        pm.register(_Recorder("a"))
        pm.activate("a")
        events = [h["event"] for h in pm._event_bus.get_history()]
        assert "plugin.activated" in events

    def test_circular_dependency_raises(self):
        pm = _make_manager()
        pm.register(_Recorder("a", dependencies=["b"]))
        pm.register(_Recorder("b", dependencies=["a"]))
        with pytest.raises(ValueError, match="Circular plugin dependency: a -> b -> a"):
            pm.activate("a")
        assert pm.active_plugins() == []

    def test_active_plugins_in_activation_order(self):
        pm = _make_manager()
        pm.register(_Recorder("reporter"))
        pm.register(_Recorder("milling"))
        pm.register(_Recorder("comparison", dependencies=["milling"]))
        pm.activate("comparison")
        assert pm.active_plugins() == ["milling", "comparison"]

    def test_deactivate_all_dependents_first(self):
        pm = _make_manager()
        order = []
        pm._event_bus.subscribe("plugin.deactivated", lambda d: order.append(d["name"]))
        pm.register(_Recorder("milling"))
        pm.register(_Recorder("comparison", dependencies=["milling"]))
        pm.activate("comparison")
        pm.deactivate_all()
        assert order == ["comparison", "milling"]

    def test_deactivate_all(self):
        pm = _make_manager()
        a, b = _Recorder("a"), _Recorder("b")
        pm.register(a)
        pm.register(b)
        pm.activate("a")
        pm.deactivate_all()
        assert not a.active
        assert pm.get_plugin("a") is None
