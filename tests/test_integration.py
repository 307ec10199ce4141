"""End-to-end integration tests."""
from __future__ import annotations

import json
import os

import pytest

from cnc_tool_selector.core.engine import Engine
from cnc_tool_selector.core.errors import ParameterValidationError


def _make_inputs(**overrides):
    data = {
        "workpiece_material": "steel", "tool_material": "carbide", "tool_coating": "tin",
        "cutting_speed_m_min": 100, "feed_per_tooth_mm": 0.1, "depth_of_cut_mm": 2,
        "width_of_cut_mm": 5, "tool_diameter_mm": 10, "number_of_teeth": 4,
        "tool_cost": 50, "processing_time_min": 10, "tool_change_time_min": 2,
        "tool_change_cost": 5, "machine_hourly_rate": 50,
    }
    data.update(overrides)
    return data


class TestFullWorkflow:
    @pytest.fixture
    def engine(self, tmp_path):
        e = Engine(data_dir=str(tmp_path))
        e.initialize()
        e.load_plugins()
        yield e
        e.shutdown()

    def test_evaluate_compare_and_report(self, engine, tmp_path):
        sid = engine.create_session(project_name="Bracket")
        milling = engine.plugin_manager.get_plugin("milling")
        comparison = engine.plugin_manager.get_plugin("comparison")
        reporter = engine.plugin_manager.get_plugin("reporter")

        ev = milling.calculate_parameters(_make_inputs(project={"project_name": "Bracket"}))
        assert ev.tool_life_min == 195

        agg = comparison.aggregator
        agg.add(_make_inputs(brand="sandvik"))
        agg.add(_make_inputs(brand="walter", tool_cost=150))
        assert agg.best_by().name == "Sandvik Tool 1"

        paths = reporter.export_all(ev, agg, output_dir=str(tmp_path / "reports"))
        for path in paths.values():
            assert os.path.exists(path)

        with open(os.path.join(str(tmp_path), "logs", "calculations.jsonl"), encoding="utf-8") as f:
            calc = json.loads(f.readline())
        assert calc["session_id"] == sid

        with open(os.path.join(str(tmp_path), "logs", "operations.jsonl"), encoding="utf-8") as f:
            events = [json.loads(line)["event_type"] for line in f]
        assert events == ["session.created", "comparison.added", "comparison.added"]

    def test_event_history(self, engine):
        milling = engine.plugin_manager.get_plugin("milling")
        milling.calculate_parameters(_make_inputs())
        with pytest.raises(ParameterValidationError):
            milling.calculate_parameters(_make_inputs(number_of_teeth=0))
        events = [h["event"] for h in engine.event_bus.get_history()]
        assert "plugin.activated" in events
        assert events[-2:] == ["calculation.completed", "validation.failed"]

    def test_catalogue_to_report(self, engine, tmp_path):
        catalogue = engine.plugin_manager.get_plugin("catalogue")
        reporter = engine.plugin_manager.get_plugin("reporter")
        template = catalogue.write_template(str(tmp_path / "template.csv"))
        entries = catalogue.import_into(template)
        assert entries[0].name == "Kennametal KOR5"
        agg = engine.plugin_manager.get_plugin("comparison").aggregator
        path = reporter.export_text(comparison=agg, output_dir=str(tmp_path))
        with open(path, encoding="utf-8") as f:
            assert "Kennametal KOR5" in f.read()
