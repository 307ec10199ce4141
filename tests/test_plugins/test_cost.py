from __future__ import annotations

import pytest

from cnc_tool_selector.core.models import CostParameters
from cnc_tool_selector.plugins.milling.cost import (
    calculate_cost, cost_breakdown, cost_score, parts_per_tool_life, production_curve,
)


def _make_cost(**overrides):
    data = dict(tool_cost=50.0, processing_time_min=10.0, machine_hourly_rate=50.0,
                tool_residual_value=0.0, tool_change_time_min=2.0, tool_change_cost=5.0)
    data.update(overrides)
    return CostParameters(**data)


class TestPartsPerToolLife:
    def test_floor(self):
        assert parts_per_tool_life(195, 12) == 16

    def test_zero_time_per_part(self):
        assert parts_per_tool_life(195, 0) == 0


class TestCalculateCost:
    def test_reference_scenario(self):
        r = calculate_cost(_make_cost(), 195)
        assert r.time_per_part_min == 12
        assert r.parts_per_tool_life == 16
        assert r.tool_changes_per_tool_life == 15
        assert r.tool_cost_per_part == pytest.approx(50 / 195)
        assert r.tool_change_cost_per_part == pytest.approx(4.6875)
        assert r.machining_cost_per_part == pytest.approx(10.0)
        assert r.processing_cost_per_part == pytest.approx(8.33333, rel=1e-5)
        assert r.tool_change_time_cost_per_part == pytest.approx(1.66667, rel=1e-5)
        assert r.total_cost_per_part == pytest.approx(14.94391, rel=1e-6)

    def test_batch_totals(self):
        r = calculate_cost(_make_cost(batch_size=10), 195)
        assert r.batch_size == 10
        assert r.total_batch_cost == pytest.approx(r.total_cost_per_part * 10)
        assert r.total_tool_cost_for_batch == pytest.approx(r.tool_cost_per_part * 10)
        assert r.total_machining_cost_for_batch == pytest.approx(100.0)

    def test_residual_value_reduces_tool_cost(self):
        r = calculate_cost(_make_cost(tool_residual_value=11), 195)
        assert r.tool_cost_per_part == pytest.approx(39 / 195)

    def test_machining_time_override(self):
        r = calculate_cost(_make_cost(machining_time_min=15), 195)
        assert r.time_per_part_min == 15
        assert r.parts_per_tool_life == 13
        assert r.machining_cost_per_part == pytest.approx(12.5)

    def test_life_shorter_than_one_part(self):
        r = calculate_cost(_make_cost(), 5)
        assert r.parts_per_tool_life == 0
        assert r.tool_changes_per_tool_life == 0
        assert r.tool_change_cost_per_part == 0.0
        assert r.tool_cost_per_part == pytest.approx(10.0)

    def test_single_part_per_tool_has_no_change_cost(self):
        r = calculate_cost(_make_cost(), 20)
        assert r.parts_per_tool_life == 1
        assert r.tool_change_cost_per_part == 0.0


class TestCostHelpers:
    def test_breakdown_skips_zero(self):
        r = calculate_cost(_make_cost(tool_change_cost=0), 195)
        labels = [label for label, _ in cost_breakdown(r)]
        assert labels == ["Tool cost", "Machining cost"]

    def test_breakdown_full(self):
        r = calculate_cost(_make_cost(), 195)
        assert len(cost_breakdown(r)) == 3

    @pytest.mark.parametrize("total,score", [(0.5, "excellent"), (2.0, "good"),
                                             (4.0, "fair"), (14.9, "needs_improvement")])
    def test_score(self, total, score):
        assert cost_score(total) == score

    def test_production_curve(self):
        r = calculate_cost(_make_cost(), 195)
        curve = production_curve(r, 195)
        assert len(curve) == 17
        assert curve[0] == {"time_min": 0, "parts": 0, "cumulative_cost": 0}
        assert curve[-1]["time_min"] == 192
        assert curve[-1]["cumulative_cost"] == pytest.approx(16 * r.total_cost_per_part)

    def test_production_curve_capped(self):
        r = calculate_cost(_make_cost(processing_time_min=1, tool_change_time_min=0), 195)
        assert len(production_curve(r, 195, max_points=20)) == 21


class TestCostProperties:
    @pytest.mark.parametrize("life", [5, 20, 60, 195, 1000])
    @pytest.mark.parametrize("change_cost", [0, 5, 20])
    def test_total_is_sum_of_parts(self, life, change_cost):
        r = calculate_cost(_make_cost(tool_change_cost=change_cost), life)
        assert r.total_cost_per_part == (r.tool_cost_per_part + r.tool_change_cost_per_part
                                         + r.machining_cost_per_part)

    @pytest.mark.parametrize("batch", [1, 2, 7, 250])
    def test_batch_scaling_is_linear(self, batch):
        r = calculate_cost(_make_cost(batch_size=batch), 195)
        assert r.total_batch_cost == r.total_cost_per_part * batch
