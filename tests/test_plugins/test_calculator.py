from __future__ import annotations

import pytest

from cnc_tool_selector.core.errors import ComputationError, ParameterValidationError
from cnc_tool_selector.core.models import (
    CostParameters, CuttingParameters, OEEParameters, ProjectInfo, ToolIdentity,
)
from cnc_tool_selector.plugins.milling.calculator import MillingCalculator, build_inputs


def _make_cutting(**overrides):
    data = dict(
        workpiece_material="steel", tool_material="carbide", tool_coating="tin",
        cutting_speed_m_min=100.0, feed_per_tooth_mm=0.1, depth_of_cut_mm=2.0,
        width_of_cut_mm=5.0, tool_diameter_mm=10.0, number_of_teeth=4,
    )
    data.update(overrides)
    return CuttingParameters(**data)


def _make_cost(**overrides):
    data = dict(tool_cost=50.0, processing_time_min=10.0, machine_hourly_rate=50.0,
                tool_change_time_min=2.0, tool_change_cost=5.0)
    data.update(overrides)
    return CostParameters(**data)


class TestMillingCalculator:
    @pytest.fixture
    def calc(self):
        return MillingCalculator()

    def test_evaluate_reference(self, calc):
        ev = calc.evaluate(_make_cutting(), _make_cost())
        assert ev.tool_life_min == 195
        assert ev.tool_life_overridden is False
        assert ev.cost.total_cost_per_part == pytest.approx(14.94391, rel=1e-6)
        assert ev.oee.oee == pytest.approx(51.92, rel=1e-3)
        assert len(ev.evaluation_id) == 12
        assert ev.scores == {"cost": "needs_improvement", "tool_life": "excellent"}
        assert [r.type for r in ev.recommendations] == ["tool_change"]
        assert len(ev.production_curve) == 17
        assert len(ev.cost_breakdown) == 3

    def test_technical_data(self, calc):
        tech = calc.evaluate(_make_cutting(helix_angle_deg=30), _make_cost()).technical
        assert tech.spindle_speed_rpm == pytest.approx(3183.0989, rel=1e-6)
        assert tech.mrr_mm3_min == pytest.approx(12732.395, rel=1e-6)
        assert tech.chip_thickness_mm == pytest.approx(0.08)
        assert tech.cutting_force_n == pytest.approx(2000)
        assert tech.power_kw == pytest.approx(3.33333, rel=1e-5)
        assert tech.feed_per_revolution_mm == pytest.approx(0.4)
        assert tech.taylor_exponent == 0.2
        assert tech.helix_angle_deg == 30
        assert tech.rake_angle_deg is None

    def test_override_tool_life(self, calc):
        ev = calc.evaluate(_make_cutting(tool_life_min=120), _make_cost())
        assert ev.tool_life_min == 120
        assert ev.tool_life_overridden is True
        assert ev.cost.parts_per_tool_life == 10

    def test_identity_and_project_attached(self, calc):
        ev = calc.evaluate(_make_cutting(), _make_cost(),
                           identity=ToolIdentity(brand="sandvik"),
                           project=ProjectInfo(client_name="ACME"))
        assert ev.identity.brand == "sandvik"
        assert ev.project.client_name == "ACME"

    def test_default_oee_inputs(self, calc):
        ev = calc.evaluate(_make_cutting(), _make_cost())
        assert ev.oee_inputs == OEEParameters()

    def test_invalid_inputs_raise_with_all_errors(self, calc):
        with pytest.raises(ParameterValidationError) as info:
            calc.evaluate(_make_cutting(tool_diameter_mm=0, number_of_teeth=0),
                          _make_cost(tool_cost=-1))
        assert info.value.fields == ["tool_diameter_mm", "number_of_teeth", "tool_cost"]
        assert info.value.validation is not None

    def test_depth_beyond_diameter(self, calc):
        with pytest.raises(ComputationError):
            calc.evaluate(_make_cutting(depth_of_cut_mm=12), _make_cost())

    def test_hardness_none_uses_30_hrc(self, calc):
        ev = calc.evaluate(_make_cutting(material_hardness_hrc=None), _make_cost())
        assert ev.technical.specific_cutting_force_n_mm2 == pytest.approx(2000)
        assert ev.cutting.material_hardness_hrc == 30.0
        assert ev.cost.total_cost_per_part == pytest.approx(14.94391, rel=1e-6)

    @pytest.mark.parametrize("field", ["cutting_speed_m_min", "tool_diameter_mm", "feed_per_tooth_mm"])
    def test_nan_input_refused_before_computing(self, calc, field):
        with pytest.raises(ParameterValidationError) as info:
            calc.evaluate(_make_cutting(**{field: float("nan")}), _make_cost())
        assert info.value.fields == [field]

    def test_infinite_cost_refused(self, calc):
        with pytest.raises(ParameterValidationError) as info:
            calc.quick_cost(_make_cutting(), _make_cost(machine_hourly_rate=float("inf")))
        assert info.value.fields == ["machine_hourly_rate"]

    def test_strict_lookup_rejects_unknown(self):
        with pytest.raises(ParameterValidationError):
            MillingCalculator(strict_lookup=True).evaluate(
                _make_cutting(workpiece_material="inconel"), _make_cost())

    def test_permissive_lookup_uses_baseline(self, calc):
        ev = calc.evaluate(_make_cutting(workpiece_material="inconel"), _make_cost())
        assert ev.tool_life_min == 195
        assert ev.technical.specific_cutting_force_n_mm2 == pytest.approx(2000)

    def test_quick_cost(self, calc):
        life, result, mrr = calc.quick_cost(_make_cutting(), _make_cost())
        assert life == 195
        assert result.total_cost_per_part == pytest.approx(14.94391, rel=1e-6)
        assert mrr == pytest.approx(12732.395, rel=1e-6)

    def test_quick_cost_depth_beyond_diameter(self, calc):
        with pytest.raises(ComputationError) as info:
            calc.quick_cost(_make_cutting(depth_of_cut_mm=12), _make_cost())
        assert info.value.field == "depth_of_cut_mm"

    def test_quick_cost_validates(self, calc):
        with pytest.raises(ParameterValidationError):
            calc.quick_cost(_make_cutting(), _make_cost(machine_hourly_rate=0))

    def test_to_dict(self, calc):
        data = calc.evaluate(_make_cutting(), _make_cost()).to_dict()
        assert data["cost"]["parts_per_tool_life"] == 16
        assert data["recommendations"][0]["type"] == "tool_change"


class TestBuildInputs:
    def test_splits_flat_dict(self):
        identity, cutting, cost, oee = build_inputs({
            "brand": "sandvik", "tool_diameter_mm": 10, "tool_cost": 50,
            "defect_rate_percent": 1.0, "unrelated": "x",
        })
        assert identity.brand == "sandvik"
        assert cutting.tool_diameter_mm == 10
        assert cutting.workpiece_material is None
        assert cost.tool_cost == 50
        assert oee.defect_rate_percent == 1.0

    def test_oee_defaults_applied(self):
        _, _, _, oee = build_inputs({}, oee_defaults={"parts_per_year": 1200})
        assert oee.parts_per_year == 1200
