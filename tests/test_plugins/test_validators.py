from __future__ import annotations

import pytest

from cnc_tool_selector.core.models import (
    CostParameters, CuttingParameters, OEEParameters, ValidationStatus,
)
from cnc_tool_selector.plugins.milling.validators import (
    CostValidator, CuttingValidator, OEEValidator, validate_inputs,
)


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


class TestCuttingValidator:
    def test_valid_passes(self):
        result = CuttingValidator().validate(_make_cutting())
        assert result["status"] == "pass"
        assert result["errors"] == []

    def test_collects_every_error(self):
        result = CuttingValidator().validate(
            _make_cutting(tool_diameter_mm=0, cutting_speed_m_min=-1, number_of_teeth=0))
        assert result["status"] == "fail"
        fields = [f for f, _ in result["errors"]]
        assert fields == ["tool_diameter_mm", "cutting_speed_m_min", "number_of_teeth"]
        assert "Tool diameter must be greater than 0" in result["messages"]
        assert "Number of teeth must be at least 1" in result["messages"]

    def test_missing_fields(self):
        result = CuttingValidator().validate(CuttingParameters.from_dict({}))
        messages = result["messages"]
        assert "Tool diameter is required" in messages
        assert "Workpiece material is required" in messages
        assert len(result["errors"]) == 9

    def test_fractional_teeth(self):
        result = CuttingValidator().validate(_make_cutting(number_of_teeth=2.5))
        assert result["errors"][0][0] == "number_of_teeth"

    def test_non_numeric(self):
        result = CuttingValidator().validate(_make_cutting(feed_per_tooth_mm="fast"))
        assert result["errors"] == [("feed_per_tooth_mm", "Feed per tooth must be a finite number, got 'fast'")]

    def test_bool_is_not_a_number(self):
        result = CuttingValidator().validate(_make_cutting(width_of_cut_mm=True))
        assert result["status"] == "fail"

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_rejected(self, value):
        result = CuttingValidator().validate(
            _make_cutting(cutting_speed_m_min=value, material_hardness_hrc=value))
        assert result["status"] == "fail"
        assert [f for f, _ in result["errors"]] == ["cutting_speed_m_min", "material_hardness_hrc"]

    def test_hardness_may_be_omitted(self):
        assert CuttingValidator().validate(_make_cutting(material_hardness_hrc=None))["status"] == "pass"

    def test_override_tool_life_must_be_positive(self):
        result = CuttingValidator().validate(_make_cutting(tool_life_min=0))
        assert result["errors"][0][0] == "tool_life_min"

    def test_unknown_material_warns_by_default(self):
        result = CuttingValidator().validate(_make_cutting(workpiece_material="unobtainium"))
        assert result["status"] == "warning"
        assert result["errors"] == []

    def test_unknown_material_fails_when_strict(self):
        result = CuttingValidator(strict_lookup=True).validate(_make_cutting(tool_coating="gold"))
        assert result["status"] == "fail"
        assert result["errors"][0][0] == "tool_coating"

    def test_catalogue_spelling_is_known(self):
        result = CuttingValidator(strict_lookup=True).validate(
            _make_cutting(workpiece_material="stainlessSteel", tool_material="Coated Carbide"))
        assert result["status"] == "pass"


class TestCostValidator:
    def test_valid_passes(self):
        assert CostValidator().validate(_make_cost())["status"] == "pass"

    def test_zero_processing_time_allowed(self):
        assert CostValidator().validate(_make_cost(processing_time_min=0))["status"] == "pass"

    def test_collects_errors(self):
        result = CostValidator().validate(
            _make_cost(tool_cost=0, machine_hourly_rate=-5, tool_change_cost=-1, batch_size=0))
        fields = [f for f, _ in result["errors"]]
        assert fields == ["tool_cost", "machine_hourly_rate", "tool_change_cost", "batch_size"]

    def test_missing_processing_time(self):
        result = CostValidator().validate(_make_cost(processing_time_min=None))
        assert result["errors"] == [("processing_time_min", "Processing time is required")]

    def test_nan_cost_rejected(self):
        result = CostValidator().validate(_make_cost(tool_cost=float("nan")))
        assert result["errors"] == [("tool_cost", "Tool cost must be a finite number, got nan")]

    def test_residual_above_cost_warns(self):
        result = CostValidator().validate(_make_cost(tool_residual_value=60))
        assert result["status"] == "warning"
        assert "exceeds tool cost" in result["messages"][0]


class TestOEEValidator:
    def test_defaults_pass(self):
        assert OEEValidator().validate(OEEParameters())["status"] == "pass"

    def test_defect_rate_range(self):
        result = OEEValidator().validate(OEEParameters(defect_rate_percent=120))
        assert result["errors"] == [("defect_rate_percent", "Defect rate must be between 0 and 100%")]

    def test_nan_defect_rate_rejected(self):
        result = OEEValidator().validate(OEEParameters(defect_rate_percent=float("nan")))
        assert result["errors"][0][0] == "defect_rate_percent"

    def test_parts_per_year_positive(self):
        result = OEEValidator().validate(OEEParameters(parts_per_year=0))
        assert result["errors"][0][0] == "parts_per_year"


class TestValidateInputs:
    def test_all_pass(self):
        result = validate_inputs(_make_cutting(), _make_cost(), OEEParameters())
        assert result.status == ValidationStatus.PASS
        assert set(result.validators) == {"cutting", "cost", "oee"}

    def test_oee_optional(self):
        result = validate_inputs(_make_cutting(), _make_cost())
        assert set(result.validators) == {"cutting", "cost"}

    def test_errors_from_every_validator(self):
        result = validate_inputs(_make_cutting(tool_diameter_mm=0), _make_cost(tool_cost=0),
                                 OEEParameters(defect_rate_percent=-1))
        assert result.status == ValidationStatus.FAIL
        assert [f for f, _ in result.errors] == ["tool_diameter_mm", "tool_cost", "defect_rate_percent"]
        assert "[cutting] Tool diameter must be greater than 0" in result.messages
        assert "[cost] Tool cost must be greater than 0" in result.messages

    def test_warning_does_not_fail(self):
        result = validate_inputs(_make_cutting(workpiece_material="inconel"), _make_cost())
        assert result.status == ValidationStatus.WARNING
        assert result.is_passed()

    def test_strict_lookup(self):
        result = validate_inputs(_make_cutting(workpiece_material="inconel"), _make_cost(),
                                 strict_lookup=True)
        assert result.status == ValidationStatus.FAIL
