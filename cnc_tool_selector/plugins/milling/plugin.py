"""Milling tool-selection parameter engine plugin."""
from __future__ import annotations

from typing import Any

from cnc_tool_selector.core.errors import ParameterValidationError
from cnc_tool_selector.core.models import (
    MillingEvaluation, ProjectInfo, ToolCoating, ToolMaterial, ValidationResult, WorkpieceMaterial,
)
from cnc_tool_selector.core.plugin_api import ParameterEnginePlugin, PluginInfo
from cnc_tool_selector.plugins.milling.calculator import MillingCalculator, build_inputs


class MillingPlugin(ParameterEnginePlugin):
    def __init__(self):
        self._calculator = None
        self._config = None
        self._event_bus = None
        self._logger = None
        self._session = None

    def get_info(self) -> PluginInfo:
        return PluginInfo(
            name="milling", version="1.0.0",
            description="Milling tool life, cost and OEE calculation engine",
            author="CncToolSelector")

    def activate(self, context: Any) -> None:
        ctx = context if isinstance(context, dict) else {}
        self._config = ctx.get("config")
        self._event_bus = ctx.get("event_bus")
        self._logger = ctx.get("logger")
        self._session = ctx.get("session")
        strict = bool(self._config.get("lookup.strict", False)) if self._config else False
        self._calculator = MillingCalculator(strict_lookup=strict)

    def deactivate(self) -> None:
        self._calculator = None

    @property
    def calculator(self) -> MillingCalculator:
        return self._calculator

    def _oee_defaults(self) -> dict:
        if self._config is None:
            return {}
        return self._config.section("oee")

    def _session_id(self) -> str:
        return self._session() if callable(self._session) else ""

    def get_input_schema(self) -> dict:
        positive = {"type": "number", "exclusiveMinimum": 0}
        non_negative = {"type": "number", "minimum": 0}
        return {
            "type": "object",
            "properties": {
                "workpiece_material": {"type": "string", "enum": [m.value for m in WorkpieceMaterial]},
                "tool_material": {"type": "string", "enum": [m.value for m in ToolMaterial]},
                "tool_coating": {"type": "string", "enum": [c.value for c in ToolCoating]},
                "cutting_speed_m_min": positive,
                "feed_per_tooth_mm": positive,
                "depth_of_cut_mm": positive,
                "width_of_cut_mm": positive,
                "tool_diameter_mm": positive,
                "number_of_teeth": {"type": "integer", "minimum": 1},
                "material_hardness_hrc": {"type": "number", "default": 30},
                "helix_angle_deg": {"type": "number"},
                "rake_angle_deg": {"type": "number"},
                "tool_life_min": positive,
                "tool_cost": positive,
                "tool_residual_value": dict(non_negative, default=0),
                "processing_time_min": non_negative,
                "tool_change_time_min": dict(non_negative, default=0),
                "tool_change_cost": dict(non_negative, default=0),
                "machining_time_min": non_negative,
                "machine_hourly_rate": positive,
                "batch_size": {"type": "integer", "minimum": 1, "default": 1},
                "defect_rate_percent": {"type": "number", "minimum": 0, "maximum": 100},
                "planned_production_hours_per_shift": non_negative,
                "unplanned_downtime_hours_per_shift": non_negative,
                "tool_change_time_loss_min": non_negative,
                "parts_per_year": positive,
            },
            "required": ["workpiece_material", "tool_material", "tool_coating",
                         "cutting_speed_m_min", "feed_per_tooth_mm", "depth_of_cut_mm",
                         "width_of_cut_mm", "tool_diameter_mm", "number_of_teeth",
                         "tool_cost", "processing_time_min", "machine_hourly_rate"],
        }

    def calculate_parameters(self, inputs: dict) -> MillingEvaluation:
        identity, cutting, cost, oee = build_inputs(inputs, self._oee_defaults())
        project = ProjectInfo.from_dict(inputs.get("project") or {})
        try:
            evaluation = self._calculator.evaluate(cutting, cost, oee,
                                                   identity=identity, project=project)
        except ParameterValidationError as exc:
            if self._event_bus:
                self._event_bus.emit("validation.failed", {"errors": exc.errors})
            raise

        if self._logger:
            self._logger.log_calculation(
                session_id=self._session_id(),
                inputs=inputs,
                outputs={"cost": evaluation.cost.to_dict(), "oee": evaluation.oee.to_dict()},
                intermediate={"tool_life_min": evaluation.tool_life_min,
                              "tool_life_overridden": evaluation.tool_life_overridden,
                              "technical": evaluation.technical.to_dict()},
                validation=self._calculator.validate(cutting, cost, oee).to_dict(),
                evaluation_id=evaluation.evaluation_id,
            )
        if self._event_bus:
            self._event_bus.emit("calculation.completed", evaluation.to_dict())
        return evaluation

    def validate_parameters(self, inputs: dict) -> ValidationResult:
        identity, cutting, cost, oee = build_inputs(inputs, self._oee_defaults())
        result = self._calculator.validate(cutting, cost, oee)
        if self._event_bus:
            self._event_bus.emit("validation.completed", result.to_dict())
        return result

    def get_supported_applications(self) -> list:
        return ["face_milling", "slot_milling", "side_milling", "contour_milling"]
