"""Milling tool evaluation: validation, physics, tool life, cost and OEE in one pass."""
from __future__ import annotations

import logging
import uuid
from dataclasses import fields, replace
from typing import Optional

from cnc_tool_selector.core.errors import ParameterValidationError
from cnc_tool_selector.core.models import (
    CostParameters, CuttingParameters, MillingEvaluation, OEEParameters,
    ProjectInfo, TechnicalData, ToolIdentity, ValidationResult,
)
from cnc_tool_selector.plugins.milling import cost as cost_model
from cnc_tool_selector.plugins.milling import tool_life as life_model
from cnc_tool_selector.plugins.milling.oee import calculate_oee
from cnc_tool_selector.plugins.milling.physics import (
    REFERENCE_HARDNESS_HRC, TAYLOR_EXPONENT, MachiningPhysics,
)
from cnc_tool_selector.plugins.milling.recommendations import generate_recommendations
from cnc_tool_selector.plugins.milling.validators import validate_inputs

logger = logging.getLogger(__name__)


class MillingCalculator:
    def __init__(self, strict_lookup: bool = False):
        self.strict_lookup = strict_lookup
        self._physics = MachiningPhysics()

    @property
    def physics(self) -> MachiningPhysics:
        return self._physics

    def validate(self, cutting: CuttingParameters, cost: CostParameters,
                 oee: Optional[OEEParameters] = None) -> ValidationResult:
        return validate_inputs(cutting, cost, oee, strict_lookup=self.strict_lookup)

    def _with_defaults(self, cutting: CuttingParameters) -> CuttingParameters:
        if cutting.material_hardness_hrc is None:
            return replace(cutting, material_hardness_hrc=REFERENCE_HARDNESS_HRC)
        return cutting

    def _check(self, cutting, cost, oee=None) -> ValidationResult:
        validation = self.validate(cutting, cost, oee)
        if not validation.is_passed():
            logger.info("Rejected inputs: %s", validation.messages)
            raise ParameterValidationError(validation.errors, validation)
        return validation

    def technical_data(self, cutting: CuttingParameters, tool_life_min: float) -> TechnicalData:
        p = self._physics
        rpm = p.spindle_speed(cutting.cutting_speed_m_min, cutting.tool_diameter_mm)
        feed_rate = p.feed_rate(cutting.feed_per_tooth_mm, cutting.number_of_teeth, rpm)
        mrr = p.material_removal_rate(
            cutting.width_of_cut_mm, cutting.depth_of_cut_mm, cutting.feed_per_tooth_mm,
            cutting.number_of_teeth, cutting.cutting_speed_m_min, cutting.tool_diameter_mm)
        chip = p.chip_thickness(cutting.feed_per_tooth_mm, cutting.depth_of_cut_mm,
                                cutting.tool_diameter_mm)
        kc = p.specific_cutting_force(cutting.workpiece_material, cutting.material_hardness_hrc)
        force = p.cutting_force(kc, cutting.depth_of_cut_mm, cutting.width_of_cut_mm,
                                cutting.feed_per_tooth_mm)
        power = p.power(force, cutting.cutting_speed_m_min)
        return TechnicalData(
            spindle_speed_rpm=rpm,
            feed_rate_mm_min=feed_rate,
            feed_per_revolution_mm=p.feed_per_revolution(cutting.feed_per_tooth_mm,
                                                         cutting.number_of_teeth),
            mrr_mm3_min=mrr,
            chip_thickness_mm=chip,
            specific_cutting_force_n_mm2=kc,
            cutting_force_n=force,
            power_kw=power,
            torque_nm=p.torque(power, rpm),
            surface_finish_um=p.surface_finish(cutting.feed_per_tooth_mm,
                                               cutting.tool_diameter_mm, cutting.number_of_teeth),
            taylor_constant=p.taylor_constant(cutting.cutting_speed_m_min, tool_life_min),
            taylor_exponent=TAYLOR_EXPONENT,
            mrr_per_power_cm3_min_kw=p.mrr_per_power(mrr, power),
            helix_angle_deg=cutting.helix_angle_deg,
            rake_angle_deg=cutting.rake_angle_deg,
        )

    def quick_cost(self, cutting: CuttingParameters, cost: CostParameters) -> tuple:
        """Tool life, cost and MRR only, as stored on a comparison entry.

        Returns (tool_life_min, cost_result, mrr_mm3_min). Raises
        ParameterValidationError when the inputs are invalid, or
        ComputationError when the depth of cut exceeds the tool diameter.
        """
        cutting = self._with_defaults(cutting)
        self._check(cutting, cost)
        self._physics.chip_thickness(cutting.feed_per_tooth_mm, cutting.depth_of_cut_mm,
                                     cutting.tool_diameter_mm)
        life, _ = life_model.resolve_tool_life(cutting)
        result = cost_model.calculate_cost(cost, life)
        mrr = self._physics.material_removal_rate(
            cutting.width_of_cut_mm, cutting.depth_of_cut_mm, cutting.feed_per_tooth_mm,
            cutting.number_of_teeth, cutting.cutting_speed_m_min, cutting.tool_diameter_mm)
        return life, result, mrr

    def evaluate(self, cutting: CuttingParameters, cost: CostParameters,
                 oee: Optional[OEEParameters] = None,
                 identity: Optional[ToolIdentity] = None,
                 project: Optional[ProjectInfo] = None) -> MillingEvaluation:
        """Full evaluation of one tool set-up.

        Raises ParameterValidationError listing every invalid field, or
        ComputationError when the depth of cut exceeds the tool diameter.
        """
        cutting = self._with_defaults(cutting)
        oee = oee or OEEParameters()
        self._check(cutting, cost, oee)

        life, overridden = life_model.resolve_tool_life(cutting)
        technical = self.technical_data(cutting, life)
        cost_result = cost_model.calculate_cost(cost, life)
        oee_result = calculate_oee(cost, cost_result, life, oee)
        recommendations = generate_recommendations(cutting, cost, cost_result)

        evaluation = MillingEvaluation(
            evaluation_id=uuid.uuid4().hex[:12],
            identity=identity or ToolIdentity(),
            cutting=cutting,
            cost_inputs=cost,
            oee_inputs=oee,
            tool_life_min=life,
            tool_life_overridden=overridden,
            technical=technical,
            cost=cost_result,
            oee=oee_result,
            recommendations=recommendations,
            scores={
                "cost": cost_model.cost_score(cost_result.total_cost_per_part),
                "tool_life": life_model.tool_life_score(life),
            },
            production_curve=cost_model.production_curve(cost_result, life),
            cost_breakdown=cost_model.cost_breakdown(cost_result),
            project=project or ProjectInfo(),
        )
        logger.info("Evaluation %s: life %s min, %.4f per part, OEE %.1f%%",
                    evaluation.evaluation_id, life, cost_result.total_cost_per_part,
                    oee_result.oee)
        return evaluation


_IDENTITY_FIELDS = [f.name for f in fields(ToolIdentity)]
_CUTTING_FIELDS = [f.name for f in fields(CuttingParameters)]
_COST_FIELDS = [f.name for f in fields(CostParameters)]
_OEE_FIELDS = [f.name for f in fields(OEEParameters)]


def build_inputs(inputs: dict, oee_defaults: Optional[dict] = None) -> tuple:
    """Split a flat input dict into (identity, cutting, cost, oee) records.

    Keys follow the record field names; a nested ``project`` dict is
    ignored here and handled by the caller.
    """
    def pick(names):
        return {k: inputs[k] for k in names if k in inputs}

    return (
        ToolIdentity.from_dict(pick(_IDENTITY_FIELDS)),
        CuttingParameters.from_dict(pick(_CUTTING_FIELDS)),
        CostParameters.from_dict(pick(_COST_FIELDS)),
        OEEParameters.from_dict(pick(_OEE_FIELDS), defaults=oee_defaults),
    )
