"""Advisory rules evaluated over one milling set-up.

Each rule fires independently; the returned list keeps rule order.
"""
from __future__ import annotations

from cnc_tool_selector.core.models import CostParameters, CostResult, CuttingParameters, Recommendation
from cnc_tool_selector.plugins.milling import tables

HARD_MATERIALS = ("stainless_steel", "titanium")
COATING_BENEFIT_MATERIALS = ("steel", "stainless_steel")
REFERENCE_SPEED_M_MIN = 100
SPEED_TOLERANCE = 0.3
LOW_FEED_MM = 0.05
HSS_MAX_FEED_MM = 0.3


def _tool_material_rule(workpiece: str, tool_material: str):
    if tool_material == "hss" and workpiece in HARD_MATERIALS:
        return Recommendation(
            "tool_material",
            "Consider upgrading to carbide or coated carbide tools for better "
            "performance with hard materials.")
    return None


def _coating_rule(workpiece: str, coating: str):
    if coating == "none" and workpiece in COATING_BENEFIT_MATERIALS:
        return Recommendation(
            "coating",
            "Adding a TiN or TiCN coating can increase tool life by 30-50% for steel materials.")
    return None


def _cutting_speed_rule(cutting: CuttingParameters):
    recommended = REFERENCE_SPEED_M_MIN * tables.material_multiplier(cutting.workpiece_material)
    if abs(cutting.cutting_speed_m_min - recommended) > recommended * SPEED_TOLERANCE:
        name = tables.normalize_key(cutting.workpiece_material).replace("_", " ")
        return Recommendation(
            "cutting_speed",
            "For %s, consider adjusting cutting speed to around %d m/min for optimal tool life."
            % (name, int(recommended + 0.5)))
    return None


def _feed_rule(cutting: CuttingParameters, tool_material: str):
    fz = cutting.feed_per_tooth_mm
    if fz < LOW_FEED_MM:
        return Recommendation(
            "feed_rate",
            "Very low feed rates may cause premature tool wear. Consider increasing feed "
            "rate if surface finish allows.")
    if fz > HSS_MAX_FEED_MM and tool_material == "hss":
        return Recommendation(
            "feed_rate",
            "High feed rates with HSS tools may cause rapid wear. Consider reducing feed "
            "rate or upgrading to carbide.")
    return None


def _tool_cost_rule(result: CostResult):
    if result.tool_cost_per_part > result.machining_cost_per_part * 0.3:
        return Recommendation(
            "cost",
            "Tool cost per part is high relative to machining cost. Consider tools with "
            "longer tool life or lower initial cost.")
    return None


def _tool_change_rule(cost: CostParameters, result: CostResult):
    if cost.tool_change_cost > 0 and result.tool_change_cost_per_part > result.tool_cost_per_part * 0.5:
        return Recommendation(
            "tool_change",
            "Tool change costs are significant. Consider optimizing tool change frequency "
            "or reducing tool change time.")
    return None


def _processing_time_rule(cost: CostParameters):
    # Only meaningful with an explicit machining time to compare against.
    machining = cost.machining_time_min
    if cost.processing_time_min and machining and cost.processing_time_min < machining * 0.7:
        return Recommendation(
            "processing_time",
            "Tool change time represents a significant portion of total machining time. "
            "Consider faster tool change systems or tool optimization.")
    return None


def generate_recommendations(cutting: CuttingParameters, cost: CostParameters,
                             result: CostResult) -> list:
    workpiece = tables.normalize_key(cutting.workpiece_material)
    tool_material = tables.normalize_key(cutting.tool_material)
    coating = tables.normalize_key(cutting.tool_coating)
    candidates = [
        _tool_material_rule(workpiece, tool_material),
        _coating_rule(workpiece, coating),
        _cutting_speed_rule(cutting),
        _feed_rule(cutting, tool_material),
        _tool_cost_rule(result),
        _tool_change_rule(cost, result),
        _processing_time_rule(cost),
    ]
    return [r for r in candidates if r is not None]
