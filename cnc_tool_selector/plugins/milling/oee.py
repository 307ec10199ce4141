"""Per-part OEE approximation: Availability x Performance x Quality.

Shift-level unplanned downtime is spread over the daily part rate implied
by the annual volume, and every tool change costs a fixed time loss. The
result is a heuristic for comparing tools, not a measured shop-floor OEE.
"""
from __future__ import annotations

import logging

from cnc_tool_selector.core.models import (
    CostParameters, CostResult, OEEParameters, OEEResult,
    ToolChangeImpact, SpeedImpact, ToolLifeImpact,
)

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def calculate_oee(cost: CostParameters, cost_result: CostResult, tool_life_min: float,
                  oee: OEEParameters) -> OEEResult:
    rate = cost.machine_hourly_rate
    time_per_part = cost.time_per_part_min
    parts = cost_result.parts_per_tool_life

    changes_per_part = 1 / parts if parts > 0 else 0.0
    change_downtime = changes_per_part * oee.tool_change_time_loss_min
    parts_per_day = oee.parts_per_year / DAYS_PER_YEAR
    unplanned_downtime = (oee.unplanned_downtime_hours_per_shift * 60) / parts_per_day
    downtime = change_downtime + unplanned_downtime

    ideal = cost.processing_time_min
    actual = time_per_part + downtime

    if actual > 0:
        availability = _clamp(1 - downtime / actual)
        performance = _clamp(ideal / actual)
    else:
        availability = 0.0
        performance = 0.0
    quality = _clamp(1 - oee.defect_rate_percent / 100)
    overall = availability * performance * quality

    change_cost = (change_downtime / 60) * rate
    shift_parts = (oee.planned_production_hours_per_shift * 60) / actual if actual > 0 else 0.0
    tool_change_impact = ToolChangeImpact(
        tool_changes_per_part=changes_per_part,
        downtime_per_part_min=change_downtime,
        cost_per_part=change_cost,
        tool_changes_per_shift=shift_parts * changes_per_part,
        tool_changes_per_year=oee.parts_per_year * changes_per_part,
        annual_downtime_hours=change_downtime * oee.parts_per_year / 60,
        annual_cost=change_cost * oee.parts_per_year,
    )

    speed_loss = actual - ideal
    speed_cost = (speed_loss / 60) * rate
    speed_impact = SpeedImpact(
        ideal_cycle_time_min=ideal,
        actual_cycle_time_min=actual,
        speed_loss_per_part_min=speed_loss,
        cost_per_part=speed_cost,
        annual_cost=speed_cost * oee.parts_per_year,
    )

    tools_per_year = oee.parts_per_year / parts if parts > 0 else 0.0
    tool_life_impact = ToolLifeImpact(
        tool_life_min=tool_life_min,
        parts_per_tool_life=parts,
        tool_life_utilization_percent=(parts * time_per_part / tool_life_min) * 100,
        tools_per_year=tools_per_year,
        annual_tool_cost=tools_per_year * cost.net_tool_cost,
    )

    result = OEEResult(
        oee=overall * 100,
        availability=availability * 100,
        performance=performance * 100,
        quality=quality * 100,
        oee_loss=100 - overall * 100,
        availability_loss=100 - availability * 100,
        performance_loss=100 - performance * 100,
        quality_loss=100 - quality * 100,
        ideal_cycle_time_min=ideal,
        actual_cycle_time_min=actual,
        downtime_per_part_min=downtime,
        tool_change_downtime_per_part_min=change_downtime,
        unplanned_downtime_per_part_min=unplanned_downtime,
        tool_change_impact=tool_change_impact,
        speed_impact=speed_impact,
        tool_life_impact=tool_life_impact,
    )
    logger.debug("OEE %.2f%% (A %.2f, P %.2f, Q %.2f)", result.oee,
                 result.availability, result.performance, result.quality)
    return result
