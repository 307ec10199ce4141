"""Cost-per-part amortisation of tool and machine time."""
from __future__ import annotations

import logging
import math

from cnc_tool_selector.core.models import CostParameters, CostResult

logger = logging.getLogger(__name__)


def parts_per_tool_life(tool_life_min: float, time_per_part_min: float) -> int:
    """Whole parts one tool produces; 0 when the time per part is not positive."""
    if time_per_part_min <= 0:
        return 0
    return int(math.floor(tool_life_min / time_per_part_min))


def calculate_cost(cost: CostParameters, tool_life_min: float) -> CostResult:
    rate = cost.machine_hourly_rate
    time_per_part = cost.time_per_part_min

    tool_cost_per_part = cost.net_tool_cost / tool_life_min
    parts = parts_per_tool_life(tool_life_min, time_per_part)
    changes = max(0, parts - 1)
    if parts > 0:
        change_cost_per_part = (changes * cost.tool_change_cost) / parts
    else:
        logger.warning("Tool life %.1f min is shorter than %.2f min per part",
                       tool_life_min, time_per_part)
        change_cost_per_part = 0.0

    processing_cost = (cost.processing_time_min / 60) * rate
    change_time_cost = (cost.tool_change_time_min / 60) * rate
    machining_cost = (time_per_part / 60) * rate
    total = tool_cost_per_part + change_cost_per_part + machining_cost

    batch = cost.batch_size
    result = CostResult(
        tool_cost_per_part=tool_cost_per_part,
        tool_change_cost_per_part=change_cost_per_part,
        processing_cost_per_part=processing_cost,
        tool_change_time_cost_per_part=change_time_cost,
        machining_cost_per_part=machining_cost,
        total_cost_per_part=total,
        total_batch_cost=total * batch,
        total_tool_cost_for_batch=tool_cost_per_part * batch,
        total_machining_cost_for_batch=machining_cost * batch,
        parts_per_tool_life=parts,
        tool_changes_per_tool_life=changes,
        time_per_part_min=time_per_part,
        batch_size=batch,
    )
    logger.debug("Cost per part %.4f (tool %.4f, change %.4f, machining %.4f)",
                 total, tool_cost_per_part, change_cost_per_part, machining_cost)
    return result


def cost_breakdown(result: CostResult) -> list:
    """Non-zero (label, value) pairs for the cost pie chart."""
    pairs = [
        ("Tool cost", result.tool_cost_per_part),
        ("Machining cost", result.machining_cost_per_part),
        ("Tool change cost", result.tool_change_cost_per_part),
    ]
    return [(label, value) for label, value in pairs if value > 0]


def cost_score(total_cost_per_part: float) -> str:
    if total_cost_per_part < 1:
        return "excellent"
    if total_cost_per_part < 3:
        return "good"
    if total_cost_per_part < 5:
        return "fair"
    return "needs_improvement"


def production_curve(result: CostResult, tool_life_min: float, max_points: int = 20) -> list:
    """Points of (time_min, parts, cumulative_cost) over one tool life."""
    points = []
    for i in range(min(result.parts_per_tool_life, max_points) + 1):
        time = i * result.time_per_part_min
        if time > tool_life_min:
            break
        points.append({"time_min": time, "parts": i,
                       "cumulative_cost": result.total_cost_per_part * i})
    return points
