"""Empirical tool life model loosely following ISO 8688-2 end-milling practice.

The reference condition (Vc=100 m/min, fz=0.1 mm, ap=2 mm) yields a
nominal 60 min life for an HSS tool in steel. Better tool materials and
coatings multiply it; more aggressive cutting shortens it through
inverse-power penalty terms. The constants are fixed, not tunable.
"""
from __future__ import annotations

import logging
import math

from cnc_tool_selector.core.models import CuttingParameters
from cnc_tool_selector.plugins.milling import tables

logger = logging.getLogger(__name__)

BASE_TOOL_LIFE_MIN = 60.0
REFERENCE_SPEED_M_MIN = 100.0
REFERENCE_FEED_MM = 0.1
REFERENCE_DEPTH_MM = 2.0
SPEED_EXPONENT = 0.2
FEED_EXPONENT = 0.15
DEPTH_EXPONENT = 0.1


def combined_factor(params: CuttingParameters) -> float:
    return (tables.material_multiplier(params.workpiece_material)
            * tables.tool_material_multiplier(params.tool_material)
            * tables.coating_multiplier(params.tool_coating))


def life_factors(params: CuttingParameters) -> dict:
    return {
        "combined": combined_factor(params),
        "speed": (REFERENCE_SPEED_M_MIN / params.cutting_speed_m_min) ** SPEED_EXPONENT,
        "feed": (REFERENCE_FEED_MM / params.feed_per_tooth_mm) ** FEED_EXPONENT,
        "depth": (REFERENCE_DEPTH_MM / params.depth_of_cut_mm) ** DEPTH_EXPONENT,
    }


def estimate_tool_life(params: CuttingParameters) -> int:
    """Estimated tool life in whole minutes, never below 1."""
    f = life_factors(params)
    raw = BASE_TOOL_LIFE_MIN * f["combined"] * f["speed"] * f["feed"] * f["depth"]
    # Half-up rounding, not banker's rounding.
    life = max(1, int(math.floor(raw + 0.5)))
    logger.debug("Tool life %.3f min -> %d min (factors %s)", raw, life, f)
    return life


def resolve_tool_life(params: CuttingParameters) -> tuple:
    """Return (tool_life_min, overridden); an explicit override wins."""
    if params.tool_life_min is not None:
        return params.tool_life_min, True
    return estimate_tool_life(params), False


def tool_life_score(tool_life_min: float) -> str:
    if tool_life_min >= 120:
        return "excellent"
    if tool_life_min >= 60:
        return "good"
    if tool_life_min >= 30:
        return "fair"
    return "poor"
