"""Static coefficient tables for milling calculations."""
from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

# Cutting speed multipliers relative to steel.
MATERIAL_MULTIPLIERS = {
    "steel": 1.0,
    "cast_iron": 0.7,
    "aluminum": 2.5,
    "stainless_steel": 0.6,
    "titanium": 0.4,
    "brass": 1.8,
}

TOOL_MATERIAL_MULTIPLIERS = {
    "hss": 1.0,
    "carbide": 2.5,
    "coated_carbide": 3.0,
    "ceramic": 4.0,
    "diamond": 5.0,
}

COATING_MULTIPLIERS = {
    "none": 1.0,
    "tin": 1.3,
    "ticn": 1.5,
    "alcrn": 1.8,
    "diamond": 2.5,
}

# Base specific cutting force kc (N/mm2) at 30 HRC.
BASE_CUTTING_FORCES = {
    "steel": 2000,
    "cast_iron": 1500,
    "aluminum": 800,
    "stainless_steel": 2500,
    "titanium": 3000,
    "brass": 1200,
}

DEFAULT_MULTIPLIER = 1.0
DEFAULT_CUTTING_FORCE = 2000


def normalize_key(key) -> str:
    """Fold enum members and catalogue spellings onto table keys.

    ``"castIron"``, ``"Cast Iron"``, ``"cast-iron"`` and
    ``WorkpieceMaterial.CAST_IRON`` all become ``"cast_iron"``.
    """
    if key is None:
        return ""
    raw = getattr(key, "value", key)
    folded = "".join(ch for ch in str(raw).lower() if ch.isalnum())
    return _FOLDED.get(folded, folded)


_FOLDED = {
    k.replace("_", ""): k
    for table in (MATERIAL_MULTIPLIERS, TOOL_MATERIAL_MULTIPLIERS, COATING_MULTIPLIERS)
    for k in table
}


def is_known(table: dict, key) -> bool:
    return normalize_key(key) in table


def _lookup(table: dict, key, default, table_name: str):
    norm = normalize_key(key)
    if norm in table:
        return table[norm]
    logger.warning("Unknown %s %r, falling back to baseline %s", table_name, key, default)
    return default


def material_multiplier(material) -> float:
    return _lookup(MATERIAL_MULTIPLIERS, material, DEFAULT_MULTIPLIER, "workpiece material")


def tool_material_multiplier(tool_material) -> float:
    return _lookup(TOOL_MATERIAL_MULTIPLIERS, tool_material, DEFAULT_MULTIPLIER, "tool material")


def coating_multiplier(coating) -> float:
    return _lookup(COATING_MULTIPLIERS, coating, DEFAULT_MULTIPLIER, "coating")


def base_cutting_force(material) -> float:
    return _lookup(BASE_CUTTING_FORCES, material, DEFAULT_CUTTING_FORCE, "workpiece material")
