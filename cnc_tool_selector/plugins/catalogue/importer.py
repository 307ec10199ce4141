"""Supplier catalogue import: CSV, JSON and Excel rows to calculator inputs."""
from __future__ import annotations

import csv
import json
import logging
import math
import os
import re
from dataclasses import dataclass, field
from typing import Optional

from openpyxl import load_workbook

from cnc_tool_selector.core.errors import CatalogueFormatError

logger = logging.getLogger(__name__)

# Declaration order matters: the first field whose aliases match a column wins.
FIELD_ALIASES = {
    "brand": ["brand", "manufacturer", "maker", "company"],
    "type": ["type", "tooltype", "category", "tool_type"],
    "name_model": ["name", "model", "namemodel", "name_model", "modelname", "model_name",
                   "partnumber", "part_number"],
    "product_code": ["code", "productcode", "product_code", "sku", "partcode", "part_code"],
    "diameter": ["diameter", "d", "dia", "size", "toolsize", "tool_size"],
    "material": ["material", "toolmaterial", "tool_material", "grade"],
    "coating": ["coating", "coated", "surface"],
    "number_of_teeth": ["teeth", "flutes", "numberofteeth", "number_of_teeth", "z"],
    "helix_angle": ["helix", "helixangle", "helix_angle", "beta"],
    "rake_angle": ["rake", "rakeangle", "rake_angle", "gamma"],
    "tool_cost": ["cost", "price", "toolcost", "tool_cost"],
    "cutting_speed": ["speed", "cutting speed", "cutting_speed", "vc", "v_c"],
    "feed_rate": ["feed", "feedrate", "feed_rate", "fz", "f_z"],
    "depth_of_cut": ["depth", "depthofcut", "depth_of_cut", "ap", "a_p"],
    "width_of_cut": ["width", "widthofcut", "width_of_cut", "ae", "a_e", "stepover"],
}

NUMERIC_FIELDS = ("diameter", "number_of_teeth", "helix_angle", "rake_angle", "tool_cost",
                  "cutting_speed", "feed_rate", "depth_of_cut", "width_of_cut")
SQUASHED_FIELDS = ("brand", "type")
# Aliases or columns this short only match exactly.
SHORT_ALIAS_LEN = 2

TEMPLATE_ROW = {
    "brand": "kennametal",
    "type": "endMill",
    "nameModel": "KOR5",
    "productCode": "KOR5-1000-12-4FL",
    "diameter": 10,
    "material": "carbide",
    "coating": "tin",
    "numberOfTeeth": 4,
    "helixAngle": 30,
    "rakeAngle": 5,
    "toolCost": 50,
    "cuttingSpeed": 100,
    "feedRate": 0.1,
    "depthOfCut": 2,
    "widthOfCut": 5,
}

# Shop defaults applied to every catalogue tool.
SHOP_DEFAULTS = {
    "workpiece_material": "steel",
    "processing_time_min": 10,
    "tool_change_cost": 5,
    "tool_change_time_min": 2,
    "machining_time_min": None,
    "machine_hourly_rate": 50,
    "tool_residual_value": 0,
    "tool_life_min": None,
    "batch_size": 1,
}


@dataclass
class CatalogueTool:
    row_index: int
    brand: str = ""
    type: str = ""
    name_model: str = ""
    product_code: str = ""
    diameter: Optional[float] = None
    material: str = ""
    coating: str = ""
    number_of_teeth: Optional[float] = None
    helix_angle: Optional[float] = None
    rake_angle: Optional[float] = None
    tool_cost: Optional[float] = None
    cutting_speed: Optional[float] = None
    feed_rate: Optional[float] = None
    depth_of_cut: Optional[float] = None
    width_of_cut: Optional[float] = None
    extra: dict = field(default_factory=dict)

    def to_inputs(self) -> dict:
        """Full calculator input dict; missing or zero values take catalogue defaults."""
        inputs = {
            "brand": self.brand,
            "tool_type": self.type,
            "name_model": self.name_model,
            "product_code": self.product_code,
            "tool_diameter_mm": self.diameter or 10,
            "tool_material": self.material or "carbide",
            "tool_coating": self.coating or "none",
            "number_of_teeth": int(self.number_of_teeth or 4),
            "helix_angle_deg": self.helix_angle or None,
            "rake_angle_deg": self.rake_angle or None,
            "tool_cost": self.tool_cost or 50,
            "cutting_speed_m_min": self.cutting_speed or 100,
            "feed_per_tooth_mm": self.feed_rate or 0.1,
            "depth_of_cut_mm": self.depth_of_cut or 2,
            "width_of_cut_mm": self.width_of_cut or 5,
        }
        inputs.update(SHOP_DEFAULTS)
        return inputs


def _read_csv(path: str) -> tuple:
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        rows = [row for row in reader if any((v or "").strip() for v in row.values() if isinstance(v, str))]
        return rows, list(reader.fieldnames or [])


def _read_json(path: str) -> tuple:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise CatalogueFormatError("Error parsing JSON: %s" % exc) from exc
    if not isinstance(data, list):
        raise CatalogueFormatError("JSON catalogue must be a list of objects")
    rows = [row for row in data if isinstance(row, dict)]
    fields = list(rows[0].keys()) if rows else []
    return rows, fields


def _read_xlsx(path: str) -> tuple:
    wb = load_workbook(path, read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        values = ws.iter_rows(values_only=True)
        header = next(values, None)
        if header is None:
            return [], []
        fields = [str(h).strip() if h is not None else "" for h in header]
        rows = []
        for raw in values:
            if raw is None or all(v is None or v == "" for v in raw):
                continue
            rows.append({name: value for name, value in zip(fields, raw) if name})
        return rows, [f for f in fields if f]
    finally:
        wb.close()


_READERS = {
    ".csv": _read_csv,
    ".json": _read_json,
    ".xlsx": _read_xlsx,
}


def read_catalogue(path: str) -> tuple:
    """Load catalogue rows; returns (rows, column_names)."""
    ext = os.path.splitext(path)[1].lower()
    reader = _READERS.get(ext)
    if reader is None:
        raise CatalogueFormatError(
            "Unsupported file format '%s'. Please use CSV, JSON, or Excel files." % ext)
    rows, fields = reader(path)
    if not rows:
        raise CatalogueFormatError("No data found")
    logger.info("Read %d catalogue rows from %s", len(rows), path)
    return rows, fields


def _matches(column: str, alias: str) -> bool:
    if column == alias:
        return True
    if len(alias) > SHORT_ALIAS_LEN and alias in column:
        return True
    return len(column) > SHORT_ALIAS_LEN and column in alias


def detect_field_mapping(columns: list) -> dict:
    """Map calculator fields to catalogue columns by alias.

    A column matches a field when it contains one of the aliases or an
    alias contains it. Aliases and columns of two characters or fewer
    (``d``, ``z``, ``vc``) only match exactly. A later column matching
    the same field replaces the earlier one.
    """
    mapping = {}
    for column in columns:
        lower = str(column).lower().strip()
        if not lower:
            continue
        for calc_field, aliases in FIELD_ALIASES.items():
            if any(_matches(lower, alias) for alias in aliases):
                mapping[calc_field] = column
                break
    logger.debug("Detected catalogue mapping %s", mapping)
    return mapping


def _parse_float(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    # Leading numeric prefix, like a lenient string-to-float parse.
    match = re.match(r"\s*([-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?)", str(value))
    return float(match.group(1)) if match else None


def apply_field_mapping(rows: list, mapping: dict) -> list:
    tools = []
    for index, row in enumerate(rows):
        values = {}
        for calc_field, column in mapping.items():
            if not column or calc_field not in FIELD_ALIASES:
                continue
            value = row.get(column)
            if value is None or value == "":
                continue
            if calc_field in NUMERIC_FIELDS:
                value = _parse_float(value)
            elif isinstance(value, str):
                value = value.strip()
                if calc_field in SQUASHED_FIELDS:
                    value = re.sub(r"\s+", "", value.lower())
            else:
                value = str(value)
            values[calc_field] = value
        unmapped = {k: v for k, v in row.items() if k not in mapping.values()}
        tools.append(CatalogueTool(row_index=index, extra=unmapped, **values))
    return tools


def catalogue_template() -> dict:
    return dict(TEMPLATE_ROW)


def write_template(path: str) -> str:
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(TEMPLATE_ROW))
        writer.writeheader()
        writer.writerow(TEMPLATE_ROW)
    return path
