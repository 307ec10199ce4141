"""Shared presentation helpers for the report exporters."""
from __future__ import annotations

import os
from datetime import datetime
from typing import Optional

from cnc_tool_selector.core.models import MillingEvaluation

CURRENCY_SYMBOLS = {"EUR": "€", "USD": "$", "GBP": "£"}

STANDARD_REFERENCE = "ISO 8688-2:1989 - Tool life testing in milling Part 2: End milling"

# (attribute, label, unit, format)
TECHNICAL_ROWS = [
    ("spindle_speed_rpm", "Spindle Speed", "RPM", "%.0f"),
    ("feed_rate_mm_min", "Feed Rate", "mm/min", "%.1f"),
    ("feed_per_revolution_mm", "Feed per Revolution", "mm/rev", "%.3f"),
    ("mrr_mm3_min", "Material Removal Rate", "mm3/min", "%.1f"),
    ("chip_thickness_mm", "Chip Thickness", "mm", "%.4f"),
    ("specific_cutting_force_n_mm2", "Specific Cutting Force", "N/mm2", "%.0f"),
    ("cutting_force_n", "Cutting Force", "N", "%.1f"),
    ("power_kw", "Power", "kW", "%.3f"),
    ("torque_nm", "Torque", "Nm", "%.3f"),
    ("surface_finish_um", "Surface Finish Ra", "um", "%.3f"),
    ("taylor_constant", "Taylor Constant", "", "%.2f"),
    ("taylor_exponent", "Taylor Exponent", "", "%.2f"),
    ("mrr_per_power_cm3_min_kw", "MRR per Power", "cm3/min/kW", "%.2f"),
]

COST_ROWS = [
    ("total_cost_per_part", "Total Cost per Part"),
    ("tool_cost_per_part", "Tool Cost per Part"),
    ("machining_cost_per_part", "Machining Cost per Part"),
    ("tool_change_cost_per_part", "Tool Change Cost per Part"),
    ("processing_cost_per_part", "Processing Cost per Part"),
    ("tool_change_time_cost_per_part", "Tool Change Time Cost per Part"),
    ("total_batch_cost", "Total Batch Cost"),
    ("total_tool_cost_for_batch", "Tool Cost for Batch"),
    ("total_machining_cost_for_batch", "Machining Cost for Batch"),
]

OEE_ROWS = [
    ("oee", "OEE"),
    ("availability", "Availability"),
    ("performance", "Performance"),
    ("quality", "Quality"),
]


def format_currency(value: float, currency: str = "EUR") -> str:
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol:
        return "%s%.2f" % (symbol, value)
    return "%s %.2f" % (currency, value)


def capitalize(text: str) -> str:
    return text[:1].upper() + text[1:] if text else ""


def enum_label(value) -> str:
    return str(getattr(value, "value", value))


def report_path(output_dir: str, report_id: str, extension: str) -> str:
    os.makedirs(output_dir, exist_ok=True)
    filename = "report_%s_%s.%s" % (report_id, datetime.now().strftime("%Y%m%d_%H%M%S"), extension)
    return os.path.join(output_dir, filename)


def report_id(evaluation: Optional[MillingEvaluation]) -> str:
    return evaluation.evaluation_id if evaluation is not None else "comparison"


def comparison_payload(aggregator) -> Optional[dict]:
    """Snapshot of a comparison for embedding in a report; None when empty."""
    if aggregator is None or aggregator.is_empty():
        return None
    entries = aggregator.entries()
    best = aggregator.best_by("total_cost_per_part")
    worst = aggregator.worst_by("total_cost_per_part")
    savings = aggregator.savings()
    return {
        "entries": [e.to_dict() for e in entries],
        "best": {"id": best.id, "name": best.name,
                 "total_cost_per_part": best.total_cost_per_part},
        "worst": {"id": worst.id, "name": worst.name,
                  "total_cost_per_part": worst.total_cost_per_part},
        "savings": savings.to_dict() if savings else None,
        "efficiency_profile": aggregator.efficiency_profile(),
    }


def check_subject(evaluation, comparison) -> None:
    if evaluation is None and (comparison is None or comparison.is_empty()):
        raise ValueError("Nothing to report: need an evaluation or a non-empty comparison")
