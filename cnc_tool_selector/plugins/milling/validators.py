"""Three-validator system for milling input verification.

Every validator collects all violations instead of stopping at the first,
so a caller can flag each offending field in one pass.
"""
from __future__ import annotations

import math
import numbers
from typing import Optional

from cnc_tool_selector.core.models import (
    CostParameters, CuttingParameters, OEEParameters, ValidationResult, ValidationStatus,
)
from cnc_tool_selector.plugins.milling import tables


def _is_number(value) -> bool:
    """Finite real number; bools, NaN and infinities are rejected."""
    return (isinstance(value, numbers.Real) and not isinstance(value, bool)
            and math.isfinite(value))


class _Collector:
    def __init__(self):
        self.status = "pass"
        self.messages = []
        self.errors = []

    def fail(self, field: str, message: str) -> None:
        self.errors.append((field, message))
        self.messages.append(message)
        self.status = "fail"

    def warn(self, message: str) -> None:
        self.messages.append(message)
        if self.status == "pass":
            self.status = "warning"

    def require_positive(self, field: str, value, label: str) -> None:
        if value is None:
            self.fail(field, "%s is required" % label)
        elif not _is_number(value):
            self.fail(field, "%s must be a finite number, got %r" % (label, value))
        elif value <= 0:
            self.fail(field, "%s must be greater than 0" % label)

    def require_non_negative(self, field: str, value, label: str, required: bool = False) -> None:
        if value is None:
            if required:
                self.fail(field, "%s is required" % label)
        elif not _is_number(value):
            self.fail(field, "%s must be a finite number, got %r" % (label, value))
        elif value < 0:
            self.fail(field, "%s cannot be negative" % label)

    def require_count(self, field: str, value, label: str, required: bool = True) -> None:
        if value is None:
            if required:
                self.fail(field, "%s is required" % label)
        elif not _is_number(value) or int(value) != value:
            self.fail(field, "%s must be a whole number, got %r" % (label, value))
        elif value < 1:
            self.fail(field, "%s must be at least 1" % label)

    def result(self) -> dict:
        return {"status": self.status, "messages": self.messages, "errors": self.errors}


class CuttingValidator:
    LOOKUPS = (
        ("workpiece_material", "Workpiece material", tables.MATERIAL_MULTIPLIERS),
        ("tool_material", "Tool material", tables.TOOL_MATERIAL_MULTIPLIERS),
        ("tool_coating", "Tool coating", tables.COATING_MULTIPLIERS),
    )

    def __init__(self, strict_lookup: bool = False):
        self.strict_lookup = strict_lookup

    def validate(self, cutting: CuttingParameters) -> dict:
        c = _Collector()
        c.require_positive("tool_diameter_mm", cutting.tool_diameter_mm, "Tool diameter")
        c.require_positive("cutting_speed_m_min", cutting.cutting_speed_m_min, "Cutting speed")
        c.require_positive("feed_per_tooth_mm", cutting.feed_per_tooth_mm, "Feed per tooth")
        c.require_positive("depth_of_cut_mm", cutting.depth_of_cut_mm, "Depth of cut")
        c.require_positive("width_of_cut_mm", cutting.width_of_cut_mm, "Width of cut")
        c.require_count("number_of_teeth", cutting.number_of_teeth, "Number of teeth")

        if cutting.material_hardness_hrc is not None and not _is_number(cutting.material_hardness_hrc):
            c.fail("material_hardness_hrc",
                   "Material hardness must be a finite number, got %r" % (cutting.material_hardness_hrc,))
        if cutting.tool_life_min is not None:
            c.require_positive("tool_life_min", cutting.tool_life_min, "Tool life")

        for field, label, table in self.LOOKUPS:
            value = getattr(cutting, field)
            if value is None or value == "":
                c.fail(field, "%s is required" % label)
            elif not tables.is_known(table, value):
                if self.strict_lookup:
                    c.fail(field, "%s %r is not recognised" % (label, value))
                else:
                    c.warn("%s %r is not recognised, baseline values used" % (label, value))
        return c.result()


class CostValidator:
    def validate(self, cost: CostParameters) -> dict:
        c = _Collector()
        c.require_positive("tool_cost", cost.tool_cost, "Tool cost")
        c.require_positive("machine_hourly_rate", cost.machine_hourly_rate, "Machine hourly rate")
        c.require_non_negative("processing_time_min", cost.processing_time_min,
                               "Processing time", required=True)
        c.require_non_negative("tool_residual_value", cost.tool_residual_value, "Tool residual value")
        c.require_non_negative("tool_change_time_min", cost.tool_change_time_min, "Tool change time")
        c.require_non_negative("tool_change_cost", cost.tool_change_cost, "Tool change cost")
        c.require_non_negative("machining_time_min", cost.machining_time_min, "Machining time")
        c.require_count("batch_size", cost.batch_size, "Batch size")

        if (not c.errors and cost.tool_residual_value > cost.tool_cost):
            c.warn("Tool residual value %.2f exceeds tool cost %.2f"
                   % (cost.tool_residual_value, cost.tool_cost))
        return c.result()


class OEEValidator:
    def validate(self, oee: OEEParameters) -> dict:
        c = _Collector()
        rate = oee.defect_rate_percent
        if not _is_number(rate):
            c.fail("defect_rate_percent", "Defect rate must be a finite number, got %r" % (rate,))
        elif not (0 <= rate <= 100):
            c.fail("defect_rate_percent", "Defect rate must be between 0 and 100%")
        c.require_non_negative("planned_production_hours_per_shift",
                               oee.planned_production_hours_per_shift, "Planned production time",
                               required=True)
        c.require_non_negative("unplanned_downtime_hours_per_shift",
                               oee.unplanned_downtime_hours_per_shift, "Unplanned downtime",
                               required=True)
        c.require_non_negative("tool_change_time_loss_min", oee.tool_change_time_loss_min,
                               "Tool change time loss", required=True)
        c.require_positive("parts_per_year", oee.parts_per_year, "Parts per year")
        return c.result()


def validate_inputs(cutting: CuttingParameters, cost: CostParameters,
                    oee: Optional[OEEParameters] = None,
                    strict_lookup: bool = False) -> ValidationResult:
    checks = [
        ("cutting", CuttingValidator(strict_lookup=strict_lookup), cutting),
        ("cost", CostValidator(), cost),
    ]
    if oee is not None:
        checks.append(("oee", OEEValidator(), oee))

    results = {}
    overall = ValidationStatus.PASS
    for name, validator, subject in checks:
        result = validator.validate(subject)
        results[name] = result
        if result["status"] == "fail":
            overall = ValidationStatus.FAIL
        elif result["status"] == "warning" and overall != ValidationStatus.FAIL:
            overall = ValidationStatus.WARNING

    all_messages = []
    for name, r in results.items():
        for msg in r["messages"]:
            all_messages.append("[%s] %s" % (name, msg))

    return ValidationResult(status=overall, validators=results, messages=all_messages)
