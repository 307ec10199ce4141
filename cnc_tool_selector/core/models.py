"""Core data models for CncToolSelector.

Units are carried in field names: ``_mm`` millimetres, ``_m_min`` metres per
minute, ``_min`` minutes, ``_rpm`` revolutions per minute, ``_n`` newtons,
``_kw`` kilowatts, ``_nm`` newton metres, ``_n_mm2`` N/mm2, ``_um`` micrometres.
Currency fields are plain decimals with no unit suffix.
"""
from __future__ import annotations

import enum
from dataclasses import MISSING, dataclass, field, asdict, fields
from datetime import datetime, timezone
from typing import Optional


class ValidationStatus(enum.Enum):
    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"


class WorkpieceMaterial(str, enum.Enum):
    STEEL = "steel"
    CAST_IRON = "cast_iron"
    ALUMINUM = "aluminum"
    STAINLESS_STEEL = "stainless_steel"
    TITANIUM = "titanium"
    BRASS = "brass"


class ToolMaterial(str, enum.Enum):
    HSS = "hss"
    CARBIDE = "carbide"
    COATED_CARBIDE = "coated_carbide"
    CERAMIC = "ceramic"
    DIAMOND = "diamond"


class ToolCoating(str, enum.Enum):
    NONE = "none"
    TIN = "tin"
    TICN = "ticn"
    ALCRN = "alcrn"
    DIAMOND = "diamond"


def _from_mapping(cls, data: dict):
    # Absent required fields become None so validation can report them.
    kwargs = {}
    for f in fields(cls):
        if f.name in data:
            kwargs[f.name] = data[f.name]
        elif f.default is MISSING and f.default_factory is MISSING:
            kwargs[f.name] = None
    return cls(**kwargs)


@dataclass
class ToolIdentity:
    name: str = ""
    brand: str = ""
    tool_type: str = ""
    name_model: str = ""
    product_code: str = ""
    part_name: str = ""
    application_type: str = ""

    @property
    def display_brand(self) -> str:
        return self.brand[:1].upper() + self.brand[1:] if self.brand else ""

    @classmethod
    def from_dict(cls, data: dict) -> "ToolIdentity":
        return _from_mapping(cls, {k: v for k, v in data.items() if v is not None})


@dataclass
class ProjectInfo:
    client_name: str = ""
    project_name: str = ""
    part_name: str = ""
    machine_name: str = ""
    application_type: str = ""
    customer_contact: str = ""

    def is_empty(self) -> bool:
        return not any(asdict(self).values())

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectInfo":
        return _from_mapping(cls, {k: v for k, v in data.items() if v is not None})


@dataclass
class CuttingParameters:
    workpiece_material: str
    tool_material: str
    tool_coating: str
    cutting_speed_m_min: float
    feed_per_tooth_mm: float
    depth_of_cut_mm: float
    width_of_cut_mm: float
    tool_diameter_mm: float
    number_of_teeth: int
    material_hardness_hrc: Optional[float] = 30.0
    helix_angle_deg: Optional[float] = None
    rake_angle_deg: Optional[float] = None
    tool_life_min: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict) -> "CuttingParameters":
        values = _from_mapping(cls, data)
        if values.material_hardness_hrc is None:
            values.material_hardness_hrc = 30.0
        return values


@dataclass
class CostParameters:
    tool_cost: float
    processing_time_min: float
    machine_hourly_rate: float
    tool_residual_value: float = 0.0
    tool_change_time_min: float = 0.0
    tool_change_cost: float = 0.0
    machining_time_min: Optional[float] = None
    batch_size: int = 1

    @property
    def net_tool_cost(self) -> float:
        return self.tool_cost - self.tool_residual_value

    @property
    def time_per_part_min(self) -> float:
        if self.machining_time_min is not None:
            return self.machining_time_min
        return self.processing_time_min + self.tool_change_time_min

    @classmethod
    def from_dict(cls, data: dict) -> "CostParameters":
        values = _from_mapping(cls, data)
        for name, default in (("tool_residual_value", 0.0), ("tool_change_time_min", 0.0),
                              ("tool_change_cost", 0.0), ("batch_size", 1)):
            if getattr(values, name) is None:
                setattr(values, name, default)
        return values


@dataclass
class OEEParameters:
    defect_rate_percent: float = 2.0
    planned_production_hours_per_shift: float = 8.0
    unplanned_downtime_hours_per_shift: float = 0.5
    tool_change_time_loss_min: float = 5.0
    parts_per_year: float = 4000

    @classmethod
    def from_dict(cls, data: dict, defaults: Optional[dict] = None) -> "OEEParameters":
        merged = dict(defaults or {})
        merged.update({k: v for k, v in data.items() if v is not None})
        return _from_mapping(cls, merged)


@dataclass
class TechnicalData:
    spindle_speed_rpm: float
    feed_rate_mm_min: float
    feed_per_revolution_mm: float
    mrr_mm3_min: float
    chip_thickness_mm: float
    specific_cutting_force_n_mm2: float
    cutting_force_n: float
    power_kw: float
    torque_nm: float
    surface_finish_um: float
    taylor_constant: float
    taylor_exponent: float
    mrr_per_power_cm3_min_kw: float
    helix_angle_deg: Optional[float] = None
    rake_angle_deg: Optional[float] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CostResult:
    tool_cost_per_part: float
    tool_change_cost_per_part: float
    processing_cost_per_part: float
    tool_change_time_cost_per_part: float
    machining_cost_per_part: float
    total_cost_per_part: float
    total_batch_cost: float
    total_tool_cost_for_batch: float
    total_machining_cost_for_batch: float
    parts_per_tool_life: int
    tool_changes_per_tool_life: int
    time_per_part_min: float
    batch_size: int = 1

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ToolChangeImpact:
    tool_changes_per_part: float
    downtime_per_part_min: float
    cost_per_part: float
    tool_changes_per_shift: float
    tool_changes_per_year: float
    annual_downtime_hours: float
    annual_cost: float


@dataclass
class SpeedImpact:
    ideal_cycle_time_min: float
    actual_cycle_time_min: float
    speed_loss_per_part_min: float
    cost_per_part: float
    annual_cost: float


@dataclass
class ToolLifeImpact:
    tool_life_min: float
    parts_per_tool_life: int
    tool_life_utilization_percent: float
    tools_per_year: float
    annual_tool_cost: float


@dataclass
class OEEResult:
    oee: float
    availability: float
    performance: float
    quality: float
    oee_loss: float
    availability_loss: float
    performance_loss: float
    quality_loss: float
    ideal_cycle_time_min: float
    actual_cycle_time_min: float
    downtime_per_part_min: float
    tool_change_downtime_per_part_min: float
    unplanned_downtime_per_part_min: float
    tool_change_impact: ToolChangeImpact
    speed_impact: SpeedImpact
    tool_life_impact: ToolLifeImpact

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Recommendation:
    type: str
    message: str


@dataclass
class MillingEvaluation:
    evaluation_id: str
    identity: ToolIdentity
    cutting: CuttingParameters
    cost_inputs: CostParameters
    oee_inputs: OEEParameters
    tool_life_min: int
    tool_life_overridden: bool
    technical: TechnicalData
    cost: CostResult
    oee: OEEResult
    recommendations: list = field(default_factory=list)
    scores: dict = field(default_factory=dict)
    production_curve: list = field(default_factory=list)
    cost_breakdown: list = field(default_factory=list)
    project: ProjectInfo = field(default_factory=ProjectInfo)
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ToolComparisonEntry:
    id: int
    name: str
    identity: ToolIdentity
    cutting: CuttingParameters
    cost_inputs: CostParameters
    tool_life_min: float
    cost: CostResult
    mrr_mm3_min: float

    @property
    def total_cost_per_part(self) -> float:
        return self.cost.total_cost_per_part

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SavingsSummary:
    best: ToolComparisonEntry
    worst: ToolComparisonEntry
    cost_difference: float
    savings_percent: float
    batch_size: int
    savings_per_batch: float
    savings_per_100_parts: float
    annual_parts_estimate: Optional[int] = None
    annual_savings: Optional[float] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["best"] = {"id": self.best.id, "name": self.best.name,
                        "total_cost_per_part": self.best.total_cost_per_part}
        data["worst"] = {"id": self.worst.id, "name": self.worst.name,
                         "total_cost_per_part": self.worst.total_cost_per_part}
        return data


@dataclass
class ValidationResult:
    status: ValidationStatus
    validators: dict
    messages: list = field(default_factory=list)

    def is_passed(self) -> bool:
        return self.status != ValidationStatus.FAIL

    @property
    def errors(self) -> list:
        """Every failed field across all validators, as (field, message) tuples."""
        found = []
        for result in self.validators.values():
            found.extend(result.get("errors", []))
        return found

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "validators": self.validators,
            "messages": self.messages,
        }
