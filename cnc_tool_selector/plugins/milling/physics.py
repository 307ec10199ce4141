"""Primitive cutting physics for end milling."""
from __future__ import annotations

import math
from typing import Optional

from cnc_tool_selector.core.errors import ComputationError
from cnc_tool_selector.plugins.milling import tables

TAYLOR_EXPONENT = 0.2
REFERENCE_HARDNESS_HRC = 30.0


class MachiningPhysics:
    def spindle_speed(self, cutting_speed_m_min: float, tool_diameter_mm: float) -> float:
        """Spindle speed in RPM: n = 1000 * Vc / (pi * D)."""
        return (cutting_speed_m_min * 1000) / (math.pi * tool_diameter_mm)

    def feed_rate(self, feed_per_tooth_mm: float, number_of_teeth: int,
                  spindle_speed_rpm: float) -> float:
        """Table feed in mm/min: Vf = fz * Z * n."""
        return feed_per_tooth_mm * number_of_teeth * spindle_speed_rpm

    def feed_per_revolution(self, feed_per_tooth_mm: float, number_of_teeth: int) -> float:
        return feed_per_tooth_mm * number_of_teeth

    def material_removal_rate(self, width_of_cut_mm: float, depth_of_cut_mm: float,
                              feed_per_tooth_mm: float, number_of_teeth: int,
                              cutting_speed_m_min: float, tool_diameter_mm: float) -> float:
        """MRR in mm3/min: Q = ae * ap * fz * Z * n."""
        rpm = self.spindle_speed(cutting_speed_m_min, tool_diameter_mm)
        return width_of_cut_mm * depth_of_cut_mm * feed_per_tooth_mm * number_of_teeth * rpm

    def chip_thickness(self, feed_per_tooth_mm: float, depth_of_cut_mm: float,
                       tool_diameter_mm: float) -> float:
        """Approximate undeformed chip thickness in mm.

        h = fz * sin(acos(1 - 2 * ap / D)). Only defined for ap <= D.
        """
        cos_angle = 1 - (2 * depth_of_cut_mm) / tool_diameter_mm
        if cos_angle < -1 or cos_angle > 1:
            raise ComputationError(
                "Depth of cut %.3f mm exceeds tool diameter %.3f mm"
                % (depth_of_cut_mm, tool_diameter_mm),
                field="depth_of_cut_mm",
            )
        return feed_per_tooth_mm * math.sin(math.acos(cos_angle))

    def specific_cutting_force(self, workpiece_material,
                               hardness_hrc: Optional[float] = None) -> float:
        """kc in N/mm2, scaled 1% per HRC away from 30 HRC (the default hardness)."""
        if hardness_hrc is None:
            hardness_hrc = REFERENCE_HARDNESS_HRC
        hardness_factor = 1 + (hardness_hrc - REFERENCE_HARDNESS_HRC) / 100
        return tables.base_cutting_force(workpiece_material) * hardness_factor

    def cutting_force(self, specific_cutting_force_n_mm2: float, depth_of_cut_mm: float,
                      width_of_cut_mm: float, feed_per_tooth_mm: float) -> float:
        """Fc in N: kc * ap * ae * fz."""
        return specific_cutting_force_n_mm2 * depth_of_cut_mm * width_of_cut_mm * feed_per_tooth_mm

    def power(self, cutting_force_n: float, cutting_speed_m_min: float) -> float:
        """Cutting power in kW: P = Fc * Vc / 60000."""
        return (cutting_force_n * cutting_speed_m_min) / 60000

    def torque(self, power_kw: float, spindle_speed_rpm: float) -> float:
        """Spindle torque in Nm: M = P * 9550 / n, 0 when the spindle is stopped."""
        if spindle_speed_rpm == 0:
            return 0.0
        return (power_kw * 9550) / spindle_speed_rpm

    def surface_finish(self, feed_per_tooth_mm: float, tool_diameter_mm: float,
                       number_of_teeth: int) -> float:
        """Estimated Ra in um: fz^2 / (8 * R), floored at 0.1 um."""
        tool_radius = tool_diameter_mm / 2
        ra_mm = feed_per_tooth_mm ** 2 / (8 * tool_radius)
        return max(0.1, ra_mm * 1000)

    def taylor_constant(self, cutting_speed_m_min: float, tool_life_min: float,
                        taylor_exponent: float = TAYLOR_EXPONENT) -> float:
        """C in V * T^n = C."""
        return cutting_speed_m_min * tool_life_min ** taylor_exponent

    def mrr_per_power(self, mrr_mm3_min: float, power_kw: float) -> float:
        """Removal efficiency in cm3/min/kW, 0 when no power is drawn."""
        if power_kw == 0:
            return 0.0
        return (mrr_mm3_min / 1000) / power_kw
