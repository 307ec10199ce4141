from __future__ import annotations

import math

import pytest

from cnc_tool_selector.core.errors import ComputationError
from cnc_tool_selector.core.models import ToolCoating, WorkpieceMaterial
from cnc_tool_selector.plugins.milling import tables
from cnc_tool_selector.plugins.milling.physics import MachiningPhysics


class TestTables:
    @pytest.mark.parametrize("raw", ["castIron", "Cast Iron", "cast-iron", "CAST_IRON",
                                     WorkpieceMaterial.CAST_IRON])
    def test_normalize_key(self, raw):
        assert tables.normalize_key(raw) == "cast_iron"

    def test_normalize_none(self):
        assert tables.normalize_key(None) == ""

    def test_multipliers(self):
        assert tables.material_multiplier("aluminum") == 2.5
        assert tables.tool_material_multiplier("coatedCarbide") == 3.0
        assert tables.coating_multiplier(ToolCoating.TICN) == 1.5
        assert tables.base_cutting_force("titanium") == 3000

    def test_unknown_falls_back_to_baseline(self):
        assert tables.material_multiplier("unobtainium") == 1.0
        assert tables.coating_multiplier("gold") == 1.0
        assert tables.base_cutting_force("unobtainium") == 2000

    def test_is_known(self):
        assert tables.is_known(tables.COATING_MULTIPLIERS, "AlCrN")
        assert not tables.is_known(tables.COATING_MULTIPLIERS, "gold")


class TestMachiningPhysics:
    @pytest.fixture
    def physics(self):
        return MachiningPhysics()

    def test_spindle_speed(self, physics):
        assert physics.spindle_speed(100, 10) == pytest.approx(3183.0989, rel=1e-6)

    def test_feed_rate(self, physics):
        assert physics.feed_rate(0.1, 4, 3183.0989) == pytest.approx(1273.2396, rel=1e-6)

    def test_material_removal_rate(self, physics):
        assert physics.material_removal_rate(5, 2, 0.1, 4, 100, 10) == pytest.approx(12732.395, rel=1e-6)

    def test_chip_thickness(self, physics):
        # ap/D = 0.2 -> cos 0.6 -> sin 0.8
        assert physics.chip_thickness(0.1, 2, 10) == pytest.approx(0.08)

    def test_chip_thickness_full_slot(self, physics):
        assert physics.chip_thickness(0.1, 10, 10) == pytest.approx(0.0, abs=1e-12)

    def test_chip_thickness_depth_beyond_diameter(self, physics):
        with pytest.raises(ComputationError) as info:
            physics.chip_thickness(0.1, 12, 10)
        assert info.value.field == "depth_of_cut_mm"

    def test_specific_cutting_force_hardness(self, physics):
        assert physics.specific_cutting_force("steel", 30) == pytest.approx(2000)
        assert physics.specific_cutting_force("steel", 40) == pytest.approx(2200)
        assert physics.specific_cutting_force("aluminum", 20) == pytest.approx(720)

    def test_specific_cutting_force_without_hardness(self, physics):
        assert physics.specific_cutting_force("steel", None) == pytest.approx(2000)
        assert physics.specific_cutting_force("steel") == pytest.approx(2000)

    def test_force_power_torque(self, physics):
        force = physics.cutting_force(2000, 2, 5, 0.1)
        assert force == pytest.approx(2000)
        power = physics.power(force, 100)
        assert power == pytest.approx(3.33333, rel=1e-5)
        assert physics.torque(power, 3183.0989) == pytest.approx(10.0007, rel=1e-4)

    def test_torque_stopped_spindle(self, physics):
        assert physics.torque(3.0, 0) == 0.0

    def test_surface_finish(self, physics):
        assert physics.surface_finish(0.1, 10, 4) == pytest.approx(0.25)

    def test_surface_finish_floor(self, physics):
        assert physics.surface_finish(0.01, 20, 4) == 0.1

    def test_taylor_constant(self, physics):
        assert physics.taylor_constant(100, 195) == pytest.approx(100 * math.pow(195, 0.2))

    def test_mrr_per_power(self, physics):
        assert physics.mrr_per_power(12000, 3.0) == pytest.approx(4.0)
        assert physics.mrr_per_power(12000, 0) == 0.0
