from __future__ import annotations

import pytest

from cnc_tool_selector.core.models import CuttingParameters
from cnc_tool_selector.plugins.milling.tool_life import (
    combined_factor, estimate_tool_life, life_factors, resolve_tool_life, tool_life_score,
)


def _make_cutting(**overrides):
    data = dict(
        workpiece_material="steel", tool_material="carbide", tool_coating="tin",
        cutting_speed_m_min=100.0, feed_per_tooth_mm=0.1, depth_of_cut_mm=2.0,
        width_of_cut_mm=5.0, tool_diameter_mm=10.0, number_of_teeth=4,
    )
    data.update(overrides)
    return CuttingParameters(**data)


class TestToolLife:
    def test_reference_conditions(self):
        # 60 min * 1.0 steel * 2.5 carbide * 1.3 TiN
        assert estimate_tool_life(_make_cutting()) == 195

    def test_combined_factor(self):
        assert combined_factor(_make_cutting()) == pytest.approx(3.25)

    def test_factors_at_reference_are_one(self):
        f = life_factors(_make_cutting())
        assert f["speed"] == pytest.approx(1.0)
        assert f["feed"] == pytest.approx(1.0)
        assert f["depth"] == pytest.approx(1.0)

    def test_higher_speed_shortens_life(self):
        assert estimate_tool_life(_make_cutting(cutting_speed_m_min=200)) < 195

    def test_hss_steel_uncoated_baseline(self):
        assert estimate_tool_life(_make_cutting(tool_material="hss", tool_coating="none")) == 60

    def test_best_combination(self):
        life = estimate_tool_life(_make_cutting(workpiece_material="aluminum",
                                                tool_material="diamond", tool_coating="diamond"))
        assert life == 1875

    def test_never_below_one_minute(self):
        life = estimate_tool_life(_make_cutting(workpiece_material="titanium", tool_material="hss",
                                                tool_coating="none", cutting_speed_m_min=1e12))
        assert life == 1

    def test_unknown_material_uses_baseline(self):
        assert estimate_tool_life(_make_cutting(workpiece_material="unobtainium")) == 195

    def test_override_wins(self):
        assert resolve_tool_life(_make_cutting(tool_life_min=42)) == (42, True)

    def test_estimate_when_no_override(self):
        assert resolve_tool_life(_make_cutting()) == (195, False)

    @pytest.mark.parametrize("life,score", [(195, "excellent"), (120, "excellent"),
                                            (60, "good"), (30, "fair"), (29, "poor")])
    def test_score(self, life, score):
        assert tool_life_score(life) == score

    @pytest.mark.parametrize("field,values", [
        ("cutting_speed_m_min", [50, 100, 150, 300]),
        ("feed_per_tooth_mm", [0.02, 0.1, 0.2, 0.4]),
        ("depth_of_cut_mm", [0.5, 2, 5, 10]),
    ])
    def test_non_increasing_in_aggressiveness(self, field, values):
        lives = [estimate_tool_life(_make_cutting(**{field: v})) for v in values]
        assert lives == sorted(lives, reverse=True)
        assert all(isinstance(life, int) and life >= 1 for life in lives)
