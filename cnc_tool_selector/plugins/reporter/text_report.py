"""Plain-text report, suitable for an e-mail body or a terminal."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from cnc_tool_selector.core.models import MillingEvaluation, ProjectInfo
from cnc_tool_selector.plugins.reporter.formatting import (
    check_subject, format_currency, report_id, report_path,
)


class TextReport:
    def __init__(self, currency: str = "EUR"):
        self.currency = currency

    def _money(self, value: float) -> str:
        return format_currency(value, self.currency)

    def render(self, evaluation: Optional[MillingEvaluation] = None,
               project: Optional[ProjectInfo] = None, comparison=None) -> str:
        check_subject(evaluation, comparison)
        if project is None and evaluation is not None:
            project = evaluation.project
        project = project or ProjectInfo()

        lines = [
            "CNC TOOL SELECTION REPORT",
            "Generated: %s" % datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            "Based on: ISO 8688-2:1989",
            "",
            "PROJECT INFORMATION",
        ]
        for label, value in (("Client", project.client_name), ("Project", project.project_name),
                             ("Part", project.part_name), ("Machine", project.machine_name)):
            if value:
                lines.append("%s: %s" % (label, value))

        if evaluation is not None:
            lines.extend(self._evaluation_lines(evaluation))
        if comparison is not None and not comparison.is_empty():
            lines.extend(self._comparison_lines(comparison))

        lines += ["", "---", "Generated by CNC Tool Selection Calculator", ""]
        return "\n".join(lines)

    def _evaluation_lines(self, ev: MillingEvaluation) -> list:
        ident, cutting, cost = ev.identity, ev.cutting, ev.cost
        lines = ["", "TOOL INFORMATION"]
        if ident.brand:
            lines.append("Brand: %s" % ident.brand)
        if ident.name_model:
            lines.append("Model: %s" % ident.name_model)
        lines += [
            "Diameter: %s mm" % cutting.tool_diameter_mm,
            "Number of Teeth: %s" % cutting.number_of_teeth,
            "Tool Cost: %s" % self._money(ev.cost_inputs.tool_cost),
            "",
            "COST ANALYSIS",
            "Total Cost per Part: %s" % self._money(cost.total_cost_per_part),
            "Tool Cost per Part: %s" % self._money(cost.tool_cost_per_part),
            "Machining Cost per Part: %s" % self._money(cost.machining_cost_per_part),
        ]
        if cost.tool_change_cost_per_part > 0:
            lines.append("Tool Change Cost per Part: %s" % self._money(cost.tool_change_cost_per_part))
        if cost.batch_size > 1:
            lines.append("Total Batch Cost (%d parts): %s"
                         % (cost.batch_size, self._money(cost.total_batch_cost)))
        lines += [
            "",
            "TOOL LIFE",
            "Estimated Tool Life: %s minutes" % ev.tool_life_min,
            "Parts per Tool Life: %d parts" % cost.parts_per_tool_life,
        ]
        return lines

    def _comparison_lines(self, comparison) -> list:
        lines = ["", "TOOL COMPARISON"]
        for e in comparison.entries():
            lines.append("%s: %s per part, %s min tool life, %.1f mm3/min"
                         % (e.name, self._money(e.total_cost_per_part), e.tool_life_min, e.mrr_mm3_min))
        savings = comparison.savings()
        if savings is not None:
            lines += [
                "Best Tool (Lowest Cost): %s" % savings.best.name,
                "Most Expensive Tool: %s" % savings.worst.name,
                "Potential Savings per Part: %s (%.1f%% reduction)"
                % (self._money(savings.cost_difference), savings.savings_percent),
                "Per 100 Parts: %s" % self._money(savings.savings_per_100_parts),
            ]
            if savings.annual_savings is not None:
                lines.append("Estimated Annual Savings: %s (%d parts/year)"
                             % (self._money(savings.annual_savings), savings.annual_parts_estimate))
        return lines

    def export(self, evaluation: Optional[MillingEvaluation] = None, comparison=None,
               output_dir: str = ".") -> str:
        text = self.render(evaluation, comparison=comparison)
        path = report_path(output_dir, report_id(evaluation), "txt")
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path
